"""Sector classification for inbound messages.

Keyword rules are evaluated in order; the first sector whose keyword set
matches wins. Text with no recognized keyword falls back to hospitality.
"""

from enum import Enum


class Sector(str, Enum):
    """Business verticals every operation is tagged with."""

    EDUCATION = "education"
    HOSPITALITY = "hospitality"
    INVESTMENT = "investment"


FALLBACK_SECTOR = Sector.HOSPITALITY

# Priority order matters: education > hospitality > investment.
SECTOR_RULES: tuple[tuple[Sector, tuple[str, ...]], ...] = (
    (Sector.EDUCATION, ("catering", "school", "lunch", "menu")),
    (Sector.HOSPITALITY, ("cafe", "coffee", "reservation", "table")),
    (Sector.INVESTMENT, ("investment", "portfolio", "meeting", "financial")),
)


def contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    """Check if lower-cased text contains any keyword as a substring."""
    return any(keyword in text for keyword in keywords)


def classify(text: str | None) -> Sector:
    """Map free text to a sector.

    Args:
        text: Message text (any case). None is treated as empty.

    Returns:
        Matched sector, or FALLBACK_SECTOR when nothing matches.
    """
    normalized = (text or "").lower()
    for sector, keywords in SECTOR_RULES:
        if contains_any(normalized, keywords):
            return sector
    return FALLBACK_SECTOR
