"""WhatsApp provider template catalog (pre-approved transactional messages).

Each template declares its body parameters in positional order ({{1}}, {{2}}...).
Parameters are rendered only in-memory at send time, never persisted.
"""

from dataclasses import dataclass, asdict
from typing import Any

from socialdesk.domain.sectors import Sector


class TemplateNotFoundError(LookupError):
    """Raised when no template matches (name, sector)."""

    pass


class TemplateParameterError(ValueError):
    """Raised when supplied parameters do not match the template."""

    pass


@dataclass(frozen=True)
class ProviderTemplate:
    name: str
    sector: Sector
    language: str
    category: str
    header: str
    body: str
    description: str
    parameters: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["sector"] = self.sector.value
        data["parameters"] = list(self.parameters)
        return data


TEMPLATES: tuple[ProviderTemplate, ...] = (
    # School catering
    ProviderTemplate(
        name="education_order_confirmation",
        sector=Sector.EDUCATION,
        language="en_US",
        category="UTILITY",
        header="School Catering Order Confirmation",
        body="Your order has been confirmed! Order #{{1}} will be delivered at {{2}} to {{3}}.",
        description="Confirmation message for school catering orders",
        parameters=("order_number", "delivery_time", "location"),
    ),
    ProviderTemplate(
        name="education_menu_update",
        sector=Sector.EDUCATION,
        language="en_US",
        category="UTILITY",
        header="Weekly Menu Update",
        body=(
            "This week's healthy lunch menu: {{1}}. Special dietary options "
            "available. Reply ORDER to place your order."
        ),
        description="Weekly menu announcement for school catering",
        parameters=("menu_items",),
    ),
    ProviderTemplate(
        name="education_delivery_reminder",
        sector=Sector.EDUCATION,
        language="en_US",
        category="UTILITY",
        header="Delivery Reminder",
        body=(
            "Your catering order will be delivered in 30 minutes at {{1}}. "
            "Please ensure someone is available to receive it."
        ),
        description="Delivery reminder for school catering orders",
        parameters=("delivery_time",),
    ),
    # Hawana Cafe
    ProviderTemplate(
        name="cafe_reservation_confirmation",
        sector=Sector.HOSPITALITY,
        language="en_US",
        category="UTILITY",
        header="Hawana Cafe Reservation Confirmed",
        body=(
            "Your reservation is confirmed for {{1}} at {{2}} for {{3}} people. "
            "Table will be held for 15 minutes."
        ),
        description="Reservation confirmation for Hawana Cafe",
        parameters=("date", "time", "party_size"),
    ),
    ProviderTemplate(
        name="cafe_special_offer",
        sector=Sector.HOSPITALITY,
        language="en_US",
        category="MARKETING",
        header="Special Offer at Hawana Cafe",
        body=(
            "{{1}}! Valid until {{2}}. Show this message to redeem. "
            "Cannot be combined with other offers."
        ),
        description="Special promotional offers for Hawana Cafe",
        parameters=("offer_description", "expiry_date"),
    ),
    ProviderTemplate(
        name="cafe_loyalty_update",
        sector=Sector.HOSPITALITY,
        language="en_US",
        category="UTILITY",
        header="Loyalty Points Update",
        body=(
            "You have earned {{1}} points! Total balance: {{2}} points. "
            "Redeem for free coffee or food items."
        ),
        description="Loyalty program updates for Hawana Cafe",
        parameters=("earned_points", "total_points"),
    ),
    # Portfolio management
    ProviderTemplate(
        name="investment_portfolio_update",
        sector=Sector.INVESTMENT,
        language="en_US",
        category="UTILITY",
        header="Portfolio Performance Update",
        body=(
            "Your portfolio value: ${{1}}. Monthly return: {{2}}%. "
            "YTD return: {{3}}%. Schedule a review meeting."
        ),
        description="Portfolio performance updates for investment clients",
        parameters=("portfolio_value", "monthly_return", "ytd_return"),
    ),
    ProviderTemplate(
        name="investment_meeting_scheduling",
        sector=Sector.INVESTMENT,
        language="en_US",
        category="UTILITY",
        header="Investment Consultation Available",
        body=(
            "Available slots: {{1}}. Choose your preferred time and we'll "
            "confirm your appointment."
        ),
        description="Meeting scheduling for investment consultations",
        parameters=("available_times",),
    ),
    ProviderTemplate(
        name="investment_market_alert",
        sector=Sector.INVESTMENT,
        language="en_US",
        category="UTILITY",
        header="Market Alert",
        body=(
            "{{1}} - {{2}}. This may impact your portfolio. "
            "Contact us for personalized advice."
        ),
        description="Market alerts for investment clients",
        parameters=("alert_type", "market_impact"),
    ),
)


def list_templates(sector: Sector | None = None) -> list[ProviderTemplate]:
    """List templates, optionally filtered by sector."""
    if sector is None:
        return list(TEMPLATES)
    return [t for t in TEMPLATES if t.sector == sector]


def get_template(name: str, sector: Sector) -> ProviderTemplate:
    """Find a template by name within a sector.

    Raises:
        TemplateNotFoundError: If the sector has no template with that name.
    """
    for template in TEMPLATES:
        if template.name == name and template.sector == sector:
            return template
    raise TemplateNotFoundError(
        f"Template '{name}' not found for sector '{Sector(sector).value}'"
    )


def build_components(
    template: ProviderTemplate, parameters: dict[str, Any]
) -> list[dict[str, Any]]:
    """Build Cloud API template components from named parameters.

    An empty parameters dict sends the template without components.

    Raises:
        TemplateParameterError: On unknown or missing parameter names.
    """
    if not parameters:
        return []

    extras = set(parameters) - set(template.parameters)
    if extras:
        raise TemplateParameterError(
            f"Disallowed params for {template.name}: {sorted(extras)}"
        )

    missing = [name for name in template.parameters if name not in parameters]
    if missing:
        raise TemplateParameterError(f"Missing params for {template.name}: {missing}")

    return [
        {
            "type": "body",
            "parameters": [
                {"type": "text", "text": str(parameters[name])}
                for name in template.parameters
            ],
        }
    ]
