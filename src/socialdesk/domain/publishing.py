"""Sector copy appended to operator posts before they are published.

Facebook posts get a call to action and the page hashtags. Instagram
captions get their own call to action, any operator hashtags, then the
longer Instagram hashtag set.
"""

from .sectors import FALLBACK_SECTOR, Sector

FACEBOOK_HASHTAGS: dict[Sector, str] = {
    Sector.EDUCATION: (
        "#SchoolCatering #HealthyLunch #StudentNutrition #EducationCatering "
        "#SchoolMeals #HealthyEating #StudentLife #SchoolFood"
    ),
    Sector.HOSPITALITY: (
        "#HawanaCafe #CoffeeLovers #CafeLife #Foodie #CoffeeTime #CafeCulture "
        "#LocalCafe #CoffeeShop #FoodPhotography"
    ),
    Sector.INVESTMENT: (
        "#InvestmentTips #FinancialPlanning #PortfolioManagement #WealthManagement "
        "#InvestmentAdvice #FinancialFreedom #MoneyMatters #Investing"
    ),
}

INSTAGRAM_HASHTAGS: dict[Sector, str] = {
    Sector.EDUCATION: FACEBOOK_HASHTAGS[Sector.EDUCATION] + " #NutritionEducation #HealthyKids",
    Sector.HOSPITALITY: FACEBOOK_HASHTAGS[Sector.HOSPITALITY] + " #CafeVibes #CoffeeArt #CafeGoals",
    Sector.INVESTMENT: FACEBOOK_HASHTAGS[Sector.INVESTMENT] + " #FinancialLiteracy #WealthBuilding",
}

FACEBOOK_CALLS_TO_ACTION: dict[Sector, str] = {
    Sector.EDUCATION: (
        "📞 Contact us for school catering inquiries\n"
        "🌐 Visit our website for menu options\n"
        "📱 Follow us for daily updates"
    ),
    Sector.HOSPITALITY: (
        "☕ Visit Hawana Cafe today!\n"
        "📞 Call for reservations\n"
        "📱 Follow @hawana_cafe on Instagram"
    ),
    Sector.INVESTMENT: (
        "💼 Schedule your free consultation\n"
        "📞 Call for portfolio review\n"
        "📱 Follow for market insights"
    ),
}

INSTAGRAM_CALLS_TO_ACTION: dict[Sector, str] = {
    **FACEBOOK_CALLS_TO_ACTION,
    Sector.HOSPITALITY: (
        "☕ Visit Hawana Cafe today!\n"
        "📞 Call for reservations\n"
        "📱 Follow @hawana_cafe for daily specials"
    ),
}

# custom_data.business_type on conversion events
BUSINESS_TYPES: dict[Sector, str] = {
    Sector.EDUCATION: "education_catering",
    Sector.HOSPITALITY: "cafe_restaurant",
    Sector.INVESTMENT: "financial_services",
}


def _lookup(table: dict[Sector, str], sector: Sector | str) -> str:
    try:
        return table[Sector(sector)]
    except ValueError:
        return table[FALLBACK_SECTOR]


def enhance_post(message: str, sector: Sector | str) -> str:
    """Facebook post body: message, call to action, hashtags."""
    cta = _lookup(FACEBOOK_CALLS_TO_ACTION, sector)
    hashtags = _lookup(FACEBOOK_HASHTAGS, sector)
    return f"{message}\n\n{cta}\n\n{hashtags}"


def enhance_caption(
    caption: str, sector: Sector | str, hashtags: list[str] | tuple[str, ...] = ()
) -> str:
    """Instagram caption: caption, call to action, operator tags, sector tags."""
    parts = [caption, _lookup(INSTAGRAM_CALLS_TO_ACTION, sector)]
    if hashtags:
        parts.append(" ".join(hashtags))
    parts.append(_lookup(INSTAGRAM_HASHTAGS, sector))
    return "\n\n".join(parts)


def business_type(sector: Sector | str) -> str:
    try:
        return BUSINESS_TYPES[Sector(sector)]
    except ValueError:
        return "general"
