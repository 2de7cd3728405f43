"""Canned auto-reply bank, keyed by sector and intent.

Replies are static text (WhatsApp markdown). Nothing from the inbound
message is interpolated, so render() is a pure function of its inputs.
"""

from dataclasses import dataclass
from enum import Enum

from .sectors import Sector, contains_any


class Intent(str, Enum):
    """Coarse request type inside a sector."""

    MENU = "menu"
    ORDER = "order"
    HOURS = "hours"
    PORTFOLIO = "portfolio"
    MEETING = "meeting"
    MARKET = "market"
    WELCOME = "welcome"


@dataclass(frozen=True)
class ReplyTemplate:
    """Static reply body for one (sector, intent) pair."""

    sector: Sector
    intent: Intent
    body: str


# First match wins within a sector; no match selects WELCOME.
INTENT_RULES: dict[Sector, tuple[tuple[Intent, tuple[str, ...]], ...]] = {
    Sector.EDUCATION: (
        (Intent.MENU, ("menu", "food")),
        (Intent.ORDER, ("order", "book")),
        (Intent.HOURS, ("delivery", "time")),
    ),
    Sector.HOSPITALITY: (
        (Intent.ORDER, ("reservation", "table", "book")),
        (Intent.MENU, ("menu", "food", "coffee")),
        (Intent.HOURS, ("hours", "open", "time")),
    ),
    Sector.INVESTMENT: (
        (Intent.PORTFOLIO, ("portfolio", "investment", "performance")),
        (Intent.MEETING, ("meeting", "consultation", "appointment")),
        (Intent.MARKET, ("market", "trend", "news")),
    ),
}

_BODIES: dict[tuple[Sector, Intent], str] = {
    # School catering
    (Sector.EDUCATION, Intent.MENU): (
        "🍽️ *School Catering Menu Update*\n\n"
        "Today's healthy lunch options:\n"
        "• Grilled chicken with vegetables\n"
        "• Vegetarian pasta\n"
        "• Fresh fruit salad\n\n"
        'To place an order, reply with "ORDER" followed by your choice. '
        "Delivery time: 12:00 PM."
    ),
    (Sector.EDUCATION, Intent.ORDER): (
        "📋 *Order Confirmation*\n\n"
        "Thank you for your catering order! We've received your request and "
        "will confirm within 30 minutes.\n\n"
        "*Order Details:*\n"
        "- Delivery Time: 12:00 PM\n"
        "- Location: School Cafeteria\n"
        "- Payment: Cash on delivery\n\n"
        "For any changes, please contact us immediately."
    ),
    (Sector.EDUCATION, Intent.HOURS): (
        "⏰ *Delivery Information*\n\n"
        "Our delivery schedule:\n"
        "• Breakfast: 7:30 AM - 8:00 AM\n"
        "• Lunch: 12:00 PM - 12:30 PM\n"
        "• Snacks: 3:00 PM - 3:15 PM\n\n"
        "For special dietary requirements, please inform us 24 hours in advance."
    ),
    (Sector.EDUCATION, Intent.WELCOME): (
        "🎓 *School Catering Services*\n\n"
        "Welcome! We provide healthy, nutritious meals for students.\n\n"
        "Quick options:\n"
        '• Reply "MENU" for today\'s options\n'
        '• Reply "ORDER" to place an order\n'
        '• Reply "DELIVERY" for timing info\n'
        '• Reply "HELP" for assistance'
    ),
    # Hawana Cafe
    (Sector.HOSPITALITY, Intent.ORDER): (
        "☕ *Hawana Cafe Reservation*\n\n"
        "Thank you for your interest! To make a reservation:\n\n"
        "*Available Times:*\n"
        "• Breakfast: 7:00 AM - 11:00 AM\n"
        "• Lunch: 12:00 PM - 3:00 PM\n"
        "• Dinner: 6:00 PM - 10:00 PM\n\n"
        "*Special Offers:*\n"
        "• 20% off for groups of 4+\n"
        "• Free dessert on birthdays\n"
        "• Happy Hour: 4:00 PM - 6:00 PM\n\n"
        "Reply with your preferred date, time, and party size."
    ),
    (Sector.HOSPITALITY, Intent.MENU): (
        "🍰 *Hawana Cafe Menu*\n\n"
        "*Coffee & Beverages:*\n"
        "• Ethiopian Yirgacheffe - $4.50\n"
        "• Cappuccino - $3.80\n"
        "• Chai Latte - $4.20\n\n"
        "*Food:*\n"
        "• Avocado Toast - $8.50\n"
        "• Mediterranean Salad - $12.00\n"
        "• Chocolate Croissant - $3.50\n\n"
        "*Today's Special:*\n"
        "• Pumpkin Spice Latte - $5.00\n"
        "• Seasonal Fruit Tart - $6.50\n\n"
        "Visit our Instagram @hawana_cafe for food photos!"
    ),
    (Sector.HOSPITALITY, Intent.HOURS): (
        "🕒 *Hawana Cafe Hours*\n\n"
        "*Monday - Friday:*\n"
        "• 7:00 AM - 10:00 PM\n\n"
        "*Saturday - Sunday:*\n"
        "• 8:00 AM - 11:00 PM\n\n"
        "*Happy Hour:*\n"
        "• Daily 4:00 PM - 6:00 PM\n"
        "• 50% off all beverages\n\n"
        "We're located at 123 Coffee Street. Free WiFi available!"
    ),
    (Sector.HOSPITALITY, Intent.WELCOME): (
        "☕ *Welcome to Hawana Cafe*\n\n"
        "We're your neighborhood coffee haven!\n\n"
        "Quick options:\n"
        '• Reply "RESERVATION" to book a table\n'
        '• Reply "MENU" for our offerings\n'
        '• Reply "HOURS" for opening times\n'
        '• Reply "SPECIALS" for today\'s deals\n\n'
        "Follow us on Instagram @hawana_cafe for updates!"
    ),
    # Portfolio management
    (Sector.INVESTMENT, Intent.PORTFOLIO): (
        "📈 *Portfolio Update*\n\n"
        "Your investment portfolio summary:\n\n"
        "*Current Value:* $125,450\n"
        "*Monthly Return:* +2.3%\n"
        "*YTD Return:* +8.7%\n\n"
        "*Top Performers:*\n"
        "• Tech ETF: +12.5%\n"
        "• Green Energy Fund: +9.2%\n"
        "• International Bonds: +3.1%\n\n"
        "*Next Review:* Scheduled for next week\n\n"
        'To schedule a consultation, reply "MEETING".'
    ),
    (Sector.INVESTMENT, Intent.MEETING): (
        "📅 *Investment Consultation*\n\n"
        "Available appointment slots:\n\n"
        "*This Week:*\n"
        "• Tuesday 2:00 PM - 3:00 PM\n"
        "• Thursday 10:00 AM - 11:00 AM\n"
        "• Friday 4:00 PM - 5:00 PM\n\n"
        "*Next Week:*\n"
        "• Monday 9:00 AM - 10:00 AM\n"
        "• Wednesday 1:00 PM - 2:00 PM\n\n"
        "*Meeting Options:*\n"
        "• In-person at our office\n"
        "• Video call (Zoom/Teams)\n"
        "• Phone consultation\n\n"
        "Reply with your preferred time and format."
    ),
    (Sector.INVESTMENT, Intent.MARKET): (
        "📊 *Market Update*\n\n"
        "*Today's Market Summary:*\n"
        "• S&P 500: +0.8%\n"
        "• NASDAQ: +1.2%\n"
        "• Dow Jones: +0.5%\n\n"
        "*Key News:*\n"
        "• Fed maintains interest rates\n"
        "• Tech earnings beat expectations\n"
        "• Oil prices stabilize\n\n"
        "*Investment Opportunities:*\n"
        "• Emerging markets showing growth\n"
        "• Renewable energy sector expanding\n"
        "• Value stocks undervalued\n\n"
        'For detailed analysis, reply "ANALYSIS".'
    ),
    (Sector.INVESTMENT, Intent.WELCOME): (
        "💼 *Portfolio Management Services*\n\n"
        "Welcome to our investment advisory service!\n\n"
        "Quick options:\n"
        '• Reply "PORTFOLIO" for your current status\n'
        '• Reply "MEETING" to schedule consultation\n'
        '• Reply "MARKET" for latest updates\n'
        '• Reply "ANALYSIS" for detailed insights\n\n'
        "Your financial success is our priority."
    ),
}

TEMPLATE_BANK: dict[tuple[Sector, Intent], ReplyTemplate] = {
    key: ReplyTemplate(sector=key[0], intent=key[1], body=body)
    for key, body in _BODIES.items()
}

# Used when a caller passes a sector value outside the enum.
GENERAL_REPLY = (
    "👋 *Thank you for your message!*\n\n"
    "We're here to help with:\n\n"
    "🎓 *Education Catering*\n"
    "• School meal services\n"
    "• Healthy lunch options\n"
    "• Delivery coordination\n\n"
    "☕ *Hawana Cafe*\n"
    "• Reservations & dining\n"
    "• Coffee & food menu\n"
    "• Special events\n\n"
    "📈 *Investment Services*\n"
    "• Portfolio management\n"
    "• Financial consultation\n"
    "• Market analysis\n\n"
    "Please specify which service you're interested in, or reply with a "
    'keyword like "catering", "cafe", or "investment".'
)


def select_intent(sector: Sector, text: str | None) -> Intent:
    """Pick the intent for text inside an already-classified sector."""
    normalized = (text or "").lower()
    for intent, keywords in INTENT_RULES.get(sector, ()):
        if contains_any(normalized, keywords):
            return intent
    return Intent.WELCOME


def render(sector: Sector | str, text: str | None) -> str:
    """Render the auto-reply for a message.

    Args:
        sector: Sector the message was classified into.
        text: Original message text (any case).

    Returns:
        Non-empty reply body. Unknown sectors get GENERAL_REPLY.
    """
    try:
        sector = Sector(sector)
    except ValueError:
        return GENERAL_REPLY

    intent = select_intent(sector, text)
    return TEMPLATE_BANK[(sector, intent)].body
