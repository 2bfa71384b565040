APP_NAME = "AutoParts Kenya"
TIMEZONE = "Africa/Nairobi"

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Delivery tiers: flat fee in KSh and estimated days
DELIVERY_TIERS = {
    "economy": {"label": "Economy", "fee": 500.0, "days": (5, 7), "description": "Standard delivery"},
    "standard": {"label": "Standard", "fee": 1500.0, "days": (2, 3), "description": "Recommended"},
    "express": {"label": "Express", "fee": 3000.0, "days": (1, 2), "description": "Fastest"},
}
DEFAULT_DELIVERY_TIER = "standard"

DELIVERY_CITIES = ["Nairobi", "Mombasa", "Kisumu", "Eldoret", "Nakuru", "Other"]
DEFAULT_DELIVERY_CITY = "Nairobi"

ORDER_STATUS = {
    "pending": {"label": "Pending", "color": "#FBC02D"},
    "confirmed": {"label": "Confirmed", "color": "#0097A7"},
    "processing": {"label": "Processing", "color": "#1976D2"},
    "shipped": {"label": "Shipped", "color": "#388E3C"},
    "delivered": {"label": "Delivered", "color": "#388E3C"},
    "cancelled": {"label": "Cancelled", "color": "#D32F2F"},
}

PAYMENT_STATUS = {
    "unpaid": {"label": "Unpaid", "color": "#757575"},
    "pending": {"label": "Pending", "color": "#FBC02D"},
    "paid": {"label": "Paid", "color": "#388E3C"},
    "failed": {"label": "Failed", "color": "#D32F2F"},
    "refunded": {"label": "Refunded", "color": "#1976D2"},
}

DEFAULT_STATUS_COLOR = "#757575"

# Catalog sort option -> API `ordering` parameter
SORT_ORDERING = {
    "newest": "-created_at",
    "price-asc": "price",
    "price-desc": "-price",
    "rating": "-rating",
    "popular": "-sales_count",
}
DEFAULT_SORT = "newest"

# Stock badges
LOW_STOCK_THRESHOLD = 10
CRITICAL_STOCK_THRESHOLD = 3

# Validation
PASSWORD_MIN_LENGTH = 8
PHONE_PREFIX = "254"

# Persisted store keys; each carries its own schema version
CART_STORAGE_KEY = "autoparts-cart"
FAVORITES_STORAGE_KEY = "autoparts-favorites"
VEHICLE_STORAGE_KEY = "autoparts-vehicle"
AUTH_STORAGE_KEY = "autoparts-auth"

LOGIN_PATH = "/auth/login"

MESSAGES = {
    "en": {
        "ERROR": "Something went wrong",
        "LOGIN_ERROR": "Invalid email or password",
        "NETWORK_ERROR": "Network error. Please check your connection.",
        "SERVER_ERROR": "Server error. Please try again later.",
        "SERVICE_UNAVAILABLE": "Service temporarily unavailable. Please try again later.",
        "INVALID_REQUEST": "Invalid request. Please check your input.",
        "FORBIDDEN": "You do not have permission to perform this action.",
        "NOT_FOUND": "Resource not found.",
        "CONFLICT": "Conflict. This item may already exist.",
        "RATE_LIMITED": "Too many requests. Please try again later.",
        "REQUIRED_FIELD": "This field is required",
        "INVALID_EMAIL": "Please enter a valid email",
        "INVALID_PHONE": "Please enter a valid Kenyan phone number",
        "PASSWORDS_DONT_MATCH": "Passwords do not match",
        "WEAK_PASSWORD": "Password must be at least 8 characters",
        "CART_EMPTY": "Your cart is empty",
    },
    "sw": {
        "ERROR": "Kitu kimetatiza",
        "LOGIN_ERROR": "Barua/namba au neno la siri si sahihi",
        "NETWORK_ERROR": "Hitilafu ya mtandao. Tafadhali angalia muunganisho wako.",
        "SERVER_ERROR": "Hitilafu ya seva. Jaribu tena baadaye.",
        "SERVICE_UNAVAILABLE": "Huduma haipatikani kwa sasa. Jaribu tena baadaye.",
        "INVALID_REQUEST": "Ombi si sahihi. Tafadhali kagua maelezo yako.",
        "FORBIDDEN": "Huna ruhusa ya kufanya kitendo hiki.",
        "NOT_FOUND": "Haikupatikana.",
        "CONFLICT": "Mgongano. Huenda kipengee hiki kipo tayari.",
        "RATE_LIMITED": "Maombi mengi mno. Jaribu tena baadaye.",
        "REQUIRED_FIELD": "Sehemu hii inahitajika",
        "INVALID_EMAIL": "Tafadhali ingiza barua halali",
        "INVALID_PHONE": "Tafadhali ingiza namba halali ya simu ya Kenya",
        "PASSWORDS_DONT_MATCH": "Maneno ya siri hayalingani",
        "WEAK_PASSWORD": "Neno la siri lazima liwe na angalau herufi 8",
        "CART_EMPTY": "Karata yako ni tupu",
    },
}


def message(key: str, locale: str = "en") -> str:
    """Look up a UI message, falling back to English."""
    table = MESSAGES.get(locale, MESSAGES["en"])
    return table.get(key) or MESSAGES["en"].get(key, key)
