# Application Version
APP_VERSION = "1.0.0"


class Currency:
    """Supported expense currencies."""
    MKD = "MKD"
    EUR = "EUR"
    USD = "USD"
    ALL = (MKD, EUR, USD)
    DEFAULT = MKD


class TrendDirection:
    """Spending trend classification."""
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class ModelUsed:
    """Which prediction path produced a result."""
    INSUFFICIENT_DATA = "insufficient_data"
    STATISTICAL_ANALYSIS = "statistical_analysis"


class AnomalyType:
    AMOUNT_SPIKE = "amount_spike"


class CategoryName:
    """Default category names shipped with every new account."""
    FOOD = "Food & Dining"
    TRANSPORTATION = "Transportation"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    BILLS = "Bills & Utilities"
    HEALTHCARE = "Healthcare"
    EDUCATION = "Education"
    OTHER = "Other"


class NotificationFrequency:
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    NEVER = "never"
    ALL = (DAILY, WEEKLY, MONTHLY, NEVER)


class BreakdownPeriod:
    """Trailing periods accepted by the spending breakdown."""
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class DefaultValues:
    """Default values used throughout the application."""
    PREDICTION_TYPE = "monthly_ml"
    PREDICTION_HORIZON_DAYS = 30
    DETECTION_METHOD = "statistical_analysis"
    FALLBACK_DESCRIPTION = "Expense"
    INVALID_INPUT_DESCRIPTION = "Invalid input - please provide text"
