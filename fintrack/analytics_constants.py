"""
Analytics constants for predictions, anomaly detection, budget
recommendations and free-text expense parsing.

This module centralizes all magic numbers used in the AI calculations
so thresholds can be tuned in one place.
"""
from types import MappingProxyType

from fintrack.constants import CategoryName, Currency

# ============================================================================
# TRAILING WINDOWS
# ============================================================================

PREDICTION_WINDOW_WEEKS = 16
ANOMALY_STATS_WINDOW_MONTHS = 3
ANOMALY_RECENT_WINDOW_WEEKS = 2
BUDGET_WINDOW_MONTHS = 6
OVERVIEW_WINDOW_DAYS = 30

# ============================================================================
# SPENDING PREDICTION
# ============================================================================

# Minimum non-empty weekly buckets before a forecast is attempted
MIN_WEEKS_FOR_PREDICTION = 4

# Number of most recent weeks averaged for the forecast
RECENT_WEEKS = 4

# Average number of weeks in a month
WEEKS_PER_MONTH = 4.33

# Second-half / first-half ratios for trend classification
TREND_INCREASE_RATIO = 1.1
TREND_DECREASE_RATIO = 0.9

INSUFFICIENT_DATA_CONFIDENCE = 0.1
MIN_PREDICTION_CONFIDENCE = 0.3
MAX_PREDICTION_CONFIDENCE = 0.9

# ============================================================================
# ANOMALY DETECTION
# ============================================================================

# Categories need this many transactions in the stats window to be checked
MIN_CATEGORY_SAMPLES = 3

# Number of standard deviations above the mean that counts as a spike
ANOMALY_SIGMA = 2.0

# Stand-in standard deviation (fraction of the mean) when variance is zero
FALLBACK_STDDEV_FACTOR = 0.3

ANOMALY_CONFIDENCE = 0.8

# ============================================================================
# BUDGET RECOMMENDATIONS
# ============================================================================

CATEGORY_NECESSITY_SCORES = MappingProxyType({
    CategoryName.FOOD: 0.9,
    CategoryName.BILLS: 0.95,
    CategoryName.HEALTHCARE: 0.9,
    CategoryName.TRANSPORTATION: 0.8,
    CategoryName.EDUCATION: 0.75,
    CategoryName.SHOPPING: 0.4,
    CategoryName.ENTERTAINMENT: 0.3,
    CategoryName.OTHER: 0.5,
})

DEFAULT_NECESSITY_SCORE = 0.5

# Necessity above this is essential, below the discretionary bound is optional
ESSENTIAL_NECESSITY = 0.8
DISCRETIONARY_NECESSITY = 0.5

REDUCTION_ESSENTIAL = 0.05
REDUCTION_DEFAULT = 0.1
REDUCTION_DISCRETIONARY = 0.2

# Recommendations saving this amount or less are dropped
MIN_POTENTIAL_SAVINGS = 10

RECOMMENDATION_CONFIDENCE = 0.75

# ============================================================================
# NATURAL-LANGUAGE EXPENSE PARSER
# ============================================================================

# Number with optional 1-2 decimals, '.' or ',' as separator
AMOUNT_NUMBER = r'(\d+(?:[,.]\d{1,2})?)'

# Tried in order, first hit wins. The last entry is the bare-number default.
AMOUNT_PATTERNS = (
    (AMOUNT_NUMBER + r'\s*(?:den|денари|mkd|denar)', Currency.MKD),
    (AMOUNT_NUMBER + r'\s*(?:eur|евра|€)', Currency.EUR),
    (AMOUNT_NUMBER + r'\s*(?:usd|долари|\$)', Currency.USD),
    (AMOUNT_NUMBER, Currency.MKD),
)

# Insertion order breaks ties between categories with equal hit counts.
# "groceries" is deliberately absent from Food & Dining.
CATEGORY_KEYWORDS = MappingProxyType({
    CategoryName.FOOD: ('food', 'restaurant', 'dinner', 'lunch', 'coffee', 'pizza', 'храна', 'ресторан'),
    CategoryName.TRANSPORTATION: ('gas', 'fuel', 'bus', 'taxi', 'uber', 'car', 'бензин', 'гориво', 'автобус'),
    CategoryName.SHOPPING: ('shopping', 'clothes', 'shirt', 'shoes', 'store', 'шопинг', 'облека', 'чевли'),
    CategoryName.ENTERTAINMENT: ('movie', 'cinema', 'concert', 'game', 'филм', 'кино', 'концерт'),
    CategoryName.BILLS: ('bill', 'electricity', 'water', 'internet', 'сметка', 'струја', 'вода'),
    CategoryName.HEALTHCARE: ('doctor', 'medicine', 'pharmacy', 'доктор', 'лек', 'аптека'),
})

TODAY_WORDS = ('today', 'денес')
YESTERDAY_WORDS = ('yesterday', 'вчера', 'last night')

FILLER_VERBS = ('spent', 'paid', 'bought', 'today', 'yesterday', 'last night',
                'купив', 'платив', 'потроших', 'денес', 'вчера')
FILLER_PREPOSITIONS = ('on', 'for', 'за', 'на')

# Confidence contributions
CONFIDENCE_AMOUNT = 0.4
CONFIDENCE_CATEGORY = 0.3
CONFIDENCE_EXPLICIT_DATE = 0.15
CONFIDENCE_DEFAULT_DATE = 0.05
CONFIDENCE_DESCRIPTION = 0.25
CONFIDENCE_FALLBACK_DESCRIPTION = 0.1

MIN_PARSE_CONFIDENCE = 0.1
MAX_PARSE_CONFIDENCE = 1.0
INVALID_INPUT_CONFIDENCE = 0.1

# Below this the caller should ask the user to confirm the parsed expense
CONFIRMATION_THRESHOLD = 0.8

# Cleaned descriptions must be longer than this to be kept
MIN_DESCRIPTION_LENGTH = 3
MAX_DESCRIPTION_LENGTH = 500
