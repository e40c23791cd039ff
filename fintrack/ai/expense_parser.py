"""
Natural-Language Expense Parser.

Turns free text such as "Paid 50 EUR for dinner last night" or
"Платив 300 денари за храна денес" into expense suggestions.

Each feature (amount, category, date, description) is extracted by its
own matcher. Every successful matcher adds to a running confidence score
which the caller uses to decide whether the user must confirm the result.
"""
import datetime
import re
from typing import NamedTuple, Optional

from fintrack.analytics_constants import (
    AMOUNT_PATTERNS,
    CATEGORY_KEYWORDS,
    TODAY_WORDS,
    YESTERDAY_WORDS,
    FILLER_VERBS,
    FILLER_PREPOSITIONS,
    CONFIDENCE_AMOUNT,
    CONFIDENCE_CATEGORY,
    CONFIDENCE_EXPLICIT_DATE,
    CONFIDENCE_DEFAULT_DATE,
    CONFIDENCE_DESCRIPTION,
    CONFIDENCE_FALLBACK_DESCRIPTION,
    MIN_PARSE_CONFIDENCE,
    MAX_PARSE_CONFIDENCE,
    INVALID_INPUT_CONFIDENCE,
    CONFIRMATION_THRESHOLD,
    MIN_DESCRIPTION_LENGTH,
    MAX_DESCRIPTION_LENGTH,
)
from fintrack.constants import Currency, DefaultValues
from fintrack.logger import get_logger
from fintrack.utils import clamp, round_half_up

logger = get_logger(__name__)

_AMOUNT_REGEXES = tuple(
    (re.compile(pattern, re.IGNORECASE), currency) for pattern, currency in AMOUNT_PATTERNS
)


def _word_regex(words) -> re.Pattern:
    alternatives = '|'.join(re.escape(word) for word in words)
    return re.compile(rf'\b(?:{alternatives})\b', re.IGNORECASE)


_FILLER_VERBS_RE = _word_regex(FILLER_VERBS)
_FILLER_PREPOSITIONS_RE = _word_regex(FILLER_PREPOSITIONS)


class AmountMatch(NamedTuple):
    amount: float
    currency: str
    start: int
    end: int


def match_amount(text: str) -> Optional[AmountMatch]:
    """
    Find the first amount in text, trying currency-specific patterns first.

    Returns:
        AmountMatch with the span of the matched "<number> <currency>" text,
        or None if text contains no number
    """
    for regex, currency in _AMOUNT_REGEXES:
        match = regex.search(text)
        if match:
            amount = float(match.group(1).replace(',', '.'))
            return AmountMatch(amount, currency, match.start(), match.end())
    return None


def match_category(text: str) -> Optional[str]:
    """
    Guess the category with the most keyword hits.

    Keywords are matched as substrings of the lower-cased text. On equal
    hit counts the category listed first wins.
    """
    lowered = text.lower()
    best_category, best_score = None, 0

    for category, keywords in CATEGORY_KEYWORDS.items():
        score = sum(1 for keyword in keywords if keyword in lowered)
        if score > best_score:
            best_category, best_score = category, score

    return best_category


def match_date(text: str, today: datetime.date) -> tuple:
    """
    Resolve relative date words.

    Returns:
        Tuple (date, confidence contribution). Without an explicit word the
        date defaults to today with a smaller contribution.
    """
    lowered = text.lower()
    if any(word in lowered for word in TODAY_WORDS):
        return today, CONFIDENCE_EXPLICIT_DATE
    if any(word in lowered for word in YESTERDAY_WORDS):
        return today - datetime.timedelta(days=1), CONFIDENCE_EXPLICIT_DATE
    return today, CONFIDENCE_DEFAULT_DATE


def _strip_amount(text: str, amount: AmountMatch) -> str:
    end = amount.end
    # "500 denars" only matches "500 den"; drop the rest of the currency word
    if text[amount.start:end][-1:].isalpha():
        while end < len(text) and text[end].isalpha():
            end += 1
    return text[:amount.start] + ' ' + text[end:]


def clean_description(text: str, amount: Optional[AmountMatch], category: Optional[str]) -> tuple:
    """
    Derive a human description from the original text.

    Removes the matched amount and filler words (spent, paid, today, on,
    for, ... in English and Macedonian) and capitalizes the rest. Falls back
    to "<Category> expense" or "Expense" when too little text is left.

    Returns:
        Tuple (description, confidence contribution)
    """
    description = _strip_amount(text, amount) if amount else text
    description = _FILLER_VERBS_RE.sub(' ', description)
    description = _FILLER_PREPOSITIONS_RE.sub(' ', description)
    description = re.sub(r'\s+', ' ', description).strip(' ,.;:-')

    if len(description) > MIN_DESCRIPTION_LENGTH:
        description = description[0].upper() + description[1:]
        return description[:MAX_DESCRIPTION_LENGTH], CONFIDENCE_DESCRIPTION

    fallback = f"{category} expense" if category else DefaultValues.FALLBACK_DESCRIPTION
    return fallback, CONFIDENCE_FALLBACK_DESCRIPTION


def parse_expense_text(text, today: Optional[datetime.date] = None) -> dict:
    """
    Extract an expense suggestion from free text.

    Args:
        text: Free-text description, English and/or Macedonian
        today: Reference date for relative words (default: today)

    Returns:
        Dict with keys:
            - amount: float or None
            - currency: 'MKD', 'EUR' or 'USD' (MKD when unspecified)
            - category: Category name or None
            - description: Cleaned description
            - date: ISO date string
            - confidence: 0.1-1.0
            - needs_confirmation: True when confidence < 0.8

        Input that is not a non-blank string gives a fixed low-confidence
        result instead of an error.

    Example:
        parsed = parse_expense_text("Paid 50 EUR for dinner last night")
        # {'amount': 50.0, 'currency': 'EUR', 'category': 'Food & Dining', ...}
    """
    today = today or datetime.date.today()

    if not isinstance(text, str) or not text.strip():
        logger.warning(f"Expense parser received invalid input of type {type(text).__name__}")
        return {
            'amount': None,
            'currency': Currency.DEFAULT,
            'category': None,
            'description': DefaultValues.INVALID_INPUT_DESCRIPTION,
            'date': today.isoformat(),
            'confidence': INVALID_INPUT_CONFIDENCE,
            'needs_confirmation': True,
        }

    original = text.strip()
    confidence = 0.0

    amount = match_amount(original)
    # A zero amount is kept but earns no confidence
    if amount and amount.amount > 0:
        confidence += CONFIDENCE_AMOUNT

    category = match_category(original)
    if category:
        confidence += CONFIDENCE_CATEGORY

    expense_date, date_confidence = match_date(original, today)
    confidence += date_confidence

    description, description_confidence = clean_description(original, amount, category)
    confidence += description_confidence

    confidence = round_half_up(clamp(confidence, MIN_PARSE_CONFIDENCE, MAX_PARSE_CONFIDENCE), 2)

    result = {
        'amount': amount.amount if amount else None,
        'currency': amount.currency if amount else Currency.DEFAULT,
        'category': category,
        'description': description,
        'date': expense_date.isoformat(),
        'confidence': confidence,
        'needs_confirmation': confidence < CONFIRMATION_THRESHOLD,
    }

    logger.info(
        f"Parsed expense text: amount={result['amount']} {result['currency']}, "
        f"category={category}, confidence={confidence}"
    )
    return result


def build_parse_response(parsed: dict) -> dict:
    """
    Wrap a parse result in the envelope returned to clients.

    Returns:
        Dict with 'parsed', 'needs_confirmation' and 'suggestions'
        (the fields a client pre-fills in its expense form)
    """
    return {
        'parsed': parsed,
        'needs_confirmation': parsed['confidence'] < CONFIRMATION_THRESHOLD,
        'suggestions': {
            'amount': parsed['amount'],
            'category': parsed['category'],
            'description': parsed['description'],
            'date': parsed['date'],
            'currency': parsed['currency'],
        },
    }
