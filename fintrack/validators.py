"""
Input validation module for FinTrack.
Validates expense, category, budget-goal and AI preference inputs before
they reach storage. Uses Pydantic v2 for validation with clear error messages.
"""

import re
from datetime import date, timedelta
from typing import Optional

from pydantic import BaseModel, Field, field_validator, ValidationError

from fintrack.constants import Currency, NotificationFrequency

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def sanitize_string_input(value, max_length: int = 255) -> str:
    """
    Strip control characters and surrounding whitespace, then truncate.

    Args:
        value: Input value (converted to str)
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    if not isinstance(value, str):
        value = str(value)
    value = _CONTROL_CHARS.sub('', value).strip()
    return value[:max_length]


class ExpenseInput(BaseModel):
    """Validation schema for expense records."""
    category_id: Optional[int] = None
    amount: float = Field(..., ge=0, lt=1e9)
    currency: str = Field(default=Currency.DEFAULT)
    description: str = Field(default='', max_length=500)
    date: date

    @field_validator('amount')
    @classmethod
    def validate_amount_precision(cls, v):
        """Round to 2 decimal places (currency)."""
        return round(v, 2)

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v):
        """Only MKD, EUR and USD are supported."""
        v = v.strip().upper()
        if v not in Currency.ALL:
            raise ValueError(f"Unsupported currency '{v}' (use {', '.join(Currency.ALL)})")
        return v

    @field_validator('description')
    @classmethod
    def sanitize_description(cls, v):
        return sanitize_string_input(v, max_length=500)

    @field_validator('date')
    @classmethod
    def validate_date_range(cls, v):
        """Ensure date is within reasonable range."""
        min_date = date(2000, 1, 1)
        max_date = date.today() + timedelta(days=365)  # Max 1 year in future

        if v < min_date:
            raise ValueError(f"Date cannot be before {min_date}")
        if v > max_date:
            raise ValueError("Date cannot be more than 1 year in the future")
        return v


class CategoryInput(BaseModel):
    """Validation schema for category creation."""
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, pattern=r'^#[0-9A-Fa-f]{6}$')

    @field_validator('name')
    @classmethod
    def validate_category_name(cls, v):
        """Ensure category name is not blank after stripping."""
        v = sanitize_string_input(v, max_length=100)
        if not v:
            raise ValueError("Category name cannot be blank")
        return v


class BudgetGoalInput(BaseModel):
    """Validation schema for budget goals."""
    target_amount: float = Field(..., gt=0, lt=1e9)
    period: str = Field(default='monthly', pattern='^(weekly|monthly|yearly)$')
    category_id: Optional[int] = None

    @field_validator('target_amount')
    @classmethod
    def validate_budget_amount(cls, v):
        return round(v, 2)


class AIPreferencesInput(BaseModel):
    """Validation schema for per-user AI feature toggles."""
    enable_predictions: bool = True
    enable_anomaly_detection: bool = True
    enable_smart_budgeting: bool = True
    notification_frequency: str = NotificationFrequency.DAILY

    @field_validator('notification_frequency')
    @classmethod
    def validate_frequency(cls, v):
        if v not in NotificationFrequency.ALL:
            raise ValueError(f"Unknown notification frequency '{v}'")
        return v


def validate_expense(data: dict) -> tuple[bool, Optional[dict], Optional[str]]:
    """
    Validate an expense dict.

    Args:
        data: Raw expense fields (category_id, amount, currency, description, date)

    Returns:
        Tuple of (is_valid, cleaned_data, error_message)
    """
    try:
        expense = ExpenseInput(**data)
        return True, expense.model_dump(), None
    except ValidationError as e:
        # Get first error message
        error_msg = e.errors()[0]['msg']
        return False, None, error_msg


__all__ = [
    'ExpenseInput',
    'CategoryInput',
    'BudgetGoalInput',
    'AIPreferencesInput',
    'validate_expense',
    'sanitize_string_input',
]
