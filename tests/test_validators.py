"""
Tests for input validation module.
"""

import pytest
from datetime import date, timedelta
from pydantic import ValidationError

from fintrack.validators import (
    ExpenseInput,
    CategoryInput,
    BudgetGoalInput,
    AIPreferencesInput,
    validate_expense,
    sanitize_string_input,
)


class TestExpenseInput:
    """Test expense input validation."""

    def test_valid_expense(self):
        expense = ExpenseInput(amount=450.0, date=date(2024, 6, 10), description="Lunch")
        assert expense.amount == 450.0
        assert expense.currency == 'MKD'
        assert expense.category_id is None

    def test_amount_precision(self):
        """Test amount is rounded to 2 decimals."""
        expense = ExpenseInput(amount=45.55555, date=date(2024, 6, 10))
        assert expense.amount == 45.56

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError):
            ExpenseInput(amount=-1, date=date(2024, 6, 10))

    def test_zero_amount_allowed(self):
        assert ExpenseInput(amount=0, date=date(2024, 6, 10)).amount == 0

    def test_currency_normalized(self):
        assert ExpenseInput(amount=1, currency=' usd ', date=date(2024, 6, 10)).currency == 'USD'

    def test_unsupported_currency(self):
        with pytest.raises(ValidationError, match="Unsupported currency"):
            ExpenseInput(amount=1, currency='GBP', date=date(2024, 6, 10))

    def test_description_sanitized(self):
        expense = ExpenseInput(amount=1, description="  Lunch\x00\x07 ", date=date(2024, 6, 10))
        assert expense.description == "Lunch"

    def test_date_range(self):
        with pytest.raises(ValidationError):
            ExpenseInput(amount=1, date=date(1999, 1, 1))
        with pytest.raises(ValidationError):
            ExpenseInput(amount=1, date=date.today() + timedelta(days=400))


class TestCategoryInput:
    def test_valid(self):
        category = CategoryInput(name="  Pets ", color="#A1b2C3")
        assert category.name == "Pets"

    @pytest.mark.parametrize("color", ["red", "#12345", "123456"])
    def test_invalid_color(self, color):
        with pytest.raises(ValidationError):
            CategoryInput(name="Pets", color=color)

    def test_blank_name(self):
        with pytest.raises(ValidationError):
            CategoryInput(name="   ")


class TestBudgetGoalInput:
    def test_defaults(self):
        goal = BudgetGoalInput(target_amount=999.999)
        assert goal.period == 'monthly'
        assert goal.target_amount == 1000.0

    def test_period(self):
        assert BudgetGoalInput(target_amount=10, period='yearly').period == 'yearly'
        with pytest.raises(ValidationError):
            BudgetGoalInput(target_amount=10, period='daily')


class TestAIPreferencesInput:
    def test_defaults(self):
        prefs = AIPreferencesInput()
        assert prefs.enable_predictions is True
        assert prefs.notification_frequency == 'daily'

    def test_unknown_frequency(self):
        with pytest.raises(ValidationError):
            AIPreferencesInput(notification_frequency='hourly')


class TestValidateExpense:
    def test_valid(self):
        is_valid, data, error = validate_expense({'amount': 10, 'date': date(2024, 6, 10)})
        assert is_valid is True
        assert data['amount'] == 10
        assert error is None

    def test_invalid(self):
        is_valid, data, error = validate_expense({'amount': 'abc', 'date': date(2024, 6, 10)})
        assert is_valid is False
        assert data is None
        assert error


class TestSanitizeStringInput:
    def test_truncates(self):
        assert sanitize_string_input("a" * 300) == "a" * 255

    def test_non_string(self):
        assert sanitize_string_input(42) == "42"

    def test_keeps_cyrillic(self):
        assert sanitize_string_input(" Храна ") == "Храна"
