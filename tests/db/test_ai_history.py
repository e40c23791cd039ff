"""
Tests for the AI audit trail, AI preferences and budget goals.
"""
import pytest
from datetime import date

from fintrack.db.ai_history import (
    get_anomalies,
    get_parse_history,
    get_predictions,
    log_parse,
    save_anomalies,
    save_anomaly_if_absent,
    save_prediction,
)
from fintrack.db.budgets import get_budgets, set_budget_goal
from fintrack.db.expenses import add_expense
from fintrack.db.preferences import get_ai_preferences, set_ai_preferences
from fintrack.exceptions import ValidationError


def make_anomaly(expense_id, severity=1.0):
    return {
        'expense_id': expense_id,
        'anomaly_type': 'amount_spike',
        'severity_score': severity,
        'description': 'Unusual Shopping expense: 900 MKD (typical: 100 MKD)',
        'expected_value': 100.0,
        'actual_value': 900.0,
        'confidence': 0.8,
    }


class TestPredictions:
    def test_save_prediction(self, temp_db):
        save_prediction(1, {'predicted_amount': 433.0, 'confidence_score': 0.9}, today=date(2024, 6, 14))

        df = get_predictions(1)
        assert len(df) == 1
        row = df.iloc[0]
        assert row['prediction_type'] == 'monthly_ml'
        assert row['predicted_date'] == '2024-07-14'
        assert row['confidence_score'] == 0.9


class TestAnomalies:
    def test_stored_once_per_expense(self, temp_db):
        expense_id = add_expense(1, 900.0, date(2024, 6, 12))

        assert save_anomaly_if_absent(1, make_anomaly(expense_id)) is True
        assert save_anomaly_if_absent(1, make_anomaly(expense_id)) is False
        assert len(get_anomalies(1)) == 1

    def test_batch_counts_new_rows(self, temp_db):
        first = add_expense(1, 900.0, date(2024, 6, 12))
        second = add_expense(1, 800.0, date(2024, 6, 13))
        save_anomaly_if_absent(1, make_anomaly(first))

        assert save_anomalies(1, [make_anomaly(first), make_anomaly(second, 0.7)]) == 1
        assert get_anomalies(1)['expense_id'].tolist() == [first, second]

    def test_empty_batch(self, temp_db):
        assert save_anomalies(1, []) == 0


class TestParseHistory:
    def test_log_parse(self, temp_db):
        parsed = {'amount': 150.0, 'category': 'Food & Dining', 'description': 'Coffee', 'confidence': 1.0}
        log_parse(1, "Coffee 150", parsed)
        log_parse(2, "Taxi 200", parsed)

        history = get_parse_history(1)
        assert len(history) == 1
        assert history.iloc[0]['parsed_category'] == 'Food & Dining'

    def test_history_limit(self, temp_db):
        parsed = {'amount': None, 'category': None, 'description': 'Expense', 'confidence': 0.15}
        for i in range(5):
            log_parse(1, f"entry {i}", parsed)

        history = get_parse_history(1, limit=3)
        assert history['raw_input'].tolist() == ['entry 4', 'entry 3', 'entry 2']


class TestAIPreferences:
    def test_defaults_created_on_first_access(self, temp_db):
        prefs = get_ai_preferences(1)
        assert prefs == {
            'enable_predictions': True,
            'enable_anomaly_detection': True,
            'enable_smart_budgeting': True,
            'notification_frequency': 'daily',
        }
        # Second read comes from the stored row
        assert get_ai_preferences(1) == prefs

    def test_update(self, temp_db):
        set_ai_preferences(1, enable_anomaly_detection=False, notification_frequency='weekly')

        prefs = get_ai_preferences(1)
        assert prefs['enable_anomaly_detection'] is False
        assert prefs['enable_predictions'] is True
        assert prefs['notification_frequency'] == 'weekly'

    def test_invalid_frequency(self, temp_db):
        with pytest.raises(ValidationError):
            set_ai_preferences(1, notification_frequency='hourly')


class TestBudgetGoals:
    def test_set_and_get(self, temp_db):
        budget = set_budget_goal(1, 12000, category_id=None)

        assert budget['amount'] == 12000
        assert budget['period'] == 'monthly'
        assert budget['is_active'] is True

        df = get_budgets(1)
        assert len(df) == 1
        assert df.iloc[0]['amount'] == 12000
        assert get_budgets(2).empty

    @pytest.mark.parametrize("amount,period", [(0, 'monthly'), (-5, 'monthly'), (100, 'daily')])
    def test_invalid_goal(self, temp_db, amount, period):
        with pytest.raises(ValidationError):
            set_budget_goal(1, amount, period=period)
