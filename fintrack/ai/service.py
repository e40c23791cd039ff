"""
AI service entry points.

Loads a user's data from storage, honours their AI preferences, runs the
analytics and records the audit trail. Every function handles one user
and shares no state with concurrent calls for other users.
"""
import datetime
from typing import Optional

import pandas as pd
from dotenv import load_dotenv

from fintrack.ai.aggregator import (
    aggregate_weekly,
    category_monthly_stats,
    category_stats,
    month_over_month,
    recent_expenses,
    spending_breakdown,
    spending_overview,
)
from fintrack.ai.anomaly_detector import detect_anomalies
from fintrack.ai.budget_recommender import recommend_budgets
from fintrack.ai.expense_parser import build_parse_response, parse_expense_text
from fintrack.ai.spending_predictor import predict_monthly_spending
from fintrack.analytics_constants import (
    PREDICTION_WINDOW_WEEKS,
    ANOMALY_STATS_WINDOW_MONTHS,
    BUDGET_WINDOW_MONTHS,
    OVERVIEW_WINDOW_DAYS,
)
from fintrack.constants import BreakdownPeriod, DefaultValues
from fintrack.db.ai_history import log_parse, save_anomalies, save_prediction
from fintrack.db.categories import get_categories
from fintrack.db.expenses import get_expenses
from fintrack.db.preferences import get_ai_preferences
from fintrack.error_tracking import init_error_tracking, track_errors
from fintrack.exceptions import FeatureDisabledError
from fintrack.logger import get_logger

logger = get_logger(__name__)

load_dotenv()
init_error_tracking()


def _today(as_of: Optional[datetime.date]) -> datetime.date:
    return as_of or datetime.date.today()


def _months_before(day: datetime.date, months: int) -> datetime.date:
    return (pd.Timestamp(day) - pd.DateOffset(months=months)).date()


def _generated_at() -> str:
    return datetime.datetime.now().isoformat()


def _require_feature(user_id: int, preference: str) -> None:
    if not get_ai_preferences(user_id)[preference]:
        logger.info(f"Skipping {preference} for user {user_id}: disabled in preferences")
        raise FeatureDisabledError(preference)


@track_errors("spending_prediction")
def generate_spending_prediction(user_id: int, as_of: Optional[datetime.date] = None) -> dict:
    """
    Forecast next month's spending for a user.

    A prediction with a positive amount is stored in the audit trail.

    Raises:
        FeatureDisabledError: if the user disabled predictions
        AnalyticsError: if stored data is corrupt

    Example:
        prediction = generate_spending_prediction(user_id)
        print(prediction['predicted_amount'], prediction['trend_direction'])
    """
    _require_feature(user_id, 'enable_predictions')
    today = _today(as_of)

    expenses = get_expenses(user_id, since=today - datetime.timedelta(weeks=PREDICTION_WINDOW_WEEKS))
    prediction = predict_monthly_spending(aggregate_weekly(expenses, as_of=today))

    if prediction['predicted_amount'] > 0:
        save_prediction(user_id, prediction, today=today)

    return {**prediction, 'generated_at': _generated_at()}


@track_errors("anomaly_detection")
def detect_user_anomalies(user_id: int, as_of: Optional[datetime.date] = None) -> dict:
    """
    Flag unusually large recent expenses for a user.

    Anomalies are stored only for expenses that were not flagged before;
    the returned list always contains everything detected in this run.

    Returns:
        Dict with 'anomalies' (sorted by severity), 'new_anomalies' (count
        stored by this call), 'detection_method' and 'generated_at'
    """
    _require_feature(user_id, 'enable_anomaly_detection')
    today = _today(as_of)

    expenses = get_expenses(user_id, since=_months_before(today, ANOMALY_STATS_WINDOW_MONTHS))
    stats = category_stats(expenses, as_of=today)
    anomalies = detect_anomalies(recent_expenses(expenses, as_of=today), stats)
    new_count = save_anomalies(user_id, anomalies)

    return {
        'anomalies': anomalies,
        'new_anomalies': new_count,
        'detection_method': DefaultValues.DETECTION_METHOD,
        'generated_at': _generated_at(),
    }


@track_errors("budget_recommendations")
def generate_budget_recommendations(user_id: int, as_of: Optional[datetime.date] = None) -> dict:
    """
    Suggest reduced monthly budgets per category for a user.

    Returns:
        Output of recommend_budgets() plus 'generated_at'
    """
    _require_feature(user_id, 'enable_smart_budgeting')
    today = _today(as_of)

    expenses = get_expenses(user_id, since=_months_before(today, BUDGET_WINDOW_MONTHS))
    spending = category_monthly_stats(expenses, get_categories(user_id), as_of=today)

    return {**recommend_budgets(spending), 'generated_at': _generated_at()}


@track_errors("expense_parsing")
def parse_expense(user_id: int, text, today: Optional[datetime.date] = None) -> dict:
    """
    Parse free text into an expense suggestion and log the attempt.

    Returns:
        Dict with 'parsed', 'needs_confirmation' and 'suggestions'
    """
    parsed = parse_expense_text(text, today=today)
    log_parse(user_id, text, parsed)
    return build_parse_response(parsed)


@track_errors("spending_breakdown")
def get_spending_breakdown(user_id: int, period: str = BreakdownPeriod.MONTH,
                           as_of: Optional[datetime.date] = None) -> dict:
    """
    Per-category spending for the trailing week, month or year.

    Returns:
        Dict with 'breakdown', 'period' and 'generated_at'
    """
    today = _today(as_of)
    expenses = get_expenses(user_id, since=_months_before(today, 12))
    breakdown = spending_breakdown(expenses, get_categories(user_id), period=period, as_of=today)
    return {'breakdown': breakdown, 'period': period, 'generated_at': _generated_at()}


@track_errors("spending_overview")
def get_spending_overview(user_id: int, days: int = OVERVIEW_WINDOW_DAYS,
                          as_of: Optional[datetime.date] = None) -> dict:
    """
    Totals per category and per day for the trailing `days`.

    Returns:
        Output of spending_overview() plus 'days' and 'generated_at'
    """
    today = _today(as_of)
    expenses = get_expenses(user_id, since=today - datetime.timedelta(days=days))
    overview = spending_overview(expenses, get_categories(user_id), days=days, as_of=today)
    return {**overview, 'days': days, 'generated_at': _generated_at()}


@track_errors("spending_insights")
def get_spending_insights(user_id: int, as_of: Optional[datetime.date] = None) -> dict:
    """
    This month versus last month, plus the top category this month.
    """
    today = _today(as_of)
    expenses = get_expenses(user_id, since=_months_before(today.replace(day=1), 1))
    return month_over_month(expenses, get_categories(user_id), as_of=today)
