"""
AI-powered analytics for expense tracking.

This package provides:
- Expense aggregation into weekly, monthly and per-category buckets
- Monthly spending prediction with trend and confidence
- Category-based anomaly detection for unusual expense amounts
- Budget recommendations weighted by category necessity
- Free-text expense parsing (English and Macedonian)
"""

from fintrack.ai.aggregator import (
    aggregate_weekly,
    aggregate_monthly,
    category_stats,
    category_monthly_stats,
    recent_expenses,
    spending_breakdown,
    month_over_month,
    spending_overview,
)
from fintrack.ai.spending_predictor import predict_monthly_spending
from fintrack.ai.anomaly_detector import detect_anomalies
from fintrack.ai.budget_recommender import recommend_budgets
from fintrack.ai.expense_parser import parse_expense_text, build_parse_response

__all__ = [
    'aggregate_weekly',
    'aggregate_monthly',
    'category_stats',
    'category_monthly_stats',
    'recent_expenses',
    'spending_breakdown',
    'month_over_month',
    'spending_overview',
    'predict_monthly_spending',
    'detect_anomalies',
    'recommend_budgets',
    'parse_expense_text',
    'build_parse_response',
]
