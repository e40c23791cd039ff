"""
Anomaly Detection for Expense Amounts.

Flags recent expenses that sit well above what the user usually spends
in the same category.
"""
import pandas as pd

from fintrack.analytics_constants import (
    ANOMALY_SIGMA,
    FALLBACK_STDDEV_FACTOR,
    ANOMALY_CONFIDENCE,
)
from fintrack.constants import AnomalyType, Currency
from fintrack.exceptions import AnalyticsError
from fintrack.logger import get_logger
from fintrack.utils import clamp, format_amount, round_half_up

logger = get_logger(__name__)


def effective_stddev(mean_amount: float, stddev_amount: float) -> float:
    """Standard deviation to use for a category, falling back to 30% of the mean when degenerate."""
    if pd.isna(stddev_amount) or stddev_amount == 0:
        return mean_amount * FALLBACK_STDDEV_FACTOR
    return stddev_amount


def severity_score(amount: float, mean_amount: float, threshold: float) -> float:
    """How far an amount reaches past the mean relative to the threshold distance, in [0, 1]."""
    spread = threshold - mean_amount
    if spread <= 0:
        # Zero-mean category: any positive amount is maximally unusual
        return 1.0
    return round_half_up(clamp((amount - mean_amount) / spread, 0.0, 1.0), 2)


def detect_anomalies(recent: pd.DataFrame, stats: pd.DataFrame,
                     threshold_sigma: float = ANOMALY_SIGMA) -> list:
    """
    Detect recent expenses with anomalous amounts for their category.

    Args:
        recent: Recent expenses (see recent_expenses()); must have 'id',
            'category_id', 'amount' and may have 'category_name', 'currency'
        stats: Per-category stats from category_stats() ('category_id',
            'mean_amount', 'stddev_amount')
        threshold_sigma: Standard deviations above the mean that count as a spike

    Returns:
        List of anomaly dicts sorted by severity_score descending, with keys:
            - expense_id
            - anomaly_type: "amount_spike"
            - severity_score: 0-1
            - description: Human readable explanation
            - expected_value: Category mean
            - actual_value: Expense amount
            - confidence: Fixed detector confidence

    Example:
        anomalies = detect_anomalies(recent_expenses(df), category_stats(df))
        for anomaly in anomalies:
            print(anomaly['description'])
    """
    if recent.empty or stats.empty:
        return []

    for col in ('mean_amount', 'stddev_amount', 'category_id'):
        if col not in stats.columns:
            raise AnalyticsError(f"Category stats are missing the '{col}' column")

    if stats['mean_amount'].isna().any():
        raise AnalyticsError("Category stats contain undefined means")

    # Uncategorized expenses are compared against each other
    no_category = stats['category_id'].isna()
    uncategorized_stat = stats[no_category].iloc[0] if no_category.any() else None
    stats_by_cat = stats[~no_category].set_index('category_id')

    anomalies = []

    for _, tx in recent.iterrows():
        category_id = tx['category_id']
        if pd.isna(category_id):
            stat = uncategorized_stat
        elif category_id in stats_by_cat.index:
            stat = stats_by_cat.loc[category_id]
        else:
            stat = None
        # No history for this category: nothing to compare against
        if stat is None:
            continue

        amount = float(tx['amount'])
        mean_amt = float(stat['mean_amount'])
        std_amt = effective_stddev(mean_amt, stat['stddev_amount'])
        threshold = mean_amt + threshold_sigma * std_amt

        if amount <= threshold:
            continue

        category_name = tx.get('category_name')
        if category_name is None or pd.isna(category_name):
            category_name = "Uncategorized"
        currency = tx.get('currency')
        if currency is None or pd.isna(currency):
            currency = Currency.DEFAULT

        anomalies.append({
            'expense_id': tx['id'],
            'anomaly_type': AnomalyType.AMOUNT_SPIKE,
            'severity_score': severity_score(amount, mean_amt, threshold),
            'description': (
                f"Unusual {category_name} expense: {format_amount(amount)} {currency} "
                f"(typical: {format_amount(round_half_up(mean_amt))} {currency})"
            ),
            'expected_value': round_half_up(mean_amt, 2),
            'actual_value': amount,
            'confidence': ANOMALY_CONFIDENCE,
        })

    # Stable sort keeps newest-first order among equal severities
    anomalies.sort(key=lambda x: x['severity_score'], reverse=True)

    logger.info(f"Detected {len(anomalies)} amount anomalies")
    return anomalies
