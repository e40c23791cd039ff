"""
Budget Recommendations.

Suggests per-category monthly budgets below the current average, cutting
harder on discretionary categories than on essentials.
"""
import pandas as pd

from fintrack.analytics_constants import (
    CATEGORY_NECESSITY_SCORES,
    DEFAULT_NECESSITY_SCORE,
    ESSENTIAL_NECESSITY,
    DISCRETIONARY_NECESSITY,
    REDUCTION_ESSENTIAL,
    REDUCTION_DEFAULT,
    REDUCTION_DISCRETIONARY,
    MIN_POTENTIAL_SAVINGS,
    RECOMMENDATION_CONFIDENCE,
)
from fintrack.exceptions import AnalyticsError
from fintrack.logger import get_logger
from fintrack.utils import round_half_up

logger = get_logger(__name__)


def get_category_necessity_score(category_name: str) -> float:
    """Necessity of a category from 0 (optional) to 1 (essential); unknown names are neutral."""
    return CATEGORY_NECESSITY_SCORES.get(category_name, DEFAULT_NECESSITY_SCORE)


def get_reduction_percent(necessity_score: float) -> float:
    """Share of the current average to cut for a given necessity score."""
    if necessity_score < DISCRETIONARY_NECESSITY:
        return REDUCTION_DISCRETIONARY
    if necessity_score > ESSENTIAL_NECESSITY:
        return REDUCTION_ESSENTIAL
    return REDUCTION_DEFAULT


def recommend_budgets(spending: pd.DataFrame) -> dict:
    """
    Build budget recommendations from average monthly spending per category.

    Args:
        spending: Output of category_monthly_stats() with columns
            'category_id', 'category_name', 'avg_spending'

    Returns:
        Dict with:
            - recommendations: List of dicts sorted by potential_savings
              descending (category_id, category_name, current_budget,
              recommended_budget, reduction_percent, reasoning,
              confidence_score, potential_savings)
            - total_potential_savings: Sum of savings, rounded
            - optimization_score: Savings as a percentage of all average spending

    Raises:
        AnalyticsError: if spending data is missing columns or corrupt

    Example:
        result = recommend_budgets(category_monthly_stats(df, categories))
        print(f"Save up to {result['total_potential_savings']} per month")
    """
    empty_result = {
        'recommendations': [],
        'total_potential_savings': 0,
        'optimization_score': 0,
    }

    if spending.empty:
        logger.info("No spending data for budget recommendations")
        return empty_result

    for col in ('category_id', 'category_name', 'avg_spending'):
        if col not in spending.columns:
            raise AnalyticsError(f"Spending data is missing the '{col}' column")

    averages = pd.to_numeric(spending['avg_spending'], errors='coerce')
    if averages.isna().any():
        raise AnalyticsError("Spending data contains non-numeric averages")

    spending = spending.assign(avg_spending=averages)
    spending = spending[spending['avg_spending'] > 0]
    if spending.empty:
        logger.info("No positive spending for budget recommendations")
        return empty_result

    recommendations = []
    total_savings = 0.0

    for _, category in spending.iterrows():
        avg_spending = float(category['avg_spending'])
        name = category['category_name']
        reduction = get_reduction_percent(get_category_necessity_score(name))

        recommended_budget = round_half_up(avg_spending * (1 - reduction))
        potential_savings = max(0.0, avg_spending - recommended_budget)

        if potential_savings <= MIN_POTENTIAL_SAVINGS:
            continue

        recommendations.append({
            'category_id': category['category_id'],
            'category_name': name,
            'current_budget': round_half_up(avg_spending),
            'recommended_budget': recommended_budget,
            'reduction_percent': reduction,
            'reasoning': (
                f"Based on {name} spending patterns, a "
                f"{round_half_up(reduction * 100):.0f}% reduction is achievable."
            ),
            'confidence_score': RECOMMENDATION_CONFIDENCE,
            'potential_savings': round_half_up(potential_savings),
        })
        total_savings += potential_savings

    recommendations.sort(key=lambda x: x['potential_savings'], reverse=True)

    total_average = float(spending['avg_spending'].sum())

    logger.info(f"Generated {len(recommendations)} budget recommendations")
    return {
        'recommendations': recommendations,
        'total_potential_savings': round_half_up(total_savings),
        'optimization_score': round_half_up(total_savings / total_average * 100),
    }
