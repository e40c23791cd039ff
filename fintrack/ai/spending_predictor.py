"""
Monthly Spending Prediction.

Forecasts next month's spending from the trailing weekly totals and
reports the trend direction and a variance-based confidence score.
"""
import math

import numpy as np
import pandas as pd

from fintrack.analytics_constants import (
    MIN_WEEKS_FOR_PREDICTION,
    RECENT_WEEKS,
    WEEKS_PER_MONTH,
    TREND_INCREASE_RATIO,
    TREND_DECREASE_RATIO,
    INSUFFICIENT_DATA_CONFIDENCE,
    MIN_PREDICTION_CONFIDENCE,
    MAX_PREDICTION_CONFIDENCE,
)
from fintrack.constants import ModelUsed, TrendDirection
from fintrack.exceptions import AnalyticsError
from fintrack.logger import get_logger
from fintrack.utils import clamp, round_half_up

logger = get_logger(__name__)


def _weekly_totals(weekly: pd.DataFrame) -> np.ndarray:
    if 'total_amount' not in weekly.columns:
        raise AnalyticsError("Weekly aggregates are missing the 'total_amount' column")

    totals = pd.to_numeric(weekly['total_amount'], errors='coerce').to_numpy(dtype=float)
    if np.isnan(totals).any():
        raise AnalyticsError("Weekly aggregates contain non-numeric totals")
    if (totals < 0).any():
        raise AnalyticsError("Weekly aggregates contain negative totals")
    return totals


def classify_trend(totals) -> str:
    """
    Compare the average of the second half of the series with the first half.

    The first half gets the smaller share on odd lengths. Ratios, not
    magnitudes, decide the outcome.
    """
    totals = np.asarray(totals, dtype=float)
    if len(totals) < 2:
        return TrendDirection.STABLE

    half = len(totals) // 2
    first_avg = totals[:half].mean()
    second_avg = totals[half:].mean()

    if second_avg > first_avg * TREND_INCREASE_RATIO:
        return TrendDirection.INCREASING
    if second_avg < first_avg * TREND_DECREASE_RATIO:
        return TrendDirection.DECREASING
    return TrendDirection.STABLE


def predict_monthly_spending(weekly: pd.DataFrame) -> dict:
    """
    Predict next month's spending from weekly aggregates.

    Args:
        weekly: Output of aggregate_weekly(), oldest week first

    Returns:
        Dict with keys:
            - predicted_amount: Forecast for a month (recent weekly average x 4.33)
            - confidence_score: 0.1 without enough data, otherwise in [0.3, 0.9]
            - trend_direction: 'increasing', 'decreasing' or 'stable'
            - model_used: 'insufficient_data' or 'statistical_analysis'
            - data_points: Number of weekly buckets used
            - volatility_score: Standard deviation relative to the recent average
            - seasonality_detected: Always False
            - message: Only present on the insufficient-data path

    Raises:
        AnalyticsError: if the aggregates are corrupt

    Example:
        prediction = predict_monthly_spending(aggregate_weekly(df))
        print(f"{prediction['predicted_amount']} ({prediction['trend_direction']})")
    """
    totals = _weekly_totals(weekly)
    data_points = len(totals)

    if data_points < MIN_WEEKS_FOR_PREDICTION:
        logger.info(f"Prediction skipped: only {data_points} weeks of data")
        return {
            'predicted_amount': 0,
            'confidence_score': INSUFFICIENT_DATA_CONFIDENCE,
            'trend_direction': TrendDirection.STABLE,
            'model_used': ModelUsed.INSUFFICIENT_DATA,
            'data_points': data_points,
            'volatility_score': 0.0,
            'seasonality_detected': False,
            'message': f"Need at least {MIN_WEEKS_FOR_PREDICTION} weeks of data for prediction",
        }

    avg_recent = float(totals[-RECENT_WEEKS:].mean())
    monthly_prediction = avg_recent * WEEKS_PER_MONTH

    # Population variance of the whole series around the recent average
    variance = float(np.mean((totals - avg_recent) ** 2))

    if avg_recent > 0:
        volatility = math.sqrt(variance) / avg_recent
        confidence = clamp(1 - volatility, MIN_PREDICTION_CONFIDENCE, MAX_PREDICTION_CONFIDENCE)
    else:
        volatility = 0.0
        confidence = MIN_PREDICTION_CONFIDENCE

    prediction = {
        'predicted_amount': round_half_up(monthly_prediction, 2),
        'confidence_score': round_half_up(confidence, 2),
        'trend_direction': classify_trend(totals),
        'model_used': ModelUsed.STATISTICAL_ANALYSIS,
        'data_points': data_points,
        'volatility_score': round_half_up(volatility, 2),
        'seasonality_detected': False,
    }

    logger.info(
        f"Predicted {prediction['predicted_amount']:.2f} for next month "
        f"({prediction['trend_direction']}, confidence {prediction['confidence_score']})"
    )
    return prediction
