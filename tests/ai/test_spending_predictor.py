import pandas as pd
import pytest
from datetime import date, timedelta

from fintrack.ai.aggregator import aggregate_weekly
from fintrack.ai.spending_predictor import classify_trend, predict_monthly_spending
from fintrack.exceptions import AnalyticsError


def weekly_frame(totals):
    """Weekly aggregates with the given totals, one week apart."""
    start = pd.Timestamp('2024-02-26')
    return pd.DataFrame({
        'period_start': [start + pd.Timedelta(weeks=i) for i in range(len(totals))],
        'total_amount': totals,
        'transaction_count': [1] * len(totals),
        'avg_transaction': totals,
    })


class TestInsufficientData:
    @pytest.mark.parametrize("totals", [[], [100.0], [100.0, 200.0], [100.0, 200.0, 300.0]])
    def test_fewer_than_four_weeks(self, totals):
        """Less than 4 weeks of data gives the low-confidence result."""
        prediction = predict_monthly_spending(weekly_frame(totals))

        assert prediction['model_used'] == 'insufficient_data'
        assert prediction['confidence_score'] == 0.1
        assert prediction['predicted_amount'] == 0
        assert prediction['trend_direction'] == 'stable'
        assert prediction['data_points'] == len(totals)
        assert 'message' in prediction


class TestPrediction:
    def test_constant_spending(self):
        """Flat spending forecasts 4.33 weeks of the weekly amount with top confidence."""
        prediction = predict_monthly_spending(weekly_frame([100.0] * 8))

        assert prediction['model_used'] == 'statistical_analysis'
        assert prediction['predicted_amount'] == 433.0
        assert prediction['confidence_score'] == 0.9
        assert prediction['volatility_score'] == 0.0
        assert prediction['trend_direction'] == 'stable'
        assert prediction['data_points'] == 8
        assert prediction['seasonality_detected'] is False

    def test_uses_last_four_weeks(self):
        prediction = predict_monthly_spending(weekly_frame([100.0, 100.0, 200.0, 200.0]))

        assert prediction['predicted_amount'] == 649.5
        assert prediction['trend_direction'] == 'increasing'
        # Population std of the series around 150 is 50
        assert prediction['volatility_score'] == 0.33
        assert prediction['confidence_score'] == 0.67

    def test_confidence_floor(self):
        prediction = predict_monthly_spending(weekly_frame([10.0, 1000.0, 10.0, 1000.0, 10.0, 10.0]))
        assert prediction['confidence_score'] == 0.3
        assert prediction['volatility_score'] > 1

    def test_zero_recent_average(self):
        """No recent spending must not divide by zero."""
        prediction = predict_monthly_spending(weekly_frame([100.0, 100.0, 0.0, 0.0, 0.0, 0.0]))

        assert prediction['predicted_amount'] == 0.0
        assert prediction['confidence_score'] == 0.3
        assert prediction['volatility_score'] == 0.0
        assert prediction['trend_direction'] == 'decreasing'

    @pytest.mark.parametrize("totals", [
        [100.0, 120.0, 90.0, 160.0, 170.0, 180.0],
        [500.0, 20.0, 300.0, 10.0, 900.0],
        [0.0, 0.0, 0.0, 50.0],
    ])
    def test_scores_in_range(self, totals):
        prediction = predict_monthly_spending(weekly_frame(totals))
        assert 0.1 <= prediction['confidence_score'] <= 0.9
        assert prediction['volatility_score'] >= 0

    def test_corrupt_totals_raise(self):
        df = weekly_frame([100.0, 200.0, 300.0, 400.0])
        df.loc[2, 'total_amount'] = float('nan')
        with pytest.raises(AnalyticsError):
            predict_monthly_spending(df)

    def test_missing_totals_column_raises(self):
        with pytest.raises(AnalyticsError):
            predict_monthly_spending(pd.DataFrame({'period_start': []}))


class TestTrend:
    def test_decreasing(self):
        assert classify_trend([200.0, 200.0, 100.0, 100.0]) == 'decreasing'

    def test_odd_length_gives_first_half_the_smaller_share(self):
        """[100, 100 | 100, 111, 111]: second half averages 107.3, within 10%."""
        assert classify_trend([100.0, 100.0, 100.0, 111.0, 111.0]) == 'stable'

    @pytest.mark.parametrize("factor", [0.5, 3.0, 1000.0])
    def test_scaling_does_not_change_trend(self, factor):
        totals = [100.0, 120.0, 90.0, 160.0, 170.0, 180.0]
        scaled = [t * factor for t in totals]
        assert classify_trend(scaled) == classify_trend(totals) == 'increasing'


class TestDeterminism:
    def test_same_input_same_output(self, make_expenses, as_of):
        """Aggregating and predicting twice yields identical results."""
        rows = [(as_of - timedelta(days=7 * i), 100.0 + 10 * i, 1) for i in range(10)]
        df = make_expenses(rows)

        first = predict_monthly_spending(aggregate_weekly(df, as_of=as_of))
        second = predict_monthly_spending(aggregate_weekly(df, as_of=as_of))

        assert first == second
        assert first['data_points'] == 10
        # Older weeks spent more
        assert first['trend_direction'] == 'decreasing'
