import pandas as pd
import pytest
from datetime import date

from fintrack.ai.aggregator import category_stats, recent_expenses
from fintrack.ai.anomaly_detector import detect_anomalies, effective_stddev, severity_score
from fintrack.exceptions import AnalyticsError


def stats_frame(*rows):
    return pd.DataFrame(rows, columns=['category_id', 'mean_amount', 'stddev_amount', 'sample_count'])


def recent_frame(*rows, category_name='Food & Dining', currency='MKD'):
    df = pd.DataFrame(rows, columns=['id', 'category_id', 'amount'])
    df['category_name'] = category_name
    df['currency'] = currency
    return df


class TestFallbackStddev:
    def test_zero_stddev_uses_thirty_percent_of_mean(self):
        assert effective_stddev(100.0, 0.0) == pytest.approx(30.0)
        assert effective_stddev(100.0, float('nan')) == pytest.approx(30.0)
        assert effective_stddev(100.0, 12.0) == 12.0

    def test_threshold_boundary_with_fallback(self):
        """With stddev 0 the threshold is 1.6x the mean: 1.6x is normal, 1.7x is flagged."""
        stats = stats_frame((1, 100.0, 0.0, 5))
        recent = recent_frame((1, 1, 160.0), (2, 1, 170.0))

        anomalies = detect_anomalies(recent, stats)

        assert [a['expense_id'] for a in anomalies] == [2]


class TestDetectAnomalies:
    def test_flags_amount_above_two_sigma(self):
        stats = stats_frame((1, 100.0, 10.0, 8))
        recent = recent_frame((1, 1, 115.0), (2, 1, 125.0))

        anomalies = detect_anomalies(recent, stats)

        assert len(anomalies) == 1
        anomaly = anomalies[0]
        assert anomaly['expense_id'] == 2
        assert anomaly['anomaly_type'] == 'amount_spike'
        assert anomaly['expected_value'] == 100.0
        assert anomaly['actual_value'] == 125.0
        assert anomaly['confidence'] == 0.8
        assert anomaly['description'] == "Unusual Food & Dining expense: 125 MKD (typical: 100 MKD)"

    def test_description_uses_expense_currency(self):
        stats = stats_frame((1, 20.5, 2.0, 4))
        recent = recent_frame((7, 1, 40.25), category_name='Shopping', currency='EUR')

        anomaly = detect_anomalies(recent, stats)[0]

        assert anomaly['description'] == "Unusual Shopping expense: 40.25 EUR (typical: 21 EUR)"
        assert anomaly['expected_value'] == 20.5

    def test_categories_without_stats_are_skipped(self):
        stats = stats_frame((1, 100.0, 10.0, 8))
        recent = recent_frame((1, 2, 5000.0), (2, None, 5000.0))
        assert detect_anomalies(recent, stats) == []

    def test_uncategorized_spike_flagged(self):
        """Uncategorized expenses are judged against other uncategorized expenses."""
        stats = stats_frame((1, 1000.0, 10.0, 8), (None, 100.0, 0.0, 5))
        recent = recent_frame((1, None, 900.0), (2, None, 120.0), category_name=None)

        anomalies = detect_anomalies(recent, stats)

        assert [a['expense_id'] for a in anomalies] == [1]
        assert anomalies[0]['description'] == "Unusual Uncategorized expense: 900 MKD (typical: 100 MKD)"

    def test_empty_inputs(self):
        assert detect_anomalies(recent_frame(), stats_frame((1, 100.0, 10.0, 8))) == []
        assert detect_anomalies(recent_frame((1, 1, 500.0)), stats_frame()) == []

    def test_sorted_and_bounded_severity(self):
        stats = stats_frame((1, 100.0, 10.0, 8), (2, 50.0, 0.0, 3))
        recent = recent_frame((1, 1, 300.0), (2, 2, 81.0), (3, 1, 121.0), (4, 2, 60.0))

        anomalies = detect_anomalies(recent, stats)

        scores = [a['severity_score'] for a in anomalies]
        assert scores == sorted(scores, reverse=True)
        assert all(0 <= s <= 1 for s in scores)
        # Equal severities keep the newest-first input order
        assert [a['expense_id'] for a in anomalies] == [1, 2, 3]

    def test_zero_mean_category(self):
        """A category that normally costs nothing flags any positive amount without dividing by zero."""
        stats = stats_frame((1, 0.0, 0.0, 3))
        anomalies = detect_anomalies(recent_frame((1, 1, 10.0)), stats)
        assert anomalies[0]['severity_score'] == 1.0

    def test_missing_stats_column_raises(self):
        stats = pd.DataFrame({'category_id': [1], 'mean_amount': [10.0]})
        with pytest.raises(AnalyticsError):
            detect_anomalies(recent_frame((1, 1, 500.0)), stats)


class TestSeverityScore:
    def test_clamped_to_one(self):
        assert severity_score(1000.0, 100.0, 120.0) == 1.0

    def test_partial_severity(self):
        assert severity_score(110.0, 100.0, 120.0) == 0.5


class TestFromRawExpenses:
    def test_uncategorized_end_to_end(self, make_expenses, as_of):
        df = make_expenses([(date(2024, 4, d), 100.0, None) for d in range(1, 6)]
                           + [(date(2024, 6, 12), 900.0, None)])

        anomalies = detect_anomalies(recent_expenses(df, as_of=as_of), category_stats(df, as_of=as_of))

        assert len(anomalies) == 1
        assert anomalies[0]['actual_value'] == 900.0
        assert anomalies[0]['description'].startswith("Unusual Uncategorized expense: 900 MKD")

    def test_end_to_end(self, make_expenses, as_of):
        """History in April, one spike in the last two weeks."""
        history = [(date(2024, 4, d), 100.0, 1) for d in range(1, 11)]
        small_category = [(date(2024, 4, 2), 10.0, 2), (date(2024, 6, 10), 900.0, 2)]
        spike = [(date(2024, 6, 12), 400.0, 1)]
        df = make_expenses(history + small_category + spike)

        stats = category_stats(df, as_of=as_of)
        anomalies = detect_anomalies(recent_expenses(df, as_of=as_of), stats)

        # Category 2 has only two expenses, so its 900 is never flagged
        assert len(anomalies) == 1
        assert anomalies[0]['actual_value'] == 400.0
        assert anomalies[0]['expense_id'] == 13
