"""
Expense Aggregation.

Groups a user's expense records into weekly, monthly and per-category
buckets. Buckets are sparse: periods without expenses are omitted rather
than zero-filled, which the trend maths downstream depends on.
"""
import datetime
from typing import Optional

import pandas as pd

from fintrack.analytics_constants import (
    PREDICTION_WINDOW_WEEKS,
    ANOMALY_STATS_WINDOW_MONTHS,
    ANOMALY_RECENT_WINDOW_WEEKS,
    BUDGET_WINDOW_MONTHS,
    MIN_CATEGORY_SAMPLES,
    OVERVIEW_WINDOW_DAYS,
)
from fintrack.constants import BreakdownPeriod
from fintrack.exceptions import AnalyticsError
from fintrack.logger import get_logger
from fintrack.utils import round_half_up

logger = get_logger(__name__)

REQUIRED_COLUMNS = ('id', 'category_id', 'amount', 'date')

BUCKET_COLUMNS = ['period_start', 'total_amount', 'transaction_count', 'avg_transaction']
STATS_COLUMNS = ['category_id', 'mean_amount', 'stddev_amount', 'sample_count']
MONTHLY_STATS_COLUMNS = ['category_id', 'category_name', 'avg_spending',
                         'spending_variance', 'months_with_data']


def _as_of(as_of: Optional[datetime.date]) -> pd.Timestamp:
    return pd.Timestamp(as_of or datetime.date.today()).normalize()


def prepare_expenses(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate an expense frame and normalize its dtypes.

    Args:
        df: DataFrame with at least 'id', 'category_id', 'amount', 'date'

    Returns:
        Copy of df with 'date' as normalized datetimes and 'amount' as float

    Raises:
        AnalyticsError: if columns are missing or amounts are not
            non-negative numbers
    """
    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise AnalyticsError(f"Expense data is missing columns: {', '.join(missing)}")

    data = df.copy()
    if data.empty:
        data['date'] = pd.to_datetime(data['date'])
        data['amount'] = data['amount'].astype(float)
        return data

    amounts = pd.to_numeric(data['amount'], errors='coerce')
    if amounts.isna().any():
        raise AnalyticsError("Expense data contains non-numeric amounts")
    if (amounts < 0).any():
        raise AnalyticsError("Expense data contains negative amounts")
    data['amount'] = amounts.astype(float)

    try:
        data['date'] = pd.to_datetime(data['date']).dt.normalize()
    except (ValueError, TypeError) as e:
        raise AnalyticsError(f"Expense data contains invalid dates: {e}") from e

    return data


def filter_window(df: pd.DataFrame, start: pd.Timestamp, end: pd.Timestamp) -> pd.DataFrame:
    """Keep rows whose date falls in [start, end]."""
    return df[(df['date'] >= start) & (df['date'] <= end)]


def _bucket(df: pd.DataFrame, keys: pd.Series) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=BUCKET_COLUMNS)

    grouped = df.assign(period_start=keys).groupby('period_start')['amount']
    buckets = grouped.agg(
        total_amount='sum',
        transaction_count='size',
        avg_transaction='mean',
    ).reset_index()
    return buckets.sort_values('period_start').reset_index(drop=True)[BUCKET_COLUMNS]


def aggregate_weekly(df: pd.DataFrame, weeks: int = PREDICTION_WINDOW_WEEKS,
                     as_of: Optional[datetime.date] = None) -> pd.DataFrame:
    """
    Bucket expenses by ISO week (weeks start on Monday) over a trailing window.

    Args:
        df: Expense DataFrame (see prepare_expenses)
        weeks: Length of the trailing window in weeks
        as_of: Window end date (default: today)

    Returns:
        DataFrame ordered by period_start with columns:
            period_start, total_amount, transaction_count, avg_transaction
        Weeks without expenses are not present.

    Example:
        weekly = aggregate_weekly(expenses_df)
        totals = weekly['total_amount'].tolist()
    """
    end = _as_of(as_of)
    data = filter_window(prepare_expenses(df), end - pd.Timedelta(weeks=weeks), end)
    if data.empty:
        return pd.DataFrame(columns=BUCKET_COLUMNS)
    week_start = data['date'] - pd.to_timedelta(data['date'].dt.weekday, unit='D')
    return _bucket(data, week_start)


def aggregate_monthly(df: pd.DataFrame, months: int = BUDGET_WINDOW_MONTHS,
                      as_of: Optional[datetime.date] = None) -> pd.DataFrame:
    """
    Bucket expenses by calendar month over a trailing window.

    Returns:
        DataFrame with the same columns as aggregate_weekly, period_start
        being the first day of each month.
    """
    end = _as_of(as_of)
    data = filter_window(prepare_expenses(df), end - pd.DateOffset(months=months), end)
    if data.empty:
        return pd.DataFrame(columns=BUCKET_COLUMNS)
    return _bucket(data, data['date'].dt.to_period('M').dt.start_time)


def recent_expenses(df: pd.DataFrame, weeks: int = ANOMALY_RECENT_WINDOW_WEEKS,
                    as_of: Optional[datetime.date] = None) -> pd.DataFrame:
    """
    Expenses from the trailing `weeks`, newest first.

    Ordered by 'created_at' when present, otherwise by date.
    """
    end = _as_of(as_of)
    data = filter_window(prepare_expenses(df), end - pd.Timedelta(weeks=weeks), end)
    order_col = 'created_at' if 'created_at' in data.columns else 'date'
    return data.sort_values(order_col, ascending=False, kind='stable').reset_index(drop=True)


def category_stats(df: pd.DataFrame, months: int = ANOMALY_STATS_WINDOW_MONTHS,
                   as_of: Optional[datetime.date] = None,
                   min_samples: int = MIN_CATEGORY_SAMPLES) -> pd.DataFrame:
    """
    Per-category amount statistics over a trailing window.

    Args:
        df: Expense DataFrame
        months: Length of the trailing window in months
        as_of: Window end date (default: today)
        min_samples: Categories with fewer transactions are left out

    Returns:
        DataFrame with columns category_id, mean_amount, stddev_amount
        (sample standard deviation, 0 when degenerate) and sample_count.
        Expenses without a category share one row whose category_id is NaN.
    """
    end = _as_of(as_of)
    data = filter_window(prepare_expenses(df), end - pd.DateOffset(months=months), end)
    if data.empty:
        return pd.DataFrame(columns=STATS_COLUMNS)

    stats = data.groupby('category_id', dropna=False)['amount'].agg(
        mean_amount='mean',
        stddev_amount='std',
        sample_count='size',
    ).reset_index()
    stats = stats[stats['sample_count'] >= min_samples].copy()
    stats['stddev_amount'] = stats['stddev_amount'].fillna(0.0)
    return stats.reset_index(drop=True)[STATS_COLUMNS]


def category_monthly_stats(df: pd.DataFrame, categories: pd.DataFrame,
                           months: int = BUDGET_WINDOW_MONTHS,
                           as_of: Optional[datetime.date] = None) -> pd.DataFrame:
    """
    Average monthly spending per category over a trailing window.

    Only months in which the category had expenses count towards the
    average. Categories with no spending are excluded.

    Args:
        df: Expense DataFrame
        categories: DataFrame with the user's categories ('id', 'name')
        months: Length of the trailing window in months
        as_of: Window end date (default: today)

    Returns:
        DataFrame sorted by avg_spending descending with columns:
            category_id, category_name, avg_spending, spending_variance,
            months_with_data
    """
    end = _as_of(as_of)
    data = filter_window(prepare_expenses(df), end - pd.DateOffset(months=months), end)
    data = data.dropna(subset=['category_id'])
    if data.empty or categories.empty:
        return pd.DataFrame(columns=MONTHLY_STATS_COLUMNS)

    data = data.assign(month=data['date'].dt.to_period('M'))
    monthly = data.groupby(['category_id', 'month'])['amount'].sum().reset_index()
    per_cat = monthly.groupby('category_id')['amount'].agg(
        avg_spending='mean',
        spending_variance='std',
        months_with_data='size',
    ).reset_index()
    per_cat['spending_variance'] = per_cat['spending_variance'].fillna(0.0)

    cats = categories[['id', 'name']].rename(columns={'id': 'category_id', 'name': 'category_name'})
    merged = cats.merge(per_cat, on='category_id', how='inner')
    merged = merged[merged['avg_spending'] > 0]
    merged = merged.sort_values('avg_spending', ascending=False, kind='stable')
    return merged.reset_index(drop=True)[MONTHLY_STATS_COLUMNS]


def _period_start(period: str, end: pd.Timestamp) -> pd.Timestamp:
    if period == BreakdownPeriod.WEEK:
        return end - pd.Timedelta(weeks=1)
    if period == BreakdownPeriod.YEAR:
        return end - pd.DateOffset(years=1)
    return end - pd.DateOffset(months=1)


def spending_breakdown(df: pd.DataFrame, categories: pd.DataFrame,
                       period: str = BreakdownPeriod.MONTH,
                       as_of: Optional[datetime.date] = None) -> list:
    """
    Spending per category for a trailing week, month or year.

    Args:
        df: Expense DataFrame
        categories: DataFrame with 'id', 'name' and optionally 'color'
        period: 'week', 'month' or 'year' (anything else means month)
        as_of: Window end date (default: today)

    Returns:
        List of dicts sorted by total descending with keys:
            category, color, total, transaction_count, avg_transaction,
            percentage (share of all spending in the window, 0-100)

    Example:
        for row in spending_breakdown(df, cats, period='week'):
            print(f"{row['category']}: {row['percentage']}%")
    """
    end = _as_of(as_of)
    data = filter_window(prepare_expenses(df), _period_start(period, end), end)
    grand_total = data['amount'].sum()
    if data.empty or categories.empty or grand_total <= 0:
        return []

    per_cat = data.groupby('category_id')['amount'].agg(
        total='sum', transaction_count='size', avg_transaction='mean'
    ).reset_index()
    cats = categories.rename(columns={'id': 'category_id', 'name': 'category'})
    merged = per_cat.merge(cats, on='category_id', how='inner')
    merged = merged.sort_values('total', ascending=False, kind='stable')

    breakdown = []
    for _, row in merged.iterrows():
        breakdown.append({
            'category': row['category'],
            'color': row.get('color'),
            'total': float(row['total']),
            'transaction_count': int(row['transaction_count']),
            'avg_transaction': round_half_up(float(row['avg_transaction']), 2),
            'percentage': round_half_up(float(row['total']) * 100.0 / grand_total, 2),
        })

    logger.info(f"Built {period} spending breakdown over {len(breakdown)} categories")
    return breakdown


def month_over_month(df: pd.DataFrame, categories: pd.DataFrame,
                     as_of: Optional[datetime.date] = None) -> dict:
    """
    Compare this calendar month's spending with the previous month.

    Returns:
        Dict with keys:
            - current_month: Total spent since the 1st of this month
            - previous_month: Total spent during the previous month
            - change_percentage: Relative change (0 if previous month is empty)
            - top_category: {'name', 'amount'} for this month, or None
    """
    end = _as_of(as_of)
    data = prepare_expenses(df)
    current_start = end.replace(day=1)
    previous_start = current_start - pd.DateOffset(months=1)
    previous_end = current_start - pd.Timedelta(days=1)

    current = filter_window(data, current_start, end)
    previous = filter_window(data, previous_start, previous_end)
    current_total = float(current['amount'].sum())
    previous_total = float(previous['amount'].sum())

    change = 0.0
    if previous_total > 0:
        change = round_half_up((current_total - previous_total) / previous_total * 100, 2)

    top_category = None
    if not current.empty and not categories.empty:
        totals = current.groupby('category_id')['amount'].sum()
        names = categories.set_index('id')['name']
        totals = totals[totals.index.isin(names.index)]
        if not totals.empty:
            top_id = totals.idxmax()
            top_category = {'name': names[top_id], 'amount': float(totals[top_id])}

    return {
        'current_month': current_total,
        'previous_month': previous_total,
        'change_percentage': change,
        'top_category': top_category,
    }


def spending_overview(df: pd.DataFrame, categories: pd.DataFrame,
                      days: int = OVERVIEW_WINDOW_DAYS,
                      as_of: Optional[datetime.date] = None) -> dict:
    """
    Dashboard overview for the trailing `days`.

    Args:
        df: Expense DataFrame
        categories: DataFrame with 'id', 'name' and optionally 'color'
        days: Length of the trailing window in days
        as_of: Window end date (default: today)

    Returns:
        Dict with keys:
            - total: Total spent in the window
            - categories: One {'name', 'color', 'amount'} per user category,
              including categories with nothing spent, largest first
            - daily: {'date' (ISO), 'amount'} per day with expenses, oldest first

    Example:
        overview = spending_overview(df, cats, days=7)
        print(overview['total'], len(overview['daily']))
    """
    end = _as_of(as_of)
    data = filter_window(prepare_expenses(df), end - pd.Timedelta(days=days), end)
    total = float(data['amount'].sum())

    per_cat = data.groupby('category_id')['amount'].sum()
    merged = categories.assign(amount=categories['id'].map(per_cat).fillna(0.0))
    merged = merged.sort_values('amount', ascending=False, kind='stable')

    category_rows = [
        {'name': row['name'], 'color': row.get('color'), 'amount': float(row['amount'])}
        for _, row in merged.iterrows()
    ]

    daily = data.groupby('date')['amount'].sum().sort_index()
    daily_rows = [
        {'date': day.date().isoformat(), 'amount': float(amount)}
        for day, amount in daily.items()
    ]

    logger.info(f"Built {days}-day spending overview: total {total:.2f} over {len(daily_rows)} days")
    return {
        'total': total,
        'categories': category_rows,
        'daily': daily_rows,
    }
