"""
Expense operations.
The AI features only read expenses; writes exist to record new expenses
(including ones confirmed from the free-text parser).
"""
import datetime
from typing import Optional

import pandas as pd

from fintrack.db.connection import get_db_connection
from fintrack.exceptions import ValidationError
from fintrack.logger import logger
from fintrack.validators import validate_expense

EXPENSE_COLUMNS = ['id', 'category_id', 'category_name', 'amount', 'currency',
                   'description', 'date', 'created_at']


def add_expense(user_id: int, amount: float, expense_date: datetime.date,
                category_id: Optional[int] = None, currency: str = 'MKD',
                description: str = '') -> int:
    """
    Record an expense.

    Args:
        user_id: Owner of the expense
        amount: Non-negative amount
        expense_date: Day the money was spent
        category_id: Optional category
        currency: MKD, EUR or USD
        description: Free text, at most 500 characters

    Returns:
        The new expense id

    Raises:
        ValidationError: if any field is invalid

    Example:
        add_expense(1, 450.0, date.today(), category_id=3, description="Lunch")
    """
    is_valid, expense, error = validate_expense({
        'category_id': category_id,
        'amount': amount,
        'currency': currency,
        'description': description,
        'date': expense_date,
    })
    if not is_valid:
        raise ValidationError(error)

    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO expenses (user_id, category_id, amount, currency, description, expense_date)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (user_id, expense['category_id'], expense['amount'], expense['currency'],
             expense['description'], expense['date'].isoformat())
        )
        conn.commit()
        return cursor.lastrowid


def get_expenses(user_id: int, since: Optional[datetime.date] = None) -> pd.DataFrame:
    """
    Retrieve a user's expenses, optionally only those on or after `since`.

    Returns:
        DataFrame with columns: id, category_id, category_name, amount,
        currency, description, date, created_at (newest first)
    """
    query = """
        SELECT e.id, e.category_id, c.name AS category_name, e.amount, e.currency,
               e.description, e.expense_date AS date, e.created_at
        FROM expenses e
        LEFT JOIN categories c ON e.category_id = c.id
        WHERE e.user_id = ?
    """
    params = [user_id]
    if since is not None:
        query += " AND e.expense_date >= ?"
        params.append(since.isoformat())
    query += " ORDER BY e.created_at DESC, e.id DESC"

    with get_db_connection() as conn:
        df = pd.read_sql(query, conn, params=params)

    logger.info(f"Loaded {len(df)} expenses for user {user_id}")
    return df[EXPENSE_COLUMNS]
