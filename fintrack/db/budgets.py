"""
Budget goal operations.
"""
import datetime
from typing import Optional

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from fintrack.db.connection import get_db_connection
from fintrack.exceptions import ValidationError
from fintrack.logger import logger
from fintrack.validators import BudgetGoalInput


def set_budget_goal(user_id: int, target_amount: float, period: str = 'monthly',
                    category_id: Optional[int] = None) -> dict:
    """
    Create an active budget goal starting today.

    Args:
        user_id: Owner of the budget
        target_amount: Positive budget amount
        period: 'weekly', 'monthly' or 'yearly'
        category_id: Category the goal applies to, None for overall spending

    Returns:
        The stored budget as a dict

    Example:
        set_budget_goal(1, 12000, category_id=4)
    """
    try:
        goal = BudgetGoalInput(target_amount=target_amount, period=period, category_id=category_id)
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]['msg']) from e

    start_date = datetime.date.today().isoformat()
    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO budgets (user_id, category_id, amount, period, start_date, is_active)
            VALUES (?, ?, ?, ?, ?, 1)
            """,
            (user_id, goal.category_id, goal.target_amount, goal.period, start_date)
        )
        conn.commit()
        budget_id = cursor.lastrowid

    logger.info(f"Budget goal {goal.target_amount} ({goal.period}) set for user {user_id}")
    return {
        'id': budget_id,
        'user_id': user_id,
        'category_id': goal.category_id,
        'amount': goal.target_amount,
        'period': goal.period,
        'start_date': start_date,
        'is_active': True,
    }


def get_budgets(user_id: int) -> pd.DataFrame:
    """
    Retrieve a user's active budget goals.

    Returns:
        DataFrame with columns: id, category_id, amount, period, start_date
    """
    with get_db_connection() as conn:
        return pd.read_sql(
            """
            SELECT id, category_id, amount, period, start_date
            FROM budgets WHERE user_id = ? AND is_active = 1
            ORDER BY id
            """,
            conn,
            params=(user_id,)
        )
