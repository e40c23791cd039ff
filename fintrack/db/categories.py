"""
Category operations.
Categories belong to a single user; names are unique per user.
"""
import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from fintrack.constants import CategoryName
from fintrack.db.connection import get_db_connection
from fintrack.exceptions import ValidationError
from fintrack.logger import logger
from fintrack.validators import CategoryInput

DEFAULT_CATEGORIES = [
    (CategoryName.FOOD, '#FF6B6B'),
    (CategoryName.TRANSPORTATION, '#4ECDC4'),
    (CategoryName.SHOPPING, '#45B7D1'),
    (CategoryName.ENTERTAINMENT, '#96CEB4'),
    (CategoryName.BILLS, '#FFEAA7'),
    (CategoryName.HEALTHCARE, '#DDA0DD'),
    (CategoryName.EDUCATION, '#98D8C8'),
    (CategoryName.OTHER, '#F7DC6F'),
]


def add_category(user_id: int, name: str, color: str = None) -> int:
    """
    Create a category for a user.

    Args:
        user_id: Owner of the category
        name: Category name
        color: Optional '#RRGGBB' colour

    Returns:
        The new category id

    Raises:
        ValidationError: if name or colour are invalid
    """
    try:
        category = CategoryInput(name=name, color=color)
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]['msg']) from e

    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO categories (user_id, name, color) VALUES (?, ?, ?)",
            (user_id, category.name, category.color)
        )
        conn.commit()
        logger.info(f"Category '{category.name}' created for user {user_id}")
        return cursor.lastrowid


def create_default_categories(user_id: int) -> int:
    """
    Give a new user the standard category set.

    Returns:
        Number of categories inserted (existing names are skipped)
    """
    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.executemany(
            "INSERT OR IGNORE INTO categories (user_id, name, color) VALUES (?, ?, ?)",
            [(user_id, name, color) for name, color in DEFAULT_CATEGORIES]
        )
        conn.commit()
        return cursor.rowcount


def get_categories(user_id: int) -> pd.DataFrame:
    """
    Retrieve a user's categories.

    Returns:
        DataFrame with columns: id, name, color
    """
    with get_db_connection() as conn:
        return pd.read_sql(
            "SELECT id, name, color FROM categories WHERE user_id = ? ORDER BY name",
            conn,
            params=(user_id,)
        )
