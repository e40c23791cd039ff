"""
Audit trail for AI results: predictions, anomalies and parser history.
"""
import datetime
from typing import Optional

import pandas as pd

from fintrack.constants import DefaultValues
from fintrack.db.connection import get_db_connection
from fintrack.logger import logger


def save_prediction(user_id: int, prediction: dict,
                    prediction_type: str = DefaultValues.PREDICTION_TYPE,
                    today: Optional[datetime.date] = None) -> int:
    """
    Store a spending prediction for the period ending in 30 days.

    Returns:
        The new prediction row id
    """
    today = today or datetime.date.today()
    predicted_date = today + datetime.timedelta(days=DefaultValues.PREDICTION_HORIZON_DAYS)

    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO predictions (user_id, prediction_type, predicted_amount, predicted_date, confidence_score)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user_id, prediction_type, prediction['predicted_amount'],
             predicted_date.isoformat(), prediction['confidence_score'])
        )
        conn.commit()
        return cursor.lastrowid


def get_predictions(user_id: int) -> pd.DataFrame:
    """Stored predictions for a user, newest first."""
    with get_db_connection() as conn:
        return pd.read_sql(
            "SELECT * FROM predictions WHERE user_id = ? ORDER BY id DESC",
            conn,
            params=(user_id,)
        )


def save_anomaly_if_absent(user_id: int, anomaly: dict) -> bool:
    """
    Store an anomaly unless one is already recorded for the same expense.

    Args:
        user_id: Owner of the expense
        anomaly: Dict produced by detect_anomalies()

    Returns:
        True if a row was inserted, False if the expense was already flagged
    """
    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            "SELECT id FROM anomalies WHERE user_id = ? AND expense_id = ?",
            (user_id, int(anomaly['expense_id']))
        )
        if cursor.fetchone():
            return False

        cursor.execute(
            """
            INSERT INTO anomalies (user_id, expense_id, anomaly_type, severity_score,
                                   description, expected_value, actual_value)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (user_id, int(anomaly['expense_id']), anomaly['anomaly_type'], anomaly['severity_score'],
             anomaly['description'], anomaly['expected_value'], anomaly['actual_value'])
        )
        conn.commit()
        return True


def save_anomalies(user_id: int, anomalies: list) -> int:
    """
    Store a batch of anomalies, skipping expenses already flagged.

    Returns:
        Number of new anomalies stored
    """
    inserted = sum(1 for anomaly in anomalies if save_anomaly_if_absent(user_id, anomaly))
    if inserted:
        logger.info(f"Stored {inserted} new anomalies for user {user_id}")
    return inserted


def get_anomalies(user_id: int, include_resolved: bool = False) -> pd.DataFrame:
    """Stored anomalies for a user, most severe first."""
    query = "SELECT * FROM anomalies WHERE user_id = ?"
    if not include_resolved:
        query += " AND is_resolved = 0"
    query += " ORDER BY severity_score DESC, id DESC"
    with get_db_connection() as conn:
        return pd.read_sql(query, conn, params=(user_id,))


def log_parse(user_id: int, raw_input, parsed: dict) -> int:
    """
    Record a free-text parse attempt.

    Returns:
        The new history row id
    """
    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO nlp_parse_history (user_id, raw_input, parsed_amount, parsed_category,
                                           parsed_description, confidence_score)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (user_id, raw_input if isinstance(raw_input, str) else None, parsed['amount'],
             parsed['category'], parsed['description'], parsed['confidence'])
        )
        conn.commit()
        return cursor.lastrowid


def get_parse_history(user_id: int, limit: int = 50) -> pd.DataFrame:
    """Most recent parse attempts for a user."""
    with get_db_connection() as conn:
        return pd.read_sql(
            "SELECT * FROM nlp_parse_history WHERE user_id = ? ORDER BY id DESC LIMIT ?",
            conn,
            params=(user_id, limit)
        )
