"""
Per-user AI preferences.
Each AI feature can be switched off individually; all are on by default.
"""
from pydantic import ValidationError as PydanticValidationError

from fintrack.db.connection import get_db_connection
from fintrack.exceptions import ValidationError
from fintrack.logger import logger
from fintrack.validators import AIPreferencesInput

PREFERENCE_FIELDS = (
    'enable_predictions',
    'enable_anomaly_detection',
    'enable_smart_budgeting',
    'notification_frequency',
)


def get_ai_preferences(user_id: int) -> dict:
    """
    Get a user's AI preferences, creating the defaults on first access.

    Returns:
        Dict with enable_predictions, enable_anomaly_detection,
        enable_smart_budgeting (bools) and notification_frequency
    """
    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            f"SELECT {', '.join(PREFERENCE_FIELDS)} FROM user_ai_preferences WHERE user_id = ?",
            (user_id,)
        )
        row = cursor.fetchone()

        if row is None:
            cursor.execute("INSERT INTO user_ai_preferences (user_id) VALUES (?)", (user_id,))
            conn.commit()
            logger.info(f"Created default AI preferences for user {user_id}")
            return AIPreferencesInput().model_dump()

    predictions, anomalies, budgeting, frequency = row
    return {
        'enable_predictions': bool(predictions),
        'enable_anomaly_detection': bool(anomalies),
        'enable_smart_budgeting': bool(budgeting),
        'notification_frequency': frequency,
    }


def set_ai_preferences(user_id: int, **preferences) -> dict:
    """
    Create or replace a user's AI preferences.

    Omitted fields fall back to their defaults (all features enabled,
    daily notifications).

    Raises:
        ValidationError: if a value is invalid

    Example:
        set_ai_preferences(1, enable_predictions=False)
    """
    try:
        prefs = AIPreferencesInput(**preferences)
    except PydanticValidationError as e:
        raise ValidationError(e.errors()[0]['msg']) from e

    with get_db_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(
            """
            INSERT INTO user_ai_preferences (user_id, enable_predictions, enable_anomaly_detection,
                                             enable_smart_budgeting, notification_frequency)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                enable_predictions = excluded.enable_predictions,
                enable_anomaly_detection = excluded.enable_anomaly_detection,
                enable_smart_budgeting = excluded.enable_smart_budgeting,
                notification_frequency = excluded.notification_frequency,
                created_at = CURRENT_TIMESTAMP
            """,
            (user_id, int(prefs.enable_predictions), int(prefs.enable_anomaly_detection),
             int(prefs.enable_smart_budgeting), prefs.notification_frequency)
        )
        conn.commit()

    logger.info(f"AI preferences updated for user {user_id}")
    return prefs.model_dump()
