"""
Database schema initialization.
Creates every table used by FinTrack; safe to run repeatedly.
"""
import os

from fintrack.db.connection import get_db_connection, get_db_path
from fintrack.logger import logger


def init_db() -> None:
    """
    Initialize database schema.

    Creates the expense tables, the AI audit tables (predictions,
    anomalies, parse history) and AI preferences if they do not exist.
    """
    db_dir = os.path.dirname(get_db_path())
    if db_dir:
        os.makedirs(db_dir, exist_ok=True)

    with get_db_connection() as conn:
        cursor = conn.cursor()

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS categories (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                name TEXT NOT NULL,
                color TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(user_id, name)
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS expenses (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                category_id INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                amount REAL NOT NULL CHECK (amount >= 0),
                currency TEXT NOT NULL DEFAULT 'MKD',
                description TEXT,
                expense_date TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS budgets (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                category_id INTEGER REFERENCES categories(id) ON DELETE CASCADE,
                amount REAL NOT NULL,
                period TEXT NOT NULL DEFAULT 'monthly',
                start_date TEXT NOT NULL,
                is_active INTEGER DEFAULT 1
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS predictions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                prediction_type TEXT NOT NULL,
                predicted_amount REAL NOT NULL,
                predicted_date TEXT NOT NULL,
                confidence_score REAL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS anomalies (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                expense_id INTEGER NOT NULL REFERENCES expenses(id) ON DELETE CASCADE,
                anomaly_type TEXT NOT NULL,
                severity_score REAL,
                description TEXT,
                expected_value REAL,
                actual_value REAL,
                is_resolved INTEGER DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(user_id, expense_id)
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS user_ai_preferences (
                user_id INTEGER PRIMARY KEY,
                enable_predictions INTEGER DEFAULT 1,
                enable_anomaly_detection INTEGER DEFAULT 1,
                enable_smart_budgeting INTEGER DEFAULT 1,
                notification_frequency TEXT DEFAULT 'daily',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE TABLE IF NOT EXISTS nlp_parse_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id INTEGER NOT NULL,
                raw_input TEXT,
                parsed_amount REAL,
                parsed_category TEXT,
                parsed_description TEXT,
                confidence_score REAL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_expenses_user_date ON expenses(user_id, expense_date)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_expenses_category ON expenses(category_id)")

        conn.commit()

    logger.info("Database schema initialized")
