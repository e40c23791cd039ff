# -*- coding: utf-8 -*-
"""
Pytest configuration and shared fixtures for FinTrack tests.
"""
import os
import tempfile
from datetime import date

import pandas as pd
import pytest

from fintrack.db.migrations import init_db

# A Friday; the ISO week containing it starts on 2024-06-10
REFERENCE_DATE = date(2024, 6, 14)


@pytest.fixture
def as_of():
    """Fixed 'today' so trailing windows are deterministic."""
    return REFERENCE_DATE


@pytest.fixture
def temp_db():
    """
    Create a temporary initialized database and clean it up after the test.
    """
    fd, db_path = tempfile.mkstemp(suffix='.db')
    os.close(fd)

    original_db = os.environ.get('DB_PATH')
    os.environ['DB_PATH'] = db_path
    init_db()

    yield db_path

    if original_db:
        os.environ['DB_PATH'] = original_db
    else:
        os.environ.pop('DB_PATH', None)

    try:
        os.unlink(db_path)
    except OSError:
        # Ignore cleanup errors in tests
        pass


@pytest.fixture
def make_expenses():
    """
    Factory building an expense DataFrame from (date, amount, category_id) tuples.

    Extra keyword columns are broadcast to every row.
    """
    def _make(rows, **columns):
        records = []
        for i, (day, amount, category_id) in enumerate(rows, start=1):
            records.append({
                'id': i,
                'category_id': category_id,
                'amount': amount,
                'currency': 'MKD',
                'description': f'Expense {i}',
                'date': day,
                'created_at': pd.Timestamp(day) + pd.Timedelta(hours=12),
            })
        df = pd.DataFrame(records, columns=['id', 'category_id', 'amount', 'currency',
                                            'description', 'date', 'created_at'])
        for name, value in columns.items():
            df[name] = value
        return df
    return _make


@pytest.fixture
def sample_categories():
    """Categories as returned by get_categories()."""
    return pd.DataFrame([
        {'id': 1, 'name': 'Food & Dining', 'color': '#FF6B6B'},
        {'id': 2, 'name': 'Transportation', 'color': '#4ECDC4'},
        {'id': 3, 'name': 'Entertainment', 'color': '#96CEB4'},
    ])
