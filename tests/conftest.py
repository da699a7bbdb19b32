"""Shared test fixtures for Basket Advisor."""

from datetime import datetime, timedelta, timezone

import pytest

from basket_advisor.data_store import DataStore
from basket_advisor.models import Basket

NOW = datetime(2026, 6, 15, 12, 0, tzinfo=timezone.utc)


def _days_ago(days: float) -> str:
    """ISO timestamp a number of days before NOW."""
    return (NOW - timedelta(days=days)).isoformat()


@pytest.fixture
def days_ago():
    """Build ISO timestamps relative to the reference instant."""
    return _days_ago


@pytest.fixture
def now():
    """Fixed reference instant (mid-June)."""
    return NOW


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary data directory."""
    data_dir = tmp_path / "test_data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def data_store(temp_data_dir):
    """Create a DataStore with temporary directory."""
    return DataStore(data_dir=temp_data_dir)


@pytest.fixture
def rice_beans_history():
    """Three baskets where beans follow rice two times out of three."""
    return [
        Basket(items=["rice", "beans"], created_at=_days_ago(20)),
        Basket(items=["rice", "beans"], created_at=_days_ago(10)),
        Basket(items=["rice"], created_at=_days_ago(5)),
    ]


@pytest.fixture
def priced_history():
    """Baskets with itemized prices, oldest first."""
    return [
        Basket(
            items_detailed=[
                {"name": "Coffee", "price": 10.00},
                {"name": "milk", "price": 4.00},
            ],
            created_at=_days_ago(30),
        ),
        Basket(
            items_detailed=[
                {"name": "coffee", "price": 12.00},
                {"name": "bread"},
            ],
            created_at=_days_ago(10),
        ),
    ]
