"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for tests: in-memory SQLite instead of SQL Server
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test_secret_key_for_testing_only")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add the project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
sys.path.insert(0, str(Path(__file__).parent))

from decimal import Decimal

import pytest

from config import CommissionPolicy
from services import book_plot, create_broker, create_plot

from fakes import InMemoryStores


@pytest.fixture
def stores():
    """Fresh in-memory stores for each test."""
    return InMemoryStores()


@pytest.fixture
def policy():
    """Default policy: 6% / 2% / 0.5%, sold at 50%, cancellation locked at 50%."""
    return CommissionPolicy()


@pytest.fixture
def chain(stores):
    """Referral chain top <- middle <- seller (seller sells, middle is level 1, top level 2)."""
    top = create_broker(stores, "Top Broker")
    middle = create_broker(stores, "Middle Broker", upline_id=top.id)
    seller = create_broker(stores, "Seller Broker", upline_id=middle.id)
    return seller, middle, top


@pytest.fixture
def booked_plot(stores, chain, policy):
    """1,000,000 plot booked with 100,000 down (10%) by the seller broker."""
    seller, _, _ = chain
    plot = create_plot(stores, "Green Valley", 12)
    book_plot(
        stores,
        plot.id,
        buyer_name="Ravi Kumar",
        total_amount=Decimal("1000000"),
        booking_amount=Decimal("100000"),
        broker_id=seller.id,
        policy=policy,
    )
    return plot
