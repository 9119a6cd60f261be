"""
Shared fixtures for the fraction ledger tests.
Every test gets a fresh in-memory SQLite database.
"""

import os

# Must be set before config is first read
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("CREATOR_IDENTITY", "owner")

import pytest

from app import create_app
from config import reload_settings
from db_engine import init_db, reset_engine
from services import InMemoryCustody, MemoryNotificationSink

CREATOR = "owner"


@pytest.fixture(autouse=True)
def fresh_database(monkeypatch):
    """Point the engine at a new in-memory database for each test."""
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    monkeypatch.setenv("CREATOR_IDENTITY", CREATOR)
    monkeypatch.delenv("TRANSFER_SETTLEMENT", raising=False)
    monkeypatch.delenv("PRICE_ROUNDING", raising=False)
    reload_settings()
    reset_engine()
    init_db()
    yield
    reset_engine()


@pytest.fixture
def custody():
    return InMemoryCustody({"alice": 1000, "bob": 1000})


@pytest.fixture
def sink():
    return MemoryNotificationSink()


@pytest.fixture
def ledger_app(custody, sink):
    return create_app(custody=custody, sink=sink)


@pytest.fixture
def asset_id(ledger_app):
    """A 100-value asset split into 10 fractions (price 10)."""
    return ledger_app.registry.create_asset("Sample Property", "Sample Location", 100, 10, caller=CREATOR)
