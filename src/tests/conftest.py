"""Pytest configuration and fixtures for the Bar Costing test suite."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

from bar_costing.models.base import Base
from bar_costing.services.dto import InventoryItem
from bar_costing.utils.config import get_config, reset_config


@pytest.fixture(autouse=True)
def test_config(monkeypatch):
    """Run every test against a fresh test-environment config.

    Costing policy environment variables are cleared so a developer's shell
    cannot change expected values.
    """
    for name in (
        "BAR_COSTING_ENV",
        "BAR_COSTING_DATA_DIR",
        "BAR_COSTING_TARGET_FOOD_COST",
        "BAR_COSTING_DEFAULT_BOTTLE_ML",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_config()
    config = get_config("test")
    yield config
    reset_config()


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the database to the test
    4. Drops all tables after the test completes
    """
    engine = create_engine("sqlite:///:memory:", echo=False)

    # Register all models before create_all
    import bar_costing.models  # noqa: F401

    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import bar_costing.services.database as db_module

    original_get_session_factory = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session_factory


@pytest.fixture
def bar_inventory():
    """A small bar inventory snapshot."""
    return [
        InventoryItem(
            id=1,
            name="Grey Goose Vodka",
            unit_cost=20.0,
            bottle_size_ml=700,
            base_unit="btl",
            total_stock=5,
        ),
        InventoryItem(
            id=2,
            name="Patron Silver",
            unit_cost=40.0,
            bottle_size_ml=700,
            base_unit="bottle",
            total_stock=2,
        ),
        InventoryItem(
            id=3,
            name="Lime Juice",
            unit_cost=6.0,
            bottle_size_ml=1000,
            base_unit="ml",
            total_stock=900,
        ),
        InventoryItem(
            id=4,
            name="Mint Sprig",
            unit_cost=0.25,
            base_unit="pieces",
            total_stock=40,
        ),
        InventoryItem(
            id=5,
            name="House Sugar Syrup",
            unit_cost=3.0,
            bottle_size_ml=1000,
            base_unit="ml",
            total_stock=2000,
            source_type="sub_recipe",
        ),
    ]
