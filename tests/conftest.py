"""
Pytest fixtures for the convertx test suite.

This module provides shared fixtures for database setup and teardown.
"""

import pytest
import tempfile
import os
from datetime import datetime
from decimal import Decimal
from sqlmodel import Session, SQLModel, create_engine

from orm_models import Item, Order, Shop
from convertx.normalizer import get_default_normalizer


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """
    Point HOME at an empty temporary directory.

    Keeps a developer's ~/.convertx/config/config.yaml out of the tests and
    resets the cached default normalizer before and after each test.
    """
    monkeypatch.setenv('HOME', str(tmp_path))
    get_default_normalizer.cache_clear()
    yield tmp_path
    get_default_normalizer.cache_clear()


@pytest.fixture(scope="function")
def db_engine():
    """
    Create a temporary file-based SQLite database engine for testing.

    We use a file-based database instead of :memory: because tests load
    entities back through a second session on the same engine.

    Yields:
        Engine: SQLModel engine instance connected to temporary database
    """
    temp_db = tempfile.NamedTemporaryFile(suffix='.db', delete=False)
    temp_db.close()
    db_url = f"sqlite:///{temp_db.name}"

    engine = create_engine(db_url, echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    try:
        os.unlink(temp_db.name)
    except OSError:
        # File may already be deleted or locked
        pass


@pytest.fixture(scope="function")
def db_session(db_engine):
    """
    Create a database session for testing.

    Yields:
        Session: SQLModel session instance
    """
    session = Session(db_engine)

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def saved_order(db_session):
    """
    Persist a shop, an order and two items.

    Returns:
        Primary key of the saved order
    """
    shop = Shop(name="Manga Corner")
    order = Order(
        code="CODE1",
        total_price=Decimal(100),
        delivery_date=datetime(2021, 6, 7, 9, 46, 26),
        details={"guest_name": "Hoang Nguyen", "is_member": True},
        shop=shop,
        items=[
            Item(name="Doraemon", price=Decimal(20), quantity=2),
            Item(name="One Piece", price=Decimal(15), quantity=6),
        ]
    )
    db_session.add(order)
    db_session.commit()
    return order.order_id
