"""Pytest configuration and fixtures."""

from datetime import date, datetime, timezone

import pytest
from sqlalchemy.orm import sessionmaker

from lectern.database.sqlite_client import get_engine
from lectern.presenters import Presenter

from .models import Base, Cheese, User

# Jane owns cheeses 6, 9 and 12; bob owns the rest.
JANE_CHEESES = {6, 9, 12}


@pytest.fixture
def session():
    """Create a temporary in-memory database session for testing."""
    engine = get_engine(":memory:", Base.metadata)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def users(session):
    bob = User(id=1, username="bob")
    jane = User(id=2, username="jane")
    session.add_all([bob, jane])
    session.commit()
    return {"bob": bob, "jane": jane}


@pytest.fixture
def cheeses(session, users):
    """Twelve cheeses; updated_at grows with id so newest-first is id desc."""
    rows = []
    for cheese_id in range(1, 13):
        owner = users["jane"] if cheese_id in JANE_CHEESES else users["bob"]
        rows.append(
            Cheese(
                id=cheese_id,
                user_id=owner.id,
                flavor=f"flavor-{cheese_id:02d}",
                made_on=date(2024, 1, cheese_id),
                updated_at=datetime(2024, 2, cheese_id, 12, 0, 0),
            )
        )
    session.add_all(rows)
    session.commit()
    return rows


@pytest.fixture
def cheese_presenter_cls():
    """A fresh CheesePresenter class per test so declarations never leak."""

    class CheesePresenter(Presenter):
        default_sort_order = "updated_at:desc"
        allowed_includes = {"user": "user"}

        def present(self, record):
            return {
                "id": record.id,
                "flavor": record.flavor,
                "made_on": record.made_on,
                "updated_at": record.updated_at,
                "user": self.association("user"),
            }

    CheesePresenter.sort_order("id", "id")
    CheesePresenter.sort_order("updated_at", "updated_at")
    CheesePresenter.sort_order("flavor", lambda scope, direction: scope.apply_order("flavor", direction))
    CheesePresenter.filter("owned_by", lambda scope, user_id: scope.where(Cheese.user_id == int(user_id)))
    return CheesePresenter


@pytest.fixture
def cheese_presenter(cheese_presenter_cls):
    return cheese_presenter_cls()


@pytest.fixture
def aware_timestamp():
    return datetime(2024, 3, 1, 8, 30, 15, 999999, tzinfo=timezone.utc)
