"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Integration tests run against an in-memory SQLite database; no external
services are needed.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from certstudy.config import Settings
from certstudy.core.models import Card, CardMasterySnapshot
from certstudy.db.database import create_db_engine
from certstudy.db.models import Base, Deck, Flashcard, StudyClass

FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory SQLite)")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


# ========================================
# Builders
# ========================================


def make_card(
    question: str = "What does OSPF use as its metric?",
    deck_id: UUID | None = None,
    position: int = 0,
) -> Card:
    """Build a published Card with a fresh id."""
    return Card(
        id=uuid4(),
        deck_id=deck_id or uuid4(),
        question=question,
        answer="answer",
        position=position,
    )


def make_snapshot(
    card: Card,
    confidence_level: int | None = None,
    last_seen: datetime | None = None,
    next_review_due: datetime | None = None,
    learner_id: str = "learner-1",
) -> CardMasterySnapshot:
    return CardMasterySnapshot(
        learner_id=learner_id,
        card_id=card.id,
        confidence_level=confidence_level,
        last_seen=last_seen,
        next_review_due=next_review_due,
        times_seen=1 if confidence_level is not None else 0,
    )


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@dataclass
class SeededContent:
    """Ids of the sample class/deck/card rows."""

    class_id: UUID
    networking_deck_id: UUID
    security_deck_id: UUID
    draft_deck_id: UUID
    networking_card_ids: list[UUID] = field(default_factory=list)
    security_card_ids: list[UUID] = field(default_factory=list)
    unpublished_card_id: UUID | None = None
    draft_card_id: UUID | None = None

    @property
    def published_card_ids(self) -> list[UUID]:
        return self.networking_card_ids + self.security_card_ids


def seed_content(session) -> SeededContent:
    """
    One class with two published decks, one draft deck and one unpublished card.

    Deck positions are deliberately the reverse of insertion order.
    """
    study_class = StudyClass(name="CCNA 200-301")
    security = Deck(study_class=study_class, name="Security Fundamentals", position=1)
    networking = Deck(study_class=study_class, name="Network Access", position=0)
    draft = Deck(study_class=study_class, name="Draft Deck", position=2, is_published=False)
    session.add_all([study_class, security, networking, draft])

    networking_cards = [
        Flashcard(deck=networking, question=f"Networking Q{i}", answer=f"A{i}", position=i)
        for i in range(3)
    ]
    security_cards = [
        Flashcard(deck=security, question=f"Security Q{i}", answer=f"A{i}", position=i)
        for i in range(2)
    ]
    unpublished = Flashcard(
        deck=networking, question="Hidden", answer="Hidden", position=9, is_published=False
    )
    draft_card = Flashcard(deck=draft, question="Draft Q", answer="Draft A", position=0)
    session.add_all([*networking_cards, *security_cards, unpublished, draft_card])
    session.flush()

    return SeededContent(
        class_id=study_class.id,
        networking_deck_id=networking.id,
        security_deck_id=security.id,
        draft_deck_id=draft.id,
        networking_card_ids=[card.id for card in networking_cards],
        security_card_ids=[card.id for card in security_cards],
        unpublished_card_id=unpublished.id,
        draft_card_id=draft_card.id,
    )


# ========================================
# Fixtures
# ========================================


@pytest.fixture
def clock():
    """Deterministic clock starting at FIXED_NOW."""
    return FixedClock()


@pytest.fixture
def test_settings():
    """Settings with defaults only (no .env file)."""
    return Settings(_env_file=None, database_url="sqlite://")


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def content(db_session) -> SeededContent:
    """Sample content committed to the test database."""
    seeded = seed_content(db_session)
    db_session.commit()
    return seeded
