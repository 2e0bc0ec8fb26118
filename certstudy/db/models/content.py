"""
Study content models (read-only to the study engine).

- StudyClass: a course-level grouping of decks
- Deck: an ordered collection of flashcards
- Flashcard: one question/answer study unit

Only published decks and published flashcards are ever offered for study.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy import Uuid as SaUuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from certstudy.core.clock import utc_now
from .base import Base


class StudyClass(Base):
    """A certification course, e.g. one exam's full syllabus."""

    __tablename__ = "classes"

    id: Mapped[UUID] = mapped_column(SaUuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    decks: Mapped[list[Deck]] = relationship(
        back_populates="study_class", cascade="all, delete-orphan", order_by="Deck.position"
    )

    def __repr__(self) -> str:
        return f"<StudyClass {self.name!r}>"


class Deck(Base):
    """A published or draft deck inside a class."""

    __tablename__ = "decks"

    id: Mapped[UUID] = mapped_column(SaUuid, primary_key=True, default=uuid4)
    class_id: Mapped[UUID] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    study_class: Mapped[StudyClass] = relationship(back_populates="decks")
    flashcards: Mapped[list[Flashcard]] = relationship(
        back_populates="deck", cascade="all, delete-orphan", order_by="Flashcard.position"
    )

    __table_args__ = (Index("idx_decks_class_published", "class_id", "is_published"),)

    def __repr__(self) -> str:
        return f"<Deck {self.name!r} published={self.is_published}>"


class Flashcard(Base):
    """A single question/answer card."""

    __tablename__ = "flashcards"

    id: Mapped[UUID] = mapped_column(SaUuid, primary_key=True, default=uuid4)
    deck_id: Mapped[UUID] = mapped_column(
        ForeignKey("decks.id", ondelete="CASCADE"), nullable=False
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, default=True)
    position: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)

    deck: Mapped[Deck] = relationship(back_populates="flashcards")

    __table_args__ = (Index("idx_flashcards_deck_published", "deck_id", "is_published"),)

    def __repr__(self) -> str:
        return f"<Flashcard {self.id} deck={self.deck_id}>"
