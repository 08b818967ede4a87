"""Database tables, engine and helpers for the SQL-backed store.

This module defines the SQLModel tables used by `SqlQuizStore` and
configures SQLAlchemy engines for them. SQLite is the default backend;
the database file lives next to the package as `quiz.db` unless
`DATABASE_URL` says otherwise.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlalchemy.pool import StaticPool
from sqlmodel import Field, SQLModel, create_engine


class QuizRecord(SQLModel, table=True):
    """A stored quiz; its questions are ordered by `QuestionRecord.position`."""
    __tablename__ = "quizzes"
    id: int = Field(primary_key=True)
    title: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class QuestionRecord(SQLModel, table=True):
    """A stored question; `position` is its display slot within the quiz.

    Choice questions fill `correct_option_ids`; text questions fill
    `accepted_answers` and `word_limit`.
    """
    __tablename__ = "questions"
    id: int = Field(primary_key=True)
    quiz_id: int = Field(foreign_key="quizzes.id", index=True)
    text: str
    type: str
    correct_option_ids: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))
    accepted_answers: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    word_limit: Optional[int] = None
    position: int = 0


class OptionRecord(SQLModel, table=True):
    """A stored option; `position` keeps the display order within a question."""
    __tablename__ = "options"
    id: int = Field(primary_key=True)
    question_id: int = Field(foreign_key="questions.id", index=True)
    position: int
    text: str


class IdSequence(SQLModel, table=True):
    """Last identifier handed out for an entity kind."""
    __tablename__ = "id_sequences"
    kind: str = Field(primary_key=True)
    value: int = 0


def build_engine(url: str, echo: bool = False):
    """Create an engine for `url`.

    SQLite connections are shared across threads; in-memory SQLite
    databases use a single static connection so every session sees the
    same data.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)
    return create_engine(url, echo=echo)


def create_db_and_tables(engine):
    """Create all quiz tables on `engine` if they do not exist yet.

    Intended for local development and tests; a real deployment would
    manage the schema with a migration tool (alembic) instead.
    """
    SQLModel.metadata.create_all(engine)
