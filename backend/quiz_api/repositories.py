"""Store implementations for quizzes and questions.

`QuizStore` is the interface the services depend on. Two backends are
provided: `InMemoryQuizStore` (the default) keeps everything in
process memory behind a lock, and `SqlQuizStore` persists to a
SQLModel/SQLAlchemy database. Both hand out identifiers from one
independent monotonic sequence per entity kind.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from datetime import timezone
from typing import Dict, List, Optional

from sqlmodel import Session, select

from . import models
from .config import settings
from .database import (
    IdSequence,
    OptionRecord,
    QuestionRecord,
    QuizRecord,
    build_engine,
    create_db_and_tables,
)
from .errors import QuizNotFound

ID_KINDS = ("quiz", "question", "option")

logger = logging.getLogger("quiz_api.store")


class QuizStore(ABC):
    """Storage interface used by `QuizService` and `GradingService`."""

    @abstractmethod
    def next_id(self, kind: str) -> int:
        """Return the next identifier for `kind` (quiz, question or option)."""

    @abstractmethod
    def save_quiz(self, quiz: models.Quiz) -> models.Quiz:
        """Insert a quiz, or update the title of an existing one.

        `quiz.question_ids` is ignored: a new quiz starts with no
        questions and links are only added through `add_question`.
        Returns the quiz as stored.
        """

    @abstractmethod
    def get_quiz(self, quiz_id: int) -> Optional[models.Quiz]:
        """Return a quiz by id or `None` if not found."""

    @abstractmethod
    def list_quizzes(self) -> List[models.Quiz]:
        """Return all quizzes ordered by id."""

    @abstractmethod
    def add_question(self, question: models.Question) -> models.Question:
        """Persist `question` and append its id to the owning quiz.

        Both happen in one step: either the question is stored and
        linked, or nothing changes. Raises `QuizNotFound` if the owning
        quiz does not exist.
        """

    @abstractmethod
    def get_question(self, question_id: int) -> Optional[models.Question]:
        """Return a question by id or `None` if not found."""

    @abstractmethod
    def clear(self) -> None:
        """Drop all data and restart every id sequence at 1."""


def _check_kind(kind: str) -> None:
    if kind not in ID_KINDS:
        raise ValueError(f"unknown id kind: {kind!r}")


class InMemoryQuizStore(QuizStore):
    """Thread-safe in-process store.

    Returned objects are copies; callers never hold references into the
    stored state.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._quizzes: Dict[int, models.Quiz] = {}
        self._questions: Dict[int, models.Question] = {}
        self._counters = {kind: itertools.count(1) for kind in ID_KINDS}

    def next_id(self, kind: str) -> int:
        _check_kind(kind)
        with self._lock:
            return next(self._counters[kind])

    def save_quiz(self, quiz: models.Quiz) -> models.Quiz:
        with self._lock:
            stored = self._quizzes.get(quiz.id)
            if stored is None:
                stored = quiz.model_copy(update={"question_ids": []}, deep=True)
                self._quizzes[quiz.id] = stored
            else:
                stored.title = quiz.title
            return stored.model_copy(deep=True)

    def get_quiz(self, quiz_id: int) -> Optional[models.Quiz]:
        with self._lock:
            quiz = self._quizzes.get(quiz_id)
            return quiz.model_copy(deep=True) if quiz else None

    def list_quizzes(self) -> List[models.Quiz]:
        with self._lock:
            return [self._quizzes[k].model_copy(deep=True) for k in sorted(self._quizzes)]

    def add_question(self, question: models.Question) -> models.Question:
        with self._lock:
            quiz = self._quizzes.get(question.quiz_id)
            if quiz is None:
                raise QuizNotFound(question.quiz_id)
            self._questions[question.id] = question.model_copy(deep=True)
            quiz.question_ids.append(question.id)
        return question

    def get_question(self, question_id: int) -> Optional[models.Question]:
        with self._lock:
            question = self._questions.get(question_id)
            return question.model_copy(deep=True) if question else None

    def clear(self) -> None:
        with self._lock:
            self._quizzes.clear()
            self._questions.clear()
            self._counters = {kind: itertools.count(1) for kind in ID_KINDS}


class SqlQuizStore(QuizStore):
    """Store backed by the SQLModel tables in `database`.

    Id sequences live in the `id_sequences` table. SQLite allows a single
    writer, so every operation runs under one store-wide lock; concurrent
    callers therefore never receive the same id.
    """

    def __init__(self, engine):
        self.engine = engine
        self._lock = threading.Lock()
        create_db_and_tables(engine)

    def next_id(self, kind: str) -> int:
        _check_kind(kind)
        with self._lock, Session(self.engine) as session:
            seq = session.get(IdSequence, kind)
            if seq is None:
                seq = IdSequence(kind=kind, value=0)
            seq.value += 1
            session.add(seq)
            session.commit()
            return seq.value

    def save_quiz(self, quiz: models.Quiz) -> models.Quiz:
        with self._lock, Session(self.engine) as session:
            record = session.get(QuizRecord, quiz.id)
            if record is None:
                record = QuizRecord(id=quiz.id, title=quiz.title, created_at=quiz.created_at)
            else:
                record.title = quiz.title
            session.add(record)
            session.commit()
            session.refresh(record)
            return self._to_quiz(session, record)

    def get_quiz(self, quiz_id: int) -> Optional[models.Quiz]:
        with self._lock, Session(self.engine) as session:
            record = session.get(QuizRecord, quiz_id)
            if record is None:
                return None
            return self._to_quiz(session, record)

    def list_quizzes(self) -> List[models.Quiz]:
        with self._lock, Session(self.engine) as session:
            records = session.exec(select(QuizRecord).order_by(QuizRecord.id)).all()
            return [self._to_quiz(session, r) for r in records]

    def add_question(self, question: models.Question) -> models.Question:
        with self._lock, Session(self.engine) as session:
            if session.get(QuizRecord, question.quiz_id) is None:
                raise QuizNotFound(question.quiz_id)
            linked = session.exec(select(QuestionRecord.id).where(QuestionRecord.quiz_id == question.quiz_id)).all()
            record = QuestionRecord(
                id=question.id,
                quiz_id=question.quiz_id,
                text=question.text,
                type=question.type.value,
                position=len(linked),
            )
            if isinstance(question, models.ChoiceQuestion):
                record.correct_option_ids = list(question.correct_option_ids)
            else:
                record.accepted_answers = list(question.accepted_answers)
                record.word_limit = question.word_limit
            session.add(record)
            # flush the question row before its options reference it
            session.flush()
            if isinstance(question, models.ChoiceQuestion):
                for pos, opt in enumerate(question.options):
                    session.add(OptionRecord(id=opt.id, question_id=question.id, position=pos, text=opt.text))
            session.commit()
        logger.debug("question %s stored for quiz %s", question.id, question.quiz_id)
        return question

    def get_question(self, question_id: int) -> Optional[models.Question]:
        with self._lock, Session(self.engine) as session:
            record = session.get(QuestionRecord, question_id)
            if record is None:
                return None
            return self._to_question(session, record)

    def clear(self) -> None:
        with self._lock, Session(self.engine) as session:
            for table in (OptionRecord, QuestionRecord, QuizRecord, IdSequence):
                for row in session.exec(select(table)).all():
                    session.delete(row)
            session.commit()

    def _to_quiz(self, session: Session, record: QuizRecord) -> models.Quiz:
        stmt = select(QuestionRecord.id).where(QuestionRecord.quiz_id == record.id).order_by(QuestionRecord.position)
        created_at = record.created_at
        # SQLite drops tzinfo on the way back
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return models.Quiz(
            id=record.id,
            title=record.title,
            question_ids=list(session.exec(stmt).all()),
            created_at=created_at,
        )

    def _to_question(self, session: Session, record: QuestionRecord) -> models.Question:
        qtype = models.QuestionType(record.type)
        if qtype == models.QuestionType.TEXT:
            return models.TextQuestion(
                id=record.id,
                quiz_id=record.quiz_id,
                text=record.text,
                accepted_answers=list(record.accepted_answers or []),
                word_limit=record.word_limit,
            )
        stmt = select(OptionRecord).where(OptionRecord.question_id == record.id).order_by(OptionRecord.position)
        options = [models.Option(id=o.id, text=o.text) for o in session.exec(stmt).all()]
        return models.ChoiceQuestion(
            id=record.id,
            quiz_id=record.quiz_id,
            text=record.text,
            type=qtype,
            options=options,
            correct_option_ids=list(record.correct_option_ids or []),
        )


_store: Optional[QuizStore] = None
_store_lock = threading.Lock()


def build_store(backend: str, database_url: Optional[str] = None) -> QuizStore:
    """Construct a store for the `memory` or `sql` backend."""
    if backend == "memory":
        return InMemoryQuizStore()
    if backend == "sql":
        return SqlQuizStore(build_engine(database_url or settings.DATABASE_URL))
    raise ValueError(f"unknown store backend: {backend!r}")


def get_store() -> QuizStore:
    """Return the process-wide store, creating it on first use.

    Used as a FastAPI dependency; tests can override it through
    `app.dependency_overrides`.
    """
    global _store
    with _store_lock:
        if _store is None:
            _store = build_store(settings.QUIZ_STORE)
            logger.info("using %s quiz store", settings.QUIZ_STORE)
        return _store
