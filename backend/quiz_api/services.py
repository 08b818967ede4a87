"""Business logic services used by HTTP controllers.

This module holds small service classes that coordinate the store and
the validation rules. Services are intentionally thin: they validate
input, execute domain logic and persist aggregates via the store. They
keep no state of their own beyond the store reference, so one instance
may be shared across threads.
"""

import json
import logging
from collections import Counter
from typing import Iterable, List

from . import models
from .errors import (
    EmptyQuizTitle,
    QuestionQuizMismatch,
    QuizNotFound,
    UnknownQuestion,
    ValidationError,
)
from .repositories import QuizStore
from .validation import resolve_word_limit, validate_definition

logger = logging.getLogger("quiz_api.services")


class QuizService:
    """Create quizzes and attach validated questions to them."""
    def __init__(self, store: QuizStore):
        self.store = store

    def create_quiz(self, title: str) -> models.Quiz:
        """Create an empty quiz with a trimmed, non-empty title."""
        cleaned = (title or "").strip()
        if not cleaned:
            raise EmptyQuizTitle("Quiz title is required")
        quiz = self.store.save_quiz(models.Quiz(id=self.store.next_id("quiz"), title=cleaned))
        logger.info("quiz_created %s", json.dumps({"quiz_id": quiz.id, "title": quiz.title}))
        return quiz

    def list_quizzes(self) -> List[models.Quiz]:
        return self.store.list_quizzes()

    def get_quiz(self, quiz_id: int) -> models.Quiz:
        """Return the quiz or raise `QuizNotFound`."""
        quiz = self.store.get_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFound(quiz_id)
        return quiz

    def add_question(self, quiz_id: int, definition: models.QuestionDefinition) -> models.Question:
        """Validate `definition` and attach the resulting question to the quiz.

        For choice questions one option is minted per option text, in
        order, and the caller's 0-based correct indices are translated
        into the minted option ids, dropping repeated indices. For text
        questions the accepted answers are copied verbatim and the word
        limit is resolved to its default when missing. The returned
        question includes the correct answers.
        """
        self.get_quiz(quiz_id)
        try:
            validate_definition(definition)
        except ValidationError as e:
            logger.info("question_rejected %s", json.dumps({"quiz_id": quiz_id, "code": e.code, "reason": str(e)}))
            raise

        question_id = self.store.next_id("question")
        if definition.type == models.QuestionType.TEXT:
            question = models.TextQuestion(
                id=question_id,
                quiz_id=quiz_id,
                text=definition.text,
                accepted_answers=list(definition.correct_answer_texts),
                word_limit=resolve_word_limit(definition.word_limit),
            )
        else:
            options = [models.Option(id=self.store.next_id("option"), text=t) for t in definition.options]
            question = models.ChoiceQuestion(
                id=question_id,
                quiz_id=quiz_id,
                text=definition.text,
                type=definition.type,
                options=options,
                correct_option_ids=list(dict.fromkeys(options[idx].id for idx in definition.correct_answers)),
            )
        self.store.add_question(question)
        logger.info(
            "question_added %s",
            json.dumps({"quiz_id": quiz_id, "question_id": question.id, "type": question.type.value}),
        )
        return question

    def get_quiz_questions(self, quiz_id: int) -> List[models.Question]:
        """Return the quiz's questions in display order."""
        quiz = self.get_quiz(quiz_id)
        questions = []
        for qid in quiz.question_ids:
            q = self.store.get_question(qid)
            if q is None:
                raise UnknownQuestion(qid)
            questions.append(q)
        return questions


def score_answer(question: models.Question, answer: models.SubmittedAnswer) -> bool:
    """Decide whether `answer` is correct for `question`.

    - SINGLE: exactly one option selected and it is a correct one
    - MULTIPLE: selected ids equal the correct ids, ignoring order
    - TEXT: trimmed text is non-empty, within the word limit and matches
      an accepted answer case-insensitively
    """
    if isinstance(question, models.ChoiceQuestion):
        selected = answer.selected_option_ids
        if question.type == models.QuestionType.SINGLE:
            return len(selected) == 1 and selected[0] in question.correct_option_ids
        return Counter(selected) == Counter(question.correct_option_ids)
    if isinstance(question, models.TextQuestion):
        given = answer.submitted_text()
        if given is None:
            return False
        given = given.strip().lower()
        if not given or len(given) > question.word_limit:
            return False
        return any(accepted.strip().lower() == given for accepted in question.accepted_answers)
    raise TypeError(f"unsupported question: {type(question).__name__}")


class GradingService:
    """Score submitted answers against a quiz."""
    def __init__(self, store: QuizStore):
        self.store = store

    def score_submission(self, quiz_id: int, answers: Iterable[models.SubmittedAnswer]) -> models.SubmissionResult:
        """Score every submitted answer for `quiz_id`.

        All answers are resolved before any is scored: an unknown
        question id raises `UnknownQuestion` and a question from another
        quiz raises `QuestionQuizMismatch`, in both cases without a
        score. `total` is the number of questions in the quiz, not the
        number of answers, so partial submissions simply score lower.
        """
        quiz = self.store.get_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFound(quiz_id)
        resolved = []
        for a in answers:
            q = self.store.get_question(a.question_id)
            if q is None:
                raise UnknownQuestion(a.question_id)
            if q.quiz_id != quiz_id:
                logger.warning(
                    "submission_rejected %s",
                    json.dumps({"quiz_id": quiz_id, "question_id": q.id, "owner_quiz_id": q.quiz_id}),
                )
                raise QuestionQuizMismatch(q.id, quiz_id)
            resolved.append((q, a))

        results = [models.QuestionResult(question_id=a.question_id, correct=score_answer(q, a)) for q, a in resolved]
        score = sum(1 for r in results if r.correct)
        total = len(quiz.question_ids)
        logger.info(
            "submission_scored %s",
            json.dumps({"quiz_id": quiz_id, "answers": len(results), "score": score, "total": total}),
        )
        return models.SubmissionResult(score=score, total=total, results=results)
