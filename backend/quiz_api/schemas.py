"""Pydantic request/response schemas used by the API.

Schemas keep API input/output shapes stable and provide validation for
controller handlers and tests. Field names are camelCase on the wire
and snake_case in Python.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from . import models

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
    """Envelope wrapping every response payload."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data):
        return cls(success=True, data=data, error=None)


class CreateQuizIn(CamelModel):
    """Payload for quiz creation."""
    title: str


class QuizOut(CamelModel):
    """A quiz as returned on creation."""
    id: int
    title: str
    question_ids: List[int]
    created_at: datetime

    @classmethod
    def from_quiz(cls, quiz: models.Quiz) -> "QuizOut":
        return cls(id=quiz.id, title=quiz.title, question_ids=list(quiz.question_ids), created_at=quiz.created_at)


class QuizSummaryOut(CamelModel):
    """Quiz listing entry."""
    id: int
    title: str
    question_count: int
    created_at: datetime

    @classmethod
    def from_quiz(cls, quiz: models.Quiz) -> "QuizSummaryOut":
        return cls(id=quiz.id, title=quiz.title, question_count=len(quiz.question_ids), created_at=quiz.created_at)


class QuestionIn(CamelModel):
    """Request format for adding a question to a quiz.

    `options` and `correct_answers` (0-based indices into `options`)
    apply to SINGLE and MULTIPLE questions; `correct_answer_texts` and
    `word_limit` apply to TEXT questions.
    """
    text: str
    type: models.QuestionType
    options: Optional[List[str]] = None
    correct_answers: Optional[List[int]] = None
    correct_answer_texts: Optional[List[str]] = None
    word_limit: Optional[int] = None

    def to_definition(self) -> models.QuestionDefinition:
        return models.QuestionDefinition(
            text=self.text,
            type=self.type,
            options=self.options,
            correct_answers=self.correct_answers,
            correct_answer_texts=self.correct_answer_texts,
            word_limit=self.word_limit,
        )


class OptionOut(CamelModel):
    id: int
    text: str


class QuestionOut(CamelModel):
    """A question including its correct answers, returned on creation."""
    id: int
    quiz_id: int
    text: str
    type: models.QuestionType
    options: Optional[List[OptionOut]] = None
    correct_answer_ids: Optional[List[int]] = None
    correct_answer_texts: Optional[List[str]] = None
    word_limit: Optional[int] = None

    @classmethod
    def from_question(cls, question: models.Question) -> "QuestionOut":
        if isinstance(question, models.ChoiceQuestion):
            return cls(
                id=question.id,
                quiz_id=question.quiz_id,
                text=question.text,
                type=question.type,
                options=[OptionOut(id=o.id, text=o.text) for o in question.options],
                correct_answer_ids=list(question.correct_option_ids),
            )
        return cls(
            id=question.id,
            quiz_id=question.quiz_id,
            text=question.text,
            type=question.type,
            correct_answer_texts=list(question.accepted_answers),
            word_limit=question.word_limit,
        )


class PublicQuestionOut(CamelModel):
    """A question as shown to quiz takers. Has no correct-answer fields."""
    id: int
    text: str
    type: models.QuestionType
    options: Optional[List[OptionOut]] = None
    word_limit: Optional[int] = None

    @classmethod
    def from_question(cls, question: models.Question) -> "PublicQuestionOut":
        if isinstance(question, models.ChoiceQuestion):
            return cls(
                id=question.id,
                text=question.text,
                type=question.type,
                options=[OptionOut(id=o.id, text=o.text) for o in question.options],
            )
        return cls(id=question.id, text=question.text, type=question.type, word_limit=question.word_limit)


class SubmissionAnswerIn(CamelModel):
    """Single submitted answer.

    `selected_options` holds option ids for choice questions. Text
    answers go in `text_answer`; when it is omitted the first entry of
    `selected_options` is used as the text.
    """
    question_id: int
    selected_options: List[int] = Field(default_factory=list)
    text_answer: Optional[str] = None

    def to_answer(self) -> models.SubmittedAnswer:
        return models.SubmittedAnswer(
            question_id=self.question_id,
            selected_option_ids=list(self.selected_options),
            text_answer=self.text_answer,
        )


class QuizSubmission(CamelModel):
    """Request model for grading containing a list of answers."""
    answers: List[SubmissionAnswerIn]


class QuestionResultOut(CamelModel):
    question_id: int
    correct: bool


class SubmissionResultOut(CamelModel):
    score: int
    total: int
    results: List[QuestionResultOut]

    @classmethod
    def from_result(cls, result: models.SubmissionResult) -> "SubmissionResultOut":
        return cls(
            score=result.score,
            total=result.total,
            results=[QuestionResultOut(question_id=r.question_id, correct=r.correct) for r in result.results],
        )
