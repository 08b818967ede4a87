"""Domain models.

Quizzes, questions and options as handled by the services and stores.
Questions are a closed variant: `ChoiceQuestion` covers SINGLE and
MULTIPLE questions, `TextQuestion` covers TEXT questions, and the two
never share answer fields.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

DEFAULT_WORD_LIMIT = 300
MIN_WORD_LIMIT = 1
MAX_WORD_LIMIT = 300
MIN_OPTIONS = 2


class QuestionType(str, Enum):
    SINGLE = "SINGLE"
    MULTIPLE = "MULTIPLE"
    TEXT = "TEXT"


class Option(BaseModel):
    """A selectable choice; `id` is unique across all questions."""
    id: int
    text: str


class Quiz(BaseModel):
    """A named, ordered collection of question ids."""
    id: int
    title: str
    question_ids: List[int] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChoiceQuestion(BaseModel):
    """A SINGLE or MULTIPLE question with minted options.

    `correct_option_ids` is always a subset of the ids in `options`.
    """
    id: int
    quiz_id: int
    text: str
    type: Literal[QuestionType.SINGLE, QuestionType.MULTIPLE]
    options: List[Option]
    correct_option_ids: List[int]


class TextQuestion(BaseModel):
    """A free-text question matched case-insensitively against `accepted_answers`."""
    id: int
    quiz_id: int
    text: str
    type: Literal[QuestionType.TEXT] = QuestionType.TEXT
    accepted_answers: List[str]
    word_limit: int = DEFAULT_WORD_LIMIT


Question = Union[ChoiceQuestion, TextQuestion]


class QuestionDefinition(BaseModel):
    """Caller-supplied question definition, before validation."""
    text: str
    type: QuestionType
    options: Optional[List[str]] = None
    correct_answers: Optional[List[int]] = None
    correct_answer_texts: Optional[List[str]] = None
    word_limit: Optional[int] = None


class SubmittedAnswer(BaseModel):
    """A single answer inside a submission.

    Text answers travel in `text_answer`. Older clients put them in the
    first slot of `selected_option_ids`; that value is used when
    `text_answer` is missing.
    """
    question_id: int
    selected_option_ids: List[int] = Field(default_factory=list)
    text_answer: Optional[str] = None

    def submitted_text(self) -> Optional[str]:
        if self.text_answer is not None:
            return self.text_answer
        if self.selected_option_ids:
            return str(self.selected_option_ids[0])
        return None


class QuestionResult(BaseModel):
    question_id: int
    correct: bool


class SubmissionResult(BaseModel):
    """Outcome of a scored submission; `total` is the quiz's question count."""
    score: int
    total: int
    results: List[QuestionResult]
