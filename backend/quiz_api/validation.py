"""Question definition validation.

`validate_question` checks a proposed question against the rules for
its type and raises the first violated rule as a `ValidationError`
subclass. Rules are evaluated in a fixed order:

1. question text must be non-empty after trimming
2. SINGLE: at least two options, exactly one correct index, index in range
3. MULTIPLE: at least two options, at least one correct index, all in range
4. TEXT: at least one accepted answer, word limit within bounds
"""

from typing import List, Optional

from .errors import (
    EmptyQuestionText,
    IndexOutOfRange,
    LimitOutOfRange,
    TooFewOptions,
    WrongCorrectCount,
)
from .models import (
    DEFAULT_WORD_LIMIT,
    MAX_WORD_LIMIT,
    MIN_OPTIONS,
    MIN_WORD_LIMIT,
    QuestionDefinition,
    QuestionType,
)


def validate_question(
    text: Optional[str],
    type: QuestionType,
    options: Optional[List[str]] = None,
    correct_answers: Optional[List[int]] = None,
    correct_answer_texts: Optional[List[str]] = None,
    word_limit: Optional[int] = None,
) -> None:
    """Raise a `ValidationError` if the definition is malformed.

    Missing lists are treated as empty. `type` must be a `QuestionType`
    member; anything else is a caller bug and raises `TypeError`.
    """
    if not text or not text.strip():
        raise EmptyQuestionText("Question text is required")
    options = options or []
    correct_answers = correct_answers or []
    correct_answer_texts = correct_answer_texts or []

    if type == QuestionType.SINGLE:
        _check_options(options, "Single choice")
        if len(correct_answers) != 1:
            raise WrongCorrectCount("Single choice questions must have exactly 1 correct answer")
        _check_indices(correct_answers, len(options))
    elif type == QuestionType.MULTIPLE:
        _check_options(options, "Multiple choice")
        if not correct_answers:
            raise WrongCorrectCount("Multiple choice questions must have at least 1 correct answer")
        _check_indices(correct_answers, len(options))
    elif type == QuestionType.TEXT:
        if not correct_answer_texts:
            raise WrongCorrectCount("Text questions must have at least 1 correct answer")
        limit = resolve_word_limit(word_limit)
        if limit < MIN_WORD_LIMIT or limit > MAX_WORD_LIMIT:
            raise LimitOutOfRange(
                f"Word limit must be between {MIN_WORD_LIMIT} and {MAX_WORD_LIMIT} characters"
            )
    else:
        raise TypeError(f"unsupported question type: {type!r}")


def validate_definition(definition: QuestionDefinition) -> None:
    """Validate a `QuestionDefinition` model."""
    validate_question(
        definition.text,
        definition.type,
        options=definition.options,
        correct_answers=definition.correct_answers,
        correct_answer_texts=definition.correct_answer_texts,
        word_limit=definition.word_limit,
    )


def resolve_word_limit(word_limit: Optional[int]) -> int:
    return DEFAULT_WORD_LIMIT if word_limit is None else word_limit


def _check_options(options: List[str], label: str) -> None:
    if len(options) < MIN_OPTIONS:
        raise TooFewOptions(f"{label} questions must have at least {MIN_OPTIONS} options")


def _check_indices(indices: List[int], option_count: int) -> None:
    for idx in indices:
        if idx < 0 or idx >= option_count:
            raise IndexOutOfRange(f"Invalid correct answer index: {idx}")
