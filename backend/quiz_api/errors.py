"""Domain error taxonomy.

Services raise these exceptions; HTTP controllers translate them into
status codes. Each error carries a human-readable message describing
the violated rule.
"""


class QuizError(Exception):
    """Base class for all quiz domain errors."""


class ValidationError(QuizError):
    """A quiz or question definition is malformed.

    `code` is a stable identifier for the violated rule.
    """
    code = "Validation"


class EmptyQuizTitle(ValidationError):
    code = "EmptyQuizTitle"


class EmptyQuestionText(ValidationError):
    code = "EmptyQuestionText"


class TooFewOptions(ValidationError):
    code = "TooFewOptions"


class WrongCorrectCount(ValidationError):
    code = "WrongCorrectCount"


class IndexOutOfRange(ValidationError):
    code = "IndexOutOfRange"


class LimitOutOfRange(ValidationError):
    code = "LimitOutOfRange"


class NotFoundError(QuizError):
    """A quiz or question identifier could not be resolved."""


class QuizNotFound(NotFoundError):
    def __init__(self, quiz_id):
        super().__init__(f"Quiz not found: {quiz_id}")
        self.quiz_id = quiz_id


class UnknownQuestion(NotFoundError):
    def __init__(self, question_id):
        super().__init__(f"Invalid question ID: {question_id}")
        self.question_id = question_id


class CrossReferenceError(QuizError):
    """An entity references another entity it does not belong to."""


class QuestionQuizMismatch(CrossReferenceError):
    def __init__(self, question_id, quiz_id):
        super().__init__(f"Question {question_id} does not belong to quiz {quiz_id}")
        self.question_id = question_id
        self.quiz_id = quiz_id
