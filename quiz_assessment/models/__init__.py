"""Quiz Models - Enums, variantes de pergunta, quiz e tentativa."""

from .attempt import (
    PresentationOrder,
    QuestionFeedback,
    QuizAnswer,
    QuizAttempt,
    QuizResult,
)
from .enums import AttemptStatus, QuestionType, QuizNotificationType
from .questions import (
    BLANK_MARKER,
    QUESTION_TYPE_DESCRIPTIONS,
    QUESTION_TYPE_LABELS,
    BlankItem,
    ChoiceOption,
    DragCategory,
    DragDropQuestion,
    DragFillQuestion,
    DragItem,
    DropZone,
    FillBlankQuestion,
    MultipleChoiceQuestion,
    Question,
    SingleChoiceQuestion,
    TrueFalseQuestion,
    count_blanks,
    create_empty_question,
)
from .progress import QuizProgress
from .quiz import Quiz, create_empty_quiz

__all__ = [
    # Enums
    "QuestionType",
    "AttemptStatus",
    "QuizNotificationType",
    # Questions
    "BLANK_MARKER",
    "QUESTION_TYPE_LABELS",
    "QUESTION_TYPE_DESCRIPTIONS",
    "ChoiceOption",
    "BlankItem",
    "DragItem",
    "DropZone",
    "DragCategory",
    "SingleChoiceQuestion",
    "MultipleChoiceQuestion",
    "TrueFalseQuestion",
    "FillBlankQuestion",
    "DragFillQuestion",
    "DragDropQuestion",
    "Question",
    "count_blanks",
    "create_empty_question",
    # Quiz
    "Quiz",
    "create_empty_quiz",
    # Attempt
    "PresentationOrder",
    "QuizAnswer",
    "QuizAttempt",
    "QuestionFeedback",
    "QuizResult",
    # Progress
    "QuizProgress",
]
