"""Quiz Engines - Logica de correcao, embaralhamento e ciclo de vida."""

from .answer_validator import AnswerScore, correct_answer_for, score_answer
from .attempt_machine import record_answer, start_attempt, submit_attempt
from .progress import apply_result
from .quiz_engine import QuizEngine, create_attempt
from .randomizer import build_presentation, present_questions, seed_from_attempt_id
from .result_aggregator import ResultAggregator, grade_attempt, preview_result
from .retake_guard import check_retake_allowed, remaining_attempts
from .validation import validate_quiz

__all__ = [
    "AnswerScore",
    "score_answer",
    "correct_answer_for",
    "start_attempt",
    "record_answer",
    "submit_attempt",
    "apply_result",
    "QuizEngine",
    "create_attempt",
    "build_presentation",
    "present_questions",
    "seed_from_attempt_id",
    "ResultAggregator",
    "grade_attempt",
    "preview_result",
    "check_retake_allowed",
    "remaining_attempts",
    "validate_quiz",
]
