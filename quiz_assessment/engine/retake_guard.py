"""Retake Policy Guard - Aplica allowRetake / maxAttempts antes de criar tentativa."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..errors import ActiveAttemptError, RetakeLimitError
from ..models.attempt import QuizAttempt
from ..models.enums import AttemptStatus
from ..models.quiz import Quiz

logger = logging.getLogger(__name__)


def attempt_limit(quiz: Quiz) -> int | None:
    """Limite de tentativas corrigidas (None = ilimitado)."""
    if not quiz.allow_retake:
        return 1
    return quiz.max_attempts


def _own_attempts(quiz: Quiz, user_id: str, attempts: Iterable[QuizAttempt]) -> list[QuizAttempt]:
    return [a for a in attempts if a.quiz_id == quiz.id and a.user_id == user_id]


def graded_count(quiz: Quiz, user_id: str, attempts: Iterable[QuizAttempt]) -> int:
    return sum(
        1 for a in _own_attempts(quiz, user_id, attempts) if a.status is AttemptStatus.GRADED
    )


def remaining_attempts(quiz: Quiz, user_id: str, attempts: Iterable[QuizAttempt]) -> int | None:
    """Quantas tentativas ainda podem ser criadas (None = ilimitado)."""
    limit = attempt_limit(quiz)
    if limit is None:
        return None
    return max(0, limit - graded_count(quiz, user_id, attempts))


def check_retake_allowed(quiz: Quiz, user_id: str, attempts: Iterable[QuizAttempt]) -> None:
    """Valida se o usuario pode iniciar uma nova tentativa.

    Apenas tentativas ``graded`` contam para o limite; uma tentativa ainda
    nao corrigida bloqueia a criacao de outra concorrente.

    Args:
        quiz: Quiz alvo
        user_id: Usuario solicitante
        attempts: Historico de tentativas (pode conter outros quizzes/usuarios)

    Raises:
        ActiveAttemptError: Existe tentativa viva para (usuario, quiz)
        RetakeLimitError: Limite de tentativas atingido
    """
    own = _own_attempts(quiz, user_id, attempts)

    live = next((a for a in own if a.status.is_live), None)
    if live is not None:
        logger.warning(f"[Quiz {quiz.id}] Tentativa viva {live.id} para user={user_id}")
        raise ActiveAttemptError(quiz.id, user_id, live.id)

    limit = attempt_limit(quiz)
    count = sum(1 for a in own if a.status is AttemptStatus.GRADED)
    if limit is not None and count >= limit:
        logger.warning(f"[Quiz {quiz.id}] Limite de tentativas {count}/{limit} para user={user_id}")
        raise RetakeLimitError(quiz.id, user_id, count, limit)
