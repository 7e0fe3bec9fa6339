"""Attempt State Machine - Ciclo de vida de uma tentativa.

Estados: not_started -> in_progress -> (submitted | expired) -> graded.

Todas as funcoes sao puras: recebem uma tentativa e devolvem uma copia nova,
sem tocar na original.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any

from ..errors import InvalidStateTransitionError, UnknownQuestionError
from ..models.attempt import QuizAnswer, QuizAttempt
from ..models.enums import AttemptStatus
from ..models.quiz import Quiz
from .randomizer import build_presentation, seed_from_attempt_id

logger = logging.getLogger(__name__)


def _reject(attempt: QuizAttempt, action: str) -> InvalidStateTransitionError:
    logger.error(
        f"[Attempt {attempt.id}] Transicao invalida: {action} em {attempt.status.value}"
    )
    return InvalidStateTransitionError(attempt.id, attempt.status.value, action)


def start_attempt(
    quiz: Quiz,
    user_id: str,
    now: datetime,
    attempt_id: str | None = None,
) -> QuizAttempt:
    """Cria tentativa ja em andamento com ordem de apresentacao congelada.

    Args:
        quiz: Quiz validado
        user_id: Dono da tentativa
        now: Relogio do servidor
        attempt_id: ID opcional (gerado se ausente)

    Returns:
        QuizAttempt em ``in_progress``
    """
    attempt_id = attempt_id or str(uuid.uuid4())
    seed = seed_from_attempt_id(attempt_id)
    attempt = QuizAttempt(
        id=attempt_id,
        quiz_id=quiz.id,
        user_id=user_id,
        status=AttemptStatus.IN_PROGRESS,
        presentation=build_presentation(quiz, seed),
        time_limit=quiz.time_limit,
        started_at=now,
    )
    logger.info(f"[Attempt {attempt_id}] Iniciada (quiz={quiz.id}, user={user_id})")
    return attempt


def deadline(attempt: QuizAttempt, grace_seconds: float = 0) -> datetime | None:
    """Momento limite da tentativa (None se sem limite de tempo)."""
    if attempt.time_limit is None:
        return None
    return attempt.started_at + timedelta(seconds=attempt.time_limit + grace_seconds)


def is_overdue(attempt: QuizAttempt, now: datetime, grace_seconds: float = 0) -> bool:
    """Se o tempo desde ``started_at`` excedeu o limite."""
    limit = deadline(attempt, grace_seconds)
    return limit is not None and now > limit


def remaining_seconds(attempt: QuizAttempt, now: datetime) -> float | None:
    """Segundos restantes (informativo para o cliente; nunca autoritativo)."""
    limit = deadline(attempt)
    if limit is None:
        return None
    return max(0.0, (limit - now).total_seconds())


def record_answer(attempt: QuizAttempt, question_id: str, answer: Any) -> QuizAttempt:
    """Insere ou substitui a resposta de uma pergunta (ultima escrita vence).

    Raises:
        InvalidStateTransitionError: Tentativa fora de ``in_progress``
        UnknownQuestionError: Pergunta fora do snapshot da tentativa
    """
    if attempt.status is not AttemptStatus.IN_PROGRESS:
        raise _reject(attempt, "record_answer")
    if question_id not in attempt.presentation.question_ids:
        raise UnknownQuestionError(attempt.id, question_id)

    answers = dict(attempt.answers)
    answers[question_id] = QuizAnswer(question_id=question_id, answer=answer)
    return attempt.model_copy(update={"answers": answers})


def submit_attempt(
    attempt: QuizAttempt,
    now: datetime,
    grace_seconds: float = 0,
) -> QuizAttempt:
    """Encerra a tentativa: ``submitted`` no prazo, ``expired`` fora dele.

    Raises:
        InvalidStateTransitionError: Tentativa fora de ``in_progress``
    """
    if attempt.status is not AttemptStatus.IN_PROGRESS:
        raise _reject(attempt, "submit")

    if is_overdue(attempt, now, grace_seconds):
        status = AttemptStatus.EXPIRED
        logger.info(f"[Attempt {attempt.id}] Expirada (limite {attempt.time_limit}s)")
    else:
        status = AttemptStatus.SUBMITTED
        logger.info(f"[Attempt {attempt.id}] Submetida")

    return attempt.model_copy(update={"status": status, "submitted_at": now})


def expire_if_overdue(
    attempt: QuizAttempt,
    now: datetime,
    grace_seconds: float = 0,
) -> QuizAttempt:
    """Varredura do prazo no servidor: expira se vencida, senao devolve igual."""
    if attempt.status is AttemptStatus.IN_PROGRESS and is_overdue(attempt, now, grace_seconds):
        return submit_attempt(attempt, now, grace_seconds)
    return attempt


def mark_graded(
    attempt: QuizAttempt,
    answers: dict[str, QuizAnswer],
    score: int,
    passed: bool,
) -> QuizAttempt:
    """Transicao terminal para ``graded``.

    Raises:
        InvalidStateTransitionError: Tentativa nao encerrada ou ja corrigida
    """
    if not attempt.status.is_closed:
        raise _reject(attempt, "grade")
    return attempt.model_copy(
        update={
            "status": AttemptStatus.GRADED,
            "answers": answers,
            "score": score,
            "passed": passed,
            "completed_at": attempt.submitted_at,
        }
    )
