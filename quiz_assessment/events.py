"""Quiz Events - Eventos emitidos apos a correcao e barramento assincrono.

Consumidores externos:
- rastreio de progresso (QuizAttemptCompletedEvent)
- notificacoes (QuizNotificationEvent: quiz_passed / quiz_failed)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, Union

from pydantic import Field

from .models.attempt import QuizResult
from .models.enums import QuizNotificationType
from .models.questions import QuizModel

logger = logging.getLogger(__name__)


class QuizAttemptCompletedEvent(QuizModel):
    """Resumo do resultado para o rastreio de progresso."""

    event: str = "quiz_attempt_completed"
    attempt_id: str
    quiz_id: str
    lesson_id: str
    user_id: str
    earned_points: float
    total_points: float
    percentage: int
    passed: bool
    completed_at: datetime | None = None


class QuizNotificationEvent(QuizModel):
    """Notificacao de aprovacao/reprovacao para o usuario."""

    event: str = "quiz_notification"
    user_id: str
    type: QuizNotificationType
    title: str
    message: str
    link: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


QuizEvent = Union[QuizAttemptCompletedEvent, QuizNotificationEvent]
EventHandler = Callable[[QuizEvent], Awaitable[None]]


def build_events(result: QuizResult) -> list[QuizEvent]:
    """Monta os eventos de uma tentativa corrigida."""
    attempt = result.attempt
    completed = QuizAttemptCompletedEvent(
        attempt_id=attempt.id,
        quiz_id=result.quiz.id,
        lesson_id=result.quiz.lesson_id,
        user_id=attempt.user_id,
        earned_points=result.earned_points,
        total_points=result.total_points,
        percentage=result.percentage,
        passed=result.passed,
        completed_at=attempt.completed_at,
    )

    title = result.quiz.title or "Quiz"
    if result.passed:
        notification_type = QuizNotificationType.QUIZ_PASSED
        message = f"Voce foi aprovado em '{title}' com {result.percentage}%."
        notification_title = "Quiz aprovado"
    else:
        notification_type = QuizNotificationType.QUIZ_FAILED
        message = (
            f"Voce obteve {result.percentage}% em '{title}'. "
            f"Nota minima: {result.quiz.passing_score:g}%."
        )
        notification_title = "Quiz nao aprovado"

    notification = QuizNotificationEvent(
        user_id=attempt.user_id,
        type=notification_type,
        title=notification_title,
        message=message,
        link=f"/quizzes/attempts/{attempt.id}/result",
        metadata={
            "quiz_id": result.quiz.id,
            "lesson_id": result.quiz.lesson_id,
            "attempt_id": attempt.id,
            "percentage": result.percentage,
        },
    )
    return [completed, notification]


class QuizEventBus:
    """Barramento assincrono em memoria.

    Falhas de um handler sao registradas e nao afetam os demais nem o
    resultado ja persistido.
    """

    def __init__(self):
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    async def publish(self, event: QuizEvent) -> None:
        logger.info(f"PUBLISH {event.event} user={event.user_id}")
        for handler in list(self._handlers):
            try:
                await handler(event)
            except Exception:
                logger.exception(f"Handler falhou para evento {event.event}")

    async def publish_result(self, result: QuizResult) -> list[QuizEvent]:
        """Publica eventos de progresso e notificacao de um resultado."""
        events = build_events(result)
        for event in events:
            await self.publish(event)
        return events
