"""Quiz Enums - Tipos de pergunta, estados de tentativa e notificacoes."""

from enum import Enum


class QuestionType(str, Enum):
    """Variantes de pergunta suportadas (conjunto fechado)."""

    SINGLE_CHOICE = "single_choice"
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    FILL_BLANK = "fill_blank"
    DRAG_FILL = "drag_fill"
    DRAG_DROP = "drag_drop"


class AttemptStatus(str, Enum):
    """Estados do ciclo de vida de uma tentativa."""

    NOT_STARTED = "not_started"  # transitorio, nunca persistido
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    EXPIRED = "expired"
    GRADED = "graded"

    @property
    def is_live(self) -> bool:
        """Tentativa ainda nao corrigida (bloqueia uma nova)."""
        return self in (
            AttemptStatus.IN_PROGRESS,
            AttemptStatus.SUBMITTED,
            AttemptStatus.EXPIRED,
        )

    @property
    def is_closed(self) -> bool:
        """Tentativa encerrada e aguardando correcao."""
        return self in (AttemptStatus.SUBMITTED, AttemptStatus.EXPIRED)


class QuizNotificationType(str, Enum):
    """Tipos de notificacao emitidos apos a correcao."""

    QUIZ_PASSED = "quiz_passed"
    QUIZ_FAILED = "quiz_failed"
