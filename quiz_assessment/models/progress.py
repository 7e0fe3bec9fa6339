"""Quiz Progress - Progresso consolidado do aluno em um quiz."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from .questions import QuizModel


class QuizProgress(QuizModel):
    """Progresso de quiz de uma aula (``quizProgress`` do rastreio de progresso)."""

    attempts: int = Field(default=0, ge=0)
    best_score: int = Field(default=0, ge=0, le=100)
    passed: bool = False
    last_attempt_at: datetime | None = None
