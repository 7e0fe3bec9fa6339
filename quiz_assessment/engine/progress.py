"""Quiz Progress - Consolidacao do resultado no progresso da aula."""

from __future__ import annotations

from ..models.attempt import QuizResult
from ..models.progress import QuizProgress


def apply_result(progress: QuizProgress | None, result: QuizResult) -> QuizProgress:
    """Incorpora um resultado ao progresso (aprovacao nunca regride)."""
    progress = progress or QuizProgress()
    return QuizProgress(
        attempts=progress.attempts + 1,
        best_score=max(progress.best_score, result.percentage),
        passed=progress.passed or result.passed,
        last_attempt_at=result.attempt.completed_at or progress.last_attempt_at,
    )
