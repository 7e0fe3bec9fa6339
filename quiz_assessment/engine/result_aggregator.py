"""Result Aggregator - Soma de pontos, percentual, aprovacao e feedback."""

from __future__ import annotations

import logging
import math
from typing import Any

from ..errors import InvalidQuizError, InvalidStateTransitionError
from ..models.attempt import QuestionFeedback, QuizAnswer, QuizAttempt, QuizResult
from ..models.enums import AttemptStatus
from ..models.questions import Question
from ..models.quiz import Quiz
from .answer_validator import AnswerScore, correct_answer_for, score_answer
from .attempt_machine import mark_graded

logger = logging.getLogger(__name__)


def round_percentage(earned: float, total: float) -> int:
    """Percentual inteiro com arredondamento half-up (66.67 -> 67, 62.5 -> 63)."""
    # Elimina ruido de ponto flutuante antes de arredondar (7/10*100 = 70.00000000000001)
    raw = round(100 * earned / total, 9)
    return int(math.floor(raw + 0.5))


class ResultAggregator:
    """Motor de correcao de tentativas.

    Soma os pontos de todas as perguntas do quiz (sem depender do
    embaralhamento), calcula o percentual e a aprovacao, e monta o feedback
    na ordem canonica das perguntas.

    Example:
        >>> aggregator = ResultAggregator()
        >>> result = aggregator.grade(submitted_attempt, quiz)
        >>> result.percentage, result.passed
        (50, False)
    """

    def evaluate_answer(self, question: Question, answer: Any) -> dict:
        """Avalia uma resposta individual.

        Args:
            question: Pergunta respondida
            answer: Resposta bruta

        Returns:
            Dict com is_correct, fraction e points_earned
        """
        verdict: AnswerScore = score_answer(question, answer)
        return {
            "is_correct": verdict.is_correct,
            "fraction": verdict.fraction,
            "points_earned": verdict.points(question.points),
        }

    def _score_all(
        self, attempt: QuizAttempt, quiz: Quiz
    ) -> tuple[dict[str, QuizAnswer], list[QuestionFeedback], float, float]:
        total_points = quiz.total_points
        if total_points <= 0:
            # Invariante checada na criacao; chegar aqui e defeito
            raise InvalidQuizError(quiz.id, ["pontuacao total igual a zero"])

        answers: dict[str, QuizAnswer] = {}
        feedback: list[QuestionFeedback] = []
        earned_points = 0.0

        for question in quiz.canonical_questions():
            submitted = attempt.answer_for(question.id)
            raw = submitted.answer if submitted is not None else None
            result = self.evaluate_answer(question, raw)

            earned_points += result["points_earned"]
            answers[question.id] = QuizAnswer(
                question_id=question.id,
                answer=raw,
                is_correct=result["is_correct"],
                points_earned=result["points_earned"],
            )
            feedback.append(
                QuestionFeedback(
                    question_id=question.id,
                    is_correct=result["is_correct"],
                    points_earned=result["points_earned"],
                    points=question.points,
                    correct_answer=correct_answer_for(question),
                    user_answer=raw,
                    explanation=question.explanation,
                )
            )

        return answers, feedback, earned_points, total_points

    def grade(self, attempt: QuizAttempt, quiz: Quiz) -> QuizResult:
        """Corrige uma tentativa encerrada e produz o QuizResult.

        Deterministico e sem efeitos colaterais: a tentativa recebida nao e
        alterada; o resultado carrega uma copia em ``graded``.

        Raises:
            InvalidStateTransitionError: Tentativa nao esta submitted/expired
        """
        if not attempt.status.is_closed:
            logger.error(
                f"[Attempt {attempt.id}] Correcao pedida em estado {attempt.status.value}"
            )
            raise InvalidStateTransitionError(attempt.id, attempt.status.value, "grade")

        answers, feedback, earned, total = self._score_all(attempt, quiz)
        percentage = round_percentage(earned, total)
        passed = percentage >= quiz.passing_score

        graded = mark_graded(attempt, answers, percentage, passed)
        logger.info(
            f"[Attempt {attempt.id}] Corrigida: {earned}/{total} ({percentage}%) "
            f"{'aprovado' if passed else 'reprovado'}"
        )
        return QuizResult(
            attempt=graded,
            quiz=quiz,
            total_points=total,
            earned_points=earned,
            percentage=percentage,
            passed=passed,
            feedback=feedback,
        )

    def preview(self, attempt: QuizAttempt, quiz: Quiz) -> QuizResult:
        """Correcao de previa: nao muda o estado da tentativa.

        Raises:
            InvalidStateTransitionError: Tentativa ja corrigida
        """
        if attempt.status is AttemptStatus.GRADED:
            raise InvalidStateTransitionError(attempt.id, attempt.status.value, "preview")

        answers, feedback, earned, total = self._score_all(attempt, quiz)
        percentage = round_percentage(earned, total)
        return QuizResult(
            attempt=attempt,
            quiz=quiz,
            total_points=total,
            earned_points=earned,
            percentage=percentage,
            passed=percentage >= quiz.passing_score,
            feedback=feedback,
        )


_default_aggregator = ResultAggregator()


def grade_attempt(attempt: QuizAttempt, quiz: Quiz) -> QuizResult:
    """Atalho para ``ResultAggregator().grade``."""
    return _default_aggregator.grade(attempt, quiz)


def preview_result(attempt: QuizAttempt, quiz: Quiz) -> QuizResult:
    """Atalho para ``ResultAggregator().preview``."""
    return _default_aggregator.preview(attempt, quiz)
