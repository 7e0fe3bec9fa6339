"""Quiz Attempt - Tentativa, respostas, snapshot de apresentacao e resultado."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import ConfigDict, Field

from .enums import AttemptStatus
from .questions import QuizModel
from .quiz import Quiz


class PresentationOrder(QuizModel):
    """Ordem apresentada ao aluno, congelada na criacao da tentativa.

    Attributes:
        seed: Semente derivada do ID da tentativa
        question_ids: Ordem das perguntas vista pelo aluno
        option_orders: Ordem das alternativas/itens por pergunta
    """

    model_config = ConfigDict(frozen=True)

    seed: int = Field(..., ge=0, description="Semente do embaralhamento")
    question_ids: tuple[str, ...] = Field(..., description="Ordem das perguntas")
    option_orders: dict[str, tuple[str, ...]] = Field(
        default_factory=dict, description="Ordem das alternativas por pergunta"
    )


class QuizAnswer(QuizModel):
    """Resposta a uma pergunta. Correcao preenchida somente ao corrigir."""

    question_id: str = Field(..., description="ID da pergunta")
    answer: Any = Field(default=None, description="Resposta bruta (formato da variante)")
    is_correct: bool = Field(default=False, description="Se a resposta esta correta")
    points_earned: float = Field(default=0, description="Pontos obtidos")


class QuizAttempt(QuizModel):
    """Uma passagem de um aluno pelo quiz."""

    id: str = Field(..., description="ID da tentativa")
    quiz_id: str = Field(..., description="ID do quiz")
    user_id: str = Field(..., description="Dono exclusivo da tentativa")
    status: AttemptStatus = Field(default=AttemptStatus.IN_PROGRESS)
    presentation: PresentationOrder = Field(..., description="Ordem apresentada (imutavel)")
    time_limit: int | None = Field(
        default=None, description="Limite em segundos capturado na criacao"
    )
    answers: dict[str, QuizAnswer] = Field(default_factory=dict)
    score: int = Field(default=0, ge=0, le=100, description="Percentual obtido")
    passed: bool = False
    started_at: datetime
    submitted_at: datetime | None = None
    completed_at: datetime | None = None

    def answer_for(self, question_id: str) -> QuizAnswer | None:
        return self.answers.get(question_id)


class QuestionFeedback(QuizModel):
    """Feedback de uma pergunta na revisao."""

    question_id: str
    is_correct: bool
    points_earned: float = 0
    points: float = 0
    correct_answer: Any = None
    user_answer: Any = None
    explanation: str | None = None


class QuizResult(QuizModel):
    """Resultado final de uma tentativa corrigida (nunca alterado)."""

    model_config = ConfigDict(frozen=True)

    attempt: QuizAttempt
    quiz: Quiz
    total_points: float
    earned_points: float
    percentage: int
    passed: bool
    feedback: list[QuestionFeedback] = Field(default_factory=list)

    @property
    def correct_count(self) -> int:
        return sum(1 for f in self.feedback if f.is_correct)

    def for_student(self) -> "QuizResult":
        """Versao para o aluno: oculta gabarito se o quiz nao o exibe."""
        if self.quiz.show_correct_answers:
            return self
        hidden = [
            f.model_copy(update={"correct_answer": None, "explanation": None})
            for f in self.feedback
        ]
        return self.model_copy(update={"feedback": hidden})
