"""Quiz Definition - Quiz e suas regras de apresentacao e refazer."""

from __future__ import annotations

from pydantic import Field

from ..config import get_config
from .questions import Question, QuizModel


class Quiz(QuizModel):
    """Definicao de um quiz (pertence a uma aula externa)."""

    id: str = Field(..., description="ID do quiz")
    lesson_id: str = Field(..., description="Aula dona do quiz (referencia externa)")
    title: str = Field(default="", description="Titulo")
    description: str | None = Field(default=None, description="Descricao opcional")
    passing_score: float = Field(default=70, description="Nota minima de aprovacao (0-100)")
    time_limit: int | None = Field(default=None, description="Limite de tempo em segundos")
    shuffle_questions: bool = False
    shuffle_options: bool = False
    show_correct_answers: bool = True
    allow_retake: bool = True
    max_attempts: int | None = Field(default=None, description="Maximo de tentativas corrigidas")
    questions: list[Question] = Field(default_factory=list)

    @property
    def total_points(self) -> float:
        """Soma dos pontos de todas as perguntas (independe do embaralhamento)."""
        return sum(q.points for q in self.questions)

    def canonical_questions(self) -> list[Question]:
        """Perguntas na ordem canonica (campo ``order``)."""
        return sorted(self.questions, key=lambda q: q.order)

    def question_by_id(self) -> dict[str, Question]:
        return {q.id: q for q in self.questions}


def create_empty_quiz(lesson_id: str, passing_score: float | None = None) -> dict:
    """Retorna payload de um quiz novo (sem id) para ferramentas de autoria.

    Sem ``passing_score``, usa ``QUIZ_DEFAULT_PASSING_SCORE``.
    """
    if passing_score is None:
        passing_score = get_config().default_passing_score
    return {
        "lesson_id": lesson_id,
        "title": "",
        "description": "",
        "passing_score": passing_score,
        "time_limit": None,
        "shuffle_questions": False,
        "shuffle_options": False,
        "show_correct_answers": True,
        "allow_retake": True,
        "max_attempts": None,
        "questions": [],
    }
