"""Quiz Validation - Checagem estrutural na fronteira do motor."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from ..errors import InvalidQuizError
from ..models.questions import (
    DragDropQuestion,
    DragFillQuestion,
    FillBlankQuestion,
    MultipleChoiceQuestion,
    SingleChoiceQuestion,
    TrueFalseQuestion,
)
from ..models.quiz import Quiz

logger = logging.getLogger(__name__)


def _question_problems(question: Any) -> list[str]:
    """Problemas que impedem a correcao de uma pergunta."""
    prefix = f"Pergunta {question.id}"

    if isinstance(question, SingleChoiceQuestion):
        if len(question.options) < 2:
            return [f"{prefix}: single_choice exige ao menos 2 alternativas"]
        return []
    if isinstance(question, MultipleChoiceQuestion):
        problems = []
        if not question.options:
            problems.append(f"{prefix}: multiple_choice sem alternativas")
        elif not question.correct_option_ids:
            problems.append(f"{prefix}: multiple_choice sem alternativa correta")
        if question.max_selections is not None and question.max_selections > len(question.options):
            problems.append(f"{prefix}: maxSelections maior que o numero de alternativas")
        return problems
    if isinstance(question, TrueFalseQuestion):
        return []
    if isinstance(question, FillBlankQuestion):
        return [] if question.blanks else [f"{prefix}: fill_blank sem lacunas"]
    if isinstance(question, DragFillQuestion):
        return [] if question.drop_zones else [f"{prefix}: drag_fill sem zonas"]
    if isinstance(question, DragDropQuestion):
        if not question.categories:
            return [f"{prefix}: drag_drop sem categorias"]
        if not question.category_of():
            return [f"{prefix}: drag_drop sem itens atribuidos a categorias"]
        return []
    raise AssertionError(f"Variante de pergunta nao tratada: {type(question).__name__}")


def validate_quiz(quiz: Quiz | dict[str, Any]) -> Quiz:
    """Valida invariantes estruturais do quiz.

    Executado uma unica vez, antes da criacao da tentativa; a correcao
    nunca levanta erro estrutural.

    Args:
        quiz: Quiz ou payload bruto

    Returns:
        Quiz validado

    Raises:
        InvalidQuizError: Quiz vazio ou com invariantes violadas
    """
    if not isinstance(quiz, Quiz):
        try:
            quiz = Quiz.model_validate(quiz)
        except ValidationError as e:
            quiz_id = quiz.get("id") if isinstance(quiz, dict) else None
            problems = [
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            logger.warning(f"[Quiz {quiz_id}] Definicao rejeitada: {problems}")
            raise InvalidQuizError(quiz_id, problems) from e

    problems: list[str] = []

    if not quiz.questions:
        problems.append("quiz sem perguntas")

    ids = [q.id for q in quiz.questions]
    if len(ids) != len(set(ids)):
        problems.append("IDs de pergunta duplicados")

    orders = [q.order for q in quiz.questions]
    if len(orders) != len(set(orders)):
        problems.append("valores de 'order' duplicados")

    if quiz.questions and quiz.total_points <= 0:
        problems.append("pontuacao total igual a zero")

    if not 0 <= quiz.passing_score <= 100:
        problems.append("passingScore fora do intervalo 0-100")

    if quiz.time_limit is not None and quiz.time_limit <= 0:
        problems.append("timeLimit deve ser positivo")

    if quiz.max_attempts is not None and quiz.max_attempts < 1:
        problems.append("maxAttempts deve ser >= 1")

    for question in quiz.questions:
        problems.extend(_question_problems(question))

    if problems:
        logger.warning(f"[Quiz {quiz.id}] Definicao rejeitada: {problems}")
        raise InvalidQuizError(quiz.id, problems)

    return quiz
