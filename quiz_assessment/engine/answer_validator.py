"""Answer Validator - Correcao pura de respostas por variante.

A correcao e total: qualquer formato inesperado vira resposta errada com
fracao zero, nunca uma excecao.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from ..models.enums import QuestionType
from ..models.questions import (
    BlankItem,
    DragDropQuestion,
    DragFillQuestion,
    FillBlankQuestion,
    MultipleChoiceQuestion,
    Question,
    SingleChoiceQuestion,
    TrueFalseQuestion,
)

T = TypeVar("T")


@dataclass(frozen=True)
class AnswerScore:
    """Veredito de uma resposta."""

    is_correct: bool
    fraction: float

    def points(self, question_points: float) -> float:
        return question_points * self.fraction


WRONG = AnswerScore(is_correct=False, fraction=0.0)


def _fraction_of_units(units: list[T], is_unit_correct: Callable[[T], bool]) -> AnswerScore:
    """Reducao compartilhada: unidades corretas / total de unidades."""
    if not units:
        return WRONG
    correct = sum(1 for unit in units if is_unit_correct(unit))
    return AnswerScore(is_correct=correct == len(units), fraction=correct / len(units))


def _id_set(value: Any) -> set[str] | None:
    """Converte lista/tupla/set de IDs em set; None se o formato for invalido."""
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        return None
    ids = list(value)
    if not all(isinstance(i, str) for i in ids):
        return None
    return set(ids)


def _normalize(text: str, case_sensitive: bool) -> str:
    return text if case_sensitive else text.strip().casefold()


def blank_matches(blank: BlankItem, submitted: Any) -> bool:
    """Compara uma lacuna com a resposta canonica ou variacoes aceitas."""
    if not isinstance(submitted, str):
        return False
    candidate = _normalize(submitted, blank.case_sensitive)
    accepted = [blank.correct_answer, *blank.acceptable_answers]
    return any(candidate == _normalize(a, blank.case_sensitive) for a in accepted)


# =============================================================================
# VALIDADORES POR VARIANTE
# =============================================================================


def score_single_choice(question: SingleChoiceQuestion, answer: Any) -> AnswerScore:
    # O player do frontend guarda a selecao como lista de um elemento
    if isinstance(answer, (list, tuple)) and len(answer) == 1:
        answer = answer[0]
    if not isinstance(answer, str):
        return WRONG
    if answer == question.correct_option_id:
        return AnswerScore(is_correct=True, fraction=1.0)
    return WRONG


def score_multiple_choice(question: MultipleChoiceQuestion, answer: Any) -> AnswerScore:
    selected = _id_set(answer)
    if selected is None:
        return WRONG
    if question.min_selections is not None and len(selected) < question.min_selections:
        return WRONG
    if question.max_selections is not None and len(selected) > question.max_selections:
        return WRONG
    # Igualdade exata: superconjunto nao conta
    if selected == set(question.correct_option_ids):
        return AnswerScore(is_correct=True, fraction=1.0)
    return WRONG


def score_true_false(question: TrueFalseQuestion, answer: Any) -> AnswerScore:
    if isinstance(answer, bool) and answer == question.correct_answer:
        return AnswerScore(is_correct=True, fraction=1.0)
    return WRONG


def score_fill_blank(question: FillBlankQuestion, answer: Any) -> AnswerScore:
    if not isinstance(answer, Mapping):
        return WRONG
    return _fraction_of_units(question.blanks, lambda b: blank_matches(b, answer.get(b.id)))


def score_drag_fill(question: DragFillQuestion, answer: Any) -> AnswerScore:
    if not isinstance(answer, Mapping):
        return WRONG
    return _fraction_of_units(
        question.drop_zones,
        lambda z: isinstance(answer.get(z.id), str) and answer.get(z.id) == z.correct_item_id,
    )


def score_drag_drop(question: DragDropQuestion, answer: Any) -> AnswerScore:
    if not isinstance(answer, Mapping):
        return WRONG

    placed: dict[str, set[str]] = {}
    for category_id, item_ids in answer.items():
        ids = _id_set(item_ids)
        placed[category_id] = ids if ids is not None else set()

    expected = question.category_of()

    def item_in_place(item_id: str) -> bool:
        homes = [c for c, ids in placed.items() if item_id in ids]
        return homes == [expected[item_id]]

    partial = _fraction_of_units(list(expected), item_in_place)
    fully_correct = all(
        placed.get(category.id, set()) == set(category.correct_item_ids)
        for category in question.categories
    )
    return AnswerScore(is_correct=fully_correct and partial.is_correct, fraction=partial.fraction)


_VALIDATORS: dict[QuestionType, Callable[[Any, Any], AnswerScore]] = {
    QuestionType.SINGLE_CHOICE: score_single_choice,
    QuestionType.MULTIPLE_CHOICE: score_multiple_choice,
    QuestionType.TRUE_FALSE: score_true_false,
    QuestionType.FILL_BLANK: score_fill_blank,
    QuestionType.DRAG_FILL: score_drag_fill,
    QuestionType.DRAG_DROP: score_drag_drop,
}


def score_answer(question: Question, answer: Any) -> AnswerScore:
    """Corrige uma resposta submetida.

    Args:
        question: Pergunta (qualquer variante)
        answer: Resposta bruta do cliente (pode ter formato errado)

    Returns:
        AnswerScore com ``is_correct`` e ``fraction`` em [0, 1]

    Raises:
        AssertionError: Variante desconhecida (defeito de programacao)
    """
    validator = _VALIDATORS.get(QuestionType(question.type))
    if validator is None:
        raise AssertionError(f"Variante sem validador: {question.type}")
    if answer is None:
        return WRONG
    return validator(question, answer)


def correct_answer_for(question: Question) -> Any:
    """Gabarito no mesmo formato da resposta esperada."""
    question_type = QuestionType(question.type)

    if question_type is QuestionType.SINGLE_CHOICE:
        return question.correct_option_id
    if question_type is QuestionType.MULTIPLE_CHOICE:
        return question.correct_option_ids
    if question_type is QuestionType.TRUE_FALSE:
        return question.correct_answer
    if question_type is QuestionType.FILL_BLANK:
        return {b.id: b.correct_answer for b in question.blanks}
    if question_type is QuestionType.DRAG_FILL:
        return {z.id: z.correct_item_id for z in question.drop_zones}
    if question_type is QuestionType.DRAG_DROP:
        return {c.id: list(c.correct_item_ids) for c in question.categories}
    raise AssertionError(f"Variante sem gabarito: {question.type}")
