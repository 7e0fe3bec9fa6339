"""Randomization Engine - Embaralhamento deterministico por tentativa.

A semente vem do ID da tentativa (SHA-256) e alimenta um SplitMix64. O
Fisher-Yates usa apenas esse gerador, entao a mesma semente sempre produz
a mesma ordem, em qualquer processo ou versao do Python.
"""

from __future__ import annotations

import hashlib
from typing import TypeVar

from ..models.attempt import PresentationOrder
from ..models.questions import Question
from ..models.quiz import Quiz

T = TypeVar("T")

_MASK64 = (1 << 64) - 1


def seed_from_attempt_id(attempt_id: str) -> int:
    """Semente estavel de 64 bits derivada do ID da tentativa."""
    digest = hashlib.sha256(attempt_id.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def _sub_seed(seed: int, key: str) -> int:
    """Semente independente por pergunta (nao depende da ordem das perguntas)."""
    digest = hashlib.sha256(f"{seed}:{key}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


class SplitMix64:
    """PRNG SplitMix64 (Steele, Lea, Flood)."""

    def __init__(self, seed: int):
        self._state = seed & _MASK64

    def next_u64(self) -> int:
        self._state = (self._state + 0x9E3779B97F4A7C15) & _MASK64
        z = self._state
        z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK64
        z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK64
        return z ^ (z >> 31)

    def next_below(self, bound: int) -> int:
        """Inteiro uniforme em [0, bound) por rejeicao (sem vies de modulo)."""
        if bound <= 0:
            raise ValueError("bound deve ser positivo")
        limit = (1 << 64) - ((1 << 64) % bound)
        while True:
            value = self.next_u64()
            if value < limit:
                return value % bound


def seeded_shuffle(items: list[T], rng: SplitMix64) -> list[T]:
    """Fisher-Yates sobre uma copia da lista."""
    result = list(items)
    for i in range(len(result) - 1, 0, -1):
        j = rng.next_below(i + 1)
        result[i], result[j] = result[j], result[i]
    return result


def build_presentation(quiz: Quiz, seed: int) -> PresentationOrder:
    """Calcula a ordem de apresentacao de uma tentativa.

    Args:
        quiz: Quiz ja validado
        seed: Semente da tentativa

    Returns:
        PresentationOrder com ordem de perguntas e de alternativas/itens
    """
    question_ids = [q.id for q in quiz.canonical_questions()]
    if quiz.shuffle_questions:
        question_ids = seeded_shuffle(question_ids, SplitMix64(seed))

    option_orders: dict[str, tuple[str, ...]] = {}
    for question in quiz.questions:
        ids = question.shuffleable_ids()
        if not ids:
            continue
        if quiz.shuffle_options:
            ids = seeded_shuffle(ids, SplitMix64(_sub_seed(seed, question.id)))
        option_orders[question.id] = tuple(ids)

    return PresentationOrder(
        seed=seed,
        question_ids=tuple(question_ids),
        option_orders=option_orders,
    )


def _reorder(elements: list, frozen_ids: tuple[str, ...]) -> list:
    """Aplica ordem congelada; elementos novos vao para o fim, removidos somem."""
    by_id = {e.id: e for e in elements}
    ordered = [by_id[i] for i in frozen_ids if i in by_id]
    seen = set(frozen_ids)
    ordered.extend(e for e in elements if e.id not in seen)
    return ordered


def present_questions(quiz: Quiz, presentation: PresentationOrder) -> list[Question]:
    """Renderiza o quiz na ordem que o aluno viu (revisao).

    Nunca recalcula a permutacao: usa o snapshot persistido, tolerando
    perguntas/alternativas adicionadas ou removidas depois da tentativa.
    """
    by_id = quiz.question_by_id()
    questions = [by_id[qid] for qid in presentation.question_ids if qid in by_id]

    presented: list[Question] = []
    for question in questions:
        frozen = presentation.option_orders.get(question.id)
        if frozen is None:
            presented.append(question)
            continue
        if hasattr(question, "options"):
            update = {"options": _reorder(question.options, frozen)}
        else:
            update = {"items": _reorder(question.items, frozen)}
        presented.append(question.model_copy(update=update))
    return presented
