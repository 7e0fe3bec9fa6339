"""Quiz Questions - Modelo das seis variantes de pergunta.

Cada variante e um modelo Pydantic com discriminador ``type``. Consumidores
(validador, renderizacao, persistencia) devem tratar todas as variantes de
``QuestionType``; um tipo desconhecido falha imediatamente.
"""

from __future__ import annotations

import uuid
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .enums import QuestionType

# Marcador de lacuna nos templates de fill_blank / drag_fill
BLANK_MARKER = "___"

QUESTION_TYPE_LABELS: dict[QuestionType, str] = {
    QuestionType.MULTIPLE_CHOICE: "Multiple Choice",
    QuestionType.SINGLE_CHOICE: "Single Choice",
    QuestionType.TRUE_FALSE: "True / False",
    QuestionType.FILL_BLANK: "Fill in the Blanks",
    QuestionType.DRAG_FILL: "Drag and Fill",
    QuestionType.DRAG_DROP: "Drag and Drop",
}

QUESTION_TYPE_DESCRIPTIONS: dict[QuestionType, str] = {
    QuestionType.MULTIPLE_CHOICE: "Select multiple correct answers from options",
    QuestionType.SINGLE_CHOICE: "Select one correct answer from options",
    QuestionType.TRUE_FALSE: "Determine if a statement is true or false",
    QuestionType.FILL_BLANK: "Type the missing words in the blanks",
    QuestionType.DRAG_FILL: "Drag words to fill in the blanks",
    QuestionType.DRAG_DROP: "Drag items into correct categories",
}


def count_blanks(text: str) -> int:
    """Conta marcadores de lacuna em um template."""
    return text.count(BLANK_MARKER)


def _new_id() -> str:
    return str(uuid.uuid4())


def _duplicates(ids: list[str]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for item_id in ids:
        if item_id in seen and item_id not in dupes:
            dupes.append(item_id)
        seen.add(item_id)
    return dupes


class QuizModel(BaseModel):
    """Base com aliases camelCase (formato JSON do frontend)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# SUB-ESTRUTURAS
# =============================================================================


class ChoiceOption(QuizModel):
    """Alternativa de single_choice / multiple_choice."""

    id: str = Field(..., description="ID da alternativa")
    text: str = Field(default="", description="Texto da alternativa")
    is_correct: bool = Field(default=False, description="Se a alternativa e correta")


class BlankItem(QuizModel):
    """Lacuna de fill_blank."""

    id: str = Field(..., description="ID da lacuna")
    correct_answer: str = Field(..., description="Resposta canonica")
    acceptable_answers: list[str] = Field(
        default_factory=list, description="Variacoes aceitas"
    )
    case_sensitive: bool = Field(default=False, description="Comparacao sensivel a caixa")


class DragItem(QuizModel):
    """Item arrastavel (drag_fill / drag_drop)."""

    id: str = Field(..., description="ID do item")
    text: str = Field(default="", description="Texto exibido")


class DropZone(QuizModel):
    """Zona de soltura de drag_fill."""

    id: str = Field(..., description="ID da zona")
    correct_item_id: str = Field(..., description="Item correto para a zona")
    label: str | None = Field(default=None, description="Rotulo opcional")


class DragCategory(QuizModel):
    """Categoria de drag_drop."""

    id: str = Field(..., description="ID da categoria")
    name: str = Field(default="", description="Nome da categoria")
    correct_item_ids: list[str] = Field(
        default_factory=list, description="Itens que pertencem a categoria"
    )


# =============================================================================
# VARIANTES
# =============================================================================


class BaseQuestion(QuizModel):
    """Campos comuns a todas as variantes."""

    id: str = Field(..., description="ID da pergunta")
    question: str = Field(default="", description="Enunciado")
    points: float = Field(default=1, gt=0, description="Peso na nota total")
    order: int = Field(default=0, description="Posicao canonica antes do embaralhamento")
    explanation: str | None = Field(default=None, description="Explicacao exibida na revisao")

    def shuffleable_ids(self) -> list[str]:
        """IDs da lista embaralhavel da variante (vazio se nao houver)."""
        return []


class SingleChoiceQuestion(BaseQuestion):
    type: Literal["single_choice"] = "single_choice"
    options: list[ChoiceOption] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_options(self) -> "SingleChoiceQuestion":
        dupes = _duplicates([o.id for o in self.options])
        if dupes:
            raise ValueError(f"IDs de alternativa duplicados: {dupes}")
        correct = [o for o in self.options if o.is_correct]
        if len(correct) != 1:
            raise ValueError(
                f"single_choice exige exatamente uma alternativa correta, "
                f"encontradas {len(correct)}"
            )
        return self

    @property
    def correct_option_id(self) -> str:
        return next(o.id for o in self.options if o.is_correct)

    def shuffleable_ids(self) -> list[str]:
        return [o.id for o in self.options]


class MultipleChoiceQuestion(BaseQuestion):
    type: Literal["multiple_choice"] = "multiple_choice"
    options: list[ChoiceOption] = Field(default_factory=list)
    min_selections: int | None = Field(default=None, ge=0)
    max_selections: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_options(self) -> "MultipleChoiceQuestion":
        dupes = _duplicates([o.id for o in self.options])
        if dupes:
            raise ValueError(f"IDs de alternativa duplicados: {dupes}")
        if (
            self.min_selections is not None
            and self.max_selections is not None
            and self.min_selections > self.max_selections
        ):
            raise ValueError("minSelections maior que maxSelections")
        return self

    @property
    def correct_option_ids(self) -> list[str]:
        return [o.id for o in self.options if o.is_correct]

    def shuffleable_ids(self) -> list[str]:
        return [o.id for o in self.options]


class TrueFalseQuestion(BaseQuestion):
    type: Literal["true_false"] = "true_false"
    correct_answer: bool = True


class FillBlankQuestion(BaseQuestion):
    type: Literal["fill_blank"] = "fill_blank"
    text_with_blanks: str = ""
    blanks: list[BlankItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_blanks(self) -> "FillBlankQuestion":
        dupes = _duplicates([b.id for b in self.blanks])
        if dupes:
            raise ValueError(f"IDs de lacuna duplicados: {dupes}")
        return self


class DragFillQuestion(BaseQuestion):
    type: Literal["drag_fill"] = "drag_fill"
    text_with_blanks: str = ""
    items: list[DragItem] = Field(default_factory=list)
    drop_zones: list[DropZone] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_zones(self) -> "DragFillQuestion":
        dupes = _duplicates([i.id for i in self.items] + [z.id for z in self.drop_zones])
        if dupes:
            raise ValueError(f"IDs de item/zona duplicados: {dupes}")
        item_ids = {i.id for i in self.items}
        missing = [z.id for z in self.drop_zones if z.correct_item_id not in item_ids]
        if missing:
            raise ValueError(f"Zonas apontam para itens inexistentes: {missing}")
        return self

    def shuffleable_ids(self) -> list[str]:
        return [i.id for i in self.items]


class DragDropQuestion(BaseQuestion):
    type: Literal["drag_drop"] = "drag_drop"
    items: list[DragItem] = Field(default_factory=list)
    categories: list[DragCategory] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_categories(self) -> "DragDropQuestion":
        dupes = _duplicates([i.id for i in self.items] + [c.id for c in self.categories])
        if dupes:
            raise ValueError(f"IDs de item/categoria duplicados: {dupes}")
        item_ids = {i.id for i in self.items}
        assigned: list[str] = []
        for category in self.categories:
            unknown = [i for i in category.correct_item_ids if i not in item_ids]
            if unknown:
                raise ValueError(
                    f"Categoria {category.id} aponta para itens inexistentes: {unknown}"
                )
            assigned.extend(category.correct_item_ids)
        shared = _duplicates(assigned)
        if shared:
            raise ValueError(f"Itens em mais de uma categoria: {shared}")
        return self

    def category_of(self) -> dict[str, str]:
        """Mapa item -> categoria correta."""
        return {
            item_id: category.id
            for category in self.categories
            for item_id in category.correct_item_ids
        }

    def shuffleable_ids(self) -> list[str]:
        return [i.id for i in self.items]


Question = Annotated[
    Union[
        SingleChoiceQuestion,
        MultipleChoiceQuestion,
        TrueFalseQuestion,
        FillBlankQuestion,
        DragFillQuestion,
        DragDropQuestion,
    ],
    Field(discriminator="type"),
]


def create_empty_question(question_type: QuestionType | str, order: int) -> Question:
    """Cria instancia minimamente valida de uma variante (ferramentas de autoria).

    Args:
        question_type: Tipo da pergunta
        order: Posicao canonica no quiz

    Returns:
        Pergunta vazia da variante pedida

    Raises:
        ValueError: Tipo desconhecido
    """
    question_type = QuestionType(question_type)
    base = {"id": _new_id(), "question": "", "points": 1, "order": order, "explanation": ""}

    if question_type is QuestionType.MULTIPLE_CHOICE:
        return MultipleChoiceQuestion(
            **base,
            options=[ChoiceOption(id=_new_id()), ChoiceOption(id=_new_id())],
        )
    if question_type is QuestionType.SINGLE_CHOICE:
        # single_choice exige uma correta para ser valida
        return SingleChoiceQuestion(
            **base,
            options=[ChoiceOption(id=_new_id(), is_correct=True), ChoiceOption(id=_new_id())],
        )
    if question_type is QuestionType.TRUE_FALSE:
        return TrueFalseQuestion(**base, correct_answer=True)
    if question_type is QuestionType.FILL_BLANK:
        return FillBlankQuestion(
            **base,
            text_with_blanks=f"The capital of France is {BLANK_MARKER}.",
            blanks=[BlankItem(id=_new_id(), correct_answer="Paris", acceptable_answers=["paris"])],
        )
    if question_type is QuestionType.DRAG_FILL:
        return DragFillQuestion(
            **base,
            text_with_blanks=f"The {BLANK_MARKER} is the largest planet in our solar system.",
            items=[
                DragItem(id=_new_id(), text="Jupiter"),
                DragItem(id=_new_id(), text="Saturn"),
                DragItem(id=_new_id(), text="Mars"),
            ],
            drop_zones=[],
        )
    if question_type is QuestionType.DRAG_DROP:
        return DragDropQuestion(
            **base,
            items=[DragItem(id=_new_id(), text="Item 1"), DragItem(id=_new_id(), text="Item 2")],
            categories=[
                DragCategory(id=_new_id(), name="Category A"),
                DragCategory(id=_new_id(), name="Category B"),
            ],
        )
    raise ValueError(f"Tipo de pergunta desconhecido: {question_type!r}")
