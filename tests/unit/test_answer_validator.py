# =============================================================================
# TESTES - Answer Validator
# =============================================================================
# Testes unitarios para correcao de respostas por variante
# =============================================================================

import pytest


def _score(quiz, question_id, answer):
    from quiz_assessment.engine.answer_validator import score_answer

    return score_answer(quiz.question_by_id()[question_id], answer)


class TestSingleChoice:
    """Testes para single_choice."""

    def test_correct_option(self, sample_quiz):
        """Verifica alternativa correta."""
        verdict = _score(sample_quiz, "q-single", "b")

        assert verdict.is_correct is True
        assert verdict.fraction == 1.0

    def test_wrong_option(self, sample_quiz):
        """Verifica alternativa errada."""
        verdict = _score(sample_quiz, "q-single", "a")

        assert verdict.is_correct is False
        assert verdict.fraction == 0.0

    def test_single_element_list(self, sample_quiz):
        """Verifica selecao guardada como lista de um elemento."""
        assert _score(sample_quiz, "q-single", ["b"]).is_correct is True

    def test_list_with_two_options(self, sample_quiz):
        """Verifica que duas selecoes sao erradas."""
        assert _score(sample_quiz, "q-single", ["b", "a"]).is_correct is False


class TestMultipleChoice:
    """Testes para multiple_choice (igualdade exata de conjuntos)."""

    def test_exact_set(self, sample_quiz):
        """Verifica conjunto exato, em qualquer ordem."""
        assert _score(sample_quiz, "q-multi", ["c", "a"]).is_correct is True

    def test_superset_is_wrong(self, sample_quiz):
        """Verifica que superconjunto nao ganha pontos."""
        verdict = _score(sample_quiz, "q-multi", ["a", "b", "c"])

        assert verdict.is_correct is False
        assert verdict.fraction == 0.0

    def test_subset_is_wrong(self, sample_quiz):
        """Verifica que subconjunto nao ganha pontos."""
        assert _score(sample_quiz, "q-multi", ["a"]).fraction == 0.0

    def test_string_is_not_a_set(self, sample_quiz):
        """Verifica que string nao e tratada como lista de caracteres."""
        assert _score(sample_quiz, "q-multi", "ac").is_correct is False

    def test_max_selections(self):
        """Verifica limite maximo de selecoes."""
        from quiz_assessment.engine.answer_validator import score_answer
        from quiz_assessment.models.questions import ChoiceOption, MultipleChoiceQuestion

        question = MultipleChoiceQuestion(
            id="q",
            options=[
                ChoiceOption(id="a", is_correct=True),
                ChoiceOption(id="b", is_correct=True),
                ChoiceOption(id="c", is_correct=True),
            ],
            max_selections=2,
        )

        assert score_answer(question, ["a", "b", "c"]).is_correct is False


class TestTrueFalse:
    """Testes para true_false."""

    def test_correct_boolean(self, sample_quiz):
        """Verifica booleano correto."""
        assert _score(sample_quiz, "q-tf", False).is_correct is True

    def test_wrong_boolean(self, sample_quiz):
        """Verifica booleano errado."""
        assert _score(sample_quiz, "q-tf", True).is_correct is False

    @pytest.mark.parametrize("answer", ["false", 0, [False]])
    def test_non_boolean_rejected(self, sample_quiz, answer):
        """Verifica que valores nao booleanos sao errados."""
        assert _score(sample_quiz, "q-tf", answer).is_correct is False


class TestFillBlank:
    """Testes para fill_blank."""

    def test_all_blanks(self, sample_quiz):
        """Verifica todas as lacunas corretas."""
        verdict = _score(sample_quiz, "q-fill", {"b1": "Paris", "b2": "Berlin"})

        assert verdict.is_correct is True
        assert verdict.fraction == 1.0

    def test_case_insensitive_and_trimmed(self, sample_quiz):
        """Verifica comparacao sem caixa e sem espacos."""
        verdict = _score(sample_quiz, "q-fill", {"b1": "  PARIS ", "b2": "Berlin"})

        assert verdict.is_correct is True

    def test_case_sensitive_blank(self, sample_quiz):
        """Verifica lacuna sensivel a caixa."""
        verdict = _score(sample_quiz, "q-fill", {"b1": "Paris", "b2": "berlin"})

        assert verdict.is_correct is False
        assert verdict.fraction == 0.5

    def test_two_of_four_blanks(self):
        """Verifica credito parcial: 2 de 4 lacunas = 0.5."""
        from quiz_assessment.engine.answer_validator import score_answer
        from quiz_assessment.models.questions import BlankItem, FillBlankQuestion

        question = FillBlankQuestion(
            id="q",
            points=4,
            text_with_blanks="___ ___ ___ ___",
            blanks=[BlankItem(id=f"b{i}", correct_answer=f"w{i}") for i in range(4)],
        )

        verdict = score_answer(question, {"b0": "w0", "b1": "w1", "b2": "x", "b3": ""})

        assert verdict.is_correct is False
        assert verdict.fraction == 0.5
        assert verdict.points(question.points) == 2

    def test_acceptable_answers(self):
        """Verifica variacoes aceitas."""
        from quiz_assessment.engine.answer_validator import blank_matches
        from quiz_assessment.models.questions import BlankItem

        blank = BlankItem(id="b", correct_answer="color", acceptable_answers=["colour"])

        assert blank_matches(blank, "Colour")
        assert not blank_matches(blank, "colr")
        assert not blank_matches(blank, None)

    def test_not_a_mapping(self, sample_quiz):
        """Verifica formato invalido."""
        assert _score(sample_quiz, "q-fill", ["Paris", "Berlin"]).fraction == 0.0


class TestDragFill:
    """Testes para drag_fill."""

    def test_correct_zone(self, sample_quiz):
        """Verifica zona preenchida corretamente."""
        assert _score(sample_quiz, "q-dragfill", {"z1": "i1"}).is_correct is True

    def test_wrong_item(self, sample_quiz):
        """Verifica item errado na zona."""
        assert _score(sample_quiz, "q-dragfill", {"z1": "i2"}).fraction == 0.0

    def test_partial_zones(self):
        """Verifica credito parcial por zona."""
        from quiz_assessment.engine.answer_validator import score_answer
        from quiz_assessment.models.questions import DragFillQuestion, DragItem, DropZone

        question = DragFillQuestion(
            id="q",
            items=[DragItem(id="i1"), DragItem(id="i2")],
            drop_zones=[
                DropZone(id="z1", correct_item_id="i1"),
                DropZone(id="z2", correct_item_id="i2"),
            ],
        )

        verdict = score_answer(question, {"z1": "i1"})

        assert verdict.is_correct is False
        assert verdict.fraction == 0.5


class TestDragDrop:
    """Testes para drag_drop."""

    def test_all_in_place(self, sample_quiz):
        """Verifica todos os itens na categoria certa."""
        verdict = _score(sample_quiz, "q-dragdrop", {"c1": ["i2", "i1"], "c2": ["i3"]})

        assert verdict.is_correct is True
        assert verdict.fraction == 1.0

    def test_partial_credit(self, sample_quiz):
        """Verifica credito parcial por item."""
        verdict = _score(sample_quiz, "q-dragdrop", {"c1": ["i1"], "c2": ["i2", "i3"]})

        assert verdict.is_correct is False
        assert verdict.fraction == pytest.approx(2 / 3)

    def test_distractor_blocks_full_credit(self, sample_quiz):
        """Verifica que distrator em categoria impede acerto total."""
        verdict = _score(
            sample_quiz, "q-dragdrop", {"c1": ["i1", "i2", "i4"], "c2": ["i3"]}
        )

        assert verdict.is_correct is False

    def test_item_in_two_categories_not_counted(self, sample_quiz):
        """Verifica que item duplicado nao conta."""
        verdict = _score(
            sample_quiz, "q-dragdrop", {"c1": ["i1", "i2", "i3"], "c2": ["i3"]}
        )

        assert verdict.fraction == pytest.approx(2 / 3)


class TestScoreAnswer:
    """Testes para o despacho por variante."""

    def test_unanswered_is_wrong(self, sample_quiz):
        """Verifica que pergunta sem resposta vale zero."""
        from quiz_assessment.engine.answer_validator import score_answer

        for question in sample_quiz.questions:
            assert score_answer(question, None).fraction == 0.0

    def test_fraction_bounds(self, sample_quiz, correct_answers):
        """Verifica fracao em [0, 1] e acerto implica fracao 1."""
        from quiz_assessment.engine.answer_validator import score_answer

        for question in sample_quiz.questions:
            verdict = score_answer(question, correct_answers[question.id])
            assert 0.0 <= verdict.fraction <= 1.0
            assert verdict.is_correct and verdict.fraction == 1.0

    def test_correct_answer_for_matches_key(self, sample_quiz, correct_answers):
        """Verifica que o gabarito retornado e aceito pelo validador."""
        from quiz_assessment.engine.answer_validator import correct_answer_for, score_answer

        for question in sample_quiz.questions:
            assert score_answer(question, correct_answer_for(question)).is_correct
