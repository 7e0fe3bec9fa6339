# =============================================================================
# TESTES - Quiz Store Module
# =============================================================================
# Testes unitarios para persistencia de quizzes e tentativas no AgentFS
# =============================================================================

from unittest.mock import AsyncMock

import pytest


class TestQuizStoreKeys:
    """Testes para geracao de chaves."""

    def test_quiz_key_format(self, mock_agentfs):
        """Verifica formato da chave de definicao."""
        from quiz_assessment.storage.quiz_store import QuizStore

        store = QuizStore(mock_agentfs)

        assert store._quiz_key("abc-123") == "quizengine:quiz:abc-123:definition"

    def test_history_key_format(self, mock_agentfs):
        """Verifica formato da chave de historico."""
        from quiz_assessment.storage.quiz_store import QuizStore

        store = QuizStore(mock_agentfs)

        assert store._history_key("quiz-1", "user-1") == "quizengine:history:quiz-1:user-1"

    def test_custom_prefix(self, mock_agentfs):
        """Verifica prefixo configuravel."""
        from quiz_assessment.storage.quiz_store import QuizStore

        store = QuizStore(mock_agentfs, key_prefix="tenant-a")

        assert store._attempt_key("att-1") == "tenant-a:attempt:att-1"


class TestQuizStoreQuiz:
    """Testes para definicoes de quiz."""

    @pytest.mark.asyncio
    async def test_save_quiz_calls_kv(self, mock_agentfs, sample_quiz):
        """Verifica chamada ao KV."""
        from quiz_assessment.storage.quiz_store import QuizStore

        store = QuizStore(mock_agentfs)

        await store.save_quiz(sample_quiz)

        mock_agentfs.kv.set.assert_called_once()
        key, data = mock_agentfs.kv.set.call_args[0]
        assert key == "quizengine:quiz:quiz-1:definition"
        assert data["questions"][0]["type"] == "single_choice"

    @pytest.mark.asyncio
    async def test_load_quiz_not_found(self, mock_agentfs):
        """Verifica retorno None quando nao encontrado."""
        from quiz_assessment.storage.quiz_store import QuizStore

        mock_agentfs.kv.get = AsyncMock(return_value=None)
        store = QuizStore(mock_agentfs)

        assert await store.load_quiz("nonexistent") is None

    @pytest.mark.asyncio
    async def test_save_and_load_quiz(self, quiz_store, sample_quiz):
        """Verifica persistencia completa do quiz."""
        await quiz_store.save_quiz(sample_quiz)

        loaded = await quiz_store.load_quiz("quiz-1")

        assert loaded == sample_quiz

    @pytest.mark.asyncio
    async def test_list_and_delete(self, quiz_store, make_quiz):
        """Verifica listagem e remocao de quizzes."""
        await quiz_store.save_quiz(make_quiz(id="quiz-b"))
        await quiz_store.save_quiz(make_quiz(id="quiz-a"))

        assert await quiz_store.list_quizzes() == ["quiz-a", "quiz-b"]

        await quiz_store.delete_quiz("quiz-a")

        assert await quiz_store.list_quizzes() == ["quiz-b"]


class TestQuizStoreAttempts:
    """Testes para tentativas e historico."""

    @pytest.mark.asyncio
    async def test_save_and_load_attempt(self, quiz_store, make_quiz, now):
        """Verifica persistencia da tentativa com snapshot de apresentacao."""
        from quiz_assessment.engine.attempt_machine import record_answer, start_attempt

        quiz = make_quiz(shuffle_questions=True, shuffle_options=True)
        attempt = start_attempt(quiz, "user-1", now, attempt_id="att-1")
        attempt = record_answer(attempt, "q-fill", {"b1": "Paris"})

        await quiz_store.save_attempt(attempt)
        loaded = await quiz_store.load_attempt("att-1")

        assert loaded == attempt
        assert loaded.presentation.question_ids == attempt.presentation.question_ids

    @pytest.mark.asyncio
    async def test_attempt_quiz_snapshot(self, quiz_store, sample_quiz):
        """Verifica definicao congelada por tentativa, fora da listagem de quizzes."""
        await quiz_store.save_attempt_quiz("att-1", sample_quiz)

        assert await quiz_store.load_attempt_quiz("att-1") == sample_quiz
        assert await quiz_store.load_attempt_quiz("att-2") is None
        assert await quiz_store.list_quizzes() == []

    @pytest.mark.asyncio
    async def test_history_keeps_creation_order(self, quiz_store, sample_quiz, now):
        """Verifica historico em ordem de criacao, sem duplicatas."""
        from quiz_assessment.engine.attempt_machine import start_attempt

        for attempt_id in ("att-2", "att-1"):
            attempt = start_attempt(sample_quiz, "user-1", now, attempt_id=attempt_id)
            await quiz_store.save_attempt(attempt)
            await quiz_store.add_to_history(attempt)
            await quiz_store.add_to_history(attempt)

        attempts = await quiz_store.list_attempts("quiz-1", "user-1")

        assert [a.id for a in attempts] == ["att-2", "att-1"]
        assert await quiz_store.list_attempts("quiz-1", "user-2") == []

    @pytest.mark.asyncio
    async def test_get_status_not_found(self, quiz_store):
        """Verifica status de tentativa inexistente."""
        status = await quiz_store.get_status("nope")

        assert status["found"] is False

    @pytest.mark.asyncio
    async def test_get_status(self, quiz_store, sample_quiz, now):
        """Verifica status resumido."""
        from quiz_assessment.engine.attempt_machine import record_answer, start_attempt

        attempt = start_attempt(sample_quiz, "user-1", now, attempt_id="att-1")
        await quiz_store.save_attempt(record_answer(attempt, "q-tf", True))

        status = await quiz_store.get_status("att-1")

        assert status["status"] == "in_progress"
        assert status["answered"] == 1
        assert status["total_questions"] == 6


class TestQuizStoreResults:
    """Testes para resultado e progresso."""

    @pytest.mark.asyncio
    async def test_save_and_load_result(self, quiz_store, sample_quiz, correct_answers, now):
        """Verifica persistencia do resultado."""
        from quiz_assessment.engine.attempt_machine import (
            record_answer,
            start_attempt,
            submit_attempt,
        )
        from quiz_assessment.engine.result_aggregator import grade_attempt

        attempt = start_attempt(sample_quiz, "user-1", now, attempt_id="att-1")
        for question_id, answer in correct_answers.items():
            attempt = record_answer(attempt, question_id, answer)
        result = grade_attempt(submit_attempt(attempt, now), sample_quiz)

        await quiz_store.save_result(result)
        loaded = await quiz_store.load_result("att-1")

        assert loaded.percentage == 100
        assert loaded.attempt.status.value == "graded"
        assert loaded.feedback == result.feedback

    @pytest.mark.asyncio
    async def test_progress_roundtrip(self, quiz_store, now):
        """Verifica persistencia do progresso."""
        from quiz_assessment.models.progress import QuizProgress

        assert await quiz_store.load_progress("quiz-1", "user-1") is None

        progress = QuizProgress(attempts=2, best_score=80, passed=True, last_attempt_at=now)
        await quiz_store.save_progress("quiz-1", "user-1", progress)

        assert await quiz_store.load_progress("quiz-1", "user-1") == progress


class TestQuizStoreLocks:
    """Testes para as travas por chave."""

    @pytest.mark.asyncio
    async def test_lock_serializes(self, quiz_store):
        """Verifica exclusao mutua na mesma chave."""
        import asyncio

        order = []

        async def worker(name):
            async with quiz_store.lock_attempt("att-1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0.01)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))

        assert order == ["a-in", "a-out", "b-in", "b-out"]

    @pytest.mark.asyncio
    async def test_distinct_keys_independent(self, quiz_store):
        """Verifica que chaves diferentes nao se bloqueiam."""
        async with quiz_store.lock_attempt("att-1"):
            async with quiz_store.lock_attempt("att-2"):
                async with quiz_store.lock_history("quiz-1", "user-1"):
                    pass

        assert len(quiz_store._locks) == 3
