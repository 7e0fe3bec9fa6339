"""Quiz Store - Abstração sobre AgentFS para persistência de quizzes e tentativas."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from agentfs_sdk import AgentFS

from ..models.attempt import QuizAttempt, QuizResult
from ..models.progress import QuizProgress
from ..models.quiz import Quiz

logger = logging.getLogger(__name__)


class QuizStore:
    """Abstração sobre AgentFS para persistência do motor de avaliação.

    Guarda definições de quiz, tentativas, resultados e progresso no KV
    store do AgentFS. Também oferece as travas usadas para tornar atômicas
    as operações "checar histórico + criar tentativa" e "checar estado +
    transicionar tentativa".

    Estrutura de chaves:
        - {prefix}:quiz:{quiz_id}:definition -> Quiz
        - {prefix}:attempt:{attempt_id} -> QuizAttempt
        - {prefix}:attempt:{attempt_id}:quiz -> Quiz congelado na criacao
        - {prefix}:result:{attempt_id} -> QuizResult
        - {prefix}:history:{quiz_id}:{user_id} -> lista de attempt_ids
        - {prefix}:progress:{quiz_id}:{user_id} -> QuizProgress

    Example:
        >>> store = QuizStore(agentfs)
        >>> await store.save_quiz(quiz)
        >>> loaded = await store.load_quiz(quiz.id)
    """

    KEY_PREFIX = "quizengine"

    def __init__(self, agentfs: AgentFS, key_prefix: str | None = None):
        """Inicializa store com instância do AgentFS.

        Args:
            agentfs: Instância configurada do AgentFS
            key_prefix: Prefixo das chaves (default: KEY_PREFIX)
        """
        self.agentfs = agentfs
        self.key_prefix = key_prefix or self.KEY_PREFIX
        self._locks: dict[str, asyncio.Lock] = {}

    # -------------------------------------------------------------------------
    # Chaves
    # -------------------------------------------------------------------------

    def _quiz_key(self, quiz_id: str) -> str:
        return f"{self.key_prefix}:quiz:{quiz_id}:definition"

    def _attempt_key(self, attempt_id: str) -> str:
        return f"{self.key_prefix}:attempt:{attempt_id}"

    def _attempt_quiz_key(self, attempt_id: str) -> str:
        return f"{self.key_prefix}:attempt:{attempt_id}:quiz"

    def _result_key(self, attempt_id: str) -> str:
        return f"{self.key_prefix}:result:{attempt_id}"

    def _history_key(self, quiz_id: str, user_id: str) -> str:
        return f"{self.key_prefix}:history:{quiz_id}:{user_id}"

    def _progress_key(self, quiz_id: str, user_id: str) -> str:
        return f"{self.key_prefix}:progress:{quiz_id}:{user_id}"

    # -------------------------------------------------------------------------
    # Travas
    # -------------------------------------------------------------------------

    @asynccontextmanager
    async def _locked(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            yield

    def lock_history(self, quiz_id: str, user_id: str):
        """Trava do par (usuário, quiz): serializa criação de tentativas."""
        return self._locked(self._history_key(quiz_id, user_id))

    def lock_attempt(self, attempt_id: str):
        """Trava de uma tentativa: serializa submit/expiração/correção."""
        return self._locked(self._attempt_key(attempt_id))

    # -------------------------------------------------------------------------
    # Quiz
    # -------------------------------------------------------------------------

    async def save_quiz(self, quiz: Quiz) -> None:
        await self.agentfs.kv.set(self._quiz_key(quiz.id), quiz.model_dump(mode="json"))
        logger.debug(f"Quiz salvo: {quiz.id}")

    async def load_quiz(self, quiz_id: str) -> Quiz | None:
        data = await self.agentfs.kv.get(self._quiz_key(quiz_id))
        if not data:
            logger.debug(f"Quiz não encontrado: {quiz_id}")
            return None
        return Quiz.model_validate(data)

    async def delete_quiz(self, quiz_id: str) -> None:
        await self.agentfs.kv.delete(self._quiz_key(quiz_id))
        logger.info(f"Quiz deletado: {quiz_id}")

    async def list_quizzes(self) -> list[str]:
        """Lista todos os quiz IDs armazenados."""
        prefix = f"{self.key_prefix}:quiz:"
        entries = await self.agentfs.kv.list(prefix=prefix)

        quiz_ids = set()
        for entry in entries:
            key = entry.get("key", "") if isinstance(entry, dict) else str(entry)
            parts = key.split(":")
            if len(parts) >= 4:
                quiz_ids.add(parts[2])

        return sorted(quiz_ids)

    # -------------------------------------------------------------------------
    # Tentativas
    # -------------------------------------------------------------------------

    async def save_attempt(self, attempt: QuizAttempt) -> None:
        await self.agentfs.kv.set(
            self._attempt_key(attempt.id), attempt.model_dump(mode="json")
        )
        logger.debug(f"Tentativa salva: {attempt.id} ({attempt.status.value})")

    async def load_attempt(self, attempt_id: str) -> QuizAttempt | None:
        data = await self.agentfs.kv.get(self._attempt_key(attempt_id))
        if not data:
            logger.debug(f"Tentativa não encontrada: {attempt_id}")
            return None
        return QuizAttempt.model_validate(data)

    async def save_attempt_quiz(self, attempt_id: str, quiz: Quiz) -> None:
        """Congela a definicao usada na correcao desta tentativa."""
        await self.agentfs.kv.set(
            self._attempt_quiz_key(attempt_id), quiz.model_dump(mode="json")
        )

    async def load_attempt_quiz(self, attempt_id: str) -> Quiz | None:
        data = await self.agentfs.kv.get(self._attempt_quiz_key(attempt_id))
        if not data:
            return None
        return Quiz.model_validate(data)

    async def add_to_history(self, attempt: QuizAttempt) -> None:
        key = self._history_key(attempt.quiz_id, attempt.user_id)
        history = list(await self.agentfs.kv.get(key) or [])
        if attempt.id not in history:
            history.append(attempt.id)
            await self.agentfs.kv.set(key, history)

    async def list_attempts(self, quiz_id: str, user_id: str) -> list[QuizAttempt]:
        """Histórico de tentativas do usuário no quiz (ordem de criação)."""
        attempt_ids = await self.agentfs.kv.get(self._history_key(quiz_id, user_id)) or []
        attempts = []
        for attempt_id in attempt_ids:
            attempt = await self.load_attempt(attempt_id)
            if attempt is not None:
                attempts.append(attempt)
        return attempts

    # -------------------------------------------------------------------------
    # Resultados e progresso
    # -------------------------------------------------------------------------

    async def save_result(self, result: QuizResult) -> None:
        await self.agentfs.kv.set(
            self._result_key(result.attempt.id), result.model_dump(mode="json")
        )
        logger.debug(f"Resultado salvo: {result.attempt.id}")

    async def load_result(self, attempt_id: str) -> QuizResult | None:
        data = await self.agentfs.kv.get(self._result_key(attempt_id))
        if not data:
            return None
        return QuizResult.model_validate(data)

    async def load_progress(self, quiz_id: str, user_id: str) -> QuizProgress | None:
        data = await self.agentfs.kv.get(self._progress_key(quiz_id, user_id))
        if not data:
            return None
        return QuizProgress.model_validate(data)

    async def save_progress(self, quiz_id: str, user_id: str, progress: QuizProgress) -> None:
        await self.agentfs.kv.set(
            self._progress_key(quiz_id, user_id), progress.model_dump(mode="json")
        )

    async def get_status(self, attempt_id: str) -> dict[str, Any]:
        """Retorna status resumido da tentativa."""
        attempt = await self.load_attempt(attempt_id)
        if attempt is None:
            return {
                "attempt_id": attempt_id,
                "found": False,
                "error": "Tentativa não encontrada",
            }

        return {
            "attempt_id": attempt_id,
            "found": True,
            "quiz_id": attempt.quiz_id,
            "status": attempt.status.value,
            "answered": len(attempt.answers),
            "total_questions": len(attempt.presentation.question_ids),
            "score": attempt.score,
            "passed": attempt.passed,
        }
