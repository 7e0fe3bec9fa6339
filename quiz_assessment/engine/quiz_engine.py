"""Quiz Engine - Fachada assincrona do motor de avaliacao.

Orquestra guarda de refazer, maquina de estados e agregador sobre o
QuizStore, aplicando a disciplina de concorrencia:

- criacao de tentativa atomica por (usuario, quiz)
- submit por compare-and-set: so o primeiro sai de ``in_progress``
- correcao persistida uma unica vez por tentativa
- relogio sempre injetado pelo chamador
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from ..config import QuizEngineConfig, get_config
from ..errors import (
    AttemptExpiredError,
    AttemptNotFoundError,
    InvalidStateTransitionError,
    QuizNotFoundError,
)
from ..events import QuizEventBus
from ..models.attempt import QuizAttempt, QuizResult
from ..models.enums import AttemptStatus
from ..models.progress import QuizProgress
from ..models.questions import Question
from ..models.quiz import Quiz
from ..storage.quiz_store import QuizStore
from . import attempt_machine
from .progress import apply_result
from .randomizer import present_questions
from .result_aggregator import ResultAggregator
from .retake_guard import check_retake_allowed
from .validation import validate_quiz

logger = logging.getLogger(__name__)


def create_attempt(
    quiz: Quiz | dict,
    user_id: str,
    history: Iterable[QuizAttempt],
    now: datetime,
    attempt_id: str | None = None,
) -> QuizAttempt:
    """Cria tentativa a partir do historico do usuario (funcao pura).

    Raises:
        InvalidQuizError: Quiz estruturalmente invalido
        ActiveAttemptError: Tentativa viva para (usuario, quiz)
        RetakeLimitError: Limite de tentativas atingido
    """
    quiz = validate_quiz(quiz)
    check_retake_allowed(quiz, user_id, history)
    return attempt_machine.start_attempt(quiz, user_id, now, attempt_id)


class QuizEngine:
    """Fachada assincrona do motor de avaliacao.

    Example:
        >>> engine = QuizEngine(store=QuizStore(agentfs))
        >>> attempt = await engine.create_attempt(quiz, "user-1", now)
        >>> await engine.record_answer(attempt.id, "q1", "opt-a", now)
        >>> result = await engine.finish_attempt(attempt.id, now)
    """

    def __init__(
        self,
        store: QuizStore,
        events: QuizEventBus | None = None,
        config: QuizEngineConfig | None = None,
    ):
        self.store = store
        self.events = events
        self.config = config or get_config()
        self.aggregator = ResultAggregator()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    async def get_quiz(self, quiz_id: str) -> Quiz:
        quiz = await self.store.load_quiz(quiz_id)
        if quiz is None:
            raise QuizNotFoundError(quiz_id)
        return quiz

    async def _require_attempt(self, attempt_id: str) -> QuizAttempt:
        attempt = await self.store.load_attempt(attempt_id)
        if attempt is None:
            raise AttemptNotFoundError(attempt_id)
        return attempt

    async def quiz_for_attempt(self, attempt: QuizAttempt) -> Quiz:
        """Definicao congelada na criacao da tentativa.

        Edicoes posteriores do quiz nao alteram gabarito nem pontuacao de
        tentativas ja iniciadas.
        """
        quiz = await self.store.load_attempt_quiz(attempt.id)
        if quiz is None:
            return await self.get_quiz(attempt.quiz_id)
        return quiz

    async def _close_abandoned(self, history: list[QuizAttempt], now: datetime) -> bool:
        """Corrige tentativas encerradas e expira as vencidas que ninguem submeteu.

        Sem isso, uma tentativa abandonada (ou expirada por resposta fora do
        prazo) bloquearia novas tentativas para sempre.
        """
        changed = False
        for attempt in history:
            if attempt.status is AttemptStatus.IN_PROGRESS:
                if not attempt_machine.is_overdue(attempt, now, self.config.time_grace_seconds):
                    continue
                logger.info(f"[Attempt {attempt.id}] Abandonada apos o prazo, corrigindo")
                await self.expire_overdue(attempt.id, now)
            elif attempt.status.is_closed:
                logger.info(f"[Attempt {attempt.id}] Encerrada sem correcao, corrigindo")
            else:
                continue
            try:
                await self.grade_attempt(attempt.id)
            except InvalidStateTransitionError:
                logger.warning(f"[Attempt {attempt.id}] Ja corrigida por outra chamada")
            changed = True
        return changed

    # -------------------------------------------------------------------------
    # Definicoes
    # -------------------------------------------------------------------------

    async def save_quiz(self, quiz: Quiz | dict) -> Quiz:
        """Valida e persiste a definicao de um quiz."""
        quiz = validate_quiz(quiz)
        await self.store.save_quiz(quiz)
        return quiz

    # -------------------------------------------------------------------------
    # Ciclo de vida
    # -------------------------------------------------------------------------

    async def create_attempt(
        self,
        quiz: Quiz | dict,
        user_id: str,
        now: datetime,
        attempt_id: str | None = None,
    ) -> QuizAttempt:
        """Cria nova tentativa apos validar quiz e politica de refazer.

        Leitura do historico e escrita da tentativa ocorrem sob a mesma
        trava do par (usuario, quiz).

        Raises:
            InvalidQuizError, ActiveAttemptError, RetakeLimitError
        """
        quiz = validate_quiz(quiz)
        async with self.store.lock_history(quiz.id, user_id):
            history = await self.store.list_attempts(quiz.id, user_id)
            if await self._close_abandoned(history, now):
                history = await self.store.list_attempts(quiz.id, user_id)
            attempt = create_attempt(quiz, user_id, history, now, attempt_id)
            await self.store.save_attempt(attempt)
            await self.store.save_attempt_quiz(attempt.id, quiz)
            await self.store.add_to_history(attempt)
        return attempt

    async def record_answer(
        self,
        attempt_id: str,
        question_id: str,
        answer: Any,
        now: datetime,
    ) -> QuizAttempt:
        """Registra (upsert) a resposta de uma pergunta.

        O prazo e verificado aqui, com o relogio do servidor: uma resposta
        fora do prazo expira a tentativa em vez de ser gravada.

        Raises:
            AttemptNotFoundError: Tentativa inexistente
            AttemptExpiredError: Prazo esgotado
            InvalidStateTransitionError: Tentativa fora de ``in_progress``
            UnknownQuestionError: Pergunta fora do snapshot
        """
        async with self.store.lock_attempt(attempt_id):
            attempt = await self._require_attempt(attempt_id)
            grace = self.config.time_grace_seconds

            if attempt.status is AttemptStatus.IN_PROGRESS and attempt_machine.is_overdue(
                attempt, now, grace
            ):
                expired = attempt_machine.submit_attempt(attempt, now, grace)
                await self.store.save_attempt(expired)
                logger.warning(f"[Attempt {attempt_id}] Resposta recebida apos o prazo")
                raise AttemptExpiredError(attempt_id)

            updated = attempt_machine.record_answer(attempt, question_id, answer)
            await self.store.save_attempt(updated)
            logger.debug(f"[Attempt {attempt_id}] Resposta registrada: {question_id}")
            return updated

    async def submit_attempt(self, attempt_id: str, now: datetime) -> QuizAttempt:
        """Encerra a tentativa (``submitted`` ou ``expired``).

        Se outra chamada ja encerrou a tentativa (submit manual vs expiracao),
        devolve o estado persistido sem nova transicao.
        """
        async with self.store.lock_attempt(attempt_id):
            attempt = await self._require_attempt(attempt_id)
            if attempt.status is not AttemptStatus.IN_PROGRESS:
                logger.warning(
                    f"[Attempt {attempt_id}] Submit ignorado: ja em {attempt.status.value}"
                )
                return attempt

            closed = attempt_machine.submit_attempt(
                attempt, now, self.config.time_grace_seconds
            )
            await self.store.save_attempt(closed)
            return closed

    async def grade_attempt(self, attempt_id: str) -> QuizResult:
        """Corrige uma tentativa encerrada, persiste e publica eventos.

        Raises:
            InvalidStateTransitionError: Tentativa em andamento ou ja corrigida
        """
        async with self.store.lock_attempt(attempt_id):
            attempt = await self._require_attempt(attempt_id)
            quiz = await self.quiz_for_attempt(attempt)

            result = self.aggregator.grade(attempt, quiz)
            await self.store.save_result(result)
            await self.store.save_attempt(result.attempt)

        progress = apply_result(
            await self.store.load_progress(quiz.id, attempt.user_id), result
        )
        await self.store.save_progress(quiz.id, attempt.user_id, progress)

        if self.events is not None and self.config.events_enabled:
            await self.events.publish_result(result)
        return result

    async def finish_attempt(self, attempt_id: str, now: datetime) -> QuizResult:
        """Submit + correcao. O perdedor de uma corrida recebe o resultado existente."""
        closed = await self.submit_attempt(attempt_id, now)
        if closed.status is AttemptStatus.GRADED:
            result = await self.store.load_result(attempt_id)
            if result is None:
                raise InvalidStateTransitionError(attempt_id, closed.status.value, "finish")
            return result
        try:
            return await self.grade_attempt(attempt_id)
        except InvalidStateTransitionError:
            # Corrigida por outra chamada entre o submit e a correcao
            result = await self.store.load_result(attempt_id)
            if result is None:
                raise
            return result

    async def expire_overdue(self, attempt_id: str, now: datetime) -> QuizAttempt:
        """Varredura do servidor: expira a tentativa se o prazo passou."""
        async with self.store.lock_attempt(attempt_id):
            attempt = await self._require_attempt(attempt_id)
            updated = attempt_machine.expire_if_overdue(
                attempt, now, self.config.time_grace_seconds
            )
            if updated is not attempt:
                await self.store.save_attempt(updated)
            return updated

    # -------------------------------------------------------------------------
    # Leitura
    # -------------------------------------------------------------------------

    async def get_presented_questions(
        self, attempt_id: str
    ) -> tuple[QuizAttempt, list[Question]]:
        """Tentativa e perguntas na ordem congelada vista pelo aluno."""
        attempt = await self._require_attempt(attempt_id)
        quiz = await self.quiz_for_attempt(attempt)
        return attempt, present_questions(quiz, attempt.presentation)

    async def get_review(self, attempt_id: str) -> QuizResult:
        """Resultado de uma tentativa corrigida (somente leitura)."""
        result = await self.store.load_result(attempt_id)
        if result is None:
            attempt = await self._require_attempt(attempt_id)
            raise InvalidStateTransitionError(attempt_id, attempt.status.value, "review")
        return result

    async def preview(self, attempt_id: str) -> QuizResult:
        """Correcao de previa, sem alterar estado persistido."""
        attempt = await self._require_attempt(attempt_id)
        quiz = await self.quiz_for_attempt(attempt)
        return self.aggregator.preview(attempt, quiz)

    async def get_progress(self, quiz_id: str, user_id: str) -> QuizProgress:
        return await self.store.load_progress(quiz_id, user_id) or QuizProgress()
