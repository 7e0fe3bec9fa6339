"""Quiz Router - Endpoints FastAPI do motor de avaliacao."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

import app_state

from .config import get_config
from .engine.attempt_machine import remaining_seconds
from .engine.quiz_engine import QuizEngine
from .errors import (
    ActiveAttemptError,
    AttemptExpiredError,
    AttemptNotFoundError,
    InvalidQuizError,
    InvalidStateTransitionError,
    QuizEngineError,
    QuizNotFoundError,
    RetakeLimitError,
    UnknownQuestionError,
)
from .models.attempt import QuizAttempt, QuizResult
from .models.enums import AttemptStatus
from .models.progress import QuizProgress
from .models.questions import Question
from .models.quiz import Quiz
from .storage.quiz_store import QuizStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quizzes", tags=["Quiz"])

# Campos que revelam o gabarito e nunca vao para o aluno durante a tentativa
ANSWER_KEY_FIELDS = {
    "isCorrect",
    "correctAnswer",
    "acceptableAnswers",
    "caseSensitive",
    "correctItemId",
    "correctItemIds",
    "explanation",
}


# =============================================================================
# REQUEST / RESPONSE
# =============================================================================


class RecordAnswerRequest(BaseModel):
    """Request para registrar uma resposta."""

    answer: Any = Field(default=None, description="Resposta no formato da variante")


class AttemptView(BaseModel):
    """Tentativa com perguntas na ordem apresentada ao aluno."""

    attempt: QuizAttempt
    questions: list[dict[str, Any]]
    remaining_seconds: float | None = None


# =============================================================================
# DEPENDENCY INJECTION
# =============================================================================


async def get_quiz_engine() -> QuizEngine:
    """Dependency para obter QuizEngine configurado."""
    config = get_config()
    agentfs = await app_state.get_agentfs()
    store = QuizStore(agentfs, key_prefix=config.key_prefix)
    return QuizEngine(store=store, events=app_state.get_event_bus(), config=config)


def get_current_user_id(x_user_id: str = Header(..., alias="X-User-Id")) -> str:
    """Usuario autenticado (autenticacao real fica no gateway)."""
    if not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Usuario nao identificado")
    return x_user_id


def get_now() -> datetime:
    """Relogio autoritativo do servidor."""
    return datetime.now(timezone.utc)


# =============================================================================
# HELPERS
# =============================================================================


def _http_error(error: QuizEngineError) -> HTTPException:
    """Traduz erros do motor para HTTP."""
    if isinstance(error, (QuizNotFoundError, AttemptNotFoundError)):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InvalidQuizError):
        return HTTPException(
            status_code=400, detail={"message": str(error), "problems": error.problems}
        )
    if isinstance(error, RetakeLimitError):
        return HTTPException(
            status_code=409,
            detail={
                "message": str(error),
                "attempt_count": error.attempt_count,
                "limit": error.limit,
            },
        )
    if isinstance(error, ActiveAttemptError):
        return HTTPException(
            status_code=409, detail={"message": str(error), "attempt_id": error.attempt_id}
        )
    if isinstance(error, AttemptExpiredError):
        return HTTPException(status_code=410, detail=str(error))
    if isinstance(error, UnknownQuestionError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, InvalidStateTransitionError):
        return HTTPException(status_code=409, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))


def strip_answer_key(data: Any) -> Any:
    """Remove recursivamente campos de gabarito de um payload."""
    if isinstance(data, dict):
        return {k: strip_answer_key(v) for k, v in data.items() if k not in ANSWER_KEY_FIELDS}
    if isinstance(data, list):
        return [strip_answer_key(v) for v in data]
    return data


def _question_payload(question: Question, reveal: bool) -> dict[str, Any]:
    data = question.model_dump(mode="json", by_alias=True)
    return data if reveal else strip_answer_key(data)


def result_payload(result: QuizResult) -> dict[str, Any]:
    """Resultado serializado para o aluno; sem gabarito se o quiz nao o exibe."""
    data = result.for_student().model_dump(mode="json", by_alias=True)
    if not result.quiz.show_correct_answers:
        data["quiz"] = strip_answer_key(data["quiz"])
    return data


async def _owned_attempt(engine: QuizEngine, attempt_id: str, user_id: str) -> QuizAttempt:
    """Carrega tentativa garantindo que pertence ao usuario."""
    attempt = await engine.store.load_attempt(attempt_id)
    if attempt is None or attempt.user_id != user_id:
        raise HTTPException(status_code=404, detail=f"Tentativa {attempt_id} não encontrada")
    return attempt


# =============================================================================
# DEFINICOES
# =============================================================================


@router.put("/{quiz_id}", response_model=Quiz)
async def save_quiz(
    quiz_id: str,
    payload: dict[str, Any],
    engine: QuizEngine = Depends(get_quiz_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Valida e salva a definicao de um quiz (ferramentas de autoria)."""
    try:
        quiz = await engine.save_quiz({**payload, "id": quiz_id})
    except QuizEngineError as e:
        raise _http_error(e) from e
    logger.info(f"[Quiz {quiz_id}] Definicao salva por {user_id}")
    return quiz


@router.get("/{quiz_id}")
async def get_quiz(quiz_id: str, engine: QuizEngine = Depends(get_quiz_engine)):
    """Definicao publica do quiz, sem gabarito."""
    quiz = await engine.store.load_quiz(quiz_id)
    if quiz is None:
        raise HTTPException(status_code=404, detail=f"Quiz {quiz_id} não encontrado")
    return strip_answer_key(quiz.model_dump(mode="json", by_alias=True))


@router.get("/{quiz_id}/progress", response_model=QuizProgress)
async def get_progress(
    quiz_id: str,
    engine: QuizEngine = Depends(get_quiz_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Progresso do usuario no quiz (tentativas, melhor nota, aprovacao)."""
    return await engine.get_progress(quiz_id, user_id)


# =============================================================================
# TENTATIVAS
# =============================================================================


@router.post("/{quiz_id}/attempts", response_model=AttemptView, status_code=201)
async def start_attempt(
    quiz_id: str,
    engine: QuizEngine = Depends(get_quiz_engine),
    user_id: str = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
):
    """Inicia uma tentativa.

    - Valida o quiz e a politica de refazer
    - Congela a ordem de apresentacao
    - Retorna perguntas sem gabarito
    """
    try:
        quiz = await engine.get_quiz(quiz_id)
        attempt = await engine.create_attempt(quiz, user_id, now)
        _, questions = await engine.get_presented_questions(attempt.id)
    except QuizEngineError as e:
        raise _http_error(e) from e

    logger.info(f"[Attempt {attempt.id}] Iniciada via API")
    return AttemptView(
        attempt=attempt,
        questions=[_question_payload(q, reveal=False) for q in questions],
        remaining_seconds=remaining_seconds(attempt, now),
    )


@router.get("/attempts/{attempt_id}", response_model=AttemptView)
async def get_attempt(
    attempt_id: str,
    engine: QuizEngine = Depends(get_quiz_engine),
    user_id: str = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
):
    """Tentativa na ordem congelada; gabarito so apos correcao e se o quiz permitir."""
    await _owned_attempt(engine, attempt_id, user_id)
    try:
        attempt, questions = await engine.get_presented_questions(attempt_id)
        reveal = False
        if attempt.status is AttemptStatus.GRADED:
            quiz = await engine.quiz_for_attempt(attempt)
            reveal = quiz.show_correct_answers
    except QuizEngineError as e:
        raise _http_error(e) from e

    return AttemptView(
        attempt=attempt,
        questions=[_question_payload(q, reveal=reveal) for q in questions],
        remaining_seconds=(
            remaining_seconds(attempt, now)
            if attempt.status is AttemptStatus.IN_PROGRESS
            else None
        ),
    )


@router.put("/attempts/{attempt_id}/answers/{question_id}", response_model=QuizAttempt)
async def record_answer(
    attempt_id: str,
    question_id: str,
    request: RecordAnswerRequest,
    engine: QuizEngine = Depends(get_quiz_engine),
    user_id: str = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
):
    """Registra resposta (autosave; ultima escrita vence)."""
    await _owned_attempt(engine, attempt_id, user_id)
    try:
        return await engine.record_answer(attempt_id, question_id, request.answer, now)
    except QuizEngineError as e:
        raise _http_error(e) from e


@router.post("/attempts/{attempt_id}/submit")
async def submit_attempt(
    attempt_id: str,
    engine: QuizEngine = Depends(get_quiz_engine),
    user_id: str = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
):
    """Encerra e corrige a tentativa.

    O prazo e avaliado com o relogio do servidor, nunca com horario
    enviado pelo cliente.
    """
    await _owned_attempt(engine, attempt_id, user_id)
    try:
        result = await engine.finish_attempt(attempt_id, now)
    except QuizEngineError as e:
        raise _http_error(e) from e
    return result_payload(result)


@router.get("/attempts/{attempt_id}/result")
async def get_result(
    attempt_id: str,
    engine: QuizEngine = Depends(get_quiz_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Resultado de uma tentativa corrigida (revisao)."""
    await _owned_attempt(engine, attempt_id, user_id)
    try:
        result = await engine.get_review(attempt_id)
    except QuizEngineError as e:
        raise _http_error(e) from e
    return result_payload(result)
