# =============================================================================
# CONFTEST - Fixtures compartilhadas para todos os testes
# =============================================================================
# Centraliza mocks do AgentFS, quizzes de exemplo e relogio fixo
# =============================================================================

import os
from datetime import datetime, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest


# =============================================================================
# FIXTURES DE AMBIENTE
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Configura ambiente de testes globalmente."""
    env_vars = {
        "QUIZ_KEY_PREFIX": "quizengine",
        "QUIZ_TIME_GRACE_SECONDS": "0",
        "QUIZ_EVENTS_ENABLED": "true",
        "LOG_LEVEL": "ERROR",  # Reduzir logs em testes
    }
    with patch.dict(os.environ, env_vars):
        yield


@pytest.fixture(autouse=True)
def reset_engine_config():
    """Descarta a configuracao singleton entre testes."""
    from quiz_assessment.config import reset_config

    reset_config()
    yield
    reset_config()


@pytest.fixture
def clean_env():
    """Limpa variaveis de ambiente para testes isolados."""
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture
def now() -> datetime:
    """Relogio fixo do servidor."""
    return datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


# =============================================================================
# FIXTURES DO AGENTFS
# =============================================================================


@pytest.fixture
def mock_agentfs():
    """Mock completo do AgentFS."""
    mock = MagicMock()

    # KV Store
    mock.kv = AsyncMock()
    mock.kv.get = AsyncMock(return_value=None)
    mock.kv.set = AsyncMock()
    mock.kv.delete = AsyncMock()
    mock.kv.list = AsyncMock(return_value=[])

    # Lifecycle
    mock.close = AsyncMock()

    return mock


@pytest.fixture
def mock_agentfs_with_data():
    """Mock do AgentFS com KV em memoria."""
    mock = MagicMock()
    _storage = {}

    async def mock_get(key):
        return _storage.get(key)

    async def mock_set(key, value):
        _storage[key] = value

    async def mock_delete(key):
        _storage.pop(key, None)

    async def mock_list(prefix=""):
        return [{"key": k} for k in _storage if k.startswith(prefix)]

    mock.kv = AsyncMock()
    mock.kv.get = mock_get
    mock.kv.set = mock_set
    mock.kv.delete = mock_delete
    mock.kv.list = mock_list
    mock._storage = _storage

    mock.close = AsyncMock()

    return mock


# =============================================================================
# FIXTURES DO QUIZ
# =============================================================================


@pytest.fixture
def sample_quiz_data() -> dict[str, Any]:
    """Quiz com as seis variantes (JSON camelCase do frontend), 10 pontos no total."""
    return {
        "id": "quiz-1",
        "lessonId": "lesson-1",
        "title": "Geografia basica",
        "passingScore": 70,
        "timeLimit": None,
        "shuffleQuestions": False,
        "shuffleOptions": False,
        "showCorrectAnswers": True,
        "allowRetake": True,
        "maxAttempts": None,
        "questions": [
            {
                "id": "q-single",
                "type": "single_choice",
                "question": "Qual a capital do Brasil?",
                "points": 2,
                "order": 1,
                "explanation": "Brasilia e a capital desde 1960.",
                "options": [
                    {"id": "a", "text": "Rio de Janeiro", "isCorrect": False},
                    {"id": "b", "text": "Brasilia", "isCorrect": True},
                    {"id": "c", "text": "Sao Paulo", "isCorrect": False},
                ],
            },
            {
                "id": "q-multi",
                "type": "multiple_choice",
                "question": "Quais sao paises da America do Sul?",
                "points": 2,
                "order": 2,
                "options": [
                    {"id": "a", "text": "Chile", "isCorrect": True},
                    {"id": "b", "text": "Mexico", "isCorrect": False},
                    {"id": "c", "text": "Peru", "isCorrect": True},
                    {"id": "d", "text": "Cuba", "isCorrect": False},
                ],
            },
            {
                "id": "q-tf",
                "type": "true_false",
                "question": "O Amazonas nasce no Brasil.",
                "points": 1,
                "order": 3,
                "correctAnswer": False,
            },
            {
                "id": "q-fill",
                "type": "fill_blank",
                "question": "Complete",
                "points": 2,
                "order": 4,
                "textWithBlanks": "A capital da Franca e ___ e a da Alemanha e ___.",
                "blanks": [
                    {"id": "b1", "correctAnswer": "Paris", "acceptableAnswers": ["paris"]},
                    {"id": "b2", "correctAnswer": "Berlin", "caseSensitive": True},
                ],
            },
            {
                "id": "q-dragfill",
                "type": "drag_fill",
                "question": "Arraste",
                "points": 1,
                "order": 5,
                "textWithBlanks": "O ___ e o maior planeta.",
                "items": [
                    {"id": "i1", "text": "Jupiter"},
                    {"id": "i2", "text": "Saturno"},
                    {"id": "i3", "text": "Marte"},
                ],
                "dropZones": [{"id": "z1", "correctItemId": "i1"}],
            },
            {
                "id": "q-dragdrop",
                "type": "drag_drop",
                "question": "Classifique",
                "points": 2,
                "order": 6,
                "items": [
                    {"id": "i1", "text": "Cachorro"},
                    {"id": "i2", "text": "Gato"},
                    {"id": "i3", "text": "Salmao"},
                    {"id": "i4", "text": "Pedra"},
                ],
                "categories": [
                    {"id": "c1", "name": "Mamiferos", "correctItemIds": ["i1", "i2"]},
                    {"id": "c2", "name": "Peixes", "correctItemIds": ["i3"]},
                ],
            },
        ],
    }


@pytest.fixture
def sample_quiz(sample_quiz_data):
    """Quiz de exemplo validado."""
    from quiz_assessment.models.quiz import Quiz

    return Quiz.model_validate(sample_quiz_data)


@pytest.fixture
def correct_answers() -> dict[str, Any]:
    """Respostas corretas para todas as perguntas de sample_quiz."""
    return {
        "q-single": "b",
        "q-multi": ["a", "c"],
        "q-tf": False,
        "q-fill": {"b1": "Paris", "b2": "Berlin"},
        "q-dragfill": {"z1": "i1"},
        "q-dragdrop": {"c1": ["i1", "i2"], "c2": ["i3"]},
    }


@pytest.fixture
def make_quiz(sample_quiz_data):
    """Fabrica de quizzes derivados do exemplo (sobrescreve campos)."""
    from pydantic.alias_generators import to_camel

    from quiz_assessment.models.quiz import Quiz

    def _make(**overrides) -> Quiz:
        data = {**sample_quiz_data, **{to_camel(k): v for k, v in overrides.items()}}
        return Quiz.model_validate(data)

    return _make


@pytest.fixture
def quiz_store(mock_agentfs_with_data):
    """QuizStore sobre KV em memoria."""
    from quiz_assessment.storage.quiz_store import QuizStore

    return QuizStore(mock_agentfs_with_data)


@pytest.fixture
def event_bus():
    """Barramento que registra os eventos publicados."""
    from quiz_assessment.events import QuizEventBus

    bus = QuizEventBus()
    bus.received = []

    async def _collect(event):
        bus.received.append(event)

    bus.subscribe(_collect)
    return bus


@pytest.fixture
def quiz_engine(quiz_store, event_bus):
    """QuizEngine com store em memoria e configuracao padrao."""
    from quiz_assessment.config import QuizEngineConfig
    from quiz_assessment.engine.quiz_engine import QuizEngine

    return QuizEngine(store=quiz_store, events=event_bus, config=QuizEngineConfig())
