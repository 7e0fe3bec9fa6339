"""Quiz Assessment - Motor de avaliacao de quizzes.

Arquitetura:
- models/: Enums, variantes de pergunta, Quiz, tentativa e resultado
- engine/: Validador de respostas, embaralhamento, maquina de estados,
  agregador de resultado, guarda de refazer e fachada QuizEngine
- storage/: QuizStore (AgentFS integration)
- events.py: Eventos de progresso e notificacao
- router.py: FastAPI endpoints
"""

from .config import QuizEngineConfig, get_config
from .engine import (
    QuizEngine,
    ResultAggregator,
    create_attempt,
    grade_attempt,
    record_answer,
    score_answer,
    submit_attempt,
    validate_quiz,
)
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
from .events import QuizEventBus
from .models import AttemptStatus, Question, QuestionType, Quiz, QuizAttempt, QuizResult
from .storage import QuizStore

__all__ = [
    # Config
    "QuizEngineConfig",
    "get_config",
    # Models
    "QuestionType",
    "AttemptStatus",
    "Question",
    "Quiz",
    "QuizAttempt",
    "QuizResult",
    # Engine
    "QuizEngine",
    "ResultAggregator",
    "create_attempt",
    "record_answer",
    "submit_attempt",
    "grade_attempt",
    "score_answer",
    "validate_quiz",
    # Errors
    "QuizEngineError",
    "InvalidQuizError",
    "RetakeLimitError",
    "ActiveAttemptError",
    "InvalidStateTransitionError",
    "AttemptExpiredError",
    "UnknownQuestionError",
    "QuizNotFoundError",
    "AttemptNotFoundError",
    # Events / Storage
    "QuizEventBus",
    "QuizStore",
]
