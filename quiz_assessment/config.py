# =============================================================================
# CONFIGURACAO DO QUIZ ENGINE
# =============================================================================
# Valores lidos de variaveis de ambiente com defaults seguros
# =============================================================================

import logging
import os
from dataclasses import dataclass

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class QuizEngineConfig:
    """Configuracao centralizada do motor de avaliacao.

    Attributes:
        key_prefix: Prefixo das chaves no KV store
        time_grace_seconds: Tolerancia somada ao timeLimit antes de expirar
        default_passing_score: Nota de aprovacao usada em quizzes novos
        events_enabled: Se eventos de resultado/notificacao sao publicados
        log_level: Nivel de log do pacote
    """

    key_prefix: str = "quizengine"
    time_grace_seconds: float = 0.0
    default_passing_score: int = 70
    events_enabled: bool = True
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "QuizEngineConfig":
        """Cria configuracao a partir das variaveis de ambiente."""
        config = cls(
            key_prefix=os.getenv("QUIZ_KEY_PREFIX", "quizengine"),
            time_grace_seconds=float(os.getenv("QUIZ_TIME_GRACE_SECONDS", "0")),
            default_passing_score=int(os.getenv("QUIZ_DEFAULT_PASSING_SCORE", "70")),
            events_enabled=_env_bool("QUIZ_EVENTS_ENABLED", True),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
        config.validate()
        return config

    def validate(self) -> None:
        if self.time_grace_seconds < 0:
            raise ValueError("QUIZ_TIME_GRACE_SECONDS deve ser >= 0")
        if not 0 <= self.default_passing_score <= 100:
            raise ValueError("QUIZ_DEFAULT_PASSING_SCORE deve estar entre 0 e 100")
        if not self.key_prefix:
            raise ValueError("QUIZ_KEY_PREFIX nao pode ser vazio")

    def configure_logging(self) -> None:
        """Aplica o nivel de log ao logger do pacote."""
        logging.getLogger("quiz_assessment").setLevel(self.log_level)


_config: QuizEngineConfig | None = None


def get_config() -> QuizEngineConfig:
    """Retorna configuracao singleton (lazy)."""
    global _config
    if _config is None:
        _config = QuizEngineConfig.from_env()
    return _config


def reset_config() -> None:
    """Descarta o singleton (usado em testes)."""
    global _config
    _config = None
