"""Quiz Errors - Hierarquia de excecoes do motor de avaliacao."""

from __future__ import annotations


class QuizEngineError(Exception):
    """Erro base do motor de avaliacao."""


class InvalidQuizError(QuizEngineError):
    """Quiz estruturalmente invalido (sem perguntas, invariantes violadas).

    Levantado na criacao da tentativa, nunca durante a correcao.
    """

    def __init__(self, quiz_id: str | None, problems: list[str]):
        self.quiz_id = quiz_id
        self.problems = list(problems)
        detail = "; ".join(self.problems) or "quiz invalido"
        super().__init__(f"Quiz {quiz_id} invalido: {detail}")


class RetakeLimitError(QuizEngineError):
    """Criacao de tentativa rejeitada pela politica de refazer."""

    def __init__(self, quiz_id: str, user_id: str, attempt_count: int, limit: int):
        self.quiz_id = quiz_id
        self.user_id = user_id
        self.attempt_count = attempt_count
        self.limit = limit
        super().__init__(
            f"Limite de tentativas atingido para quiz {quiz_id}: "
            f"{attempt_count}/{limit}"
        )


class ActiveAttemptError(QuizEngineError):
    """Ja existe uma tentativa em andamento para o mesmo (usuario, quiz)."""

    def __init__(self, quiz_id: str, user_id: str, attempt_id: str):
        self.quiz_id = quiz_id
        self.user_id = user_id
        self.attempt_id = attempt_id
        super().__init__(
            f"Tentativa {attempt_id} ainda em andamento para quiz {quiz_id}"
        )


class InvalidStateTransitionError(QuizEngineError):
    """Violacao de contrato: transicao nao permitida no estado atual."""

    def __init__(self, attempt_id: str, current: str, action: str):
        self.attempt_id = attempt_id
        self.current = current
        self.action = action
        super().__init__(
            f"Tentativa {attempt_id}: '{action}' nao permitido no estado '{current}'"
        )


class AttemptExpiredError(InvalidStateTransitionError):
    """Resposta recebida apos o prazo da tentativa."""

    def __init__(self, attempt_id: str):
        super().__init__(attempt_id, "expired", "record_answer")


class UnknownQuestionError(QuizEngineError):
    """Pergunta nao faz parte do snapshot da tentativa."""

    def __init__(self, attempt_id: str, question_id: str):
        self.attempt_id = attempt_id
        self.question_id = question_id
        super().__init__(
            f"Pergunta {question_id} nao pertence a tentativa {attempt_id}"
        )


class QuizNotFoundError(QuizEngineError):
    def __init__(self, quiz_id: str):
        self.quiz_id = quiz_id
        super().__init__(f"Quiz {quiz_id} não encontrado")


class AttemptNotFoundError(QuizEngineError):
    def __init__(self, attempt_id: str):
        self.attempt_id = attempt_id
        super().__init__(f"Tentativa {attempt_id} não encontrada")
