"""
Tutor Errors

Labeled failures raised by the core and mapped to responses by the
request boundary. Every error carries a machine-readable kind, a
human-readable detail and whether the caller may simply retry.
"""

from typing import Optional


class TutorError(Exception):
    """Base class for all labeled tutor failures."""
    kind = "tutor_error"
    status_code = 500
    retryable = False

    def __init__(self, detail: str, kind: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        if kind:
            self.kind = kind

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail, "retryable": self.retryable}


# ==================== Precondition errors ====================

class PreconditionError(TutorError):
    """Caller asked for something the session cannot do right now."""
    kind = "precondition_failed"
    status_code = 400


class NoActiveSessionError(PreconditionError):
    kind = "no_active_session"

    def __init__(self, detail: str = "No active session. Initialize a topic first."):
        super().__init__(detail)


class MissingAnswerError(PreconditionError):
    kind = "missing_answer"

    def __init__(self, detail: str = "Answer is required"):
        super().__init__(detail)


class InvalidInputError(PreconditionError):
    kind = "invalid_input"


class InvalidPhaseError(PreconditionError):
    kind = "invalid_phase"
    status_code = 409


# ==================== Collaborator errors ====================

class LLMServiceError(TutorError):
    """The LLM collaborator failed; session state is left as it was."""
    kind = "llm_failure"
    status_code = 502
    retryable = True


class LLMTimeoutError(LLMServiceError):
    kind = "llm_timeout"
    status_code = 504
