"""
SOCRATIX tutor core - session state machine, scoring and progression.

Components:
    - session_state: Session record and its records
    - error_classifier: Answer -> misconception kind (keyword heuristic)
    - contradiction_detector: Negation + overlap contradiction heuristic
    - consistency_scorer: Bounded consistency accumulator
    - diversity_tracker: Question-type repetition warnings
    - curriculum: 6-step curriculum gatekeeper
    - scaffold_manager: Nudge -> hint -> partial explanation escalation
    - assertion_ledger: Proven statements
    - orchestrator: Session phase state machine
"""

from .session_state import SessionState, SessionPhase, MisconceptionKind
from .session_manager import SessionManager
from .llm_client import LLMService, OpenAILLMService
from .orchestrator import SocraticOrchestrator, AnswerOutcome
from .errors import TutorError

__all__ = [
    "SessionState",
    "SessionPhase",
    "MisconceptionKind",
    "SessionManager",
    "LLMService",
    "OpenAILLMService",
    "SocraticOrchestrator",
    "AnswerOutcome",
    "TutorError",
]
