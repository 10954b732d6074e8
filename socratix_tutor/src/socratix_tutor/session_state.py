"""
Session State Data Model

Defines the SessionState dataclass and the records it owns:
conversation turns, assertions, misconceptions, contradictions,
curriculum steps and thought-process nodes.
"""

import copy
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum


class SessionPhase(Enum):
    """Session phases, in the only order they may be entered."""
    CALIBRATION = "calibration"
    PROGRESSIVE = "progressive"
    SYNTHESIS = "synthesis"
    CONCLUSION = "conclusion"


PHASE_ORDER = [
    SessionPhase.CALIBRATION,
    SessionPhase.PROGRESSIVE,
    SessionPhase.SYNTHESIS,
    SessionPhase.CONCLUSION,
]


class MisconceptionKind(Enum):
    """Misconception kinds produced by the error classifier."""
    CALCULATION = "calculation"
    LOGIC = "logic"
    FUNDAMENTAL = "fundamental"


MISCONCEPTION_SEVERITY = {
    MisconceptionKind.CALCULATION: "low",
    MisconceptionKind.LOGIC: "medium",
    MisconceptionKind.FUNDAMENTAL: "high",
}


@dataclass
class ConversationTurn:
    """One message in the conversation."""
    role: str  # "user" or "assistant"
    text: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class Assertion:
    """A user statement recorded as proven knowledge."""
    id: str
    statement: str
    source_answer_id: str  # node id of the answer it came from
    confidence: int
    foundational: bool
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class Misconception:
    """A classified gap detected in a user answer."""
    id: str
    source_answer: str
    kind: MisconceptionKind
    depth_detected: int
    severity: str
    resolved: bool = False


@dataclass
class Contradiction:
    """A new statement that negates content in earlier answers."""
    id: str
    new_statement: str
    conflicting_prior_statements: List[str]
    depth_detected: int


@dataclass
class CurriculumStep:
    """One stage of the fixed curriculum path."""
    index: int
    name: str
    description: str


@dataclass
class ThoughtNode:
    """Thought-process node, one per answer."""
    id: str
    text: str
    depth: int
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ThoughtConnection:
    """Edge between two consecutive thought-process nodes."""
    source: str
    target: str


@dataclass
class SessionState:
    """Mutable record of one learner's progress through a topic."""
    session_id: str
    topic: Optional[str] = None
    phase: SessionPhase = SessionPhase.CALIBRATION
    question_depth: int = 0
    conversation_history: List[ConversationTurn] = field(default_factory=list)
    user_answers: List[str] = field(default_factory=list)
    assertions: List[Assertion] = field(default_factory=list)
    misconceptions: List[Misconception] = field(default_factory=list)
    contradictions: List[Contradiction] = field(default_factory=list)
    consistency_score: int = 0
    curriculum_path: List[CurriculumStep] = field(default_factory=list)
    current_step: int = 0
    scaffold_level: int = 0
    question_type_sequence: List[str] = field(default_factory=list)
    # Calibration
    baseline_level: Optional[str] = None  # "beginner", "intermediate", "advanced"
    calibration_questions: List[str] = field(default_factory=list)
    # Current question and synthesis
    current_question: Optional[str] = None
    synthesis_memo: Optional[str] = None
    # Thought-process graph for visualization
    thought_nodes: List[ThoughtNode] = field(default_factory=list)
    thought_connections: List[ThoughtConnection] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    last_updated: datetime = field(default_factory=datetime.now)

    @property
    def has_topic(self) -> bool:
        return bool(self.topic)

    @property
    def assertion_count(self) -> int:
        return len(self.assertions)

    @property
    def current_step_info(self) -> Optional[CurriculumStep]:
        if not self.curriculum_path:
            return None
        return self.curriculum_path[self.current_step]

    @staticmethod
    def answer_id(answer_number: int) -> str:
        """Id of the n-th answer (1-based)."""
        return f"node-{answer_number}"

    def answer_for(self, answer_id: str) -> Optional[str]:
        """Resolve an answer id back to the answer text."""
        if not answer_id.startswith("node-"):
            return None
        try:
            index = int(answer_id[len("node-"):]) - 1
        except ValueError:
            return None
        if 0 <= index < len(self.user_answers):
            return self.user_answers[index]
        return None

    def add_turn(self, role: str, text: str):
        """Append a conversation turn."""
        self.conversation_history.append(ConversationTurn(role=role, text=text))
        self.last_updated = datetime.now()

    def add_thought_node(self, text: str) -> ThoughtNode:
        """Add a thought node for the latest answer and link it to the previous one."""
        node = ThoughtNode(
            id=self.answer_id(len(self.user_answers)),
            text=text,
            depth=self.question_depth,
        )
        self.thought_nodes.append(node)
        if len(self.thought_nodes) > 1:
            previous = self.thought_nodes[-2]
            self.thought_connections.append(ThoughtConnection(source=previous.id, target=node.id))
        return node

    def transition_to(self, phase: SessionPhase):
        """
        Move to a later phase.

        Raises:
            ValueError: if the target phase is earlier than the current one
        """
        if PHASE_ORDER.index(phase) < PHASE_ORDER.index(self.phase):
            raise ValueError(f"Cannot move from {self.phase.value} back to {phase.value}")
        self.phase = phase
        self.last_updated = datetime.now()

    def snapshot(self) -> "SessionState":
        """Deep copy used to roll back a failed operation."""
        return copy.deepcopy(self)

    def restore(self, snapshot: "SessionState"):
        """Restore every field from a snapshot taken with snapshot()."""
        self.__dict__.update(copy.deepcopy(snapshot).__dict__)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the session for the request boundary."""
        return {
            "session_id": self.session_id,
            "topic": self.topic,
            "phase": self.phase.value,
            "question_depth": self.question_depth,
            "conversation_history": [
                {"role": t.role, "text": t.text, "timestamp": t.timestamp.isoformat()}
                for t in self.conversation_history
            ],
            "user_answers": list(self.user_answers),
            "assertions": [
                {
                    "id": a.id,
                    "statement": a.statement,
                    "source_answer_id": a.source_answer_id,
                    "confidence": a.confidence,
                    "foundational": a.foundational,
                    "timestamp": a.timestamp.isoformat(),
                }
                for a in self.assertions
            ],
            "misconceptions": [
                {
                    "id": m.id,
                    "source_answer": m.source_answer,
                    "kind": m.kind.value,
                    "severity": m.severity,
                    "depth_detected": m.depth_detected,
                    "resolved": m.resolved,
                }
                for m in self.misconceptions
            ],
            "contradictions": [
                {
                    "id": c.id,
                    "new_statement": c.new_statement,
                    "conflicting_prior_statements": list(c.conflicting_prior_statements),
                    "depth_detected": c.depth_detected,
                }
                for c in self.contradictions
            ],
            "consistency_score": self.consistency_score,
            "curriculum_path": [
                {"step": s.index, "name": s.name, "description": s.description}
                for s in self.curriculum_path
            ],
            "current_step": self.current_step,
            "scaffold_level": self.scaffold_level,
            "question_type_sequence": list(self.question_type_sequence),
            "baseline_level": self.baseline_level,
            "current_question": self.current_question,
            "synthesis_memo": self.synthesis_memo,
        }
