"""
Socratic Session Orchestrator

Owns the session-phase state machine
(calibration -> progressive -> synthesis -> conclusion) and dispatches each
answer through the scoring and progression components in a fixed order
before asking the LLM for the next question.

Every operation runs under the session's lock, so at most one LLM call is
outstanding per session. A failed answer submission is rolled back: the
session looks exactly as it did before the call.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, asdict
from typing import Dict, Optional, List, Any, AsyncIterator

from socratix_tutor.assertion_ledger import AssertionLedger
from socratix_tutor.calibration import CalibrationScorer, calibration_questions_for
from socratix_tutor.consistency_scorer import ConsistencyScorer
from socratix_tutor.contradiction_detector import ContradictionDetector, NegationOverlapDetector
from socratix_tutor.curriculum import CurriculumGatekeeper, AdvanceResult, RegressionResult
from socratix_tutor.diversity_tracker import DiversityTracker
from socratix_tutor.error_classifier import ErrorClassifier, KeywordErrorClassifier
from socratix_tutor.errors import (
    InvalidInputError,
    InvalidPhaseError,
    MissingAnswerError,
    NoActiveSessionError,
)
from socratix_tutor.llm_client import LLMService
from socratix_tutor.prompts import (
    SOCRATIC_SYSTEM_PROMPT,
    SCAFFOLD_DIRECTIVES,
    select_question_type,
    build_initial_question_prompt,
    build_next_question_system_prompt,
    build_next_question_prompt,
    build_synthesis_prompt,
    build_final_question_prompt,
    build_confused_questions_prompt,
)
from socratix_tutor.scaffold_manager import ScaffoldManager, ScaffoldResponse
from socratix_tutor.session_manager import SessionManager
from socratix_tutor.session_state import (
    SessionState,
    SessionPhase,
    MisconceptionKind,
    Misconception,
    Contradiction,
    MISCONCEPTION_SEVERITY,
)

logger = logging.getLogger(__name__)


@dataclass
class AnswerOutcome:
    """Everything the boundary reports after an answer is processed."""
    question: str
    depth: int
    question_type: str
    confidence: int
    consistency_score: int
    assertion_count: int
    contradiction_detected: bool
    loop_warning: Optional[str]
    misconception_kind: Optional[str]
    regression: Optional[RegressionResult]
    advanced: bool
    ready_for_synthesis: bool
    phase: str
    current_step: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SocraticOrchestrator:
    """
    Session state machine.

    Heuristic components are injected so a model-based classifier or
    detector can replace the keyword ones without touching this class.
    """

    # Synthesis readiness
    READY_MIN_DEPTH = 5
    READY_MIN_SCORE = 60
    READY_MIN_ASSERTIONS = 2

    # Misconception logging: confidence > 85 and depth > 2
    MISCONCEPTION_CONFIDENCE = 85
    MISCONCEPTION_MIN_DEPTH = 2

    # Low confidence asks the LLM to scaffold
    SCAFFOLD_CONFIDENCE = 40

    ANSWERABLE_PHASES = (SessionPhase.CALIBRATION, SessionPhase.PROGRESSIVE)

    def __init__(
        self,
        llm: LLMService,
        session_manager: Optional[SessionManager] = None,
        error_classifier: Optional[ErrorClassifier] = None,
        contradiction_detector: Optional[ContradictionDetector] = None,
        gatekeeper: Optional[CurriculumGatekeeper] = None,
    ):
        self.llm = llm
        self.sessions = session_manager or SessionManager()
        self.error_classifier = error_classifier or KeywordErrorClassifier()
        self.contradiction_detector = contradiction_detector or NegationOverlapDetector()
        self.gatekeeper = gatekeeper or CurriculumGatekeeper()
        self.scorer = ConsistencyScorer()
        self.diversity = DiversityTracker()
        self.scaffold = ScaffoldManager()
        self.ledger = AssertionLedger()
        self.calibration = CalibrationScorer(llm)

    # ==================== Helpers ====================

    async def _existing(self, session_id: str) -> SessionState:
        """Stored session, never created on lookup."""
        state = await self.sessions.get_session(session_id)
        if state is None:
            raise NoActiveSessionError()
        return state

    @asynccontextmanager
    async def _locked(self, session_id: str, create: bool = False) -> AsyncIterator[SessionState]:
        """
        Hold the session lock for one operation.

        Only init and reset may create a session; unknown ids are rejected
        before a lock is allocated for them.
        """
        if not create:
            await self._existing(session_id)
        async with self.sessions.lock_for(session_id):
            if create:
                state = await self.sessions.get_or_create_session(session_id)
            else:
                state = await self._existing(session_id)
            yield state
            await self.sessions.save_session(state)

    @staticmethod
    def _require_topic(state: SessionState):
        if not state.has_topic:
            raise NoActiveSessionError()

    @staticmethod
    def _require_phase(state: SessionState, allowed, action: str):
        if state.phase not in allowed:
            raise InvalidPhaseError(f"Cannot {action} during the {state.phase.value} phase")

    def _reinitialize(self, state: SessionState, topic: Optional[str]):
        fresh = self.sessions.new_session(state.session_id)
        if topic:
            fresh.topic = topic
            fresh.calibration_questions = calibration_questions_for(topic)
        state.restore(fresh)

    def _ask_new_question(self, state: SessionState, question: str):
        """Commit a new question node."""
        state.current_question = question
        state.add_turn("assistant", question)
        self.scaffold.reset(state)

    def is_ready_for_synthesis(self, state: SessionState) -> bool:
        return (
            state.question_depth >= self.READY_MIN_DEPTH
            and state.consistency_score > self.READY_MIN_SCORE
            and state.assertion_count > self.READY_MIN_ASSERTIONS
        )

    # ==================== Session lifecycle ====================

    async def init(self, session_id: str, topic: str) -> Dict[str, Any]:
        """Start a new session on a topic, clearing any prior state."""
        if not topic or not topic.strip():
            raise InvalidInputError("Topic is required")

        async with self._locked(session_id, create=True) as state:
            self._reinitialize(state, topic.strip())
            logger.info(f"🎓 [Orchestrator] Session {session_id} initialized on '{state.topic}'")
            return {
                "message": "Session initialized",
                "state": state.to_dict(),
                "calibration_questions": list(state.calibration_questions),
                "session_phase": state.phase.value,
            }

    async def reset(self, session_id: str, topic: Optional[str] = None) -> Dict[str, Any]:
        """
        Back to the empty-topic state, or straight into a new topic.

        Only a reset that supplies a topic may start an unknown session.
        """
        topic = topic.strip() if topic and topic.strip() else None
        async with self._locked(session_id, create=topic is not None) as state:
            self._reinitialize(state, topic)
            logger.info(f"🔄 [Orchestrator] Session {session_id} reset")
            return {"message": "Session reset successfully", "state": state.to_dict()}

    async def calibrate(self, session_id: str, responses: List[str]) -> Dict[str, Any]:
        """
        Score calibration responses, set the baseline level and ask the
        first question. Moves the session to the progressive phase.
        """
        if not responses or not any(r and r.strip() for r in responses):
            raise InvalidInputError("Calibration responses are required")

        async with self._locked(session_id) as state:
            self._require_topic(state)
            self._require_phase(state, (SessionPhase.CALIBRATION,), "calibrate")

            result = await self.calibration.calibrate(responses, state.topic)
            question = await self.llm.complete(
                SOCRATIC_SYSTEM_PROMPT,
                build_initial_question_prompt(state.topic, result.baseline_level),
            )

            state.baseline_level = result.baseline_level
            self._ask_new_question(state, question)
            state.transition_to(SessionPhase.PROGRESSIVE)
            logger.info(f"🎯 [Orchestrator] Calibrated {session_id}: {result.baseline_level} (avg={result.average:.2f})")

            return {
                "baseline_level": result.baseline_level,
                "first_question": question,
                "next_phase": SessionPhase.PROGRESSIVE.value,
                "session_phase": state.phase.value,
            }

    async def generate_initial_question(self, session_id: str) -> Dict[str, Any]:
        """Opening question without calibration."""
        async with self._locked(session_id) as state:
            self._require_topic(state)
            self._require_phase(state, self.ANSWERABLE_PHASES, "generate a question")

            question = await self.llm.complete(
                SOCRATIC_SYSTEM_PROMPT,
                build_initial_question_prompt(state.topic, state.baseline_level),
            )
            self._ask_new_question(state, question)
            return {"question": question, "depth": state.question_depth}

    # ==================== Progressive questioning ====================

    async def submit_answer(self, session_id: str, answer_text: str, confidence: int = 50) -> AnswerOutcome:
        """
        Process one answer and obtain the next question.

        Args:
            session_id: Session identifier
            answer_text: The learner's answer
            confidence: Self-reported confidence 0-100

        Returns:
            AnswerOutcome for the turn

        Raises:
            MissingAnswerError, InvalidInputError, NoActiveSessionError,
            InvalidPhaseError: preconditions, nothing mutated
            LLMServiceError: the LLM call failed, state rolled back
        """
        if answer_text is None or not answer_text.strip():
            raise MissingAnswerError()
        if isinstance(confidence, bool) or not isinstance(confidence, int) or not 0 <= confidence <= 100:
            raise InvalidInputError("Confidence must be an integer between 0 and 100")

        async with self._locked(session_id) as state:
            self._require_topic(state)
            self._require_phase(state, self.ANSWERABLE_PHASES, "submit an answer")

            snapshot = state.snapshot()
            try:
                return await self._process_answer(state, answer_text.strip(), confidence)
            except BaseException:
                # Cancellation during the LLM call must roll back too
                state.restore(snapshot)
                logger.warning(f"⚠️ [Orchestrator] Answer for {session_id} rolled back")
                raise

    async def _process_answer(self, state: SessionState, answer: str, confidence: int) -> AnswerOutcome:
        if state.phase == SessionPhase.CALIBRATION:
            state.transition_to(SessionPhase.PROGRESSIVE)

        prior_answers = list(state.user_answers)

        # 1. Record the answer
        state.user_answers.append(answer)
        state.question_depth += 1
        node = state.add_thought_node(answer)
        state.add_turn("user", answer)
        depth = state.question_depth

        # 2-3. Question type and diversity
        question_type = select_question_type(depth)
        diversity = self.diversity.observe(state, question_type)

        # 4. Contradictions against earlier answers
        contradiction = self.contradiction_detector.detect(answer, prior_answers)
        if contradiction.detected:
            state.contradictions.append(Contradiction(
                id=f"contradiction-{uuid.uuid4().hex[:8]}",
                new_statement=answer,
                conflicting_prior_statements=contradiction.conflicting,
                depth_detected=depth,
            ))
            logger.info(f"⚡ [Orchestrator] Contradiction at depth {depth} ({len(contradiction.conflicting)} prior)")

        # 5. Proven assertion
        assertion = self.ledger.record(state, answer, node.id, confidence)

        # 6. Misconception on confident answers deep in the session
        misconception_kind: Optional[MisconceptionKind] = None
        regression: Optional[RegressionResult] = None
        if confidence > self.MISCONCEPTION_CONFIDENCE and depth > self.MISCONCEPTION_MIN_DEPTH:
            misconception_kind = self.error_classifier.classify(answer)
            state.misconceptions.append(Misconception(
                id=f"misconception-{uuid.uuid4().hex[:8]}",
                source_answer=answer,
                kind=misconception_kind,
                depth_detected=depth,
                severity=MISCONCEPTION_SEVERITY[misconception_kind],
            ))
            if misconception_kind == MisconceptionKind.FUNDAMENTAL:
                regression = self.gatekeeper.regress_on_fundamental_error(state)

        # 7. Consistency, then curriculum progress on a clean proven answer
        self.scorer.update(state, resolved=not contradiction.detected)
        advanced = False
        if assertion is not None and not contradiction.detected and regression is None:
            advanced = self.gatekeeper.advance(state).advanced

        # 8. Prompt
        scaffold_directive = None
        if confidence < self.SCAFFOLD_CONFIDENCE and self.scaffold.can_escalate(state):
            scaffold_directive = SCAFFOLD_DIRECTIVES[self.scaffold.next_level_name(state)]

        user_prompt = build_next_question_prompt(
            state,
            answer,
            question_type,
            contradiction_detected=contradiction.detected,
            loop_warning=diversity.reason if diversity.is_warning else None,
            scaffold_directive=scaffold_directive,
            regression_directive=regression.directive if regression else None,
        )

        # 9. Next question, verbatim apart from trimming
        question = (await self.llm.complete(build_next_question_system_prompt(question_type), user_prompt)).strip()
        self._ask_new_question(state, question)

        # 10. Readiness is reported, never acted on here
        return AnswerOutcome(
            question=question,
            depth=depth,
            question_type=question_type,
            confidence=confidence,
            consistency_score=state.consistency_score,
            assertion_count=state.assertion_count,
            contradiction_detected=contradiction.detected,
            loop_warning=diversity.reason if diversity.is_warning else None,
            misconception_kind=misconception_kind.value if misconception_kind else None,
            regression=regression,
            advanced=advanced,
            ready_for_synthesis=self.is_ready_for_synthesis(state),
            phase=state.phase.value,
            current_step=state.current_step,
        )

    async def request_scaffold(self, session_id: str) -> ScaffoldResponse:
        async with self._locked(session_id) as state:
            self._require_topic(state)
            return self.scaffold.request(state, state.current_question)

    async def advance_step(self, session_id: str) -> AdvanceResult:
        """Explicitly move to the next curriculum step."""
        async with self._locked(session_id) as state:
            self._require_topic(state)
            self._require_phase(state, self.ANSWERABLE_PHASES, "advance the curriculum")
            return self.gatekeeper.advance(state)

    # ==================== Synthesis & conclusion ====================

    async def request_synthesis(self, session_id: str) -> Dict[str, Any]:
        """Enter the synthesis phase and ask for a synthesis memo."""
        async with self._locked(session_id) as state:
            self._require_topic(state)
            self._require_phase(
                state,
                (SessionPhase.CALIBRATION, SessionPhase.PROGRESSIVE, SessionPhase.SYNTHESIS),
                "start synthesis",
            )

            question = await self.llm.complete(SOCRATIC_SYSTEM_PROMPT, build_synthesis_prompt(state))

            state.transition_to(SessionPhase.SYNTHESIS)
            self._ask_new_question(state, question)
            logger.info(f"🧩 [Orchestrator] Session {session_id} entered synthesis")

            return {
                "phase": state.phase.value,
                "message": "Time to connect the pieces.",
                "synthesis_question": question,
                "ready_for_synthesis": self.is_ready_for_synthesis(state),
                "proven_assertions": [
                    {"id": a.id, "statement": a.statement, "confidence": a.confidence}
                    for a in state.assertions
                ],
            }

    async def evaluate_synthesis(self, session_id: str, memo: str) -> Dict[str, Any]:
        """Store the synthesis memo and report the knowledge gap map."""
        if not memo or not memo.strip():
            raise InvalidInputError("Synthesis memo is required")

        async with self._locked(session_id) as state:
            self._require_topic(state)
            self._require_phase(
                state,
                (SessionPhase.CALIBRATION, SessionPhase.PROGRESSIVE, SessionPhase.SYNTHESIS),
                "evaluate a synthesis",
            )

            gap_map = self.gatekeeper.knowledge_gap_map(state)
            open_steps = [entry["step"] for entry in gap_map if entry["status"] != "mastered"]
            final_question = await self.llm.complete(
                SOCRATIC_SYSTEM_PROMPT,
                build_final_question_prompt(state, memo.strip(), open_steps),
            )

            state.synthesis_memo = memo.strip()
            state.transition_to(SessionPhase.SYNTHESIS)
            self._ask_new_question(state, final_question)

            return {
                "phase": state.phase.value,
                "message": "Synthesis recorded. Here is how your understanding maps onto the curriculum.",
                "knowledge_gap_map": gap_map,
                "session_stats": {
                    "total_questions": state.question_depth,
                    "consistency_score": state.consistency_score,
                    "assertion_count": state.assertion_count,
                    "misconceptions_detected": len(state.misconceptions),
                    "path_progress_percentage": self.gatekeeper.progress_percentage(state),
                },
                "final_question": final_question,
            }

    async def conclude(self, session_id: str) -> Dict[str, Any]:
        """Close a session that has been through synthesis."""
        async with self._locked(session_id) as state:
            self._require_topic(state)
            self._require_phase(state, (SessionPhase.SYNTHESIS,), "conclude")

            state.transition_to(SessionPhase.CONCLUSION)
            gap_map = self.gatekeeper.knowledge_gap_map(state)
            remaining = [entry["step"] for entry in gap_map if entry["status"] != "mastered"]
            if remaining:
                next_steps = f"Next, keep working on: {', '.join(remaining)}."
            else:
                next_steps = "You've worked through every stage of the curriculum."

            logger.info(f"🏁 [Orchestrator] Session {session_id} concluded")
            return {
                "phase": state.phase.value,
                "summary": {
                    "topic": state.topic,
                    "total_questions": state.question_depth,
                    "consistency_score": state.consistency_score,
                    "assertions": state.assertion_count,
                    "misconceptions": len(state.misconceptions),
                    "synthesis_memo": state.synthesis_memo,
                    "knowledge_gap_map": gap_map,
                },
                "next_steps": next_steps,
            }

    async def generate_confused_questions(self, session_id: str, count: int = 3) -> Dict[str, Any]:
        """Questions a confused classmate might ask, for the learner to answer."""
        if count < 1:
            raise InvalidInputError("count must be at least 1")

        async with self._locked(session_id) as state:
            self._require_topic(state)
            content = await self.llm.complete(
                SOCRATIC_SYSTEM_PROMPT,
                build_confused_questions_prompt(state, count),
                max_tokens=300,
            )
            questions = [line.strip().lstrip("-*• ").strip() for line in content.splitlines()]
            questions = [q for q in questions if q][:count]
            return {
                "questions": questions,
                "count": len(questions),
                "session_context": {
                    "topic": state.topic,
                    "assertion_count": state.assertion_count,
                    "knowledge_level": state.baseline_level,
                },
            }

    # ==================== Read-only queries ====================

    async def get_state(self, session_id: str) -> Dict[str, Any]:
        state = await self._existing(session_id)
        data = state.to_dict()
        data["session_summary"] = {
            "topic": state.topic,
            "phase": state.phase.value,
            "question_depth": state.question_depth,
            "consistency_score": state.consistency_score,
            "assertion_count": state.assertion_count,
            "misconception_count": len(state.misconceptions),
            "baseline_level": state.baseline_level,
            "current_step": state.current_step,
            "total_steps": len(state.curriculum_path),
            "ready_for_synthesis": self.is_ready_for_synthesis(state),
        }
        return data

    async def get_thought_process(self, session_id: str) -> Dict[str, Any]:
        state = await self._existing(session_id)
        return {
            "nodes": [
                {"id": n.id, "text": n.text, "depth": n.depth, "timestamp": n.timestamp.isoformat()}
                for n in state.thought_nodes
            ],
            "connections": [{"from": c.source, "to": c.target} for c in state.thought_connections],
            "metadata": {
                "total_nodes": len(state.thought_nodes),
                "total_connections": len(state.thought_connections),
                "depth": state.question_depth,
            },
        }

    async def get_assertion_log(self, session_id: str) -> Dict[str, Any]:
        state = await self._existing(session_id)
        summary = self.ledger.summary(state)
        return {
            "assertions": [
                {
                    "id": a.id,
                    "statement": a.statement,
                    "source_answer_id": a.source_answer_id,
                    "source_answer": state.answer_for(a.source_answer_id),
                    "confidence": a.confidence,
                    "foundational": a.foundational,
                }
                for a in state.assertions
            ],
            "total": summary["total"],
            "high_confidence": summary["high_confidence"],
            "foundational": summary["foundational"],
        }

    async def get_misconceptions(self, session_id: str) -> Dict[str, Any]:
        state = await self._existing(session_id)
        by_type = {kind.value: 0 for kind in MisconceptionKind}
        for m in state.misconceptions:
            by_type[m.kind.value] += 1
        return {
            "misconceptions": [
                {
                    "id": m.id,
                    "type": m.kind.value,
                    "severity": m.severity,
                    "detected_at_depth": m.depth_detected,
                    "resolved": m.resolved,
                }
                for m in state.misconceptions
            ],
            "total_detected": len(state.misconceptions),
            "by_type": by_type,
        }

    async def get_knowledge_gap_map(self, session_id: str) -> Dict[str, Any]:
        state = await self._existing(session_id)
        gap_map = self.gatekeeper.knowledge_gap_map(state)
        return {
            "map": gap_map,
            "summary": {
                "areas_mastered": sum(1 for e in gap_map if e["status"] == "mastered"),
                "areas_in_progress": sum(1 for e in gap_map if e["status"] == "current"),
                "areas_locked": sum(1 for e in gap_map if e["status"] == "locked"),
            },
        }

    async def get_consistency_report(self, session_id: str) -> Dict[str, Any]:
        state = await self._existing(session_id)
        return {
            "score": state.consistency_score,
            "contradictions": len(state.contradictions),
            "resolved_turns": state.question_depth - len(state.contradictions),
            "assertions": state.assertion_count,
            "metadata": {
                "max_score": ConsistencyScorer.MAX_SCORE,
                "current_phase": state.phase.value,
            },
        }

    async def get_conversation_history(self, session_id: str) -> Dict[str, Any]:
        state = await self._existing(session_id)
        return {
            "history": state.to_dict()["conversation_history"],
            "total": len(state.conversation_history),
            "phase": state.phase.value,
        }

    async def get_knowledge_graph(self, session_id: str) -> Dict[str, Any]:
        state = await self._existing(session_id)
        statuses = {entry["step"]: entry["status"] for entry in self.gatekeeper.knowledge_gap_map(state)}
        return {
            "nodes": [
                {
                    "id": f"step-{step.index}",
                    "label": step.name,
                    "description": step.description,
                    "status": statuses[step.name],
                    "order": step.index,
                }
                for step in state.curriculum_path
            ],
            "proven_concepts": [
                {
                    "id": a.id,
                    "label": a.statement[:60] + ("..." if len(a.statement) > 60 else ""),
                    "confidence": a.confidence,
                }
                for a in state.assertions
            ],
        }
