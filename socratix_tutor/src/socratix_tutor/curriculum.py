"""
Curriculum Gatekeeping

Linear 6-step progression with prerequisite checks and a
regression-on-fundamental-error policy.

Steps: Foundation -> Building Blocks -> Application -> Edge Cases
       -> Synthesis -> Mastery
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from socratix_tutor.session_state import CurriculumStep, SessionPhase

logger = logging.getLogger(__name__)


CURRICULUM_STEPS = [
    ("Foundation", "Establish the core definitions and intuitions"),
    ("Building Blocks", "Identify the components and how they relate"),
    ("Application", "Apply the concept to concrete situations"),
    ("Edge Cases", "Probe boundary conditions and exceptions"),
    ("Synthesis", "Connect the pieces into a coherent model"),
    ("Mastery", "Explain, defend and extend the concept independently"),
]


def build_curriculum_path() -> List[CurriculumStep]:
    """Fresh copy of the fixed curriculum path."""
    return [
        CurriculumStep(index=i, name=name, description=description)
        for i, (name, description) in enumerate(CURRICULUM_STEPS)
    ]


@dataclass
class AdvanceResult:
    """Result of an advance attempt."""
    advanced: bool
    current_step: int
    reason: Optional[str] = None


@dataclass
class RegressionResult:
    """Result of a regression after a fundamental misconception."""
    previous_step: int
    target_step: int
    directive: str


Condition = Callable[[object], bool]


class CurriculumGatekeeper:
    """
    Controls movement along the curriculum path.

    Gatekeeper conditions are optional per-step predicates over the session
    state. With none registered every step is open.
    """

    REGRESSION_DISTANCE = 2

    def __init__(self):
        self._conditions: Dict[int, List[Condition]] = {}

    def register_condition(self, step_index: int, condition: Condition):
        """Require condition(state) to hold before entering step_index."""
        self._conditions.setdefault(step_index, []).append(condition)

    def can_advance(self, state, target_index: int) -> bool:
        if target_index == 0:
            return True
        conditions = self._conditions.get(target_index)
        if not conditions:
            return True
        return all(condition(state) for condition in conditions)

    def advance(self, state) -> AdvanceResult:
        """
        Move to the next step if its prerequisites are met.

        Rejection is reported, not raised; state is untouched on rejection.

        Raises:
            ValueError: if the session is already past the progressive phase
        """
        target = state.current_step + 1
        if target >= len(state.curriculum_path):
            return AdvanceResult(advanced=False, current_step=state.current_step, reason="already at final step")

        if not self.can_advance(state, target):
            return AdvanceResult(advanced=False, current_step=state.current_step, reason="prerequisites not met")

        state.transition_to(SessionPhase.PROGRESSIVE)
        state.current_step = target
        logger.info(f"📈 [Curriculum] Advanced to step {target} ({state.curriculum_path[target].name})")
        return AdvanceResult(advanced=True, current_step=target)

    def regress_on_fundamental_error(self, state) -> RegressionResult:
        """Step back two stages (floored at 0) without changing phase."""
        previous = state.current_step
        target = max(0, previous - self.REGRESSION_DISTANCE)
        state.current_step = target
        step_name = state.curriculum_path[target].name if state.curriculum_path else "Foundation"
        directive = (
            f"A fundamental misconception was detected. Return to '{step_name}' and "
            f"re-ground the learner in its core ideas before moving on."
        )
        logger.info(f"📉 [Curriculum] Regressed from step {previous} to {target}")
        return RegressionResult(previous_step=previous, target_step=target, directive=directive)

    def knowledge_gap_map(self, state) -> List[Dict]:
        """
        Per-step mastery map.

        Steps before the cursor are mastered (100), the current step carries
        the consistency score, later steps are locked (0).
        """
        gap_map = []
        for step in state.curriculum_path:
            if step.index < state.current_step:
                status, confidence = "mastered", 100
            elif step.index == state.current_step:
                status, confidence = "current", state.consistency_score
            else:
                status, confidence = "locked", 0
            gap_map.append({"step": step.name, "status": status, "confidence": confidence})
        return gap_map

    def progress_percentage(self, state) -> float:
        if not state.curriculum_path:
            return 0.0
        return round(state.current_step / len(state.curriculum_path) * 100, 1)
