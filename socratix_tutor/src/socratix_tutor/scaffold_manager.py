"""
Scaffold Level Management

Three-level hint escalation per question:
    1 = nudge, 2 = hint, 3 = partial_explanation
The level starts at 0 for each new question and never exceeds 3.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ScaffoldResponse:
    """Scaffold returned to the learner."""
    level: int
    level_name: Optional[str]
    message: str
    max_reached: bool = False


class ScaffoldManager:

    LEVEL_NAMES = {
        1: "nudge",
        2: "hint",
        3: "partial_explanation",
    }
    MAX_LEVEL = 3

    MESSAGES = {
        1: "Take another look at the question. What is it really asking you to consider?",
        2: "Think about the key terms in the question and how they relate to what you already said.",
        3: "Try breaking the problem into smaller parts and explain the first part in your own words.",
    }
    MAX_REACHED_MESSAGE = "Maximum scaffolding reached. Try answering in your own words, even if you're unsure."

    def can_escalate(self, state) -> bool:
        return state.scaffold_level < self.MAX_LEVEL

    def next_level_name(self, state) -> Optional[str]:
        """Name of the level the next request would produce."""
        if not self.can_escalate(state):
            return None
        return self.LEVEL_NAMES[state.scaffold_level + 1]

    def request(self, state, current_question: Optional[str] = None) -> ScaffoldResponse:
        """
        Escalate one level for the current question.

        Args:
            state: SessionState object
            current_question: Question text to anchor the message to

        Returns:
            ScaffoldResponse; at the ceiling the level stays put and
            max_reached is set
        """
        if not self.can_escalate(state):
            return ScaffoldResponse(
                level=state.scaffold_level,
                level_name=self.LEVEL_NAMES[self.MAX_LEVEL],
                message=self.MAX_REACHED_MESSAGE,
                max_reached=True,
            )

        state.scaffold_level += 1
        level = state.scaffold_level
        message = self.MESSAGES[level]
        if current_question:
            message = f"{message}\n\nQuestion: {current_question}"

        return ScaffoldResponse(level=level, level_name=self.LEVEL_NAMES[level], message=message)

    def reset(self, state):
        """New question node: back to no scaffold."""
        state.scaffold_level = 0
