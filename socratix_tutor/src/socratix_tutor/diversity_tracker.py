"""
Question Diversity Tracking

Sliding-window repetition detector over the question types asked so far.
Advisory only: a warning annotates the next prompt, it never blocks.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class DiversityCheck:
    """Outcome of observing one question type."""
    status: str  # "normal" or "warning"
    reason: Optional[str] = None

    @property
    def is_warning(self) -> bool:
        return self.status == "warning"


class DiversityTracker:
    """Warns when the recent question types are all the same."""

    WINDOW = 5
    MIN_OBSERVATIONS = 3

    def observe(self, state, question_type: str) -> DiversityCheck:
        """
        Record a question type and check the recent window.

        Args:
            state: SessionState object (question_type_sequence is appended)
            question_type: Type tag of the question about to be asked

        Returns:
            DiversityCheck with status "normal" or "warning"
        """
        state.question_type_sequence.append(question_type)
        sequence = state.question_type_sequence

        if len(sequence) < self.MIN_OBSERVATIONS:
            return DiversityCheck(status="normal")

        recent = sequence[-self.WINDOW:]
        if len(set(recent)) == 1:
            return DiversityCheck(
                status="warning",
                reason=f"Repetitive questioning: the last {len(recent)} questions were all '{question_type}'",
            )

        return DiversityCheck(status="normal")
