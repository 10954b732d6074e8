"""
Assertion Ledger

Records high-confidence user statements as proven facts. Append-only.
"""

import uuid
from typing import Dict, Optional

from socratix_tutor.session_state import Assertion


class AssertionLedger:

    CONFIDENCE_THRESHOLD = 70  # strict: confidence must exceed this
    HIGH_CONFIDENCE = 85
    FOUNDATIONAL_MAX_STEP = 1

    def record(self, state, statement: str, source_answer_id: str, confidence: int) -> Optional[Assertion]:
        """
        Record a statement when confidence exceeds the threshold.

        Args:
            state: SessionState object
            statement: The learner's statement
            source_answer_id: Id of the answer it came from
            confidence: Self-reported confidence 0-100

        Returns:
            The new Assertion, or None when confidence is too low
        """
        if confidence <= self.CONFIDENCE_THRESHOLD:
            return None

        assertion = Assertion(
            id=f"assertion-{uuid.uuid4().hex[:8]}",
            statement=statement,
            source_answer_id=source_answer_id,
            confidence=confidence,
            foundational=state.current_step <= self.FOUNDATIONAL_MAX_STEP,
        )
        state.assertions.append(assertion)
        return assertion

    def summary(self, state) -> Dict[str, int]:
        return {
            "total": len(state.assertions),
            "high_confidence": sum(1 for a in state.assertions if a.confidence > self.HIGH_CONFIDENCE),
            "foundational": sum(1 for a in state.assertions if a.foundational),
        }
