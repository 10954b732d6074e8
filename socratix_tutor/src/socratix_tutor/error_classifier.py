"""
Error Classification

Maps a free-text answer to a misconception kind using keyword heuristics.
This is a coarse proxy for real misconception detection: most answers
fall through to FUNDAMENTAL. Swap in another ErrorClassifier to change it.
"""

from socratix_tutor.session_state import MisconceptionKind


class ErrorClassifier:
    """Strategy interface for misconception classification."""

    def classify(self, answer_text: str) -> MisconceptionKind:
        raise NotImplementedError


class KeywordErrorClassifier(ErrorClassifier):
    """
    Keyword classifier.

    - Self-correction markers ("forgot", "miscalculated") -> CALCULATION
    - Contrast construction ("but" ... "instead") -> LOGIC
    - Anything else -> FUNDAMENTAL
    """

    SELF_CORRECTION_MARKERS = ["forgot", "miscalculated"]
    CONTRAST_MARKERS = ("but", "instead")

    def classify(self, answer_text: str) -> MisconceptionKind:
        text = (answer_text or "").lower()

        if any(marker in text for marker in self.SELF_CORRECTION_MARKERS):
            return MisconceptionKind.CALCULATION

        if all(marker in text for marker in self.CONTRAST_MARKERS):
            return MisconceptionKind.LOGIC

        return MisconceptionKind.FUNDAMENTAL
