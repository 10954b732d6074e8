"""
Consistency Scoring

Bounded accumulator that reacts to contradiction/resolution events.
"""


class ConsistencyScorer:
    """
    Keeps session.consistency_score within [MIN_SCORE, MAX_SCORE].

    - resolved (no contradiction this turn) -> +10
    - contradiction found -> -5
    """

    MIN_SCORE = 0
    MAX_SCORE = 100
    RESOLVED_GAIN = 10
    CONTRADICTION_PENALTY = 5

    def update(self, state, resolved: bool) -> int:
        """
        Apply one turn's outcome to the session score.

        Args:
            state: SessionState object
            resolved: True when no contradiction was detected this turn

        Returns:
            The new score
        """
        if resolved:
            state.consistency_score = min(self.MAX_SCORE, state.consistency_score + self.RESOLVED_GAIN)
        else:
            state.consistency_score = max(self.MIN_SCORE, state.consistency_score - self.CONTRADICTION_PENALTY)
        return state.consistency_score
