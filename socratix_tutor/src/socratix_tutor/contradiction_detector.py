"""
Contradiction Detection

Flags whether a new statement negates content in earlier answers.

The default heuristic is deliberately permissive: a negation word in the new
statement that the prior statement lacks, plus any single shared word,
counts as a conflict. Tokens are whitespace-split and lowercased.
"""

from dataclasses import dataclass, field
from typing import List, Set


@dataclass
class ContradictionResult:
    """Result of a contradiction check."""
    detected: bool
    conflicting: List[str] = field(default_factory=list)


class ContradictionDetector:
    """Strategy interface for contradiction detection."""

    def detect(self, new_statement: str, prior_statements: List[str]) -> ContradictionResult:
        raise NotImplementedError


class NegationOverlapDetector(ContradictionDetector):
    """Negation marker + lexical overlap heuristic."""

    NEGATION_MARKERS = {"not", "no", "never"}

    @staticmethod
    def _tokens(text: str) -> Set[str]:
        return set(text.lower().split())

    def detect(self, new_statement: str, prior_statements: List[str]) -> ContradictionResult:
        """
        Check a new statement against prior ones.

        Args:
            new_statement: The latest answer
            prior_statements: Earlier answers, oldest first

        Returns:
            ContradictionResult with the conflicting prior statements
        """
        new_tokens = self._tokens(new_statement)
        new_negations = new_tokens & self.NEGATION_MARKERS
        if not new_negations:
            return ContradictionResult(detected=False)

        conflicting = []
        for prior in prior_statements:
            prior_tokens = self._tokens(prior)
            # Negation must be absent from the prior statement
            if not (new_negations - prior_tokens):
                continue
            if new_tokens & prior_tokens:
                conflicting.append(prior)

        return ContradictionResult(detected=bool(conflicting), conflicting=conflicting)
