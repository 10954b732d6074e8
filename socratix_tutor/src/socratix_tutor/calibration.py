"""
Calibration

Estimates the learner's baseline level from their answers to the
calibration questions asked at session start.

Hybrid approach for scoring responses:
1. Fast heuristic (length, confidence markers, topic vocabulary)
2. LLM self-grading for uncertain cases, when an LLM service is available

Numeric option answers ("1".."4") are averaged directly:
<= 1.5 beginner, <= 3 intermediate, otherwise advanced.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import List

from socratix_tutor.errors import LLMServiceError
from socratix_tutor.prompts import CALIBRATION_SCORING_SYSTEM_PROMPT, build_calibration_scoring_prompt

logger = logging.getLogger(__name__)


CALIBRATION_QUESTIONS = [
    "How familiar are you with the core concepts of {topic}? Describe what you already know.",
    "When learning something new, do you prefer detailed explanations, guided practice, open exploration, or challenging deep dives?",
    "In a sentence or two, how would you explain {topic} to a friend?",
]


def calibration_questions_for(topic: str) -> List[str]:
    return [q.format(topic=topic) for q in CALIBRATION_QUESTIONS]


@dataclass
class CalibrationResult:
    """Outcome of calibration."""
    baseline_level: str  # "beginner", "intermediate", "advanced"
    scores: List[float] = field(default_factory=list)
    average: float = 0.0


class CalibrationScorer:
    """
    Scores calibration responses on a scale of 0-1 and maps the
    average to a baseline level.
    """

    WEAK_INDICATORS = [
        "i think", "maybe", "not sure", "i don't know",
        "i'm not sure", "unsure", "probably", "perhaps",
        "i guess", "not really", "no idea", "never heard",
    ]
    STRONG_INDICATORS = [
        "because", "since", "for example", "specifically",
        "this means", "in other words", "essentially",
        "the key is", "important to note", "crucially",
    ]

    STRONG_THRESHOLD = 0.7
    WEAK_THRESHOLD = 0.4

    def __init__(self, llm=None):
        self.llm = llm

    async def calibrate(self, responses: List[str], topic: str) -> CalibrationResult:
        """
        Derive a baseline level from calibration responses.

        Args:
            responses: One answer per calibration question
            topic: Session topic, used as vocabulary for the heuristic

        Returns:
            CalibrationResult with the baseline level
        """
        cleaned = [r.strip() for r in responses if r and r.strip()]
        if not cleaned:
            return CalibrationResult(baseline_level="intermediate")

        if all(r.isdigit() for r in cleaned):
            values = [int(r) for r in cleaned]
            average = sum(values) / len(values)
            level = "beginner" if average <= 1.5 else "intermediate" if average <= 3 else "advanced"
            return CalibrationResult(baseline_level=level, scores=[float(v) for v in values], average=average)

        scores = [await self.score(r, topic) for r in cleaned]
        average = sum(scores) / len(scores)
        return CalibrationResult(baseline_level=self.classify(average), scores=scores, average=average)

    async def score(self, response: str, topic: str) -> float:
        heuristic_score = self._heuristic_score(response, topic)

        # Clear cases skip the LLM
        if heuristic_score < 0.3 or heuristic_score > 0.8:
            return heuristic_score
        if self.llm is None:
            return heuristic_score
        return await self._llm_score(response, topic, heuristic_score)

    def _heuristic_score(self, response: str, topic: str) -> float:
        score = 0.5
        response_lower = response.lower().strip()

        word_count = len(response.split())
        if word_count < 5:
            score -= 0.4
        elif word_count < 10:
            score -= 0.2
        elif word_count > 100:
            score += 0.3
        elif word_count > 50:
            score += 0.2

        weak_count = sum(1 for ind in self.WEAK_INDICATORS if ind in response_lower)
        strong_count = sum(1 for ind in self.STRONG_INDICATORS if ind in response_lower)
        score += (strong_count * 0.1) - (weak_count * 0.15)

        # Topic vocabulary indicates familiarity
        topic_terms = {t for t in re.findall(r"[a-z]+", (topic or "").lower()) if len(t) > 3}
        term_count = sum(1 for term in topic_terms if term in response_lower)
        score += min(term_count * 0.05, 0.2)

        if response.count("?") > 1:
            score -= 0.1

        return max(0.0, min(1.0, score))

    async def _llm_score(self, response: str, topic: str, fallback: float) -> float:
        try:
            content = await self.llm.complete(
                CALIBRATION_SCORING_SYSTEM_PROMPT,
                build_calibration_scoring_prompt(topic, response),
                max_tokens=100,
                temperature=0.3,
            )
        except LLMServiceError as e:
            logger.warning(f"⚠️ [Calibration] LLM scoring failed: {e}, using heuristic")
            return fallback

        json_match = re.search(r'\{[^}]+\}', content, re.DOTALL)
        try:
            result = json.loads(json_match.group(0) if json_match else content)
            return max(0.0, min(1.0, float(result.get("score", fallback))))
        except (json.JSONDecodeError, ValueError, TypeError, AttributeError):
            logger.warning("⚠️ [Calibration] Unparseable LLM score, using heuristic")
            return fallback

    def classify(self, score: float) -> str:
        if score > self.STRONG_THRESHOLD:
            return "advanced"
        elif score < self.WEAK_THRESHOLD:
            return "beginner"
        return "intermediate"
