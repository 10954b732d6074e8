"""
Unit Tests for the keyword error classifier.
"""

import pytest

from socratix_tutor.error_classifier import KeywordErrorClassifier
from socratix_tutor.session_state import MisconceptionKind


class TestKeywordErrorClassifier:

    @pytest.fixture
    def classifier(self):
        return KeywordErrorClassifier()

    def test_self_correction_is_calculation(self, classifier):
        assert classifier.classify("I forgot to carry the one") == MisconceptionKind.CALCULATION
        assert classifier.classify("I Miscalculated the area") == MisconceptionKind.CALCULATION

    def test_contrast_is_logic(self, classifier):
        """Both 'but' and 'instead' are needed."""
        text = "I thought it was heat, but it is light instead"
        assert classifier.classify(text) == MisconceptionKind.LOGIC

    def test_but_alone_is_fundamental(self, classifier):
        assert classifier.classify("It grows, but slowly") == MisconceptionKind.FUNDAMENTAL

    def test_self_correction_wins_over_contrast(self, classifier):
        text = "I forgot the sign but used addition instead"
        assert classifier.classify(text) == MisconceptionKind.CALCULATION

    def test_default_is_fundamental(self, classifier):
        assert classifier.classify("Plants eat soil") == MisconceptionKind.FUNDAMENTAL
        assert classifier.classify("") == MisconceptionKind.FUNDAMENTAL
