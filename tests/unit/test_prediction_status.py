"""
Unit tests for prediction status classification and transitions.
"""

import pytest

from uniguide.domain.enums import PredictionResultStatus
from uniguide.domain.prediction_status import can_transition, classify_tier_status


class TestClassifyTierStatus:
    """COMPLETED iff both tiers produced results, PARTIAL iff exactly one."""

    @pytest.mark.parametrize(
        "l1, l2, expected",
        [
            ([{"x": 1}], [{"y": 2}], PredictionResultStatus.COMPLETED),
            ([{"x": 1}], [], PredictionResultStatus.PARTIAL),
            ([], [{"y": 2}], PredictionResultStatus.PARTIAL),
            ([], [], PredictionResultStatus.FAILED),
            (None, None, PredictionResultStatus.FAILED),
            (None, [{"y": 2}], PredictionResultStatus.PARTIAL),
        ],
    )
    def test_classification(self, l1, l2, expected):
        assert classify_tier_status(l1, l2) == expected


class TestTransitions:
    """PROCESSING is the only non-terminal status."""

    @pytest.mark.parametrize(
        "requested",
        [
            PredictionResultStatus.COMPLETED,
            PredictionResultStatus.PARTIAL,
            PredictionResultStatus.FAILED,
        ],
    )
    def test_processing_moves_to_any_terminal(self, requested):
        assert can_transition(PredictionResultStatus.PROCESSING, requested)

    def test_processing_to_processing_is_rejected(self):
        assert not can_transition(PredictionResultStatus.PROCESSING, PredictionResultStatus.PROCESSING)

    @pytest.mark.parametrize(
        "current",
        [
            PredictionResultStatus.COMPLETED,
            PredictionResultStatus.PARTIAL,
            PredictionResultStatus.FAILED,
        ],
    )
    def test_terminal_never_moves(self, current):
        for requested in PredictionResultStatus:
            assert not can_transition(current, requested)

    def test_is_terminal(self):
        assert not PredictionResultStatus.PROCESSING.is_terminal
        assert PredictionResultStatus.FAILED.is_terminal
