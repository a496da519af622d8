"""
Prediction result status rules.

PROCESSING -> COMPLETED | PARTIAL | FAILED, and terminal states never move.
"""

from typing import Any, Optional, Sequence

from uniguide.domain.enums import PredictionResultStatus


def classify_tier_status(
    l1_results: Optional[Sequence[Any]],
    l2_results: Optional[Sequence[Any]],
) -> PredictionResultStatus:
    """
    Terminal status implied by the L1 and L2 outcomes.

    COMPLETED when both tiers produced results, PARTIAL when exactly one did,
    FAILED when neither did.
    """
    produced = sum(1 for results in (l1_results, l2_results) if results)
    if produced == 2:
        return PredictionResultStatus.COMPLETED
    if produced == 1:
        return PredictionResultStatus.PARTIAL
    return PredictionResultStatus.FAILED


def can_transition(
    current: PredictionResultStatus,
    requested: PredictionResultStatus,
) -> bool:
    return current == PredictionResultStatus.PROCESSING and requested.is_terminal
