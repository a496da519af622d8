"""
Tier 1 (L1) prediction orchestrator

Coarse ranking by major group. One payload per (award variant, major group):
the base payload carries the student's priority flags, public/private
preference, tuition budget and province; award variants carry the subjects of
first, second and third prize national excellent student awards.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from uniguide.config.settings import settings
from uniguide.domain.enums import NATIONAL_EXCELLENT_TO_HSG, Rank, major_group_code
from uniguide.domain.prediction_models import L1PredictRequest, L1PredictResult
from uniguide.domain.student_profile import StudentProfile
from uniguide.infrastructure.exceptions import InvalidInputError
from uniguide.infrastructure.services.batching import BatchPolicy, TierBatchExecutor
from uniguide.infrastructure.services.prediction_client import PredictionClient

logger = logging.getLogger(__name__)

AWARD_FIELDS: Dict[Rank, str] = {
    Rank.FIRST: "hsg_1",
    Rank.SECOND: "hsg_2",
    Rank.THIRD: "hsg_3",
}


class TierOnePredictionService:
    """Builds L1 payloads for a profile and runs them through the batch executor."""

    def __init__(
        self,
        client: PredictionClient,
        policy: Optional[BatchPolicy] = None,
        max_chunk_size: Optional[int] = None,
    ):
        self._client = client
        self._executor: TierBatchExecutor[L1PredictRequest, L1PredictResult] = TierBatchExecutor(
            "L1",
            single_call=client.predict_l1,
            batch_call=client.predict_l1_batch,
            policy=policy or BatchPolicy.from_settings(),
            max_chunk_size=max_chunk_size or settings.prediction_l1_max_chunk_size,
        )

    @staticmethod
    def award_variants(profile: StudentProfile) -> List[Dict[str, object]]:
        """
        hsg_1/2/3 assignments, one per qualifying award, or a single all-zero set.

        FIRST awards come before SECOND before THIRD; combine_results keeps the
        first-seen entry on a tied score.
        """
        qualifying = sorted(
            (award for award in profile.awards if award.level in AWARD_FIELDS),
            key=lambda award: AWARD_FIELDS[award.level],
        )
        variants = []
        for award in qualifying:
            variant: Dict[str, object] = {"hsg_1": 0, "hsg_2": 0, "hsg_3": 0}
            variant[AWARD_FIELDS[award.level]] = NATIONAL_EXCELLENT_TO_HSG[award.category].value
            variants.append(variant)
        return variants or [{"hsg_1": 0, "hsg_2": 0, "hsg_3": 0}]

    def build_inputs(self, profile: StudentProfile) -> List[L1PredictRequest]:
        base = {
            **profile.special_case_flags(),
            "cong_lap": profile.is_public_preference,
            "hoc_phi": profile.tuition_budget,
            "tinh_tp": profile.province,
        }
        major_codes = [
            code for code in (major_group_code(name) for name in profile.majors)
            if code is not None
        ]
        return [
            L1PredictRequest(**base, **variant, nhom_nganh=code)
            for variant in self.award_variants(profile)
            for code in major_codes
        ]

    async def predict(self, profile: StudentProfile) -> List[L1PredictResult]:
        """Run L1 for the profile; failed chunks simply contribute nothing."""
        inputs = self.build_inputs(profile)
        if not inputs:
            raise InvalidInputError(
                f"No L1 inputs could be built for student {profile.student_id}",
                tier="L1",
                field="majors",
            )

        groups: Dict[int, List[L1PredictRequest]] = defaultdict(list)
        for payload in inputs:
            groups[payload.nhom_nganh].append(payload)

        raw_results = await self._executor.run(groups)
        combined = self.combine_results(raw_results)
        logger.info(
            f"[L1] Student {profile.student_id}: {len(inputs)} input(s) -> "
            f"{sum(len(r.ma_xet_tuyen) for r in combined)} admission code(s)"
        )
        return combined

    @staticmethod
    def combine_results(results: List[L1PredictResult]) -> List[L1PredictResult]:
        """
        Keep the highest score per admission code, regrouped by priority type.

        Only a strictly greater score replaces an earlier one, so ties keep the
        first-seen entry.
        """
        best: Dict[str, Tuple[str, float]] = {}
        for result in results:
            for code, score in result.ma_xet_tuyen.items():
                current = best.get(code)
                if current is None or score > current[1]:
                    best[code] = (result.loai_uu_tien, score)

        regrouped: Dict[str, Dict[str, float]] = {}
        for code, (priority_type, score) in best.items():
            regrouped.setdefault(priority_type, {})[code] = score

        return [
            L1PredictResult(loai_uu_tien=priority_type, ma_xet_tuyen=codes)
            for priority_type, codes in regrouped.items()
        ]
