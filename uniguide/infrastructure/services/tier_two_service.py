"""
Tier 2 (L2) prediction orchestrator

Refined ranking per admission code. Every exam scenario the student supports
is crossed with every major group and, when the student holds language
certificates, with every certificate.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from uniguide.config.settings import settings
from uniguide.domain.enums import RATING_RANK, ExamCategory, ExamType, major_group_code
from uniguide.domain.exam_scenarios import collect_exam_scenarios
from uniguide.domain.prediction_models import L2PredictRequest, L2PredictResult
from uniguide.domain.student_profile import StudentProfile
from uniguide.infrastructure.exceptions import InvalidInputError
from uniguide.infrastructure.services.batching import BatchPolicy, TierBatchExecutor
from uniguide.infrastructure.services.prediction_client import PredictionClient

logger = logging.getLogger(__name__)

NO_CERTIFICATE = ("0", "0")


class TierTwoPredictionService:
    """Builds L2 payloads for a profile and runs them through the batch executor."""

    def __init__(
        self,
        client: PredictionClient,
        policy: Optional[BatchPolicy] = None,
        max_chunk_size: Optional[int] = None,
    ):
        self._client = client
        self._executor: TierBatchExecutor[L2PredictRequest, L2PredictResult] = TierBatchExecutor(
            "L2",
            single_call=client.predict_l2,
            batch_call=client.predict_l2_batch,
            policy=policy or BatchPolicy.from_settings(),
            max_chunk_size=max_chunk_size or settings.prediction_l2_max_chunk_size,
        )

    @staticmethod
    def base_fields(profile: StudentProfile) -> Dict[str, object]:
        """Conduct and academic ranks for grades 10-12 plus preferences."""
        fields: Dict[str, object] = {
            "cong_lap": profile.is_public_preference,
            "hoc_phi": profile.tuition_budget,
            "tinh_tp": profile.province,
        }
        for grade in (10, 11, 12):
            conduct = profile.conduct_for(grade)
            if conduct is None:
                raise InvalidInputError(
                    f"Missing conduct for grade {grade}", tier="L2", field=f"hk{grade}"
                )
            performance = profile.academic_performance_for(grade)
            if performance is None:
                raise InvalidInputError(
                    f"Missing academic performance for grade {grade}", tier="L2", field=f"hl{grade}"
                )
            fields[f"hk{grade}"] = RATING_RANK[conduct.value]
            fields[f"hl{grade}"] = RATING_RANK[performance.value]
        return fields

    @staticmethod
    def certificate_variants(profile: StudentProfile) -> List[Tuple[str, str]]:
        """(ten_ccta, diem_ccta) pairs: JLPT by level, others by CEFR."""
        variants: List[Tuple[str, str]] = []
        for cert in profile.certifications_in(ExamCategory.CCNN):
            if cert.exam_type == ExamType.JLPT and cert.level:
                variants.append(("JLPT", cert.level))
            elif cert.cefr:
                variants.append(("CEFR", cert.cefr))
        return variants or [NO_CERTIFICATE]

    def build_inputs(self, profile: StudentProfile) -> List[L2PredictRequest]:
        base = self.base_fields(profile)
        scenarios = collect_exam_scenarios(profile)
        major_codes = [
            code for code in (major_group_code(name) for name in profile.majors)
            if code is not None
        ]
        inputs = [
            L2PredictRequest(
                **base,
                diem_chuan=scenario.diem_chuan,
                to_hop_mon=scenario.to_hop_mon,
                ten_ccta=cert_name,
                diem_ccta=cert_score,
                nhom_nganh=code,
            )
            for scenario in scenarios
            for cert_name, cert_score in self.certificate_variants(profile)
            for code in major_codes
        ]
        return sorted(inputs, key=lambda payload: payload.to_hop_mon)

    async def predict(self, profile: StudentProfile) -> List[L2PredictResult]:
        """Run L2 for the profile; failed chunks simply contribute nothing."""
        inputs = self.build_inputs(profile)
        if not inputs:
            raise InvalidInputError(
                f"No L2 inputs could be built for student {profile.student_id}",
                tier="L2",
            )

        groups: Dict[str, List[L2PredictRequest]] = defaultdict(list)
        for payload in inputs:
            groups[payload.to_hop_mon].append(payload)

        raw_results = await self._executor.run(groups)
        deduped = self.deduplicate(raw_results)
        logger.info(
            f"[L2] Student {profile.student_id}: {len(inputs)} input(s) -> "
            f"{len(deduped)} admission code(s)"
        )
        return deduped

    @staticmethod
    def deduplicate(results: List[L2PredictResult]) -> List[L2PredictResult]:
        """One result per admission code, the highest score; ties keep the first seen."""
        best: Dict[str, L2PredictResult] = {}
        for result in results:
            current = best.get(result.ma_xet_tuyen)
            if current is None or result.score > current.score:
                best[result.ma_xet_tuyen] = result
        return list(best.values())
