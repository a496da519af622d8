"""
Tier 3 (L3) prediction orchestrator

Program-specific scoring. Payloads combine the student's transcript, national
exam, awards, certificates, aptitude test and talent scores, all translated
into the L3 vocabulary. One payload is built per combination of major group,
English certificate, international certificate and VNUHCM aptitude result.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from uniguide.config.settings import settings
from uniguide.domain.enums import ExamCategory, ExamType, major_group_code
from uniguide.domain.exam_scenarios import ccqt_score
from uniguide.domain.prediction_models import (
    AwardQG,
    DgnlScore,
    InterCer,
    L3PredictRequest,
    L3PredictResult,
    NationalExamL3,
    SubjectScoreL3,
    TranscriptRecord,
)
from uniguide.domain.student_profile import StudentProfile
from uniguide.domain.subjects import VietnameseSubject
from uniguide.domain.tier_three_vocabulary import (
    award_level,
    award_subject_code,
    inter_cer_name,
    national_subject_code,
    talent_subject_key,
)
from uniguide.infrastructure.exceptions import InvalidInputError
from uniguide.infrastructure.services.batching import BatchPolicy, TierBatchExecutor
from uniguide.infrastructure.services.prediction_client import PredictionClient

logger = logging.getLogger(__name__)


class TierThreePredictionService:
    """Builds L3 payloads for a profile and runs them through the batch executor."""

    def __init__(
        self,
        client: PredictionClient,
        policy: Optional[BatchPolicy] = None,
        max_chunk_size: Optional[int] = None,
    ):
        self._client = client
        self._executor: TierBatchExecutor[L3PredictRequest, L3PredictResult] = TierBatchExecutor(
            "L3",
            single_call=self._predict_single,
            batch_call=client.predict_l3_batch,
            policy=policy or BatchPolicy.from_settings(),
            max_chunk_size=max_chunk_size or settings.prediction_l3_max_chunk_size,
            complexity="high",
        )

    async def _predict_single(self, payload: L3PredictRequest) -> List[L3PredictResult]:
        return [await self._client.predict_l3(payload)]

    # =========================================================================
    # Payload parts
    # =========================================================================

    @staticmethod
    def national_exam(profile: StudentProfile) -> Optional[NationalExamL3]:
        """Math, literature and two electives from a complete national exam."""
        if not profile.has_valid_national_exam():
            return None

        math = literature = None
        electives: List[SubjectScoreL3] = []
        for exam in profile.national_exams:
            entry = SubjectScoreL3(score=exam.score, subject_name=national_subject_code(exam.name))
            if exam.name == VietnameseSubject.TOAN:
                math = entry
            elif exam.name == VietnameseSubject.NGU_VAN:
                literature = entry
            else:
                electives.append(entry)

        if math is None or literature is None or len(electives) < 2:
            raise InvalidInputError(
                "National exam needs math, literature and two electives",
                tier="L3",
                field="thpt",
            )
        return NationalExamL3(
            math_score=math,
            literature_score=literature,
            elective_1_score=electives[0],
            elective_2_score=electives[1],
        )

    @staticmethod
    def best_award(profile: StudentProfile) -> Optional[AwardQG]:
        """Highest ranked national award; earlier awards win ties."""
        best: Optional[AwardQG] = None
        for award in profile.awards:
            candidate = AwardQG(level=award_level(award.level), subject=award_subject_code(award.category))
            if best is None or candidate.level < best.level:
                best = candidate
        return best

    @staticmethod
    def talent_scores(profile: StudentProfile) -> Optional[Dict[str, float]]:
        if not profile.talent_exams:
            return None
        return {talent_subject_key(exam.name): exam.score for exam in profile.talent_exams}

    @staticmethod
    def english_options(profile: StudentProfile) -> List[Optional[str]]:
        levels = [
            cert.cefr for cert in profile.certifications_in(ExamCategory.CCNN)
            if cert.cefr
        ]
        return list(dict.fromkeys(levels)) or [None]

    @staticmethod
    def inter_cer_options(profile: StudentProfile) -> List[Optional[InterCer]]:
        options: List[Optional[InterCer]] = []
        for cert in profile.certifications_in(ExamCategory.CCQT):
            score = ccqt_score(cert)
            if score is None:
                continue
            options.append(InterCer(name=inter_cer_name(cert.exam_type), score=score))
        return options or [None]

    @staticmethod
    def dgnl_options(profile: StudentProfile) -> List[Optional[DgnlScore]]:
        options: List[Optional[DgnlScore]] = []
        for exam in profile.aptitude_exams_in(ExamCategory.DGNL):
            if exam.exam_type != ExamType.VNUHCM:
                continue
            if None in (exam.language_score, exam.math_score, exam.science_logic):
                logger.warning("[L3] Skipping VNUHCM result without component scores")
                continue
            options.append(DgnlScore(
                language_score=exam.language_score,
                math_score=exam.math_score,
                science_logic=exam.science_logic,
            ))
        return options or [None]

    # =========================================================================
    # Orchestration
    # =========================================================================

    def build_inputs(
        self,
        profile: StudentProfile,
        transcript: TranscriptRecord,
    ) -> List[L3PredictRequest]:
        base = {
            "award_qg": self.best_award(profile),
            "cong_lap": profile.is_public_preference,
            "hoc_ba": transcript,
            "hoc_phi": profile.tuition_budget,
            "nang_khieu": self.talent_scores(profile),
            "priority_object": 0,
            "priority_region": 0,
            "thpt": self.national_exam(profile),
            "tinh_tp": profile.province,
        }
        major_codes = [
            code for code in (major_group_code(name) for name in profile.majors)
            if code is not None
        ]

        unique: Dict[str, L3PredictRequest] = {}
        for code in major_codes:
            for english in self.english_options(profile):
                for inter_cer in self.inter_cer_options(profile):
                    for dgnl in self.dgnl_options(profile):
                        payload = L3PredictRequest(
                            **base,
                            nhom_nganh=code,
                            award_english=english,
                            int_cer=inter_cer,
                            dgnl=dgnl,
                        )
                        unique.setdefault(payload.model_dump_json(exclude_none=True), payload)
        return list(unique.values())

    async def predict(
        self,
        profile: StudentProfile,
        transcript: TranscriptRecord,
    ) -> List[L3PredictResult]:
        inputs = self.build_inputs(profile, transcript)
        if not inputs:
            raise InvalidInputError(
                f"No L3 inputs could be built for student {profile.student_id}",
                tier="L3",
                field="majors",
            )

        groups: Dict[int, List[L3PredictRequest]] = defaultdict(list)
        for payload in inputs:
            groups[payload.nhom_nganh].append(payload)

        raw_results = await self._executor.run(groups)
        deduped = self.deduplicate(raw_results)
        logger.info(
            f"[L3] Student {profile.student_id}: {len(inputs)} input(s) -> "
            f"{len(deduped)} distinct result(s)"
        )
        return deduped

    @staticmethod
    def result_signature(result: L3PredictResult) -> str:
        keys = sorted(
            f"{uni_code}:{item.ma_nganh}"
            for uni_code, items in result.result.items()
            for item in items
        )
        return "|".join(keys)

    @classmethod
    def deduplicate(cls, results: Sequence[L3PredictResult]) -> List[L3PredictResult]:
        """Drop empty results and results predicting the same programs as an earlier one."""
        unique: Dict[str, L3PredictResult] = {}
        for result in results:
            signature = cls.result_signature(result)
            if not signature:
                continue
            unique.setdefault(signature, result)
        return list(unique.values())

    @staticmethod
    def admission_ids(results: Sequence[L3PredictResult]) -> List[UUID]:
        """Admission ids referenced by L3 items; malformed ids are logged and skipped."""
        ids: Dict[UUID, None] = {}
        for result in results:
            for items in result.result.values():
                for item in items:
                    if not item.id:
                        continue
                    try:
                        ids[UUID(item.id)] = None
                    except ValueError:
                        logger.warning(f"[L3] Ignoring invalid admission id '{item.id}'")
        return list(ids)
