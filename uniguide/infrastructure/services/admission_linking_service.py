"""
Admission Linking Service

Links admission programs predicted for a student to the student record.
Runs inside the prediction result's write transaction. Links are only ever
added: admissions already linked are skipped, and the unique constraint on
(student_id, admission_id) absorbs races between concurrent runs.
"""

import logging
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from uniguide.domain.matcher import AdmissionMatcher
from uniguide.domain.prediction_models import L1PredictResult, L2PredictResult
from uniguide.domain.student_profile import StudentProfile
from uniguide.infrastructure.db.repositories.admission_repository import (
    AdmissionRepository,
    StudentAdmissionRepository,
)

logger = logging.getLogger(__name__)


def collect_admission_codes(
    l1_results: Sequence[L1PredictResult],
    l2_results: Sequence[L2PredictResult],
) -> List[str]:
    """Distinct admission codes referenced by either tier, first-seen order."""
    codes = {}
    for result in l1_results:
        for code in result.ma_xet_tuyen:
            codes[code] = None
    for result in l2_results:
        codes[result.ma_xet_tuyen] = None
    return list(codes)


class AdmissionLinkingService:
    """Resolves predicted admission codes and links the matching programs."""

    def __init__(self, matcher: Optional[AdmissionMatcher] = None):
        self._matcher = matcher or AdmissionMatcher()

    async def link_tier_results(
        self,
        session: AsyncSession,
        profile: StudentProfile,
        l1_results: Sequence[L1PredictResult],
        l2_results: Sequence[L2PredictResult],
        created_by: str,
    ) -> int:
        """
        Link admissions predicted by L1/L2 that match the student.

        Returns:
            Number of links inserted
        """
        student_id = profile.student_id
        codes = collect_admission_codes(l1_results, l2_results)
        if not codes:
            logger.info(f"[LINKING] No admission codes predicted for student {student_id}")
            return 0

        admissions = await AdmissionRepository(session).find_by_codes(codes)
        if not admissions:
            logger.warning(
                f"[LINKING] None of {len(codes)} predicted code(s) exist in the admission catalog"
            )
            return 0

        links = StudentAdmissionRepository(session)
        already_linked = await links.get_linked_admission_ids(
            student_id, [admission.id for admission in admissions]
        )
        candidates = [admission for admission in admissions if admission.id not in already_linked]
        if not candidates:
            logger.info(f"[LINKING] All predicted admissions already linked to student {student_id}")
            return 0

        matched = self._matcher.filter(profile, candidates)
        if not matched:
            logger.info(
                f"[LINKING] 0/{len(candidates)} new admission(s) match student {student_id}"
            )
            return 0

        inserted = await links.bulk_link(student_id, [admission.id for admission in matched], created_by)
        logger.info(
            f"[LINKING] Linked {inserted} admission(s) to student {student_id} "
            f"({len(matched)}/{len(candidates)} new candidates matched)"
        )
        return inserted

    async def link_admission_ids(
        self,
        session: AsyncSession,
        student_id: UUID,
        admission_ids: Iterable[UUID],
        created_by: str,
    ) -> int:
        """Link admissions referenced directly by id (L3 results)."""
        requested = list(dict.fromkeys(admission_ids))
        if not requested:
            logger.info(f"[LINKING] No admission ids in L3 results for student {student_id}")
            return 0

        admissions = await AdmissionRepository(session).get_by_ids(requested)
        found = {admission.id for admission in admissions}
        missing = [admission_id for admission_id in requested if admission_id not in found]
        if missing:
            logger.warning(f"[LINKING] {len(missing)} L3 admission id(s) not found in catalog")

        links = StudentAdmissionRepository(session)
        already_linked = await links.get_linked_admission_ids(student_id, found)
        new_ids = [admission_id for admission_id in requested if admission_id in found - already_linked]
        if not new_ids:
            logger.info(f"[LINKING] No new L3 admissions to link for student {student_id}")
            return 0

        inserted = await links.bulk_link(student_id, new_ids, created_by)
        logger.info(f"[LINKING] Linked {inserted} L3 admission(s) to student {student_id}")
        return inserted
