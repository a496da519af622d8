"""
Prediction Pipeline

Entry points driven by the event listeners:

- run_tier_one_and_two: a new student triggers L1 and L2 concurrently
- run_tier_three: a complete transcript set triggers L3

Each run creates its PROCESSING row before any remote call, settles the
tiers without holding a database transaction, then writes results, status
and admission links in one short transaction. If anything fails before the
terminal write, the row is moved to FAILED in a separate transaction and the
error is re-raised to the caller.
"""

import asyncio
import logging
from typing import Any, List, Optional, Sequence
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from uniguide.domain.enums import PredictionResultStatus
from uniguide.domain.prediction_models import L1PredictResult, L2PredictResult, L3PredictResult
from uniguide.domain.student_profile import StudentProfile
from uniguide.domain.transcripts import select_transcript_record
from uniguide.infrastructure.exceptions import UnmappedValueError
from uniguide.infrastructure.services.admission_linking_service import AdmissionLinkingService
from uniguide.infrastructure.services.cache_invalidator import CacheInvalidator
from uniguide.infrastructure.services.prediction_result_store import PredictionResultStore
from uniguide.infrastructure.services.student_snapshot_service import StudentSnapshotLoader
from uniguide.infrastructure.services.tier_one_service import TierOnePredictionService
from uniguide.infrastructure.services.tier_three_service import TierThreePredictionService
from uniguide.infrastructure.services.tier_two_service import TierTwoPredictionService

logger = logging.getLogger(__name__)


def to_payload(results: Sequence[BaseModel]) -> List[dict]:
    """JSON-ready rows for a results column."""
    return [result.model_dump(mode="json") for result in results]


class PredictionPipeline:
    """Runs prediction tiers for a student and records the outcome."""

    def __init__(
        self,
        tier_one: TierOnePredictionService,
        tier_two: TierTwoPredictionService,
        tier_three: TierThreePredictionService,
        store: PredictionResultStore,
        snapshot_loader: StudentSnapshotLoader,
        linking_service: AdmissionLinkingService,
        cache_invalidator: Optional[CacheInvalidator] = None,
    ):
        self._tier_one = tier_one
        self._tier_two = tier_two
        self._tier_three = tier_three
        self._store = store
        self._snapshot_loader = snapshot_loader
        self._linking = linking_service
        self._cache_invalidator = cache_invalidator

    # =========================================================================
    # L1 + L2
    # =========================================================================

    async def run_tier_one_and_two(
        self,
        student_id: UUID,
        user_id: Optional[UUID] = None,
    ) -> PredictionResultStatus:
        actor = await self._store.resolve_actor(user_id)
        record = await self._store.create_processing(student_id, user_id, actor)

        try:
            snapshot = await self._snapshot_loader.load(student_id)
            profile = snapshot.profile
            l1_results, l2_results = await self._settle_tiers(profile)

            async def link(session: AsyncSession) -> int:
                return await self._linking.link_tier_results(
                    session, profile, l1_results, l2_results, actor
                )

            status = await self._store.complete_tiers(
                record.id,
                to_payload(l1_results),
                to_payload(l2_results),
                actor,
                link,
            )
        except Exception as e:
            logger.error(f"[PIPELINE] L1/L2 run {record.id} for student {student_id} failed: {e}")
            await self._mark_failed(record.id, actor)
            raise

        await self._invalidate(student_id, user_id)
        return status

    async def _settle_tiers(self, profile: StudentProfile):
        """Run L1 and L2 concurrently; a failing tier contributes no results."""
        l1_outcome, l2_outcome = await asyncio.gather(
            self._tier_one.predict(profile),
            self._tier_two.predict(profile),
            return_exceptions=True,
        )
        l1_results: List[L1PredictResult] = self._settle("L1", l1_outcome, profile.student_id)
        l2_results: List[L2PredictResult] = self._settle("L2", l2_outcome, profile.student_id)
        return l1_results, l2_results

    @staticmethod
    def _settle(tier: str, outcome: Any, student_id: UUID) -> list:
        if isinstance(outcome, UnmappedValueError):
            raise outcome
        if isinstance(outcome, Exception):
            logger.warning(f"[{tier}] No results for student {student_id}: {outcome}")
            return []
        if isinstance(outcome, BaseException):
            raise outcome
        return list(outcome)

    # =========================================================================
    # L3
    # =========================================================================

    async def run_tier_three(
        self,
        student_id: UUID,
        user_id: Optional[UUID] = None,
    ) -> Optional[PredictionResultStatus]:
        """
        Run L3 on top of the L1/L2 results of the student's latest finished run.

        Returns:
            The terminal status, or None when the student has no finished run
        """
        previous = await self._store.latest_for_student(student_id)
        if previous is None:
            logger.warning(f"[L3] No finished prediction result for student {student_id}, skipping L3")
            return None

        actor = await self._store.resolve_actor(user_id)
        record = await self._store.create_processing(
            student_id,
            user_id,
            actor,
            l1_results=previous.l1_results,
            l2_results=previous.l2_results,
        )

        try:
            snapshot = await self._snapshot_loader.load(student_id)
            transcript = select_transcript_record(snapshot.manual_sheets, snapshot.ocr_sheets)
            l3_results: List[L3PredictResult] = await self._tier_three.predict(snapshot.profile, transcript)
            admission_ids = TierThreePredictionService.admission_ids(l3_results)

            async def link(session: AsyncSession) -> int:
                return await self._linking.link_admission_ids(session, student_id, admission_ids, actor)

            status = await self._store.complete_tier_three(
                record.id,
                to_payload(l3_results),
                actor,
                link,
            )
        except Exception as e:
            logger.error(f"[L3] Run {record.id} for student {student_id} failed: {e}")
            await self._mark_failed(record.id, actor)
            raise

        await self._invalidate(student_id, user_id)
        return status

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _mark_failed(self, result_id: UUID, actor: str) -> None:
        try:
            await self._store.mark_failed(result_id, actor)
        except Exception as e:
            logger.error(f"[PIPELINE] Could not mark prediction result {result_id} FAILED: {e}")

    async def _invalidate(self, student_id: UUID, user_id: Optional[UUID]) -> None:
        if self._cache_invalidator is None:
            return
        try:
            await self._cache_invalidator.invalidate_student(student_id, user_id)
        except Exception as e:
            logger.warning(f"[CACHE] Invalidation for student {student_id} failed: {e}")
