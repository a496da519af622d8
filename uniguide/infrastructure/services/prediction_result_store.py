"""
Prediction Result Store

Persistence and status transitions of prediction runs. Every method opens
its own short session, so the pipeline never holds a transaction while the
prediction service is called:

- create_processing: committed immediately, before any tier call
- complete_tiers / complete_tier_three: one transaction that writes the tier
  results, moves the row to its terminal status and runs the linking step,
  so results and admission links commit together
- mark_failed: a separate transaction used after the write phase failed
"""

import logging
from contextlib import AbstractAsyncContextManager
from typing import Any, Awaitable, Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from uniguide.domain.enums import PredictionResultStatus
from uniguide.domain.prediction_status import can_transition, classify_tier_status
from uniguide.infrastructure.db.database import get_session_context
from uniguide.infrastructure.db.models.prediction_result import ANONYMOUS_ACTOR, PredictionResult
from uniguide.infrastructure.db.repositories.prediction_result_repository import (
    PredictionResultRepository,
)
from uniguide.infrastructure.db.repositories.student_repository import UserAccountRepository
from uniguide.infrastructure.exceptions import InvalidStatusTransitionError, NotFoundError

logger = logging.getLogger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager]
LinkStep = Callable[[AsyncSession], Awaitable[int]]
TierPayload = List[Dict[str, Any]]


def apply_transition(result: PredictionResult, requested: PredictionResultStatus) -> None:
    """Move `result` to `requested`, refusing to leave a terminal status."""
    current = PredictionResultStatus(result.status)
    if not can_transition(current, requested):
        raise InvalidStatusTransitionError(result.id, current.value, requested.value)
    result.status = requested


class PredictionResultStore:
    """Prediction run persistence with the PROCESSING -> terminal state machine."""

    def __init__(self, session_scope: SessionScope = get_session_context):
        self._session_scope = session_scope

    async def resolve_actor(self, user_id: Optional[UUID]) -> str:
        """Email of the acting user, or ANONYMOUS."""
        if user_id is None:
            return ANONYMOUS_ACTOR
        async with self._session_scope() as session:
            email = await UserAccountRepository(session).get_email(user_id)
        return email or ANONYMOUS_ACTOR

    async def create_processing(
        self,
        student_id: UUID,
        user_id: Optional[UUID],
        created_by: str,
        l1_results: Optional[TierPayload] = None,
        l2_results: Optional[TierPayload] = None,
    ) -> PredictionResult:
        async with self._session_scope() as session:
            result = await PredictionResultRepository(session).create_processing(
                student_id=student_id,
                user_id=user_id,
                created_by=created_by,
                l1_results=l1_results,
                l2_results=l2_results,
            )
        logger.info(f"[PIPELINE] Created prediction result {result.id} for student {student_id}")
        return result

    async def latest_for_student(self, student_id: UUID) -> Optional[PredictionResult]:
        async with self._session_scope() as session:
            return await PredictionResultRepository(session).get_latest_for_student(student_id)

    async def complete_tiers(
        self,
        result_id: UUID,
        l1_results: TierPayload,
        l2_results: TierPayload,
        updated_by: str,
        link: Optional[LinkStep] = None,
    ) -> PredictionResultStatus:
        """Persist L1/L2 results, classify, and link admissions in one transaction."""
        status = classify_tier_status(l1_results, l2_results)
        async with self._session_scope() as session:
            result = await self._load_for_update(session, result_id)
            apply_transition(result, status)
            result.l1_results = l1_results
            result.l2_results = l2_results
            result.updated_by = updated_by
            session.add(result)
            if link is not None:
                await link(session)
            await session.flush()
        logger.info(
            f"[PIPELINE] Prediction result {result_id} -> {status.value} "
            f"(l1={len(l1_results)}, l2={len(l2_results)})"
        )
        return status

    async def complete_tier_three(
        self,
        result_id: UUID,
        l3_results: TierPayload,
        updated_by: str,
        link: Optional[LinkStep] = None,
    ) -> PredictionResultStatus:
        """Persist L3 results; the status follows the L1/L2 results carried by the row."""
        async with self._session_scope() as session:
            result = await self._load_for_update(session, result_id)
            status = classify_tier_status(result.l1_results, result.l2_results)
            apply_transition(result, status)
            result.l3_results = l3_results
            result.updated_by = updated_by
            session.add(result)
            if link is not None:
                await link(session)
            await session.flush()
        logger.info(
            f"[PIPELINE] Prediction result {result_id} -> {status.value} (l3={len(l3_results)})"
        )
        return status

    async def mark_failed(self, result_id: UUID, updated_by: str) -> bool:
        """
        Move a PROCESSING run to FAILED in its own transaction.

        Returns:
            False when the row is gone or already terminal
        """
        async with self._session_scope() as session:
            repo = PredictionResultRepository(session)
            result = await repo.get_for_update(result_id)
            if result is None:
                logger.warning(f"[PIPELINE] Cannot mark missing prediction result {result_id} as FAILED")
                return False
            if PredictionResultStatus(result.status).is_terminal:
                logger.warning(
                    f"[PIPELINE] Prediction result {result_id} already {result.status.value}, "
                    f"not marking FAILED"
                )
                return False
            apply_transition(result, PredictionResultStatus.FAILED)
            result.updated_by = updated_by
            session.add(result)
            await session.flush()
        logger.info(f"[PIPELINE] Prediction result {result_id} -> FAILED")
        return True

    @staticmethod
    async def _load_for_update(session: AsyncSession, result_id: UUID) -> PredictionResult:
        result = await PredictionResultRepository(session).get_for_update(result_id)
        if result is None:
            raise NotFoundError(
                f"Prediction result {result_id} not found",
                operation="update",
                table="prediction_results",
            )
        return result
