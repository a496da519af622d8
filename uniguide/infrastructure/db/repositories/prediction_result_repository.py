"""
Prediction Result Repository

Data access for prediction run records. Status rules live in
uniguide.domain.prediction_status; this layer only reads and writes rows.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uniguide.domain.enums import PredictionResultStatus
from uniguide.infrastructure.db.models.prediction_result import PredictionResult
from uniguide.infrastructure.db.repositories.base_repository import BaseRepository


class PredictionResultRepository(BaseRepository[PredictionResult]):
    """Repository for prediction_results."""

    def __init__(self, session: AsyncSession):
        super().__init__(PredictionResult, session)

    async def create_processing(
        self,
        student_id: UUID,
        user_id: Optional[UUID],
        created_by: str,
        l1_results: Optional[List[Dict[str, Any]]] = None,
        l2_results: Optional[List[Dict[str, Any]]] = None,
    ) -> PredictionResult:
        """Insert a new run in PROCESSING."""
        result = PredictionResult(
            student_id=student_id,
            user_id=user_id,
            status=PredictionResultStatus.PROCESSING,
            created_by=created_by,
            updated_by=created_by,
            l1_results=l1_results,
            l2_results=l2_results,
        )
        return await self.add(result)

    async def get_latest_for_student(self, student_id: UUID) -> Optional[PredictionResult]:
        """Most recently created run for the student that has reached a terminal status."""
        stmt = (
            select(PredictionResult)
            .where(PredictionResult.student_id == student_id)
            .where(PredictionResult.status != PredictionResultStatus.PROCESSING)
            .order_by(PredictionResult.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_for_update(self, result_id: UUID) -> Optional[PredictionResult]:
        """Load a run and lock its row for the rest of the transaction."""
        stmt = (
            select(PredictionResult)
            .where(PredictionResult.id == result_id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
