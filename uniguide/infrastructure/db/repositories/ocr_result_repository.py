"""
OCR Result Repository

Tracks OCR extraction state for uploaded transcript files.
"""

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from uniguide.domain.enums import OcrStatus
from uniguide.infrastructure.db.models.ocr_result import OcrResult
from uniguide.infrastructure.db.repositories.base_repository import BaseRepository


class OcrResultRepository(BaseRepository[OcrResult]):
    """Repository for ocr_results."""

    def __init__(self, session: AsyncSession):
        super().__init__(OcrResult, session)

    async def get_by_file_ids(self, file_ids: Iterable[UUID]) -> List[OcrResult]:
        id_list = list(file_ids)
        if not id_list:
            return []
        stmt = select(OcrResult).where(OcrResult.file_id.in_(id_list))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_pending(
        self,
        student_id: UUID,
        file_id: UUID,
        created_by: str,
    ) -> OcrResult:
        """Insert a PROCESSING placeholder for a file."""
        return await self.add(OcrResult(
            student_id=student_id,
            file_id=file_id,
            status=OcrStatus.PROCESSING,
            created_by=created_by,
        ))

    async def mark_completed(
        self,
        ocr_result_id: UUID,
        scores: List[Dict[str, Any]],
        grade: Optional[int],
        semester: Optional[int],
    ) -> Optional[OcrResult]:
        ocr_result = await self.get_by_id(ocr_result_id)
        if ocr_result is None:
            return None
        ocr_result.status = OcrStatus.COMPLETED
        ocr_result.scores = scores
        ocr_result.grade = grade
        ocr_result.semester = semester
        ocr_result.error_message = None
        return await self.add(ocr_result)

    async def mark_failed(self, ocr_result_id: UUID, error_message: str) -> Optional[OcrResult]:
        ocr_result = await self.get_by_id(ocr_result_id)
        if ocr_result is None:
            return None
        ocr_result.status = OcrStatus.FAILED
        ocr_result.error_message = error_message[:1000]
        return await self.add(ocr_result)

    async def list_completed(self, student_id: UUID) -> List[OcrResult]:
        """COMPLETED OCR results for the student, oldest first."""
        stmt = (
            select(OcrResult)
            .where(and_(
                OcrResult.student_id == student_id,
                OcrResult.status == OcrStatus.COMPLETED,
            ))
            .order_by(OcrResult.created_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
