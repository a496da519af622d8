"""
Admission Repository

Read access to the admission catalog plus the student ↔ admission links the
pipeline writes.
"""

import logging
from typing import Iterable, List, Set
from uuid import UUID, uuid4

from sqlalchemy import select, and_
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from uniguide.infrastructure.db.models.admission import Admission
from uniguide.infrastructure.db.models.base import utc_now
from uniguide.infrastructure.db.models.student_admission import StudentAdmission
from uniguide.infrastructure.db.repositories.base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AdmissionRepository(BaseRepository[Admission]):
    """Repository for the admissions catalog."""

    def __init__(self, session: AsyncSession):
        super().__init__(Admission, session)

    async def find_by_codes(self, codes: Iterable[str]) -> List[Admission]:
        """All admissions whose admission_code is in `codes`."""
        code_list = sorted(set(codes))
        if not code_list:
            return []
        stmt = select(Admission).where(Admission.admission_code.in_(code_list))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class StudentAdmissionRepository:
    """Repository for student_admissions links."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_linked_admission_ids(
        self,
        student_id: UUID,
        admission_ids: Iterable[UUID],
    ) -> Set[UUID]:
        """Subset of `admission_ids` already linked to the student."""
        id_list = list(admission_ids)
        if not id_list:
            return set()
        stmt = select(StudentAdmission.admission_id).where(and_(
            StudentAdmission.student_id == student_id,
            StudentAdmission.admission_id.in_(id_list),
        ))
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def bulk_link(
        self,
        student_id: UUID,
        admission_ids: Iterable[UUID],
        created_by: str,
    ) -> int:
        """
        Insert links, ignoring pairs that already exist.

        The unique constraint on (student_id, admission_id) makes concurrent
        runs for the same student safe.

        Returns:
            Number of rows actually inserted
        """
        rows = [
            {
                "id": uuid4(),
                "student_id": student_id,
                "admission_id": admission_id,
                "created_by": created_by,
                "created_at": utc_now(),
            }
            for admission_id in dict.fromkeys(admission_ids)
        ]
        if not rows:
            return 0
        stmt = (
            insert(StudentAdmission)
            .values(rows)
            .on_conflict_do_nothing(constraint="uq_student_admissions_student_admission")
        )
        result = await self.session.execute(stmt)
        inserted = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(rows)
        if inserted < len(rows):
            logger.info(
                f"[LINKING] {len(rows) - inserted} link(s) for student {student_id} "
                f"already existed"
            )
        return inserted
