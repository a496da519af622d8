"""
Student Repository

Read access to the student profile, its transcripts and the owning account.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from uniguide.infrastructure.db.models.student import Student, Transcript
from uniguide.infrastructure.db.models.user_account import UserAccount
from uniguide.infrastructure.db.repositories.base_repository import BaseRepository


class StudentRepository(BaseRepository[Student]):
    """Repository for students and their transcripts."""

    def __init__(self, session: AsyncSession):
        super().__init__(Student, session)

    async def get_transcripts(self, student_id: UUID) -> List[Transcript]:
        """Transcript sheets ordered by grade then semester."""
        stmt = (
            select(Transcript)
            .where(Transcript.student_id == student_id)
            .order_by(Transcript.grade, Transcript.semester)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class UserAccountRepository(BaseRepository[UserAccount]):
    """Repository for account lookups."""

    def __init__(self, session: AsyncSession):
        super().__init__(UserAccount, session)

    async def get_email(self, user_id: UUID) -> Optional[str]:
        stmt = select(UserAccount.email).where(UserAccount.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
