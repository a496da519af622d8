"""
Student snapshot loading

Reads everything a prediction run needs about a student in one short
session: the validated profile, manually entered transcript sheets and the
sheets of completed OCR extractions.
"""

import logging
from dataclasses import dataclass, field
from typing import List
from uuid import UUID

from uniguide.domain.student_profile import StudentProfile
from uniguide.domain.transcripts import TranscriptSheet
from uniguide.infrastructure.db.database import get_session_context
from uniguide.infrastructure.db.repositories.ocr_result_repository import OcrResultRepository
from uniguide.infrastructure.db.repositories.student_repository import StudentRepository
from uniguide.infrastructure.exceptions import NotFoundError
from uniguide.infrastructure.services.prediction_result_store import SessionScope

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentSnapshot:
    profile: StudentProfile
    manual_sheets: List[TranscriptSheet] = field(default_factory=list)
    ocr_sheets: List[TranscriptSheet] = field(default_factory=list)


class StudentSnapshotLoader:
    """Loads a StudentSnapshot; a missing student raises NotFoundError."""

    def __init__(self, session_scope: SessionScope = get_session_context):
        self._session_scope = session_scope

    async def load(self, student_id: UUID) -> StudentSnapshot:
        async with self._session_scope() as session:
            students = StudentRepository(session)
            student = await students.get_by_id(student_id)
            if student is None:
                raise NotFoundError(
                    f"Student {student_id} not found",
                    operation="select",
                    table="students",
                )
            profile = StudentProfile.from_student(student)
            transcripts = await students.get_transcripts(student_id)
            ocr_results = await OcrResultRepository(session).list_completed(student_id)

        manual_sheets = [
            TranscriptSheet.from_rows(t.grade, t.semester, t.subjects or [])
            for t in transcripts
            if t.ocr_result_id is None
        ]
        ocr_sheets = [
            TranscriptSheet.from_rows(o.grade, o.semester, o.scores or [])
            for o in ocr_results
        ]
        logger.debug(
            f"[PIPELINE] Loaded student {student_id}: {len(manual_sheets)} manual sheet(s), "
            f"{len(ocr_sheets)} OCR sheet(s)"
        )
        return StudentSnapshot(profile=profile, manual_sheets=manual_sheets, ocr_sheets=ocr_sheets)
