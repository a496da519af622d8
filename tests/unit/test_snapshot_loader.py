"""
Unit tests for StudentSnapshotLoader.
"""

import pytest
from uuid import uuid4

from uniguide.domain.enums import OcrStatus, UniType
from uniguide.infrastructure.db.models.ocr_result import OcrResult
from uniguide.infrastructure.db.models.student import Student, Transcript
from uniguide.infrastructure.exceptions import NotFoundError
from uniguide.infrastructure.services.student_snapshot_service import StudentSnapshotLoader

from tests.factories import scalars_result


def make_student():
    return Student(
        id=uuid4(),
        province="Hồ Chí Minh",
        uni_type="Công lập",
        max_budget=30_000_000,
        majors=["Kỹ thuật"],
        national_exams=[{"name": "Toán", "score": 8.0}],
    )


class TestStudentSnapshotLoader:

    async def test_missing_student(self, session_scope, mock_session):
        mock_session.get.return_value = None
        with pytest.raises(NotFoundError):
            await StudentSnapshotLoader(session_scope).load(uuid4())

    async def test_splits_manual_and_ocr_sheets(self, session_scope, mock_session):
        student = make_student()
        mock_session.get.return_value = student
        manual = Transcript(
            student_id=student.id, grade=10, semester=1,
            subjects=[{"subject": "Toán", "score": 8.0}],
        )
        from_ocr = Transcript(
            student_id=student.id, grade=10, semester=2, ocr_result_id=uuid4(),
            subjects=[{"subject": "Toán", "score": 6.0}],
        )
        ocr = OcrResult(
            student_id=student.id, file_id=uuid4(), status=OcrStatus.COMPLETED,
            grade=11, scores=[{"subject": "Ngữ Văn", "score": 7.0}], created_by="ANONYMOUS",
        )
        mock_session.execute.side_effect = [scalars_result([manual, from_ocr]), scalars_result([ocr])]

        snapshot = await StudentSnapshotLoader(session_scope).load(student.id)

        assert snapshot.profile.student_id == student.id
        assert snapshot.profile.uni_type == UniType.PUBLIC
        assert [(s.grade, s.semester, s.scores) for s in snapshot.manual_sheets] == [(10, 1, {"toan": 8.0})]
        assert [(s.grade, s.semester, s.scores) for s in snapshot.ocr_sheets] == [(11, None, {"van": 7.0})]
