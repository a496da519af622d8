"""
Unit tests for transcript sheet aggregation and selection.
"""

import pytest

from uniguide.domain.transcripts import (
    TRANSCRIPT_BATCH_SIZES,
    TranscriptSheet,
    aggregate_sheets,
    is_complete_sheet_set,
    select_transcript_record,
)
from uniguide.infrastructure.exceptions import InvalidInputError


def year_sheets(score=8.0):
    return [TranscriptSheet(grade, None, {"toan": score}) for grade in (10, 11, 12)]


def semester_sheets(first=7.0, second=8.0):
    sheets = []
    for grade in (10, 11, 12):
        sheets.append(TranscriptSheet(grade, 1, {"toan": first}))
        sheets.append(TranscriptSheet(grade, 2, {"toan": second}))
    return sheets


class TestTranscriptSheet:

    def test_rows_map_to_grade_fields(self):
        sheet = TranscriptSheet.from_rows(10, 1, [
            {"subject": "Toán", "score": 8.5},
            {"subject": "Ngữ Văn", "score": "7"},
            {"subject": "Hát", "score": 9},
            {"subject": "unknown", "score": 5},
            {"score": 5},
        ])
        assert sheet.scores == {"toan": 8.5, "van": 7.0}

    def test_other_language_fills_english_field(self):
        sheet = TranscriptSheet.from_rows(10, None, [{"subject": "Tiếng Nhật", "score": 9}])
        assert sheet.scores == {"anh": 9.0}

    def test_english_wins_over_other_language(self):
        sheet = TranscriptSheet.from_rows(10, None, [
            {"subject": "Tiếng Pháp", "score": 6},
            {"subject": "Tiếng Anh", "score": 9},
        ])
        assert sheet.scores == {"anh": 9.0}


class TestCompleteness:

    def test_batch_sizes(self):
        assert TRANSCRIPT_BATCH_SIZES == {3, 6}

    def test_three_year_sheets_are_complete(self):
        assert is_complete_sheet_set(year_sheets())

    def test_six_semester_sheets_are_complete(self):
        assert is_complete_sheet_set(semester_sheets())

    def test_missing_grade_is_incomplete(self):
        sheets = year_sheets()[:2] + [TranscriptSheet(11, None, {})]
        assert not is_complete_sheet_set(sheets)

    @pytest.mark.parametrize("count", [0, 1, 2, 4, 5])
    def test_other_counts_are_incomplete(self, count):
        assert not is_complete_sheet_set(semester_sheets()[:count])


class TestAggregation:

    def test_semesters_are_averaged(self):
        record = aggregate_sheets(semester_sheets(7.0, 8.0))
        assert record.grade_10.toan == 7.5
        assert record.grade_12.van == 0.0

    def test_missing_grade_raises(self):
        with pytest.raises(InvalidInputError):
            aggregate_sheets(year_sheets()[:2])


class TestSelection:

    def test_manual_transcripts_win(self):
        record = select_transcript_record(year_sheets(9.0), year_sheets(5.0))
        assert record.grade_11.toan == 9.0

    def test_falls_back_to_ocr(self):
        record = select_transcript_record(year_sheets()[:1], semester_sheets(6.0, 8.0))
        assert record.grade_10.toan == 7.0

    def test_no_complete_source_raises(self):
        with pytest.raises(InvalidInputError):
            select_transcript_record([], semester_sheets()[:4])
