"""
Transcript (học bạ) aggregation for L3

A complete transcript is either six semester sheets or three full-year
sheets covering grades 10, 11 and 12. Sheets come from manually entered
transcripts or from completed OCR extractions; manual transcripts win when
they are complete.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from uniguide.domain.prediction_models import TranscriptGradeScores, TranscriptRecord
from uniguide.domain.subjects import VietnameseSubject
from uniguide.domain.tier_three_vocabulary import (
    TRANSCRIPT_LANGUAGE_FALLBACKS,
    TRANSCRIPT_SUBJECT_FIELDS,
)
from uniguide.infrastructure.exceptions import InvalidInputError

logger = logging.getLogger(__name__)

GRADES = (10, 11, 12)
TRANSCRIPT_BATCH_SIZES = frozenset({3, 6})


@dataclass(frozen=True)
class TranscriptSheet:
    """Scores of one transcript sheet, keyed by L3 grade-score field."""
    grade: Optional[int]
    semester: Optional[int]
    scores: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_rows(
        cls,
        grade: Optional[int],
        semester: Optional[int],
        rows: Iterable[Dict[str, Any]],
    ) -> "TranscriptSheet":
        """Build a sheet from [{subject, score}] rows, ignoring subjects L3 does not use."""
        scores: Dict[str, float] = {}
        language_fallback: Optional[float] = None
        for row in rows:
            try:
                subject = VietnameseSubject(str(row.get("subject", "")).strip())
                score = float(row["score"])
            except (KeyError, TypeError, ValueError):
                logger.debug(f"[L3] Ignoring transcript row {row!r}")
                continue
            field_name = TRANSCRIPT_SUBJECT_FIELDS.get(subject)
            if field_name is not None:
                scores[field_name] = score
            elif subject in TRANSCRIPT_LANGUAGE_FALLBACKS and language_fallback is None:
                language_fallback = score
        if "anh" not in scores and language_fallback is not None:
            scores["anh"] = language_fallback
        return cls(grade=grade, semester=semester, scores=scores)


def is_complete_sheet_set(sheets: Sequence[TranscriptSheet]) -> bool:
    """Six semester sheets (two per grade) or three full-year sheets (one per grade)."""
    if any(sheet.grade not in GRADES for sheet in sheets):
        return False
    per_grade: Dict[int, List[TranscriptSheet]] = defaultdict(list)
    for sheet in sheets:
        per_grade[sheet.grade].append(sheet)
    if set(per_grade) != set(GRADES):
        return False

    if len(sheets) == 6:
        return all(
            sorted(sheet.semester or 0 for sheet in grade_sheets) == [1, 2]
            for grade_sheets in per_grade.values()
        )
    if len(sheets) == 3:
        return all(len(grade_sheets) == 1 for grade_sheets in per_grade.values())
    return False


def aggregate_sheets(sheets: Sequence[TranscriptSheet]) -> TranscriptRecord:
    """Average each grade's sheets subject by subject, rounded to two decimals."""
    per_grade: Dict[int, List[TranscriptSheet]] = defaultdict(list)
    for sheet in sheets:
        per_grade[sheet.grade].append(sheet)

    grades: Dict[str, TranscriptGradeScores] = {}
    for grade in GRADES:
        grade_sheets = per_grade.get(grade)
        if not grade_sheets:
            raise InvalidInputError(f"Transcript for grade {grade} is missing", tier="L3", field="hoc_ba")
        totals: Dict[str, List[float]] = defaultdict(list)
        for sheet in grade_sheets:
            for field_name, score in sheet.scores.items():
                totals[field_name].append(score)
        averaged = {
            field_name: round(sum(values) / len(values), 2)
            for field_name, values in totals.items()
        }
        grades[f"grade_{grade}"] = TranscriptGradeScores(**averaged)
    return TranscriptRecord(**grades)


def select_transcript_record(
    manual_sheets: Sequence[TranscriptSheet],
    ocr_sheets: Sequence[TranscriptSheet],
) -> TranscriptRecord:
    """
    Pick the transcript source for L3.

    Priority: complete manual transcripts, then a 3 or 6 sheet set of
    completed OCR results. Anything else cannot be scored.
    """
    if manual_sheets and is_complete_sheet_set(manual_sheets):
        return aggregate_sheets(manual_sheets)
    if len(ocr_sheets) in TRANSCRIPT_BATCH_SIZES and is_complete_sheet_set(ocr_sheets):
        return aggregate_sheets(ocr_sheets)
    raise InvalidInputError(
        f"No complete transcript: {len(manual_sheets)} manual sheet(s), "
        f"{len(ocr_sheets)} OCR sheet(s)",
        tier="L3",
        field="hoc_ba",
    )
