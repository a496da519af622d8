"""
L3 vocabulary

Translations from domain enumerations to the field names and labels the L3
model expects. Every table is checked against its source enumeration when
this module is imported, and lookups raise UnmappedValueError for values
outside the table.
"""

from typing import Dict, Hashable, Iterable, Mapping, TypeVar

from uniguide.domain.enums import (
    EXAM_CATEGORIES,
    ExamCategory,
    ExamType,
    NationalExcellentSubject,
    Rank,
)
from uniguide.domain.subjects import (
    NATIONAL_EXAM_SUBJECTS,
    TALENT_EXAM_SUBJECTS,
    VietnameseSubject,
)
from uniguide.infrastructure.exceptions import UnmappedValueError

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

S = VietnameseSubject

NATIONAL_SUBJECT_CODES: Dict[VietnameseSubject, str] = {
    S.TOAN: "toan",
    S.NGU_VAN: "van",
    S.TIENG_ANH: "anh",
    S.TIENG_DUC: "tieng_duc",
    S.TIENG_HAN: "tieng_han",
    S.TIENG_NGA: "tieng_nga",
    S.TIENG_NHAT: "tieng_nhat",
    S.TIENG_PHAP: "tieng_phap",
    S.TIENG_TRUNG: "tieng_trung",
    S.VAT_LY: "ly",
    S.HOA_HOC: "hoa",
    S.SINH_HOC: "sinh",
    S.LICH_SU: "su",
    S.DIA_LY: "dia",
    S.GDKTPL: "gdkt_pl",
    S.TIN_HOC: "tin",
    S.CONG_NGHE_CONG_NGHIEP: "cong_nghe_cong_nghiep",
    S.CONG_NGHE_NONG_NGHIEP: "cong_nghe_nong_nghiep",
}

AWARD_SUBJECT_CODES: Dict[NationalExcellentSubject, str] = {
    NationalExcellentSubject.BIOLOGY: "sinh",
    NationalExcellentSubject.CHEMISTRY: "hoa",
    NationalExcellentSubject.CHINESE: "tieng_trung",
    NationalExcellentSubject.ENGLISH: "anh",
    NationalExcellentSubject.FRENCH: "tieng_phap",
    NationalExcellentSubject.GEOGRAPHY: "dia",
    NationalExcellentSubject.HISTORY: "su",
    NationalExcellentSubject.INFORMATION_TECHNOLOGY: "tin",
    NationalExcellentSubject.JAPANESE: "tieng_nhat",
    NationalExcellentSubject.LITERATURE: "van",
    NationalExcellentSubject.MATHEMATICS: "toan",
    NationalExcellentSubject.PHYSICS: "ly",
    NationalExcellentSubject.RUSSIAN: "tieng_nga",
}

AWARD_LEVELS: Dict[Rank, int] = {
    Rank.FIRST: 1,
    Rank.SECOND: 2,
    Rank.THIRD: 3,
    Rank.CONSOLATION: 4,
}

INTER_CER_NAMES: Dict[ExamType, str] = {
    ExamType.A_LEVEL: "A-Level",
    ExamType.ACT: "ACT",
    ExamType.DUOLINGO: "Duolingo English Test",
    ExamType.IB: "IB",
    ExamType.OSSD: "OSSD",
    ExamType.PTE: "PTE Academic",
    ExamType.SAT: "SAT",
}

# Talent scores are sent keyed by the subject's code name
TALENT_SUBJECT_KEYS: Dict[VietnameseSubject, str] = {
    subject: subject.name for subject in TALENT_EXAM_SUBJECTS
}

# Transcript (học bạ) subjects and the L3 grade-score field they fill
TRANSCRIPT_SUBJECT_FIELDS: Dict[VietnameseSubject, str] = {
    S.TOAN: "toan",
    S.NGU_VAN: "van",
    S.TIENG_ANH: "anh",
    S.VAT_LY: "ly",
    S.HOA_HOC: "hoa",
    S.SINH_HOC: "sinh",
    S.LICH_SU: "su",
    S.DIA_LY: "dia",
    S.GDKTPL: "gdkt_pl",
    S.TIN_HOC: "tin",
    S.CONG_NGHE: "cong_nghe_cong_nghiep",
    S.CONG_NGHE_CONG_NGHIEP: "cong_nghe_cong_nghiep",
}

# Other foreign languages fill the single language field when English is absent
TRANSCRIPT_LANGUAGE_FALLBACKS = frozenset({
    S.TIENG_DUC, S.TIENG_HAN, S.TIENG_NGA, S.TIENG_NHAT, S.TIENG_PHAP, S.TIENG_TRUNG,
})


def _require_exhaustive(name: str, mapping: Mapping[K, V], members: Iterable[K]) -> None:
    for member in members:
        if member not in mapping:
            raise UnmappedValueError(name, member)


def lookup(name: str, mapping: Mapping[K, V], value: K) -> V:
    """Translate `value`, raising UnmappedValueError when the table lacks it."""
    try:
        return mapping[value]
    except KeyError:
        raise UnmappedValueError(name, value) from None


def national_subject_code(subject: VietnameseSubject) -> str:
    return lookup("national exam subject", NATIONAL_SUBJECT_CODES, subject)


def award_subject_code(subject: NationalExcellentSubject) -> str:
    return lookup("award subject", AWARD_SUBJECT_CODES, subject)


def award_level(rank: Rank) -> int:
    return lookup("award level", AWARD_LEVELS, rank)


def inter_cer_name(exam_type: ExamType) -> str:
    return lookup("international certificate", INTER_CER_NAMES, exam_type)


def talent_subject_key(subject: VietnameseSubject) -> str:
    return lookup("talent subject", TALENT_SUBJECT_KEYS, subject)


_require_exhaustive("national exam subject", NATIONAL_SUBJECT_CODES, NATIONAL_EXAM_SUBJECTS)
_require_exhaustive("award subject", AWARD_SUBJECT_CODES, NationalExcellentSubject)
_require_exhaustive("award level", AWARD_LEVELS, Rank)
_require_exhaustive("international certificate", INTER_CER_NAMES, EXAM_CATEGORIES[ExamCategory.CCQT])
_require_exhaustive("talent subject", TALENT_SUBJECT_KEYS, TALENT_EXAM_SUBJECTS)
