"""
Domain enumerations for the UniGuide prediction pipeline.

Values mirror the strings stored in the student profile tables, which are the
Vietnamese labels shown to students.
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet, Optional

logger = logging.getLogger(__name__)


class PredictionResultStatus(str, Enum):
    """Lifecycle of one prediction run."""
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not PredictionResultStatus.PROCESSING


class OcrStatus(str, Enum):
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class UniType(str, Enum):
    """Student preference for public or private universities."""
    PRIVATE = "Tư thục"
    PUBLIC = "Công lập"


class Rank(str, Enum):
    FIRST = "Hạng Nhất"
    SECOND = "Hạng Nhì"
    THIRD = "Hạng Ba"
    CONSOLATION = "Khuyến Khích"


class Conduct(str, Enum):
    GOOD = "Tốt"
    FAIR = "Khá"
    SATISFACTORY = "Đạt"
    UNSATISFACTORY = "Chưa Đạt"


class AcademicPerformance(str, Enum):
    GOOD = "Tốt"
    FAIR = "Khá"
    SATISFACTORY = "Đạt"
    UNSATISFACTORY = "Chưa Đạt"


# Ordinal used by the L2 model for both conduct and academic performance
RATING_RANK: Dict[str, int] = {
    "Tốt": 1,
    "Khá": 2,
    "Đạt": 3,
    "Chưa Đạt": 4,
}


class SpecialStudentCase(str, Enum):
    ETHNIC_MINORITY_STUDENT = "Học sinh thuộc huyện nghèo, vùng đặc biệt khó khăn"
    HEROES_AND_CONTRIBUTORS = "Anh hùng Lao động, Anh hùng LLVT, Chiến sĩ thi đua toàn quốc"
    VERY_FEW_ETHNIC_MINORITY = "Người dân tộc thiểu số rất ít người"
    TRANSFER_STUDENT = "Học sinh chuyển trường"


class ExamType(str, Enum):
    A_LEVEL = "Alevel"
    ACT = "ACT"
    DUOLINGO = "DoulingoEnglishTest"
    HSA = "HSA"
    IB = "IB"
    IELTS = "IELTS"
    JLPT = "JLPT"
    OSSD = "OSSD"
    PTE = "PTEAcademic"
    SAT = "SAT"
    TOEFL_CBT = "TOEFL CBT"
    TOEFL_IBT = "TOEFL iBT"
    TOEFL_PAPER = "TOEFL Paper"
    TOEIC = "TOEIC"
    TSA = "TSA"
    VNUHCM = "VNUHCM"


class ExamCategory(str, Enum):
    CCNN = "CCNN"  # language certificates
    CCQT = "CCQT"  # international certificates
    DGNL = "ĐGNL"  # aptitude assessment


EXAM_CATEGORIES: Dict[ExamCategory, FrozenSet[ExamType]] = {
    ExamCategory.CCNN: frozenset({
        ExamType.IELTS,
        ExamType.JLPT,
        ExamType.TOEFL_CBT,
        ExamType.TOEFL_IBT,
        ExamType.TOEFL_PAPER,
        ExamType.TOEIC,
    }),
    ExamCategory.CCQT: frozenset({
        ExamType.A_LEVEL,
        ExamType.ACT,
        ExamType.DUOLINGO,
        ExamType.IB,
        ExamType.OSSD,
        ExamType.PTE,
        ExamType.SAT,
    }),
    ExamCategory.DGNL: frozenset({
        ExamType.HSA,
        ExamType.TSA,
        ExamType.VNUHCM,
    }),
}


class NationalExcellentSubject(str, Enum):
    """Subjects of the national excellent student contest (HSG quốc gia)."""
    BIOLOGY = "Sinh Học"
    CHEMISTRY = "Hoá Học"
    CHINESE = "Tiếng Trung"
    ENGLISH = "Tiếng Anh"
    FRENCH = "Tiếng Pháp"
    GEOGRAPHY = "Địa Lý"
    HISTORY = "Lịch Sử"
    INFORMATION_TECHNOLOGY = "Tin Học"
    JAPANESE = "Tiếng Nhật"
    LITERATURE = "Ngữ Văn"
    MATHEMATICS = "Toán"
    PHYSICS = "Vật Lý"
    RUSSIAN = "Tiếng Nga"


class HsgSubject(str, Enum):
    """Award subject labels used by the L1 model."""
    ANH = "Anh"
    DIA = "Địa"
    HOA = "Hoá"
    LY = "Lý"
    SINH = "Sinh"
    SU = "Sử"
    TIENG_NGA = "Tiếng Nga"
    TIENG_NHAT = "Tiếng Nhật"
    TIENG_PHAP = "Tiếng Pháp"
    TIENG_TRUNG = "Tiếng Trung"
    TIN = "Tin"
    TOAN = "Toán"
    VAN = "Văn"


NATIONAL_EXCELLENT_TO_HSG: Dict[NationalExcellentSubject, HsgSubject] = {
    NationalExcellentSubject.BIOLOGY: HsgSubject.SINH,
    NationalExcellentSubject.CHEMISTRY: HsgSubject.HOA,
    NationalExcellentSubject.CHINESE: HsgSubject.TIENG_TRUNG,
    NationalExcellentSubject.ENGLISH: HsgSubject.ANH,
    NationalExcellentSubject.FRENCH: HsgSubject.TIENG_PHAP,
    NationalExcellentSubject.GEOGRAPHY: HsgSubject.DIA,
    NationalExcellentSubject.HISTORY: HsgSubject.SU,
    NationalExcellentSubject.INFORMATION_TECHNOLOGY: HsgSubject.TIN,
    NationalExcellentSubject.JAPANESE: HsgSubject.TIENG_NHAT,
    NationalExcellentSubject.LITERATURE: HsgSubject.VAN,
    NationalExcellentSubject.MATHEMATICS: HsgSubject.TOAN,
    NationalExcellentSubject.PHYSICS: HsgSubject.LY,
    NationalExcellentSubject.RUSSIAN: HsgSubject.TIENG_NGA,
}


MAJOR_GROUP_CODES: Dict[str, int] = {
    "Khoa học giáo dục và đào tạo giáo viên": 714,
    "Nghệ thuật": 721,
    "Nhân văn": 722,
    "Khoa học xã hội và hành vi": 731,
    "Báo chí và thông tin": 732,
    "Kinh doanh và quản lý": 734,
    "Pháp luật": 738,
    "Khoa học sự sống": 742,
    "Khoa học tự nhiên": 744,
    "Toán và thống kê": 746,
    "Máy tính và công nghệ thông tin": 748,
    "Công nghệ kỹ thuật": 751,
    "Kỹ thuật": 752,
    "Sản xuất và chế biến": 754,
    "Kiến trúc và xây dựng": 758,
    "Nông, lâm nghiệp và thủy sản": 762,
    "Thú y": 764,
    "Sức khỏe": 772,
    "Dịch vụ xã hội": 776,
    "Du lịch, khách sạn, thể thao và dịch vụ cá nhân": 781,
    "Dịch vụ vận tải": 784,
    "Môi trường và bảo vệ môi trường": 785,
    "An ninh, Quốc phòng": 786,
    "Khác": 790,
}


def major_group_code(name: str) -> Optional[int]:
    """Resolve a major-group name to its 3-digit code, or None if unknown."""
    code = MAJOR_GROUP_CODES.get(name.strip())
    if code is None:
        logger.warning(f"[MAJORS] Unknown major group '{name}', skipping")
    return code
