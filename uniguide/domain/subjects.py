"""
Subjects and admission subject groups (tổ hợp môn).

A subject group code such as "A00" names the three or four subjects whose
scores are summed for an admission method. Admission programs store the group
code in their subject_combination column.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Tuple


class VietnameseSubject(str, Enum):
    BIEU_DIEN_NGHE_THUAT = "Biểu diễn nghệ thuật"
    CHI_HUY_TAI_CHO = "Chỉ huy tại chỗ"
    CHUYEN_MON_AM_NHAC = "Chuyên môn âm nhạc"
    CHUYEN_MON_AM_NHAC_1 = "Chuyên môn âm nhạc 1"
    CHUYEN_MON_AM_NHAC_2 = "Chuyên môn âm nhạc 2"
    CONG_NGHE = "Công Nghệ"
    CONG_NGHE_CONG_NGHIEP = "Công nghệ Công nghiệp"
    CONG_NGHE_NONG_NGHIEP = "Công nghệ Nông nghiệp"
    DIA_LY = "Địa Lý"
    DOC_DIEN_CAM = "Đọc diễn cảm"
    DOC_HIEU = "Đọc hiểu"
    GDKTPL = "Giáo dục Kinh tế và Pháp luật"
    GHI_AM_XUONG_AM = "Ghi âm - xướng âm"
    HAT = "Hát"
    HAT_BIEU_DIEN_NHAC_CU = "Hát hoặc biểu diễn nhạc cụ"
    HAT_MUA = "Hát - Múa"
    HAT_XUONG_AM = "Hát xướng âm"
    HOA_HOC = "Hóa Học"
    HOA_THANH = "Hòa thanh"
    KHOA_HOC_TU_NHIEN = "Khoa học tự nhiên"
    KHOA_HOC_XA_HOI = "Khoa học xã hội"
    KY_XUONG_AM = "Ký xướng âm"
    LICH_SU = "Lịch Sử"
    NANG_KHIEU = "Năng khiếu"
    NANG_KHIEU_1 = "Năng khiếu 1"
    NANG_KHIEU_2 = "Năng khiếu 2"
    NANG_KHIEU_AM_NHAC_1 = "Năng khiếu Âm nhạc 1 (Hát, xướng âm)"
    NANG_KHIEU_AM_NHAC_2 = "Năng khiếu Âm nhạc 2 (Thẩm âm, tiết tất)"
    NANG_KHIEU_BAO_CHI = "Năng khiếu báo chí"
    NANG_KHIEU_MAM_NON_1 = "Năng khiếu Mầm non 1(Kể chuyện, đọc, diễn cảm)"
    NANG_KHIEU_MAM_NON_2 = "Năng khiếu Mầm non 2 (Hát)"
    NANG_KHIEU_SKDA_1 = "Năng khiếu SKĐA 1"
    NANG_KHIEU_SKDA_2 = "Năng khiếu SKĐA 2"
    NANG_KHIEU_TDTT = "Năng khiếu TDTT"
    NANG_KHIEU_VE_1 = "Năng khiếu Vẽ Nghệ thuật 1"
    NANG_KHIEU_VE_2 = "Năng khiếu Vẽ Nghệ thuật 2"
    NGU_VAN = "Ngữ Văn"
    SINH_HOC = "Sinh Học"
    TIENG_ANH = "Tiếng Anh"
    TIENG_DUC = "Tiếng Đức"
    TIENG_HAN = "Tiếng Hàn"
    TIENG_NGA = "Tiếng Nga"
    TIENG_NHAT = "Tiếng Nhật"
    TIENG_PHAP = "Tiếng Pháp"
    TIENG_TRUNG = "Tiếng Trung"
    TIN_HOC = "Tin Học"
    TOAN = "Toán"
    TU_DUY_GIAI_QUYET_NGU_VAN_DE = "Tư duy Khoa học Giải quyết vấn đề"
    VAT_LY = "Vật Lý"
    VE_HINH_HOA_MY_THUAT = "Vẽ Hình họa mỹ thuật"
    VE_MY_THUAT = "Vẽ Mỹ thuật"
    VE_TRANG_TRI_MAU = "Vẽ trang trí màu"
    XAY_DUNG_KICH_BAN_SU_KIEN = "Xây dựng kịch bản sự kiện"


S = VietnameseSubject

NATIONAL_EXAM_SUBJECTS: FrozenSet[VietnameseSubject] = frozenset({
    S.TOAN, S.NGU_VAN, S.TIENG_ANH, S.TIENG_DUC, S.TIENG_HAN, S.TIENG_NGA,
    S.TIENG_NHAT, S.TIENG_PHAP, S.TIENG_TRUNG, S.VAT_LY, S.HOA_HOC,
    S.SINH_HOC, S.LICH_SU, S.DIA_LY, S.GDKTPL, S.TIN_HOC,
    S.CONG_NGHE_CONG_NGHIEP, S.CONG_NGHE_NONG_NGHIEP,
})

TALENT_EXAM_SUBJECTS: FrozenSet[VietnameseSubject] = frozenset({
    S.BIEU_DIEN_NGHE_THUAT, S.CHI_HUY_TAI_CHO, S.CHUYEN_MON_AM_NHAC,
    S.CHUYEN_MON_AM_NHAC_1, S.CHUYEN_MON_AM_NHAC_2, S.DOC_DIEN_CAM,
    S.DOC_HIEU, S.GHI_AM_XUONG_AM, S.HAT, S.HAT_BIEU_DIEN_NHAC_CU,
    S.HAT_MUA, S.HAT_XUONG_AM, S.HOA_THANH, S.KY_XUONG_AM, S.NANG_KHIEU,
    S.NANG_KHIEU_1, S.NANG_KHIEU_2, S.NANG_KHIEU_AM_NHAC_1,
    S.NANG_KHIEU_AM_NHAC_2, S.NANG_KHIEU_BAO_CHI, S.NANG_KHIEU_MAM_NON_1,
    S.NANG_KHIEU_MAM_NON_2, S.NANG_KHIEU_SKDA_1, S.NANG_KHIEU_SKDA_2,
    S.NANG_KHIEU_TDTT, S.NANG_KHIEU_VE_1, S.NANG_KHIEU_VE_2,
    S.TU_DUY_GIAI_QUYET_NGU_VAN_DE, S.VE_HINH_HOA_MY_THUAT, S.VE_MY_THUAT,
    S.VE_TRANG_TRI_MAU, S.XAY_DUNG_KICH_BAN_SU_KIEN,
})

SUBJECT_GROUPS: Dict[str, Tuple[VietnameseSubject, ...]] = {
    # Khối A
    "A00": (S.TOAN, S.VAT_LY, S.HOA_HOC),
    "A01": (S.TOAN, S.VAT_LY, S.TIENG_ANH),
    "A02": (S.TOAN, S.VAT_LY, S.SINH_HOC),
    "A03": (S.TOAN, S.VAT_LY, S.LICH_SU),
    "A04": (S.TOAN, S.VAT_LY, S.DIA_LY),
    "A05": (S.TOAN, S.HOA_HOC, S.LICH_SU),
    "A06": (S.TOAN, S.HOA_HOC, S.DIA_LY),
    "A07": (S.TOAN, S.LICH_SU, S.DIA_LY),
    "A08": (S.TOAN, S.LICH_SU, S.GDKTPL),
    "A09": (S.TOAN, S.DIA_LY, S.GDKTPL),
    "A10": (S.TOAN, S.VAT_LY, S.GDKTPL),
    "A11": (S.TOAN, S.HOA_HOC, S.GDKTPL),
    # Khối B
    "B00": (S.TOAN, S.HOA_HOC, S.SINH_HOC),
    "B01": (S.TOAN, S.SINH_HOC, S.LICH_SU),
    "B02": (S.TOAN, S.SINH_HOC, S.DIA_LY),
    "B03": (S.TOAN, S.SINH_HOC, S.NGU_VAN),
    "B04": (S.TOAN, S.SINH_HOC, S.GDKTPL),
    "B08": (S.TOAN, S.SINH_HOC, S.TIENG_ANH),
    # Khối C
    "C00": (S.NGU_VAN, S.LICH_SU, S.DIA_LY),
    "C01": (S.NGU_VAN, S.TOAN, S.VAT_LY),
    "C02": (S.NGU_VAN, S.TOAN, S.HOA_HOC),
    "C03": (S.NGU_VAN, S.TOAN, S.LICH_SU),
    "C04": (S.NGU_VAN, S.TOAN, S.DIA_LY),
    "C05": (S.NGU_VAN, S.VAT_LY, S.HOA_HOC),
    "C06": (S.NGU_VAN, S.VAT_LY, S.SINH_HOC),
    "C07": (S.NGU_VAN, S.VAT_LY, S.LICH_SU),
    "C08": (S.NGU_VAN, S.HOA_HOC, S.SINH_HOC),
    "C09": (S.NGU_VAN, S.VAT_LY, S.DIA_LY),
    "C10": (S.NGU_VAN, S.HOA_HOC, S.LICH_SU),
    "C12": (S.NGU_VAN, S.SINH_HOC, S.LICH_SU),
    "C13": (S.NGU_VAN, S.SINH_HOC, S.DIA_LY),
    "C14": (S.NGU_VAN, S.TOAN, S.GDKTPL),
    "C19": (S.NGU_VAN, S.LICH_SU, S.GDKTPL),
    "C20": (S.NGU_VAN, S.DIA_LY, S.GDKTPL),
    # Khối D
    "D01": (S.NGU_VAN, S.TOAN, S.TIENG_ANH),
    "D02": (S.NGU_VAN, S.TOAN, S.TIENG_NGA),
    "D03": (S.NGU_VAN, S.TOAN, S.TIENG_PHAP),
    "D04": (S.NGU_VAN, S.TOAN, S.TIENG_TRUNG),
    "D05": (S.NGU_VAN, S.TOAN, S.TIENG_DUC),
    "D06": (S.NGU_VAN, S.TOAN, S.TIENG_NHAT),
    "D07": (S.TOAN, S.HOA_HOC, S.TIENG_ANH),
    "D08": (S.TOAN, S.SINH_HOC, S.TIENG_ANH),
    "D09": (S.TOAN, S.LICH_SU, S.TIENG_ANH),
    "D10": (S.TOAN, S.DIA_LY, S.TIENG_ANH),
    "D11": (S.NGU_VAN, S.VAT_LY, S.TIENG_ANH),
    "D12": (S.NGU_VAN, S.HOA_HOC, S.TIENG_ANH),
    "D13": (S.NGU_VAN, S.SINH_HOC, S.TIENG_ANH),
    "D14": (S.NGU_VAN, S.LICH_SU, S.TIENG_ANH),
    "D15": (S.NGU_VAN, S.DIA_LY, S.TIENG_ANH),
    # 2025 program groups
    "X01": (S.TOAN, S.NGU_VAN, S.GDKTPL),
    "X02": (S.TOAN, S.NGU_VAN, S.TIN_HOC),
    "X03": (S.TOAN, S.NGU_VAN, S.CONG_NGHE_CONG_NGHIEP),
    "X04": (S.TOAN, S.NGU_VAN, S.CONG_NGHE_NONG_NGHIEP),
    "X25": (S.TOAN, S.TIENG_ANH, S.GDKTPL),
    "X26": (S.TOAN, S.TIENG_ANH, S.TIN_HOC),
    "X27": (S.TOAN, S.TIENG_ANH, S.CONG_NGHE_CONG_NGHIEP),
    "X28": (S.TOAN, S.TIENG_ANH, S.CONG_NGHE_NONG_NGHIEP),
    # Talent groups
    "H00": (S.TOAN, S.NANG_KHIEU_VE_1, S.NANG_KHIEU_VE_2),
    "H01": (S.TOAN, S.NGU_VAN, S.VE_MY_THUAT),
    "H02": (S.TOAN, S.VE_HINH_HOA_MY_THUAT, S.VE_TRANG_TRI_MAU),
    "K00": (S.TOAN, S.DOC_HIEU, S.TU_DUY_GIAI_QUYET_NGU_VAN_DE),
    "M00": (S.NGU_VAN, S.TOAN, S.DOC_DIEN_CAM, S.HAT),
    "M01": (S.NGU_VAN, S.LICH_SU, S.NANG_KHIEU),
    "M02": (S.TOAN, S.NANG_KHIEU_1, S.NANG_KHIEU_2),
    "N00": (S.NGU_VAN, S.NANG_KHIEU_AM_NHAC_1, S.NANG_KHIEU_AM_NHAC_2),
    "N01": (S.NGU_VAN, S.HAT_XUONG_AM, S.BIEU_DIEN_NGHE_THUAT),
    "N02": (S.NGU_VAN, S.KY_XUONG_AM, S.HAT_BIEU_DIEN_NHAC_CU),
    "S00": (S.NGU_VAN, S.NANG_KHIEU_SKDA_1, S.NANG_KHIEU_SKDA_2),
    "T00": (S.TOAN, S.SINH_HOC, S.NANG_KHIEU_TDTT),
    "T01": (S.TOAN, S.NGU_VAN, S.NANG_KHIEU_TDTT),
    "T02": (S.NGU_VAN, S.SINH_HOC, S.NANG_KHIEU_TDTT),
    "V00": (S.TOAN, S.VAT_LY, S.VE_MY_THUAT),
    "V01": (S.TOAN, S.NGU_VAN, S.VE_MY_THUAT),
    "V02": (S.TOAN, S.TIENG_ANH, S.VE_MY_THUAT),
}

# Groups accepted for V-SAT (Vietnamese standardized aptitude test) scores
VSAT_SUBJECT_GROUPS: Tuple[str, ...] = ("A00", "A01", "D01", "D07", "C01", "D10")


def get_all_possible_subject_groups(
    subjects: Iterable[VietnameseSubject],
) -> List[str]:
    """Group codes whose subjects are all present in `subjects`, in table order."""
    available = set(subjects)
    return [
        code
        for code, members in SUBJECT_GROUPS.items()
        if all(subject in available for subject in members)
    ]
