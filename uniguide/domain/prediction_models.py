"""
Prediction service wire models

Request payloads sent to the external prediction service and the response
shapes it must return. Responses are validated before any orchestrator uses
them; a body that does not fit is a call failure.
"""

from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# L1 - coarse ranking
# =============================================================================

class L1PredictRequest(BaseModel):
    """One L1 input: priority flags, award subjects and a major group."""
    ahld: int = Field(0, ge=0, le=1)
    cong_lap: int = Field(..., ge=0, le=1)
    dan_toc_thieu_so: int = Field(0, ge=0, le=1)
    haimuoi_huyen_ngheo_tnb: int = Field(0, ge=0, le=1)
    hoc_phi: float = Field(..., ge=0)
    hsg_1: Union[int, str] = 0
    hsg_2: Union[int, str] = 0
    hsg_3: Union[int, str] = 0
    nhom_nganh: int
    tinh_tp: str


class L1PredictResult(BaseModel):
    """Admission codes and scores for one priority type (loai_uu_tien)."""
    model_config = ConfigDict(extra="ignore")

    loai_uu_tien: str
    ma_xet_tuyen: Dict[str, float]


# =============================================================================
# L2 - refined ranking
# =============================================================================

class L2PredictRequest(BaseModel):
    """One L2 input: an exam scenario crossed with a major group and certificate."""
    cong_lap: int = Field(..., ge=0, le=1)
    diem_ccta: str = "0"
    diem_chuan: float
    hk10: int = Field(..., ge=1, le=4)
    hk11: int = Field(..., ge=1, le=4)
    hk12: int = Field(..., ge=1, le=4)
    hl10: int = Field(..., ge=1, le=4)
    hl11: int = Field(..., ge=1, le=4)
    hl12: int = Field(..., ge=1, le=4)
    hoc_phi: float = Field(..., ge=0)
    nhom_nganh: int
    ten_ccta: str = "0"
    tinh_tp: str
    to_hop_mon: str


class L2PredictResult(BaseModel):
    """Score for one admission code; extra model metadata is kept."""
    model_config = ConfigDict(extra="allow")

    ma_xet_tuyen: str
    score: float


# =============================================================================
# L3 - program-specific scoring
# =============================================================================

class AwardQG(BaseModel):
    level: int = Field(..., ge=1, le=4)
    subject: str


class DgnlScore(BaseModel):
    language_score: float
    math_score: float
    science_logic: float


class TranscriptGradeScores(BaseModel):
    """Averaged transcript scores of one school year."""
    anh: float = 0.0
    cong_nghe_cong_nghiep: float = 0.0
    dia: float = 0.0
    gdkt_pl: float = 0.0
    hoa: float = 0.0
    ly: float = 0.0
    sinh: float = 0.0
    su: float = 0.0
    tin: float = 0.0
    toan: float = 0.0
    van: float = 0.0


class TranscriptRecord(BaseModel):
    grade_10: TranscriptGradeScores
    grade_11: TranscriptGradeScores
    grade_12: TranscriptGradeScores


class InterCer(BaseModel):
    name: str
    score: float


class SubjectScoreL3(BaseModel):
    score: float
    subject_name: str


class NationalExamL3(BaseModel):
    math_score: SubjectScoreL3
    literature_score: SubjectScoreL3
    elective_1_score: SubjectScoreL3
    elective_2_score: SubjectScoreL3


class L3PredictRequest(BaseModel):
    award_english: Optional[str] = None
    award_qg: Optional[AwardQG] = None
    cong_lap: int = Field(..., ge=0, le=1)
    dgnl: Optional[DgnlScore] = None
    hoc_ba: TranscriptRecord
    hoc_phi: float = Field(..., ge=0)
    int_cer: Optional[InterCer] = None
    nang_khieu: Optional[Dict[str, float]] = None
    nhom_nganh: int
    priority_object: int = 0
    priority_region: int = 0
    thpt: Optional[NationalExamL3] = None
    tinh_tp: str


class L3PredictionItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    best_to_hop: List[str]
    best_to_hop_score: float
    bonus_points: float
    diem_chuan: float
    ma_nganh: str
    nhom_nganh: int
    ten_nganh: str
    total_score: float
    # Admission id, when the service could resolve it
    id: Optional[str] = None


class L3PredictResult(BaseModel):
    """Predictions keyed by university code."""
    model_config = ConfigDict(extra="ignore")

    result: Dict[str, List[L3PredictionItem]]


PredictRequest = Union[L1PredictRequest, L2PredictRequest, L3PredictRequest]
