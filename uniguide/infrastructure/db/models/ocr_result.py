"""
OcrResult SQLModel

Tracks OCR extraction of an uploaded transcript file.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import Column, JSON
from sqlmodel import Field

from uniguide.domain.enums import OcrStatus
from uniguide.infrastructure.db.models.base import BaseModel


class OcrResult(BaseModel, table=True):
    """OCR extraction record for one uploaded file."""

    __tablename__ = "ocr_results"

    student_id: UUID = Field(
        ...,
        foreign_key="students.id",
        index=True,
    )
    file_id: UUID = Field(
        ...,
        unique=True,
        index=True,
        description="Uploaded file the OCR ran on"
    )
    status: OcrStatus = Field(
        default=OcrStatus.PROCESSING,
        index=True,
    )
    grade: Optional[int] = Field(default=None, ge=10, le=12)
    semester: Optional[int] = Field(default=None, ge=1, le=2)
    scores: List[Dict[str, Any]] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
        description="[{subject, score}] extracted by OCR"
    )
    error_message: Optional[str] = Field(default=None)
    created_by: str = Field(..., max_length=255)
