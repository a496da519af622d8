"""
SQLModel ORM Models for the UniGuide prediction backend

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from uniguide.infrastructure.db.models.base import (
    BaseModel,
    TimestampMixin,
    UUIDMixin,
)
from uniguide.infrastructure.db.models.user_account import UserAccount
from uniguide.infrastructure.db.models.student import Student, Transcript
from uniguide.infrastructure.db.models.ocr_result import OcrResult
from uniguide.infrastructure.db.models.admission import Admission
from uniguide.infrastructure.db.models.student_admission import StudentAdmission
from uniguide.infrastructure.db.models.prediction_result import (
    ANONYMOUS_ACTOR,
    PredictionResult,
)


__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "UUIDMixin",
    # Profile side (read-only here)
    "UserAccount",
    "Student",
    "Transcript",
    "OcrResult",
    "Admission",
    # Written by the pipeline
    "StudentAdmission",
    "PredictionResult",
    "ANONYMOUS_ACTOR",
]
