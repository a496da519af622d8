"""
Repository Layer for the UniGuide prediction backend

Exports all repository classes for dependency injection.
"""

from uniguide.infrastructure.db.repositories.base_repository import (
    BaseRepository,
    IReadRepository,
)
from uniguide.infrastructure.db.repositories.prediction_result_repository import (
    PredictionResultRepository,
)
from uniguide.infrastructure.db.repositories.admission_repository import (
    AdmissionRepository,
    StudentAdmissionRepository,
)
from uniguide.infrastructure.db.repositories.student_repository import (
    StudentRepository,
    UserAccountRepository,
)
from uniguide.infrastructure.db.repositories.ocr_result_repository import (
    OcrResultRepository,
)


__all__ = [
    # Base
    "BaseRepository",
    "IReadRepository",
    # Repositories
    "PredictionResultRepository",
    "AdmissionRepository",
    "StudentAdmissionRepository",
    "StudentRepository",
    "UserAccountRepository",
    "OcrResultRepository",
]
