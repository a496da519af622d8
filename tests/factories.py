"""
Builders shared by the unit tests.
"""

from typing import Any, Dict
from unittest.mock import MagicMock
from uuid import uuid4

from uniguide.domain.student_profile import StudentProfile


def build_profile(**overrides: Any) -> StudentProfile:
    """Student profile with a complete national exam (Toán, Ngữ Văn, Vật Lý, Tiếng Anh)."""
    data: Dict[str, Any] = {
        "student_id": uuid4(),
        "user_id": None,
        "province": "Hồ Chí Minh",
        "uni_type": "Công lập",
        "min_budget": 10_000_000,
        "max_budget": 30_000_000,
        "majors": ["Máy tính và công nghệ thông tin"],
        "national_exams": [
            {"name": "Toán", "score": 8.0},
            {"name": "Ngữ Văn", "score": 7.0},
            {"name": "Vật Lý", "score": 8.5},
            {"name": "Tiếng Anh", "score": 9.0},
        ],
        "conducts": [
            {"grade": 10, "conduct": "Tốt"},
            {"grade": 11, "conduct": "Tốt"},
            {"grade": 12, "conduct": "Khá"},
        ],
        "academic_performances": [
            {"grade": 10, "academic_performance": "Khá"},
            {"grade": 11, "academic_performance": "Tốt"},
            {"grade": 12, "academic_performance": "Tốt"},
        ],
    }
    data.update(overrides)
    return StudentProfile(**data)


def scalars_result(items):
    """Mock of an execute() result whose scalars().all()/first() return `items`."""
    items = list(items)
    result = MagicMock()
    result.scalars.return_value.all.return_value = items
    result.scalars.return_value.first.return_value = items[0] if items else None
    result.scalar_one_or_none.return_value = items[0] if items else None
    return result
