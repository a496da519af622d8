"""
PredictionResult SQLModel

One row per prediction pipeline execution for one student. The row is created
in PROCESSING and moved exactly once to a terminal status by the same run.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel

from uniguide.domain.enums import PredictionResultStatus
from uniguide.infrastructure.db.models.base import BaseModel


ANONYMOUS_ACTOR = "ANONYMOUS"


class PredictionResultBase(SQLModel):
    """Shared fields for prediction results."""

    student_id: UUID = Field(
        ...,
        foreign_key="students.id",
        index=True,
        description="Student the prediction run belongs to"
    )
    user_id: Optional[UUID] = Field(
        default=None,
        index=True,
        description="Owning user, NULL for anonymous students"
    )
    status: PredictionResultStatus = Field(
        default=PredictionResultStatus.PROCESSING,
        index=True,
        description="Run status (state machine)"
    )
    created_by: str = Field(
        default=ANONYMOUS_ACTOR,
        max_length=255,
        description="Email of the acting user or ANONYMOUS"
    )
    updated_by: Optional[str] = Field(
        default=None,
        max_length=255,
    )


class PredictionResult(PredictionResultBase, BaseModel, table=True):
    """
    Prediction run record.

    NULL tier columns mean the tier was not attempted in this run; an empty
    list means it was attempted and produced nothing.
    """

    __tablename__ = "prediction_results"

    l1_results: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        sa_column=Column(JSON),
        description="Tier-1 results grouped by priority type"
    )
    l2_results: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        sa_column=Column(JSON),
        description="Tier-2 results, one entry per admission code"
    )
    l3_results: Optional[List[Dict[str, Any]]] = Field(
        default=None,
        sa_column=Column(JSON),
        description="Tier-3 results, each keyed by university code"
    )
