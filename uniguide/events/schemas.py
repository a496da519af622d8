"""
Event payload schemas

Inbound pub/sub messages are untyped JSON. parse_event() validates them into
these models and returns a tagged result instead of raising, so listeners can
log and drop malformed messages.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class EventModel(BaseModel):
    """Base for event payloads: camelCase on the wire, unknown keys ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class StudentCreatedEvent(EventModel):
    student_id: UUID = Field(..., alias="studentId")
    user_id: Optional[UUID] = Field(default=None, alias="userId")


class TranscriptChangedEvent(EventModel):
    """Sent on transcript:created and transcript:updated."""

    student_id: UUID = Field(..., alias="studentId")
    transcript_ids: List[UUID] = Field(..., alias="transcriptIds")
    user_id: Optional[UUID] = Field(default=None, alias="userId")


class FileCreatedEvent(EventModel):
    """One uploaded file (fileId) or a batch (fileIds)."""

    student_id: UUID = Field(..., alias="studentId")
    file_id: Optional[UUID] = Field(default=None, alias="fileId")
    file_ids: List[UUID] = Field(default_factory=list, alias="fileIds")
    user_id: Optional[UUID] = Field(default=None, alias="userId")

    @model_validator(mode="after")
    def require_file(self) -> "FileCreatedEvent":
        if self.file_id is None and not self.file_ids:
            raise ValueError("fileId or fileIds is required")
        return self

    @property
    def all_file_ids(self) -> List[UUID]:
        ids = list(self.file_ids)
        if self.file_id is not None:
            ids.insert(0, self.file_id)
        return list(dict.fromkeys(ids))


class OcrBatchCompletedEvent(EventModel):
    """Internal event raised when a student's OCR results form a complete set."""

    student_id: UUID = Field(..., alias="studentId")
    ocr_result_ids: List[UUID] = Field(..., alias="ocrResultIds")
    user_id: Optional[UUID] = Field(default=None, alias="userId")


E = TypeVar("E", bound=EventModel)


@dataclass(frozen=True)
class EventParseOk(Generic[E]):
    payload: E


@dataclass(frozen=True)
class EventSchemaError:
    errors: List[Dict[str, Any]]
    raw: Any = field(default=None, repr=False)

    def describe(self) -> str:
        return "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))} - {error.get('msg', '')}"
            for error in self.errors
        )


EventParseResult = Union[EventParseOk[E], EventSchemaError]


def parse_event(schema: Type[E], raw: Any) -> EventParseResult:
    """
    Validate a raw pub/sub payload against `schema`.

    Args:
        schema: Event model to validate into
        raw: dict, JSON string or bytes

    Returns:
        EventParseOk with the payload, or EventSchemaError with the errors
    """
    data = raw
    if isinstance(data, (bytes, bytearray)):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            return EventSchemaError(errors=[{"loc": (), "msg": f"Invalid encoding: {e}"}], raw=raw)
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            return EventSchemaError(errors=[{"loc": (), "msg": f"Invalid JSON: {e.msg}"}], raw=raw)
    if not isinstance(data, dict):
        return EventSchemaError(
            errors=[{"loc": (), "msg": f"Expected an object, got {type(data).__name__}"}],
            raw=raw,
        )

    try:
        return EventParseOk(payload=schema.model_validate(data))
    except ValidationError as e:
        return EventSchemaError(
            errors=[{"loc": error["loc"], "msg": error["msg"]} for error in e.errors()],
            raw=raw,
        )
