from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so stored and catalog timestamps compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileDescriptor(BaseModel):
    """One submitted file in a task roster, as reported by the file catalog."""

    student_id: str
    updated_at: datetime
    content_locator: str

    @field_validator("updated_at")
    @classmethod
    def validate_updated_at(cls, v: datetime) -> datetime:
        return as_utc(v)


class Task(BaseModel):
    id: str
    analysis_started_at: datetime

    @field_validator("analysis_started_at")
    @classmethod
    def validate_started_at(cls, v: datetime) -> datetime:
        return as_utc(v)


class PlagiarismReport(BaseModel):
    """Persisted result of comparing the files of two students within a task."""

    id: UUID = Field(default_factory=uuid4)
    task_id: str
    student_a: str
    student_b: str
    similarity: float = Field(ge=0.0, le=1.0)
    file_a_handed_over_at: datetime
    file_b_handed_over_at: datetime

    @field_validator("file_a_handed_over_at", "file_b_handed_over_at")
    @classmethod
    def validate_handed_over_at(cls, v: datetime) -> datetime:
        return as_utc(v)


class AggregatedMatch(BaseModel):
    """Best match of one student, seen from that student's side."""

    student: str
    matched_student: str
    max_similarity: float
    matched_file_handed_over_at: Optional[datetime] = None


class TaskReport(BaseModel):
    task_id: str
    started_at: datetime
    reports: List[AggregatedMatch] = Field(default_factory=list)
