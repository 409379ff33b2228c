from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class StudentOut(OrmModel):
    id: str
    school_id: str
    child_name: str
    date_of_birth: date | None = None
    gender: str | None = None
    class_name: str | None = Field(default=None, serialization_alias="class")
    enrollment_date: date
    status: str


class AssessmentOut(OrmModel):
    id: str
    assessment_data: dict[str, Any]
    ai_summary: dict[str, Any] | None = None
    ai_status: str
    submitted_at: datetime


class PathwayProgressOut(BaseModel):
    pathway_id: str
    pathway_name: str
    goal_description: str
    current_step: int
    status: str
    started_at: datetime
    mastered_at: datetime | None = None


class StudentDetailOut(StudentOut):
    assessments: list[AssessmentOut] = Field(default_factory=list)
    pathway_progress: list[PathwayProgressOut] = Field(default_factory=list)


class TeacherOut(OrmModel):
    id: str
    school_id: str
    name: str
    email: str
    phone_number: str | None = None
    status: str


class AlertOut(OrmModel):
    id: str
    school_id: str
    alert_type: str
    details: dict[str, Any]
    status: str
    created_at: datetime


class AlertStatusUpdate(BaseModel):
    status: Literal["viewed", "dismissed"]


class EventOut(OrmModel):
    id: str
    school_id: str
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    audience: list[str]
