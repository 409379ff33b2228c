from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FocusArea(BaseModel):
    category: str
    reason: str


class ProfileSummary(BaseModel):
    focus_areas: list[FocusArea] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    interests: str = "Not specified"

    @property
    def categories(self) -> list[str]:
        return [area.category for area in self.focus_areas]


class PathwayOut(BaseModel):
    id: str
    pathway_name: str
    problem_category: str


def answer_set(raw: Any) -> dict[str, Any]:
    """Stored questionnaire answers as a dict; anything but a JSON object counts as no answers."""
    return dict(raw) if isinstance(raw, Mapping) else {}


@dataclass(frozen=True)
class AssessmentRecord:
    id: str
    student_id: str | None
    child_name: str
    assessment_data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PathwayAssignment:
    student_id: str | None
    pathway_id: str

    def as_params(self) -> dict[str, Any]:
        return {"student_id": self.student_id, "pathway_id": self.pathway_id}


class ProcessEnrollmentRequest(BaseModel):
    assessment_id: str | None = None


class EnrollmentResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: ProfileSummary
    recommended_pathways: list[PathwayOut] = Field(default_factory=list, alias="recommendedPathways")


class EnrollmentSubmitRequest(BaseModel):
    """Intake questionnaire; unknown answer fields are kept in the stored answer set."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    child_name: str = Field(min_length=1, max_length=255)
    date_of_birth: date | None = None
    gender: str | None = None
    class_name: str | None = Field(default=None, alias="class")
    father_name: str | None = None
    mother_name: str | None = None
    language_skills: str | None = None
    motor_skills: str | None = None
    cognitive_skills: str | None = None
    learning_style: list[str] = Field(default_factory=list)
    interests: str | None = None
    concerns: list[str] = Field(default_factory=list)
    goals: list[str] = Field(default_factory=list)


class EnrollmentSubmitResponse(EnrollmentResult):
    student_id: str
    assessment_id: str
