import enum
from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database import Base
from ..rbac_module.models import new_id


class AiStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class PathwayStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    MASTERED = "mastered"


class Student(Base):
    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    school_id: Mapped[str] = mapped_column(ForeignKey("schools.id"), nullable=False, index=True)
    child_name: Mapped[str] = mapped_column(String(255), nullable=False)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(32), nullable=True)
    class_name: Mapped[str | None] = mapped_column("class", String(64), nullable=True)
    enrollment_date: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)
    status: Mapped[str] = mapped_column(String(32), default="active", nullable=False)

    assessments: Mapped[list["StudentAssessment"]] = relationship(back_populates="student")
    pathway_progress: Mapped[list["StudentPathwayProgress"]] = relationship(back_populates="student")


class StudentAssessment(Base):
    __tablename__ = "student_assessments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    school_id: Mapped[str | None] = mapped_column(ForeignKey("schools.id"), nullable=True, index=True)
    student_id: Mapped[str | None] = mapped_column(ForeignKey("students.id"), nullable=True, index=True)
    facilitator_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    child_name: Mapped[str] = mapped_column(String(255), nullable=False)
    assessment_data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    ai_summary: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    ai_status: Mapped[str] = mapped_column(String(32), default=AiStatus.PENDING.value, nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    student: Mapped[Student | None] = relationship(back_populates="assessments")


class SkillPathway(Base):
    __tablename__ = "skill_pathways"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    pathway_name: Mapped[str] = mapped_column(String(255), nullable=False)
    problem_category: Mapped[str] = mapped_column(String(128), unique=True, nullable=False, index=True)
    goal_description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    parent_home_activity_suggestion: Mapped[str | None] = mapped_column(Text, nullable=True)


class StudentPathwayProgress(Base):
    # No uniqueness on (student_id, pathway_id): re-processing an assessment appends rows.
    __tablename__ = "student_pathway_progress"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    student_id: Mapped[str] = mapped_column(ForeignKey("students.id"), nullable=False, index=True)
    pathway_id: Mapped[str] = mapped_column(ForeignKey("skill_pathways.id"), nullable=False)
    current_step: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    status: Mapped[str] = mapped_column(String(32), default=PathwayStatus.NOT_STARTED.value, nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    mastered_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    student: Mapped[Student] = relationship(back_populates="pathway_progress")
    pathway: Mapped[SkillPathway] = relationship()
