import enum
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..database import Base
from ..rbac_module.models import new_id


class AlertType(str, enum.Enum):
    STUDENT_AT_RISK = "STUDENT_AT_RISK"
    STUDENT_STRUGGLING = "STUDENT_STRUGGLING"
    STUDENT_DISENGAGED = "STUDENT_DISENGAGED"
    TEACHER_SUPPORT_NEEDED = "TEACHER_SUPPORT_NEEDED"


class AlertStatus(str, enum.Enum):
    NEW = "new"
    VIEWED = "viewed"
    DISMISSED = "dismissed"


class AIAlert(Base):
    __tablename__ = "ai_alerts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    school_id: Mapped[str] = mapped_column(ForeignKey("schools.id"), nullable=False, index=True)
    alert_type: Mapped[str] = mapped_column(String(64), nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    status: Mapped[str] = mapped_column(String(32), default=AlertStatus.NEW.value, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class SchoolEvent(Base):
    __tablename__ = "school_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    school_id: Mapped[str] = mapped_column(ForeignKey("schools.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    end_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    # Role values ("admin", "teacher", "parent") the event is shown to.
    audience: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
