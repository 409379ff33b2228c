import logging
from datetime import datetime

from fastapi import HTTPException
from sqlalchemy.orm import Session, selectinload

from ..enrollment_module.models import Student, StudentPathwayProgress
from ..rbac_module.models import Role, Teacher
from .models import AIAlert, AlertStatus, SchoolEvent
from .schemas import AssessmentOut, PathwayProgressOut, StudentDetailOut, StudentOut

logger = logging.getLogger(__name__)


def list_students(db: Session, *, school_id: str) -> list[Student]:
    return (
        db.query(Student)
        .filter(Student.school_id == school_id, Student.status == "active")
        .order_by(Student.child_name)
        .all()
    )


def get_student_detail(db: Session, *, school_id: str, student_id: str) -> StudentDetailOut:
    student = (
        db.query(Student)
        .options(
            selectinload(Student.assessments),
            selectinload(Student.pathway_progress).selectinload(StudentPathwayProgress.pathway),
        )
        .filter(Student.id == student_id, Student.school_id == school_id)
        .first()
    )
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    assessments = [
        AssessmentOut.model_validate(a) for a in sorted(student.assessments, key=lambda a: a.submitted_at)
    ]
    progress = [
        PathwayProgressOut(
            pathway_id=p.pathway_id,
            pathway_name=p.pathway.pathway_name,
            goal_description=p.pathway.goal_description,
            current_step=p.current_step,
            status=p.status,
            started_at=p.started_at,
            mastered_at=p.mastered_at,
        )
        for p in student.pathway_progress
    ]
    return StudentDetailOut(
        **StudentOut.model_validate(student).model_dump(), assessments=assessments, pathway_progress=progress
    )


def list_teachers(db: Session, *, school_id: str) -> list[Teacher]:
    return db.query(Teacher).filter(Teacher.school_id == school_id).order_by(Teacher.name).all()


def get_co_pilot_feed(db: Session, *, school_id: str) -> list[AIAlert]:
    return (
        db.query(AIAlert)
        .filter(AIAlert.school_id == school_id, AIAlert.status != AlertStatus.DISMISSED.value)
        .order_by(AIAlert.created_at.desc())
        .all()
    )


def update_alert_status(db: Session, *, school_id: str, alert_id: str, status: str) -> AIAlert:
    alert = db.query(AIAlert).filter(AIAlert.id == alert_id, AIAlert.school_id == school_id).first()
    if not alert:
        raise HTTPException(status_code=404, detail="Alert not found")
    alert.status = AlertStatus(status).value
    db.commit()
    db.refresh(alert)
    logger.info(f"Alert {alert_id} marked {alert.status}")
    return alert


def list_upcoming_events(db: Session, *, school_id: str, role: Role, now: datetime | None = None) -> list[SchoolEvent]:
    now = now or datetime.utcnow()
    events = (
        db.query(SchoolEvent)
        .filter(SchoolEvent.school_id == school_id, SchoolEvent.start_time >= now)
        .order_by(SchoolEvent.start_time)
        .all()
    )
    # An empty audience means the whole school.
    return [event for event in events if not event.audience or role.value in event.audience]
