from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..rbac_module.middleware import require_module, require_roles, require_school
from ..rbac_module.models import Role
from ..rbac_module.navigation import AI_COPILOT
from ..rbac_module.schemas import UserProfile
from .schemas import AlertOut, AlertStatusUpdate, EventOut, StudentDetailOut, StudentOut, TeacherOut
from .services import (
    get_co_pilot_feed,
    get_student_detail,
    list_students,
    list_teachers,
    list_upcoming_events,
    update_alert_status,
)

router = APIRouter(prefix="/api/v1", tags=["School"])

staff_only = require_roles(Role.ADMIN, Role.TEACHER)
co_pilot_access = require_module(AI_COPILOT, Role.ADMIN)


@router.get("/students", response_model=list[StudentOut])
def students(db: Session = Depends(get_db_session), profile: UserProfile = Depends(staff_only)):
    return list_students(db, school_id=require_school(profile))


@router.get("/students/{student_id}", response_model=StudentDetailOut)
def student_detail(student_id: str, db: Session = Depends(get_db_session), profile: UserProfile = Depends(staff_only)):
    return get_student_detail(db, school_id=require_school(profile), student_id=student_id)


@router.get("/teachers", response_model=list[TeacherOut])
def teachers(db: Session = Depends(get_db_session), profile: UserProfile = Depends(require_roles(Role.ADMIN))):
    return list_teachers(db, school_id=require_school(profile))


@router.get("/co-pilot/alerts", response_model=list[AlertOut])
def co_pilot_alerts(db: Session = Depends(get_db_session), profile: UserProfile = Depends(co_pilot_access)):
    return get_co_pilot_feed(db, school_id=require_school(profile))


@router.patch("/co-pilot/alerts/{alert_id}", response_model=AlertOut)
def co_pilot_alert_status(
    alert_id: str,
    payload: AlertStatusUpdate,
    db: Session = Depends(get_db_session),
    profile: UserProfile = Depends(co_pilot_access),
):
    return update_alert_status(db, school_id=require_school(profile), alert_id=alert_id, status=payload.status)


@router.get("/events", response_model=list[EventOut])
def events(db: Session = Depends(get_db_session), profile: UserProfile = Depends(staff_only)):
    return list_upcoming_events(db, school_id=require_school(profile), role=profile.role)
