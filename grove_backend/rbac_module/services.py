import logging
import re

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .models import (
    Admin,
    AuthUser,
    GroveModule,
    Parent,
    Role,
    School,
    SchoolUnlockedModule,
    SubscriptionStatus,
    Teacher,
)
from .navigation import AI_COPILOT, FINANCIALS
from .schemas import UserProfile
from .security import hash_password, issue_session_token, verify_password

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")

# Lookup order when resolving which role an auth user holds.
ROLE_TABLES: tuple[tuple[Role, type], ...] = (
    (Role.ADMIN, Admin),
    (Role.TEACHER, Teacher),
    (Role.PARENT, Parent),
)

MODULE_CATALOG = (
    (FINANCIALS, "Financial Management", "Fee structures, payment plans and transaction tracking."),
    (AI_COPILOT, "AI Co-Pilot", "Proactive alerts about students and teachers who need support."),
    ("COMPLIANCE_PLUS", "Compliance Plus", "Document expiry reminders and audit-ready exports."),
)


def _normalize_email(value: str) -> str:
    normalized = value.lower().strip()
    if not EMAIL_PATTERN.match(normalized):
        raise HTTPException(status_code=400, detail="Invalid email format")
    return normalized


def get_unlocked_module_ids(db: Session, school_id: str | None) -> list[str]:
    if not school_id:
        return []
    rows = (
        db.query(SchoolUnlockedModule.module_id)
        .filter(SchoolUnlockedModule.school_id == school_id)
        .order_by(SchoolUnlockedModule.module_id)
        .all()
    )
    return [row.module_id for row in rows]


def resolve_profile(db: Session, auth_id: str) -> UserProfile | None:
    for role, table in ROLE_TABLES:
        record = db.query(table).filter(table.auth_id == auth_id).first()
        if record is None:
            continue
        school_id = getattr(record, "school_id", None)
        return UserProfile(
            id=record.id,
            auth_id=auth_id,
            school_id=school_id,
            name=record.name,
            email=record.email,
            role=role,
            status=getattr(record, "status", None),
            unlocked_modules=get_unlocked_module_ids(db, school_id),
        )
    logger.warning(f"Authenticated user not found in any role table: {auth_id}")
    return None


def login_user(db: Session, *, email: str, password: str) -> tuple[str, UserProfile]:
    user = db.query(AuthUser).filter(AuthUser.email == _normalize_email(email)).first()
    if not user or not user.is_active or not verify_password(password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    profile = resolve_profile(db, user.id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account has no role in this system")
    return issue_session_token(user.id, profile.role), profile


def list_modules(db: Session) -> list[GroveModule]:
    return db.query(GroveModule).order_by(GroveModule.module_name).all()


def activate_module(db: Session, *, school_id: str, module_id: str) -> list[str]:
    if not db.query(GroveModule).filter(GroveModule.id == module_id).first():
        raise HTTPException(status_code=404, detail="Module not found")
    exists = (
        db.query(SchoolUnlockedModule)
        .filter(SchoolUnlockedModule.school_id == school_id, SchoolUnlockedModule.module_id == module_id)
        .first()
    )
    if not exists:
        db.add(SchoolUnlockedModule(school_id=school_id, module_id=module_id))
        try:
            db.commit()
        except IntegrityError:
            # Concurrent activation already inserted the row.
            db.rollback()
        else:
            logger.info(f"Module {module_id} unlocked for school {school_id}")
    return get_unlocked_module_ids(db, school_id)


def create_account(
    db: Session,
    *,
    role: Role,
    email: str,
    password: str,
    name: str,
    school_id: str | None = None,
) -> AuthUser:
    email = _normalize_email(email)
    if db.query(AuthUser).filter(AuthUser.email == email).first():
        raise HTTPException(status_code=409, detail="Email already exists")
    if role is not Role.PARENT and not school_id:
        raise HTTPException(status_code=400, detail=f"{role.value} accounts require a school")

    user = AuthUser(email=email, password_hash=hash_password(password))
    db.add(user)
    db.flush()
    if role is Role.ADMIN:
        db.add(Admin(auth_id=user.id, school_id=school_id, name=name, email=email))
    elif role is Role.TEACHER:
        db.add(Teacher(auth_id=user.id, school_id=school_id, name=name, email=email))
    else:
        db.add(Parent(auth_id=user.id, name=name, email=email))
    db.commit()
    db.refresh(user)
    return user


def seed_module_catalog(db: Session) -> None:
    for module_id, name, description in MODULE_CATALOG:
        if db.query(GroveModule).filter(GroveModule.id == module_id).first():
            continue
        db.add(GroveModule(id=module_id, module_name=name, description=description))
    db.commit()


def seed_default_users(db: Session) -> None:
    school = db.query(School).filter(School.school_name == "Grove Demo School").first()
    if school is None:
        school = School(school_name="Grove Demo School", subscription_status=SubscriptionStatus.ACTIVE.value)
        db.add(school)
        db.commit()

    defaults = [
        ("admin@grove.local", Role.ADMIN, "Demo Admin"),
        ("teacher@grove.local", Role.TEACHER, "Demo Teacher"),
        ("parent@grove.local", Role.PARENT, "Demo Parent"),
    ]
    for email, role, name in defaults:
        if db.query(AuthUser).filter(AuthUser.email == email).first():
            continue
        create_account(db, role=role, email=email, password="ChangeMe@123", name=name, school_id=school.id)
