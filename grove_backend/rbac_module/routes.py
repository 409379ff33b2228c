from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db_session
from .middleware import get_current_profile, require_roles, require_school
from .models import Role
from .navigation import dashboard_path_for, visible_navigation
from .schemas import (
    LoginRequest,
    LoginResponse,
    ModuleOut,
    NavItemOut,
    ProfileOut,
    SchoolModulesOut,
    UserProfile,
)
from .services import activate_module, get_unlocked_module_ids, list_modules, login_user

router = APIRouter(prefix="/api/v1", tags=["Auth & Modules"])


@router.post("/auth/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db_session)):
    token, profile = login_user(db, email=payload.email, password=payload.password)
    return LoginResponse(access_token=token, role=profile.role, dashboard_path=dashboard_path_for(profile.role))


@router.get("/me", response_model=ProfileOut)
def me(profile: UserProfile = Depends(get_current_profile)):
    return ProfileOut(**profile.model_dump(), dashboard_path=dashboard_path_for(profile.role))


@router.get("/me/navigation", response_model=list[NavItemOut])
def navigation(profile: UserProfile = Depends(get_current_profile)):
    return [
        NavItemOut(path=item.path, label=item.label, module_required=item.module_required)
        for item in visible_navigation(profile)
    ]


@router.get("/modules", response_model=list[ModuleOut])
def available_modules(db: Session = Depends(get_db_session), _: UserProfile = Depends(get_current_profile)):
    return [ModuleOut(id=m.id, module_name=m.module_name, description=m.description) for m in list_modules(db)]


@router.get("/schools/me/modules", response_model=SchoolModulesOut)
def school_modules(
    db: Session = Depends(get_db_session),
    profile: UserProfile = Depends(require_roles(Role.ADMIN, Role.TEACHER)),
):
    school_id = require_school(profile)
    return SchoolModulesOut(school_id=school_id, unlocked_modules=get_unlocked_module_ids(db, school_id))


@router.post("/schools/me/modules/{module_id}", response_model=SchoolModulesOut)
def unlock_module(
    module_id: str,
    db: Session = Depends(get_db_session),
    profile: UserProfile = Depends(require_roles(Role.ADMIN)),
):
    school_id = require_school(profile)
    unlocked = activate_module(db, school_id=school_id, module_id=module_id)
    return SchoolModulesOut(school_id=school_id, unlocked_modules=unlocked)
