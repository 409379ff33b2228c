from pydantic import BaseModel, Field

from .models import Role


class LoginRequest(BaseModel):
    email: str = Field(min_length=5, max_length=255)
    password: str = Field(min_length=8)


class UserProfile(BaseModel):
    id: str
    auth_id: str
    school_id: str | None = None
    name: str
    email: str
    role: Role
    status: str | None = None
    unlocked_modules: list[str] = Field(default_factory=list)

    def has_module(self, module_id: str) -> bool:
        return module_id in self.unlocked_modules


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role
    dashboard_path: str


class ProfileOut(UserProfile):
    dashboard_path: str


class NavItemOut(BaseModel):
    path: str
    label: str
    module_required: str | None = None


class ModuleOut(BaseModel):
    id: str
    module_name: str
    description: str


class SchoolModulesOut(BaseModel):
    school_id: str
    unlocked_modules: list[str]
