from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..database import get_db_session
from ..rbac_module.middleware import require_roles
from ..rbac_module.models import Role
from ..rbac_module.schemas import UserProfile
from .errors import EnrollmentError, InvalidRequestError
from .pipeline import EnrollmentPipeline
from .schemas import EnrollmentResult, EnrollmentSubmitRequest, EnrollmentSubmitResponse, ProcessEnrollmentRequest
from .services import build_enrollment_store, submit_enrollment

PROCESS_ENROLLMENT_PATH = "/functions/v1/process-enrollment"

router = APIRouter(tags=["Enrollment"])


def get_enrollment_pipeline(db: Session = Depends(get_db_session)) -> EnrollmentPipeline:
    return EnrollmentPipeline(build_enrollment_store(db))


async def enrollment_error_handler(request: Request, exc: EnrollmentError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # The processing function answers every failure with {"error": ...}, even unparseable JSON.
    if request.url.path == PROCESS_ENROLLMENT_PATH:
        return await enrollment_error_handler(request, InvalidRequestError("Request body must be valid JSON."))
    return await request_validation_exception_handler(request, exc)


def _requested_assessment_id(body: Any) -> str | None:
    try:
        return ProcessEnrollmentRequest.model_validate(body or {}).assessment_id
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "body"
        raise InvalidRequestError(f"Invalid {field}: {error['msg']}") from exc


@router.post(PROCESS_ENROLLMENT_PATH, response_model=EnrollmentResult)
def process_enrollment(
    _: UserProfile = Depends(require_roles(Role.ADMIN)),
    pipeline: EnrollmentPipeline = Depends(get_enrollment_pipeline),
    body: Any = Body(default=None),
):
    return pipeline.process(_requested_assessment_id(body))


@router.post(
    "/api/v1/enrollments",
    response_model=EnrollmentSubmitResponse,
    status_code=status.HTTP_201_CREATED,
)
def enroll_student(
    payload: EnrollmentSubmitRequest,
    profile: UserProfile = Depends(require_roles(Role.ADMIN)),
    db: Session = Depends(get_db_session),
    pipeline: EnrollmentPipeline = Depends(get_enrollment_pipeline),
):
    return submit_enrollment(db, pipeline, payload=payload, actor=profile)
