import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ..config import settings
from ..rbac_module.schemas import UserProfile
from .models import SkillPathway, Student, StudentAssessment
from .pipeline import EnrollmentPipeline
from .schemas import EnrollmentSubmitRequest, EnrollmentSubmitResponse
from .store import EnrollmentStore, SqlAlchemyEnrollmentStore
from .supabase_store import SupabaseEnrollmentStore

logger = logging.getLogger(__name__)

SKILL_PATHWAY_CATALOG = (
    (
        "Language Skills",
        "Little Talkers",
        "Build expressive vocabulary and comprehension through stories, songs and guided conversation.",
        "Read a picture book together and ask your child to name three things on each page.",
    ),
    (
        "Social & Emotional Skills",
        "Friendship Garden",
        "Practise turn-taking, sharing and naming feelings in small-group play.",
        "Play a simple board game and narrate whose turn it is.",
    ),
    (
        "Motor Skills",
        "Busy Hands",
        "Strengthen fine motor control with threading, cutting and drawing activities.",
        "Thread large beads onto a shoelace to make a necklace.",
    ),
)


def build_enrollment_store(db: Session) -> EnrollmentStore:
    if settings.enrollment_store == "supabase":
        return SupabaseEnrollmentStore(
            settings.supabase_url,
            settings.supabase_service_role_key,
            timeout=settings.supabase_timeout_seconds,
        )
    return SqlAlchemyEnrollmentStore(db)


def submit_enrollment(
    db: Session,
    pipeline: EnrollmentPipeline,
    *,
    payload: EnrollmentSubmitRequest,
    actor: UserProfile,
) -> EnrollmentSubmitResponse:
    if not actor.school_id:
        raise HTTPException(status_code=403, detail="Account is not linked to a school")

    student = Student(
        school_id=actor.school_id,
        child_name=payload.child_name.strip(),
        date_of_birth=payload.date_of_birth,
        gender=payload.gender,
        class_name=payload.class_name,
    )
    db.add(student)
    db.flush()
    assessment = StudentAssessment(
        school_id=actor.school_id,
        student_id=student.id,
        facilitator_name=actor.name,
        child_name=student.child_name,
        assessment_data=payload.model_dump(mode="json", by_alias=True),
    )
    db.add(assessment)
    db.commit()
    logger.info(f"Enrollment submitted for {student.child_name} by {actor.email} (assessment {assessment.id})")

    result = pipeline.process(assessment.id)
    return EnrollmentSubmitResponse(
        student_id=student.id,
        assessment_id=assessment.id,
        summary=result.summary,
        recommended_pathways=result.recommended_pathways,
    )


def seed_skill_pathways(db: Session) -> None:
    for category, name, goal, home_activity in SKILL_PATHWAY_CATALOG:
        if db.query(SkillPathway).filter(SkillPathway.problem_category == category).first():
            continue
        db.add(
            SkillPathway(
                pathway_name=name,
                problem_category=category,
                goal_description=goal,
                parent_home_activity_suggestion=home_activity,
            )
        )
    db.commit()
