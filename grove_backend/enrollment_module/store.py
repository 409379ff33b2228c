import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import PersistError, StoreError
from .models import AiStatus, SkillPathway, StudentAssessment, StudentPathwayProgress
from .schemas import AssessmentRecord, PathwayAssignment, PathwayOut, ProfileSummary, answer_set

logger = logging.getLogger(__name__)


class EnrollmentStore(Protocol):
    def fetch_assessment(self, assessment_id: str) -> AssessmentRecord | None: ...

    def find_pathways(self, categories: Sequence[str]) -> list[PathwayOut]: ...

    def update_assessment_and_assign_pathways(
        self,
        assessment_id: str,
        summary: ProfileSummary,
        assignments: Iterable[PathwayAssignment],
    ) -> None: ...


class SqlAlchemyEnrollmentStore:
    def __init__(self, db: Session):
        self.db = db

    def fetch_assessment(self, assessment_id: str) -> AssessmentRecord | None:
        try:
            row = self.db.query(StudentAssessment).filter(StudentAssessment.id == assessment_id).first()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to fetch assessment: {exc}") from exc
        if row is None:
            return None
        return AssessmentRecord(
            id=row.id,
            student_id=row.student_id,
            child_name=row.child_name,
            assessment_data=answer_set(row.assessment_data),
        )

    def find_pathways(self, categories: Sequence[str]) -> list[PathwayOut]:
        try:
            rows = (
                self.db.query(SkillPathway)
                .filter(SkillPathway.problem_category.in_(list(categories)))
                .order_by(SkillPathway.problem_category)
                .all()
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to look up pathways: {exc}") from exc
        return [
            PathwayOut(id=row.id, pathway_name=row.pathway_name, problem_category=row.problem_category)
            for row in rows
        ]

    def update_assessment_and_assign_pathways(
        self,
        assessment_id: str,
        summary: ProfileSummary,
        assignments: Iterable[PathwayAssignment],
    ) -> None:
        try:
            assessment = self.db.query(StudentAssessment).filter(StudentAssessment.id == assessment_id).first()
            if assessment is None:
                raise PersistError(f"Assessment {assessment_id} disappeared before it could be updated")
            assessment.ai_summary = summary.model_dump(mode="json")
            assessment.ai_status = AiStatus.COMPLETED.value
            for assignment in assignments:
                self.db.add(StudentPathwayProgress(student_id=assignment.student_id, pathway_id=assignment.pathway_id))
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error(f"Rolled back enrollment update for assessment {assessment_id}: {exc}")
            raise PersistError(str(exc.orig) if getattr(exc, "orig", None) else str(exc)) from exc
        except PersistError:
            self.db.rollback()
            raise
