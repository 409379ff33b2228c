import logging
from collections.abc import Sequence

from .errors import AssessmentNotFoundError, MissingAssessmentIdError
from .schemas import EnrollmentResult, PathwayAssignment, PathwayOut
from .store import EnrollmentStore
from .summarizer import ProfileSummarizer, RuleBasedProfileSummarizer

logger = logging.getLogger(__name__)


def match_pathways(store: EnrollmentStore, categories: Sequence[str]) -> list[PathwayOut]:
    """Catalog pathways whose category is one of ``categories``, in focus-area order."""
    wanted = list(dict.fromkeys(categories))
    if not wanted:
        return []
    order = {category: index for index, category in enumerate(wanted)}
    pathways = [p for p in store.find_pathways(wanted) if p.problem_category in order]
    return sorted(pathways, key=lambda p: order[p.problem_category])


class EnrollmentPipeline:
    def __init__(self, store: EnrollmentStore, summarizer: ProfileSummarizer | None = None):
        self.store = store
        self.summarizer = summarizer or RuleBasedProfileSummarizer()

    def process(self, assessment_id: str | None) -> EnrollmentResult:
        if not assessment_id:
            raise MissingAssessmentIdError()

        assessment = self.store.fetch_assessment(assessment_id)
        if assessment is None:
            logger.warning(f"Enrollment processing requested for unknown assessment {assessment_id}")
            raise AssessmentNotFoundError(assessment_id)

        logger.info(f"Generating profile summary for {assessment.child_name} (assessment {assessment_id})")
        summary = self.summarizer.summarize(assessment.assessment_data)

        pathways = match_pathways(self.store, summary.categories)
        assignments = [PathwayAssignment(student_id=assessment.student_id, pathway_id=p.id) for p in pathways]
        self.store.update_assessment_and_assign_pathways(assessment_id, summary, assignments)

        logger.info(f"Assessment {assessment_id} processed: {len(assignments)} pathway(s) assigned")
        return EnrollmentResult(summary=summary, recommended_pathways=pathways)
