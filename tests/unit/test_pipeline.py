"""Unit tests for the enrollment pipeline and pathway matcher."""

from unittest.mock import MagicMock

import pytest

from grove_backend.enrollment_module.errors import (
    AssessmentNotFoundError,
    MissingAssessmentIdError,
    PersistError,
)
from grove_backend.enrollment_module.pipeline import EnrollmentPipeline, match_pathways
from grove_backend.enrollment_module.schemas import (
    AssessmentRecord,
    PathwayAssignment,
    PathwayOut,
    ProfileSummary,
)

pytestmark = pytest.mark.unit

CATALOG = [
    PathwayOut(id="p-lang", pathway_name="Little Talkers", problem_category="Language Skills"),
    PathwayOut(id="p-social", pathway_name="Friendship Garden", problem_category="Social & Emotional Skills"),
]


class FakeStore:
    """In-memory store that applies the persist call all-or-nothing."""

    def __init__(self, assessments=None, catalog=CATALOG, fail_persist=False):
        self.assessments = {a.id: a for a in (assessments or [])}
        self.catalog = list(catalog)
        self.fail_persist = fail_persist
        self.summaries = {}
        self.assignments = []
        self.lookups = []

    def fetch_assessment(self, assessment_id):
        return self.assessments.get(assessment_id)

    def find_pathways(self, categories):
        self.lookups.append(list(categories))
        return [p for p in self.catalog if p.problem_category in categories]

    def update_assessment_and_assign_pathways(self, assessment_id, summary, assignments):
        if self.fail_persist:
            raise PersistError("insert or update on table violates foreign key constraint")
        self.summaries[assessment_id] = summary
        self.assignments.extend(assignments)


def make_assessment(answers, assessment_id="a-1", student_id="s-1"):
    return AssessmentRecord(id=assessment_id, student_id=student_id, child_name="Mia", assessment_data=answers)


class TestMatchPathways:
    def test_empty_categories_skip_lookup(self):
        store = FakeStore()
        assert match_pathways(store, []) == []
        assert store.lookups == []

    def test_returns_one_entry_per_catalog_category(self):
        store = FakeStore()
        matched = match_pathways(store, ["Language Skills", "Motor Skills", "Language Skills"])
        assert [p.id for p in matched] == ["p-lang"]
        assert store.lookups == [["Language Skills", "Motor Skills"]]

    def test_results_follow_focus_area_order(self):
        store = FakeStore(catalog=list(reversed(CATALOG)))
        matched = match_pathways(store, ["Language Skills", "Social & Emotional Skills"])
        assert [p.problem_category for p in matched] == ["Language Skills", "Social & Emotional Skills"]

    def test_matching_is_exact(self):
        store = FakeStore()
        assert match_pathways(store, ["language skills"]) == []


class TestEnrollmentPipeline:
    @pytest.mark.parametrize("assessment_id", [None, ""])
    def test_missing_reference(self, assessment_id):
        with pytest.raises(MissingAssessmentIdError) as exc_info:
            EnrollmentPipeline(FakeStore()).process(assessment_id)
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Assessment ID is required."

    def test_unknown_assessment_fails_without_writing(self):
        store = FakeStore()
        with pytest.raises(AssessmentNotFoundError) as exc_info:
            EnrollmentPipeline(store).process("missing")
        assert exc_info.value.status_code == 404
        assert store.summaries == {}
        assert store.assignments == []

    def test_speech_delay_assigns_language_pathway(self):
        store = FakeStore(
            [
                make_assessment(
                    {"concerns": ["Speech Delay"], "cognitive_skills": "Above Average", "interests": "Dinosaurs"}
                )
            ]
        )

        result = EnrollmentPipeline(store).process("a-1")

        assert result.summary.categories == ["Language Skills"]
        assert result.summary.strengths == ["Advanced problem-solving and cognitive abilities noted by parent."]
        assert result.summary.interests == "Dinosaurs"
        assert [p.id for p in result.recommended_pathways] == ["p-lang"]
        assert store.summaries["a-1"] == result.summary
        assert store.assignments == [PathwayAssignment(student_id="s-1", pathway_id="p-lang")]

    def test_no_concerns_means_no_lookup_and_no_assignments(self):
        store = FakeStore([make_assessment({"concerns": []})])

        result = EnrollmentPipeline(store).process("a-1")

        assert result.summary == ProfileSummary(focus_areas=[], strengths=[], interests="Not specified")
        assert result.recommended_pathways == []
        assert store.lookups == []
        assert store.summaries["a-1"] == result.summary
        assert store.assignments == []

    def test_focus_area_without_catalog_entry_gets_no_assignment(self):
        store = FakeStore([make_assessment({"concerns": ["Shyness", "Clumsiness"]})])

        result = EnrollmentPipeline(store).process("a-1")

        assert result.summary.categories == ["Social & Emotional Skills", "Motor Skills"]
        assert store.assignments == [PathwayAssignment(student_id="s-1", pathway_id="p-social")]

    def test_persist_failure_propagates_and_leaves_nothing_applied(self):
        store = FakeStore([make_assessment({"concerns": ["Speech Delay"]})], fail_persist=True)

        with pytest.raises(PersistError) as exc_info:
            EnrollmentPipeline(store).process("a-1")

        assert exc_info.value.status_code == 502
        assert "foreign key" in exc_info.value.message
        assert store.summaries == {}

    def test_reprocessing_appends_assignments_again(self):
        store = FakeStore([make_assessment({"concerns": ["Speech Delay"]})])
        pipeline = EnrollmentPipeline(store)

        first = pipeline.process("a-1")
        second = pipeline.process("a-1")

        assert first == second
        assert len(store.assignments) == 2

    def test_summarizer_is_swappable(self):
        summarizer = MagicMock()
        summarizer.summarize.return_value = ProfileSummary(
            focus_areas=[{"category": "Social & Emotional Skills", "reason": "Model output"}],
            interests="Painting",
        )
        answers = {"concerns": ["Speech Delay"]}
        store = FakeStore([make_assessment(answers)])

        result = EnrollmentPipeline(store, summarizer).process("a-1")

        summarizer.summarize.assert_called_once_with(answers)
        assert [p.id for p in result.recommended_pathways] == ["p-social"]

    def test_response_uses_camel_case_pathway_key(self):
        store = FakeStore([make_assessment({"concerns": ["Speech Delay"]})])
        payload = EnrollmentPipeline(store).process("a-1").model_dump(by_alias=True)
        assert set(payload) == {"summary", "recommendedPathways"}
