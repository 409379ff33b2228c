"""Integration tests for the school directory, Co-Pilot feed and calendar."""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.orm import Session

from grove_backend.enrollment_module.models import Student, StudentAssessment, StudentPathwayProgress
from grove_backend.rbac_module.models import School, Teacher
from grove_backend.school_module.models import AIAlert, AlertStatus, AlertType, SchoolEvent

pytestmark = pytest.mark.integration


@pytest.fixture
def other_school(db_session: Session) -> School:
    school = School(school_name="Oak Hill Nursery")
    db_session.add(school)
    db_session.commit()
    return school


@pytest.fixture
def roster(db_session: Session, school, other_school, pathways) -> dict[str, Student]:
    students = {
        "zoe": Student(school_id=school.id, child_name="Zoe Adams", class_name="Sunflowers"),
        "ben": Student(school_id=school.id, child_name="Ben Cole"),
        "left": Student(school_id=school.id, child_name="Ava Left", status="withdrawn"),
        "other": Student(school_id=other_school.id, child_name="Omar Other"),
    }
    db_session.add_all(students.values())
    db_session.flush()
    db_session.add(
        StudentAssessment(
            student_id=students["zoe"].id,
            child_name="Zoe Adams",
            assessment_data={"concerns": ["Shyness"]},
            ai_summary={"focus_areas": [], "strengths": [], "interests": "Not specified"},
            ai_status="completed",
        )
    )
    db_session.add(
        StudentPathwayProgress(student_id=students["zoe"].id, pathway_id=pathways["Social & Emotional Skills"].id)
    )
    db_session.commit()
    return students


class TestStudents:
    def test_lists_active_students_of_own_school_by_name(self, client, teacher_headers, roster):
        names = [s["child_name"] for s in client.get("/api/v1/students", headers=teacher_headers).json()]
        assert names == ["Ben Cole", "Zoe Adams"]

    def test_class_column_is_exposed_as_class(self, client, admin_headers, roster):
        zoe = next(
            s for s in client.get("/api/v1/students", headers=admin_headers).json() if s["child_name"] == "Zoe Adams"
        )
        assert zoe["class"] == "Sunflowers"

    def test_student_detail_includes_assessment_and_progress(self, client, admin_headers, roster):
        response = client.get(f"/api/v1/students/{roster['zoe'].id}", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["assessments"][0]["ai_status"] == "completed"
        assert body["pathway_progress"][0]["pathway_name"] == "Friendship Garden"
        assert body["pathway_progress"][0]["status"] == "not_started"
        assert body["pathway_progress"][0]["current_step"] == 1

    def test_student_from_other_school_is_hidden(self, client, admin_headers, roster):
        assert client.get(f"/api/v1/students/{roster['other'].id}", headers=admin_headers).status_code == 404

    def test_parents_cannot_list_students(self, client, parent_headers):
        assert client.get("/api/v1/students", headers=parent_headers).status_code == 403


def test_teachers_are_listed_by_name(client, admin_headers, db_session, school):
    db_session.add_all(
        [
            Teacher(school_id=school.id, name="Yara Young", email="yara@maplegrove.test"),
            Teacher(school_id=school.id, name="Ada Abbott", email="ada@maplegrove.test", status="on_leave"),
        ]
    )
    db_session.commit()

    names = [t["name"] for t in client.get("/api/v1/teachers", headers=admin_headers).json()]

    assert names == ["Ada Abbott", "Yara Young"]


class TestCoPilot:
    @pytest.fixture
    def alerts(self, db_session: Session, school) -> list[AIAlert]:
        now = datetime.utcnow()
        alerts = [
            AIAlert(
                school_id=school.id,
                alert_type=AlertType.STUDENT_STRUGGLING.value,
                details={"student_name": "Zoe Adams"},
                created_at=now - timedelta(days=1),
            ),
            AIAlert(
                school_id=school.id,
                alert_type=AlertType.TEACHER_SUPPORT_NEEDED.value,
                details={"teacher_name": "Yara Young"},
                created_at=now,
            ),
            AIAlert(
                school_id=school.id,
                alert_type=AlertType.STUDENT_AT_RISK.value,
                status=AlertStatus.DISMISSED.value,
                created_at=now,
            ),
        ]
        db_session.add_all(alerts)
        db_session.commit()
        return alerts

    def test_feed_requires_module(self, client, admin_headers, alerts):
        response = client.get("/api/v1/co-pilot/alerts", headers=admin_headers)
        assert response.status_code == 403

    def test_feed_lists_open_alerts_newest_first(self, client, admin_headers, alerts):
        client.post("/api/v1/schools/me/modules/AI_COPILOT", headers=admin_headers)

        body = client.get("/api/v1/co-pilot/alerts", headers=admin_headers).json()

        assert [a["alert_type"] for a in body] == ["TEACHER_SUPPORT_NEEDED", "STUDENT_STRUGGLING"]

    def test_dismissing_removes_alert_from_feed(self, client, admin_headers, alerts):
        client.post("/api/v1/schools/me/modules/AI_COPILOT", headers=admin_headers)

        response = client.patch(
            f"/api/v1/co-pilot/alerts/{alerts[0].id}", json={"status": "dismissed"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["status"] == "dismissed"
        body = client.get("/api/v1/co-pilot/alerts", headers=admin_headers).json()
        assert [a["id"] for a in body] == [alerts[1].id]

    def test_rejects_unknown_status(self, client, admin_headers, alerts):
        client.post("/api/v1/schools/me/modules/AI_COPILOT", headers=admin_headers)
        response = client.patch(
            f"/api/v1/co-pilot/alerts/{alerts[0].id}", json={"status": "new"}, headers=admin_headers
        )
        assert response.status_code == 422


def test_events_are_upcoming_and_filtered_by_audience(client, teacher_headers, db_session, school):
    now = datetime.utcnow()
    db_session.add_all(
        [
            SchoolEvent(school_id=school.id, title="Past picnic", start_time=now - timedelta(days=2), audience=[]),
            SchoolEvent(
                school_id=school.id,
                title="Staff meeting",
                start_time=now + timedelta(days=2),
                audience=["admin", "teacher"],
            ),
            SchoolEvent(
                school_id=school.id, title="Board review", start_time=now + timedelta(days=3), audience=["admin"]
            ),
            SchoolEvent(school_id=school.id, title="Open day", start_time=now + timedelta(days=1), audience=[]),
        ]
    )
    db_session.commit()

    titles = [e["title"] for e in client.get("/api/v1/events", headers=teacher_headers).json()]

    assert titles == ["Open day", "Staff meeting"]
