"""Enrollment store backed by the hosted Supabase REST (PostgREST) API.

The atomic write is delegated to the ``update_assessment_and_assign_pathways``
database function, so one RPC call either applies the summary and every
assignment or nothing at all.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

import requests

from .errors import PersistError, StoreError
from .schemas import AssessmentRecord, PathwayAssignment, PathwayOut, ProfileSummary, answer_set

logger = logging.getLogger(__name__)

ASSESSMENT_COLUMNS = "id,student_id,child_name,assessment_data"
PATHWAY_COLUMNS = "id,pathway_name,problem_category"
PERSIST_RPC = "update_assessment_and_assign_pathways"


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return body.get("message") or body.get("error") or str(body)
    return str(body)


class SupabaseEnrollmentStore:
    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        *,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ):
        if not base_url or not service_role_key:
            raise StoreError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be configured")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": service_role_key,
                "Authorization": f"Bearer {service_role_key}",
                "Content-Type": "application/json",
            }
        )

    def _get(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        try:
            response = self.session.get(f"{self.base_url}/rest/v1/{table}", params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise StoreError(f"Supabase request to {table} failed: {exc}") from exc
        if not response.ok:
            raise StoreError(_error_message(response))
        return response.json()

    def fetch_assessment(self, assessment_id: str) -> AssessmentRecord | None:
        rows = self._get(
            "student_assessments",
            {"select": ASSESSMENT_COLUMNS, "id": f"eq.{assessment_id}", "limit": "1"},
        )
        if not rows:
            return None
        row = rows[0]
        return AssessmentRecord(
            id=row["id"],
            student_id=row.get("student_id"),
            child_name=row.get("child_name") or "",
            assessment_data=answer_set(row.get("assessment_data")),
        )

    def find_pathways(self, categories: Sequence[str]) -> list[PathwayOut]:
        in_filter = ",".join(_quote(category) for category in categories)
        rows = self._get("skill_pathways", {"select": PATHWAY_COLUMNS, "problem_category": f"in.({in_filter})"})
        return [PathwayOut(**row) for row in rows]

    def update_assessment_and_assign_pathways(
        self,
        assessment_id: str,
        summary: ProfileSummary,
        assignments: Iterable[PathwayAssignment],
    ) -> None:
        params = {
            "assessment_id_param": assessment_id,
            "summary_param": summary.model_dump(mode="json"),
            "pathways_param": [assignment.as_params() for assignment in assignments],
        }
        try:
            response = self.session.post(
                f"{self.base_url}/rest/v1/rpc/{PERSIST_RPC}", json=params, timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise PersistError(f"Supabase RPC {PERSIST_RPC} failed: {exc}") from exc
        if not response.ok:
            message = _error_message(response)
            logger.error(f"Supabase RPC {PERSIST_RPC} returned {response.status_code}: {message}")
            raise PersistError(message)
