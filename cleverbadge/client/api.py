# cleverbadge/client/api.py

from typing import Any, Dict, Iterable, Optional

import httpx


class ApiError(Exception):
    """Error response from the assessment API."""

    def __init__(self, status_code: int, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


def _error_from_response(response: httpx.Response) -> ApiError:
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = response.text

    if isinstance(detail, dict):
        return ApiError(response.status_code, detail.get("error", ""), detail.get("code"))
    if isinstance(detail, list):
        # pydantic validation errors
        messages = "; ".join(str(item.get("msg", item)) for item in detail)
        return ApiError(response.status_code, messages, "VALIDATION_ERROR")
    return ApiError(response.status_code, str(detail))


class CleverBadgeClient:
    """
    Thin wrapper over the candidate-facing REST endpoints.

    Takes any ``httpx.Client`` (FastAPI's TestClient included) whose base
    URL points at the server root.
    """

    def __init__(self, http: httpx.Client, prefix: str = "/api"):
        self.http = http
        self.prefix = prefix

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        response = self.http.request(method, f"{self.prefix}{path}", **kwargs)
        if response.is_error:
            raise _error_from_response(response)
        return response.json()

    def get_test(self, slug: str) -> Dict[str, Any]:
        return self._request("GET", f"/tests/slug/{slug}")

    def start(self, test_id: str, candidate_name: str) -> Dict[str, Any]:
        return self._request(
            "POST",
            "/assessments/start",
            json={"test_id": str(test_id), "candidate_name": candidate_name},
        )

    def answer(self, assessment_id: str, question_id: str, selected_options: Iterable[Any]) -> Dict[str, Any]:
        return self._request(
            "POST",
            f"/assessments/{assessment_id}/answer",
            json={
                "question_id": str(question_id),
                "selected_options": [str(o) for o in selected_options],
            },
        )

    def answers(self, assessment_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/assessments/{assessment_id}/answers")

    def status(self, assessment_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/assessments/{assessment_id}/status")

    def submit(self, assessment_id: str) -> Dict[str, Any]:
        return self._request("POST", f"/assessments/{assessment_id}/submit")

    def results(self, assessment_id: str) -> Dict[str, Any]:
        return self._request("GET", f"/assessments/{assessment_id}/results")
