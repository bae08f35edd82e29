"""Thin HTTP client for the KaamKar API.

Any object with a ``requests``-style ``request(method, url, ...)`` method can
serve as the transport, so the FastAPI ``TestClient`` drops in for tests.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from .errors import AI_ERRORS_BY_KIND, IndexRequiredError, KaamKarError, ReadError, ValidationError, WriteError

logger = logging.getLogger(__name__)


class ApiError(KaamKarError):
    code = "API_ERROR"

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


def _error_from_response(method: str, status_code: int, body: Any) -> KaamKarError:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error = body["error"]
        code = error.get("code")
        message = error.get("message", "request failed")
        if code == "INDEX_REQUIRED":
            details = {d.get("field"): d.get("message") for d in error.get("details", [])}
            fields = tuple(f for f in (details.get("fields") or "").split(",") if f)
            return IndexRequiredError(details.get("collection", ""), fields, error.get("link") or "")
        if code == "READ_ERROR":
            return ReadError(message)
        if code == "WRITE_ERROR":
            return WriteError(message)
        if code == "VALIDATION_ERROR":
            details = error.get("details") or []
            field = details[0].get("field", "body") if details else "body"
            detail_text = "; ".join(f"{d.get('field')}: {d.get('message')}" for d in details)
            return ValidationError(f"{message}: {detail_text}" if detail_text else message, field=field)
        return ApiError(status_code, message)
    if isinstance(body, dict) and "kind" in body and "error" in body:
        error_cls = AI_ERRORS_BY_KIND.get(body["kind"], AI_ERRORS_BY_KIND["generic"])
        return error_cls(body["error"])
    detail = body.get("detail") if isinstance(body, dict) else None
    return ApiError(status_code, str(detail or f"{method} failed with HTTP {status_code}"))


class ApiClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        session: Any | None = None,
        token: str | None = None,
        timeout: float = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.token = token
        self.timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def request(self, method: str, path: str, json: Any = None, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}/api/v1{path}"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        kwargs: dict[str, Any] = {"json": json, "params": query or None, "headers": self._headers()}
        if isinstance(self.session, requests.Session):
            kwargs["timeout"] = self.timeout
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            error_cls = ReadError if method == "GET" else WriteError
            raise error_cls(f"{method} {path} failed") from exc
        if response.status_code == 204:
            return None
        try:
            body = response.json()
        except ValueError:
            body = None
        if response.status_code >= 400:
            raise _error_from_response(method, response.status_code, body)
        return body

    def register(self, email: str, password: str, full_name: str | None = None) -> dict[str, Any]:
        body = self.request("POST", "/auth/register", json={"email": email, "password": password, "fullName": full_name})
        self.token = body["token"]
        return body

    def login(self, email: str, password: str) -> dict[str, Any]:
        body = self.request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = body["token"]
        return body

    def list(self, path: str, **params: Any) -> list[dict[str, Any]]:
        return self.request("GET", path, params=params)

    def get(self, path: str, **params: Any) -> Any:
        return self.request("GET", path, params=params)

    def create(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        return self.request("POST", path, json=payload)

    def post(self, path: str, payload: dict[str, Any] | None = None) -> Any:
        return self.request("POST", path, json=payload)

    def update(self, path: str, changes: dict[str, Any]) -> dict[str, Any]:
        return self.request("PATCH", path, json=changes)

    def delete(self, path: str) -> None:
        self.request("DELETE", path)

    def assistant(self, action: str, **data: Any) -> str:
        return self.request("POST", "/assistant", json={"action": action, "data": data})["result"]
