from __future__ import annotations

from typing import TypedDict

# Paths answered with the JSON dashboard error envelope instead of Starlette's defaults.
JSON_ERROR_PATH_PREFIXES = ("/api/", "/auth", "/setup")


class DashboardErrorDetail(TypedDict):
    code: str
    message: str


class DashboardErrorEnvelope(TypedDict):
    error: DashboardErrorDetail


def dashboard_error(code: str, message: str) -> DashboardErrorEnvelope:
    return {"error": {"code": code, "message": message}}


def wants_json_errors(path: str) -> bool:
    return path.startswith(JSON_ERROR_PATH_PREFIXES)
