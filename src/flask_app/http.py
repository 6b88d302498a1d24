from __future__ import annotations

from typing import Any, Dict, Optional

from flask import jsonify

from eve_industry_calculator.application.errors import ServiceError


def ok(*, data: Any = None, message: Optional[str] = None, status_code: int = 200, **extra: Any):
    payload: Dict[str, Any] = {"status": "success"}
    if message is not None:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return jsonify(payload), status_code


def error(*, message: str, status_code: int = 500, code: Optional[str] = None, **extra: Any):
    payload: Dict[str, Any] = {
        "status": "error",
        "message": message,
        "error": {"message": message},
    }
    if code is not None:
        payload["error"]["code"] = code
    payload.update(extra)
    return jsonify(payload), status_code


def service_error(e: ServiceError):
    extra: Dict[str, Any] = {}
    if e.data is not None:
        extra["data"] = e.data
    if e.meta is not None:
        extra["meta"] = e.meta
    return error(message=e.message, status_code=e.status_code, **extra)
