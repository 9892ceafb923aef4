"""Response shaping helpers for MCP tools and resources."""

from __future__ import annotations

import json
import time
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

DISCLAIMER = "Informational use only. This is not financial advice."


def to_jsonable(data: Any) -> Any:
    if is_dataclass(data) and not isinstance(data, type):
        return {item.name: to_jsonable(getattr(data, item.name)) for item in fields(data)}
    if isinstance(data, Enum):
        return data.name
    if isinstance(data, (datetime, date)):
        return data.isoformat()
    if isinstance(data, (list, tuple)):
        return [to_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {str(to_jsonable(key)): to_jsonable(value) for key, value in data.items()}
    if isinstance(data, float):
        return round(data, 6)
    return data


def success_response(data: Any, source: str | None = None, warning: str | None = None) -> str:
    payload: dict[str, Any] = {
        "data": to_jsonable(data),
        "timestamp": int(time.time()),
        "disclaimer": DISCLAIMER,
    }
    if source:
        payload["source"] = source
    if warning:
        payload["warning"] = warning
    return json.dumps(payload, ensure_ascii=False)


def error_response(code: str, message: str) -> str:
    return json.dumps(
        {
            "error": True,
            "code": code,
            "message": message,
            "timestamp": int(time.time()),
        },
        ensure_ascii=False,
    )
