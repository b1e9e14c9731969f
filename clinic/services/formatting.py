"""Small conversions shared by the JSON formatters."""
from __future__ import annotations

from datetime import date, datetime

from rest_framework.exceptions import ValidationError


def money(value) -> float:
    if value is None:
        return 0.0
    return float(value)


def iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


def page_window(params, default_limit: int = 50) -> tuple[int, int]:
    """Return ``(offset, limit)`` from ``page``/``limit`` query params."""
    try:
        page = max(int(params.get('page') or 1), 1)
        limit = max(int(params.get('limit') or default_limit), 1)
    except (TypeError, ValueError):
        raise ValidationError({'page': 'page and limit must be integers'})
    return (page - 1) * limit, min(limit, 500)


def truthy(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or '').lower() in ('1', 'true', 'yes')
