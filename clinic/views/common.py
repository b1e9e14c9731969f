"""Lookup, query parameter and pagination helpers shared by the function views."""
from __future__ import annotations

from django.utils.dateparse import parse_date
from rest_framework.exceptions import NotFound, ValidationError

from clinic.services.formatting import page_window


def get_or_404(queryset, pk, label: str = 'record'):
    obj = queryset.filter(pk=pk).first()
    if obj is None:
        raise NotFound(f'{label} not found')
    return obj


def paginate(queryset, params, default_limit: int = 50):
    offset, limit = page_window(params, default_limit)
    return queryset[offset:offset + limit]


def id_param(params, key: str) -> int | None:
    """Integer id from ``params[key]``; ``None`` when absent, 400 when malformed."""
    value = params.get(key)
    if not value:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError({key: 'must be an integer id'})


def date_param(params, key: str):
    value = params.get(key)
    if not value:
        return None
    try:
        parsed = parse_date(value)
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError({key: 'must be a date in YYYY-MM-DD format'})
    return parsed


def date_range(queryset, params, field: str, start_key: str = 'startDate', end_key: str = 'endDate'):
    """Filter ``field`` by inclusive ``startDate``/``endDate`` query params."""
    start = date_param(params, start_key)
    end = date_param(params, end_key)
    if start:
        queryset = queryset.filter(**{f'{field}__gte': start})
    if end:
        queryset = queryset.filter(**{f'{field}__lte': end})
    return queryset
