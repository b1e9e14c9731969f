"""
Human-readable record numbers.

Two shapes are used across the system: a running sequence such as
``TRX-000042`` and a per-day sequence such as ``INV-20240131-0007``.
Both look at the highest existing number with the same prefix, so they
must be called inside the transaction that inserts the new row.
"""
from __future__ import annotations

import re
from datetime import date

from django.db import models
from django.utils import timezone


def _last_suffix(model: type[models.Model], field: str, prefix: str) -> int:
    last = (
        model.objects.filter(**{f"{field}__regex": rf"^{re.escape(prefix)}[0-9]+$"})
        .order_by(f'-{field}')
        .values_list(field, flat=True)
        .first()
    )
    if not last:
        return 0
    return int(last[len(prefix):])


def next_sequential(model: type[models.Model], field: str, prefix: str, width: int = 6) -> str:
    """Return ``prefix`` followed by the next zero padded number, e.g. ``AST-000001``."""
    return f"{prefix}{_last_suffix(model, field, prefix) + 1:0{width}d}"


def next_daily(model: type[models.Model], field: str, prefix: str,
               day: date | None = None, width: int = 4) -> str:
    """Return ``PREFIX-YYYYMMDD-NNNN`` numbering restarting every day."""
    day = day or timezone.localdate()
    day_prefix = f"{prefix}-{day:%Y%m%d}-"
    return f"{day_prefix}{_last_suffix(model, field, day_prefix) + 1:0{width}d}"
