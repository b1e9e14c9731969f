"""Audit trail for state changes made through the API."""
from __future__ import annotations

import logging
from typing import Any

from clinic.models import AuditEvent

logger = logging.getLogger(__name__)


def _actor(user):
    if user is None or not getattr(user, 'is_authenticated', False):
        return None
    return user if getattr(user, 'pk', None) else None


def log_action(*, user=None, action: str, object_type: str | None = None,
               object_id: int | None = None, detail: dict[str, Any] | None = None) -> AuditEvent:
    """Record ``action`` on ``object_type``/``object_id``; anonymous callers are stored as null."""
    event = AuditEvent.objects.create(
        user=_actor(user),
        action=action,
        object_type=object_type,
        object_id=object_id,
        detail=detail or {},
    )
    logger.debug('audit %s %s:%s', action, object_type or '-', object_id or '-')
    return event
