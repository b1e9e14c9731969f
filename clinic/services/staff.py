"""Lookups for staff references carried in request payloads."""
from __future__ import annotations

from rest_framework.exceptions import ValidationError

from clinic.models import User


def check_staff(user_id, field: str) -> None:
    """400 on ``field`` unless ``user_id`` is empty or an existing active user."""
    if user_id is None:
        return
    if not User.objects.filter(id=user_id, is_active=True).exists():
        raise ValidationError({field: 'user not found'})
