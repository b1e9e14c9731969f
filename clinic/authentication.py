"""
Token authentication for the API.

Kept apart from the login views so that REST framework can import the
authentication class during initialisation without pulling in views.
"""
from __future__ import annotations

from rest_framework import authentication


class TokenAuthentication(authentication.TokenAuthentication):
    """DRF token authentication using the ``Token`` keyword.

    JWT access tokens issued at login are accepted separately through
    ``rest_framework_simplejwt`` with the ``Bearer`` keyword.
    """

    keyword = 'Token'
