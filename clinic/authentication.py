"""
Token authentication for the API.

This module defines a subclass of Django REST framework's
``TokenAuthentication``.  It is kept apart from any view definitions so
that REST framework can import it during initialization without
circular imports.
"""
from __future__ import annotations

from rest_framework import authentication, exceptions
from rest_framework.authtoken.models import Token


class TokenAuthentication(authentication.TokenAuthentication):
    """Token authentication using the ``Token`` keyword.

    Unlike DRF's default, a valid token of a disabled account still
    authenticates; the permission guard then answers 403 rather than
    treating the caller as anonymous (401).
    """

    keyword = 'Token'

    def authenticate_credentials(self, key):
        try:
            token = Token.objects.select_related('user').get(key=key)
        except Token.DoesNotExist:
            raise exceptions.AuthenticationFailed('Invalid token.')
        return (token.user, token)
