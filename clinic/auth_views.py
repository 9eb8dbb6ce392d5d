"""
Authentication views.

This module defines the login, logout and "who am I" endpoints used by
the front-end.  By isolating these views from the authentication class
(see ``clinic.authentication``) we prevent circular imports when Django
REST framework initialises authentication classes.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from django.contrib.auth.models import update_last_login
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from clinic.exceptions import Forbidden, Unauthorized
from clinic.permissions import ADMIN_ROLE, ALL_PERMISSIONS, IsActiveUser
from clinic.serializers.auth import LoginSerializer, LogoutSerializer
from clinic.services.audit import log_action
from clinic.throttling import LoginRateThrottle

from .models import User

logger = logging.getLogger(__name__)


def user_payload(user: User) -> dict:
    permissions = list(ALL_PERMISSIONS) if user.role == ADMIN_ROLE else list(user.permissions or [])
    return {
        'id': user.id,
        'username': user.username,
        'fullName': user.full_name or user.get_full_name() or user.username,
        'email': user.email,
        'role': user.role,
        'permissions': permissions,
        'isActive': user.is_active,
        'lastLogin': user.last_login,
    }


# ---------------------------------------------------------------------
# Username/password login
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """
    Login with username/password.  Returns a DRF token for the
    ``Authorization: Token <key>`` header plus a JWT pair.
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']
    password = s.validated_data['password']
    ip = request.META.get('REMOTE_ADDR')

    user = authenticate(request, username=username, password=password)
    if not user:
        candidate = User.objects.filter(username=username).first()
        if candidate is not None and not candidate.is_active and candidate.check_password(password):
            log_action(user=candidate, action='login', object_type='user', object_id=candidate.id,
                       detail={'result': 'inactive', 'ip': ip})
            raise Forbidden('Account is disabled.')
        # only the username is recorded for failed attempts
        log_action(user=None, action='login', object_type='user', object_id=None,
                   detail={'result': 'fail', 'username': username, 'ip': ip})
        logger.info("failed login for %s from %s", username, ip)
        raise Unauthorized('Invalid username or password.')

    update_last_login(None, user)
    log_action(user=user, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'ip': ip})

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    return Response({
        'ok': True,
        'token': token_obj.key,
        'jwt_access': str(refresh.access_token),
        'jwt_refresh': str(refresh),
        'user': user_payload(user),
    }, status=200)


@api_view(['GET'])
@permission_classes([IsActiveUser])
def me_view(request):
    return Response({'ok': True, 'user': user_payload(request.user)})


# ---------------------------------------------------------------------
# JWT: refresh & logout
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from refresh token."""
    view = TokenRefreshView.as_view()
    resp = view(request._request)
    data = dict(resp.data)
    if 'access' in data and 'jwt_access' not in data:
        data['jwt_access'] = data.pop('access')
    return Response(data, status=resp.status_code)


@api_view(['POST'])
@permission_classes([IsActiveUser])
def logout_view(request):
    """Drop the DRF token and blacklist the caller's refresh tokens (all, or the one given)."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
            count = 1
        except TokenError as e:
            logger.info("logout with unusable refresh token: %s", e)
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    log_action(user=request.user, action='logout', object_type='user', object_id=request.user.id,
               detail={'blacklisted': count})
    return Response({'ok': True, 'blacklisted': count})
