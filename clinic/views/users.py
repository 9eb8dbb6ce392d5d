"""
System user management.

Users manage each other with ``manage_users``.  Anyone may read and edit
their own record, but only a ``manage_users`` holder can change a role,
a permission list or the active flag, or delete an account.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.exceptions import Forbidden, ValidationError
from clinic.permissions import (
    MANAGE_USERS,
    VIEW_USERS,
    check_permission,
    read_write,
    require_permission,
    self_or_permission,
)
from clinic.repositories import default_repositories
from clinic.serializers.users import UserSerializer
from clinic.services.audit import log_action
from .common import list_or_create, validated

PRIVILEGED_FIELDS = {'role', 'permissions', 'is_active'}


def _can_manage(user) -> bool:
    return check_permission(user.role, user.permissions, MANAGE_USERS)


@api_view(['GET', 'POST'])
@permission_classes([read_write(VIEW_USERS, MANAGE_USERS)])
def users_list(request):
    repos = default_repositories()

    def create(fields):
        user = repos.users.create(fields)
        log_action(user=request.user, action='user_create', object_type='user', object_id=user.id,
                   detail={'username': user.username, 'role': user.role})
        return user

    return list_or_create(request, repos.users, UserSerializer, create=create)


@api_view(['GET'])
@permission_classes([require_permission(VIEW_USERS)])
def users_active(request):
    repos = default_repositories()
    return Response(UserSerializer(repos.users.list_active(), many=True).data)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([self_or_permission(VIEW_USERS, MANAGE_USERS)])
def user_detail(request, pk: int):
    repos = default_repositories()
    target = repos.users.get(pk)
    if request.method == 'GET':
        return Response(UserSerializer(target).data)

    if request.method == 'DELETE':
        if not _can_manage(request.user):
            raise Forbidden()
        if target.pk == request.user.pk:
            raise ValidationError({'id': ['You cannot delete your own account.']})
        repos.users.delete(pk)
        log_action(user=request.user, action='user_delete', object_type='user', object_id=int(pk),
                   detail={'username': target.username})
        return Response(status=status.HTTP_204_NO_CONTENT)

    fields = validated(UserSerializer, request, instance=target, partial=True)
    if PRIVILEGED_FIELDS & set(fields) and not _can_manage(request.user):
        raise Forbidden('Only user managers can change roles, permissions or account status.')
    user = repos.users.update(pk, fields)
    log_action(user=request.user, action='user_update', object_type='user', object_id=user.id,
               detail={'fields': sorted(f for f in fields if f != 'password')})
    return Response(UserSerializer(user).data)
