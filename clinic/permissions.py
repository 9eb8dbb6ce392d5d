"""
Role and permission based access control.

``ROLE_PERMISSIONS`` is the single source of truth for what each role may
do.  :func:`check_permission` is the pure decision function; the DRF
permission classes built by the factories below apply it at every API
boundary so that a request is rejected before any data is touched.

An unauthenticated request yields HTTP 401, an authenticated caller who
lacks the permission (or whose account is disabled) yields HTTP 403.
"""
from __future__ import annotations

from typing import Iterable

from rest_framework.permissions import BasePermission, SAFE_METHODS

from .exceptions import Forbidden

VIEW_PATIENTS = 'view_patients'
MANAGE_PATIENTS = 'manage_patients'
VIEW_STAFF = 'view_staff'
MANAGE_STAFF = 'manage_staff'
VIEW_FINANCE = 'view_finance'
MANAGE_FINANCE = 'manage_finance'
VIEW_PAYROLL = 'view_payroll'
MANAGE_PAYROLL = 'manage_payroll'
VIEW_USERS = 'view_users'
MANAGE_USERS = 'manage_users'
VIEW_REPORTS = 'view_reports'
MANAGE_SETTINGS = 'manage_settings'
MANAGE_DATABASE = 'manage_database'

ALL_PERMISSIONS = (
    VIEW_PATIENTS, MANAGE_PATIENTS,
    VIEW_STAFF, MANAGE_STAFF,
    VIEW_FINANCE, MANAGE_FINANCE,
    VIEW_PAYROLL, MANAGE_PAYROLL,
    VIEW_USERS, MANAGE_USERS,
    VIEW_REPORTS,
    MANAGE_SETTINGS,
    MANAGE_DATABASE,
)

ADMIN_ROLE = 'admin'

ROLE_PERMISSIONS: dict[str, tuple[str, ...]] = {
    'admin': ALL_PERMISSIONS,
    'doctor': (VIEW_PATIENTS, MANAGE_PATIENTS, VIEW_STAFF, VIEW_REPORTS),
    'nurse': (VIEW_PATIENTS, VIEW_STAFF),
    'receptionist': (VIEW_PATIENTS, MANAGE_PATIENTS, VIEW_FINANCE, MANAGE_FINANCE),
    'accountant': (
        VIEW_PATIENTS, VIEW_STAFF,
        VIEW_FINANCE, MANAGE_FINANCE,
        VIEW_PAYROLL, MANAGE_PAYROLL,
        VIEW_REPORTS,
    ),
}

MODE_SINGLE = 'single'
MODE_ANY = 'any'
MODE_ALL = 'all'


def default_permissions(role: str) -> list[str]:
    """Permission list a new account of ``role`` starts with."""
    return list(ROLE_PERMISSIONS.get(role, ()))


def check_permission(role: str, permissions: Iterable[str] | None, required: Iterable[str] | str,
                     mode: str = MODE_SINGLE, *, caller_id=None, owner_id=None) -> bool:
    """Decide whether a caller holding ``permissions`` may proceed.

    ``admin`` always passes.  ``mode`` is one of ``single`` (every listed
    permission, normally just one), ``any`` or ``all``.  When both
    ``caller_id`` and ``owner_id`` are given and equal, the caller is
    acting on their own record and the permission check is skipped.
    """
    if role == ADMIN_ROLE:
        return True
    if caller_id is not None and owner_id is not None and str(caller_id) == str(owner_id):
        return True
    if isinstance(required, str):
        required = (required,)
    needed = set(required)
    held = set(permissions or ())
    if mode == MODE_ANY:
        return bool(held & needed)
    if mode in (MODE_ALL, MODE_SINGLE):
        return needed <= held
    raise ValueError(f"unknown permission mode: {mode}")


class PermissionGuard(BasePermission):
    """Base guard: authenticated, active, then the permission table."""

    required: tuple[str, ...] = ()
    mode = MODE_SINGLE
    message = Forbidden.default_detail

    def required_for(self, request) -> tuple[str, ...]:
        return self.required

    def owner_id(self, request, view):
        return None

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            # DRF turns this into 401 because no credentials were presented
            return False
        if not user.is_active:
            raise Forbidden('Account is disabled.')
        return check_permission(
            user.role, user.permissions, self.required_for(request), self.mode,
            caller_id=user.pk, owner_id=self.owner_id(request, view),
        )


def require_permission(*perms: str, mode: str = MODE_SINGLE) -> type[PermissionGuard]:
    return type('RequirePermission', (PermissionGuard,), {'required': tuple(perms), 'mode': mode})


def require_any(*perms: str) -> type[PermissionGuard]:
    return require_permission(*perms, mode=MODE_ANY)


def require_all(*perms: str) -> type[PermissionGuard]:
    return require_permission(*perms, mode=MODE_ALL)


def read_write(read: str, write: str) -> type[PermissionGuard]:
    """``read`` for safe methods, ``write`` for everything else."""

    def required_for(self, request):
        return (read,) if request.method in SAFE_METHODS else (write,)

    return type('ReadWritePermission', (PermissionGuard,), {'required_for': required_for})


def self_or_permission(read: str, write: str, lookup: str = 'pk') -> type[PermissionGuard]:
    """Like :func:`read_write`, but the owner of the record (``lookup`` in
    the URL kwargs) is always let through."""

    def required_for(self, request):
        return (read,) if request.method in SAFE_METHODS else (write,)

    def owner_id(self, request, view):
        kwargs = getattr(view, 'kwargs', None) or {}
        return kwargs.get(lookup) or kwargs.get('user_id')

    return type('SelfOrPermission', (PermissionGuard,), {'required_for': required_for, 'owner_id': owner_id})


def require_role(*roles: str) -> type[BasePermission]:
    """Role-only guard; ``admin`` is always accepted."""

    class RequireRole(BasePermission):
        message = Forbidden.default_detail

        def has_permission(self, request, view) -> bool:  # type: ignore[override]
            user = getattr(request, "user", None)
            if not (user and user.is_authenticated):
                return False
            if not user.is_active:
                raise Forbidden('Account is disabled.')
            return user.role == ADMIN_ROLE or user.role in roles

    return RequireRole


class IsActiveUser(PermissionGuard):
    """Any authenticated, active account."""

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        if not (user and user.is_authenticated):
            return False
        if not user.is_active:
            raise Forbidden('Account is disabled.')
        return True
