from types import SimpleNamespace as NS

import pytest

from clinic import permissions as perms
from clinic.exceptions import Forbidden
from clinic.permissions import (
    check_permission,
    default_permissions,
    read_write,
    require_any,
    require_permission,
    self_or_permission,
)


def test_nurse_cannot_manage_patients():
    nurse = default_permissions('nurse')
    assert not check_permission('nurse', nurse, perms.MANAGE_PATIENTS)
    assert check_permission('nurse', nurse, perms.VIEW_PATIENTS)


@pytest.mark.parametrize('permission', perms.ALL_PERMISSIONS)
def test_admin_passes_every_check(permission):
    assert check_permission('admin', [], permission)
    assert check_permission('admin', None, [permission, 'anything_else'], perms.MODE_ALL)


def test_role_table():
    assert set(default_permissions('admin')) == set(perms.ALL_PERMISSIONS)
    assert perms.MANAGE_PAYROLL in default_permissions('accountant')
    assert perms.MANAGE_PAYROLL not in default_permissions('receptionist')
    assert perms.VIEW_REPORTS in default_permissions('doctor')
    assert default_permissions('unknown') == []


def test_any_and_all_modes():
    held = [perms.VIEW_FINANCE]
    wanted = [perms.VIEW_FINANCE, perms.VIEW_PAYROLL]
    assert check_permission('accountant', held, wanted, perms.MODE_ANY)
    assert not check_permission('accountant', held, wanted, perms.MODE_ALL)
    assert check_permission('accountant', held + [perms.VIEW_PAYROLL], wanted, perms.MODE_ALL)
    assert not check_permission('accountant', [], wanted, perms.MODE_ANY)


def test_explicit_list_overrides_role_defaults():
    # a nurse granted manage_patients explicitly is allowed
    assert check_permission('nurse', [perms.MANAGE_PATIENTS], perms.MANAGE_PATIENTS)


def test_owner_bypass():
    assert check_permission('nurse', [], perms.MANAGE_USERS, caller_id=7, owner_id='7')
    assert not check_permission('nurse', [], perms.MANAGE_USERS, caller_id=7, owner_id=8)


def test_unknown_mode_is_rejected():
    with pytest.raises(ValueError):
        check_permission('nurse', [], perms.VIEW_STAFF, 'some')


def _request(user, method='GET'):
    return NS(user=user, method=method)


def _user(role, pk=1, active=True, permissions=None):
    held = default_permissions(role) if permissions is None else permissions
    return NS(pk=pk, role=role, permissions=held, is_active=active, is_authenticated=True)


def test_guard_rejects_anonymous():
    guard = require_permission(perms.VIEW_PATIENTS)()
    anonymous = NS(is_authenticated=False)
    assert guard.has_permission(_request(anonymous), NS()) is False
    assert guard.has_permission(_request(None), NS()) is False


def test_guard_raises_forbidden_for_disabled_account():
    guard = require_permission(perms.VIEW_PATIENTS)()
    with pytest.raises(Forbidden):
        guard.has_permission(_request(_user('admin', active=False)), NS())


def test_read_write_guard_switches_on_method():
    guard = read_write(perms.VIEW_PATIENTS, perms.MANAGE_PATIENTS)()
    nurse = _user('nurse')
    assert guard.has_permission(_request(nurse, 'GET'), NS())
    assert not guard.has_permission(_request(nurse, 'POST'), NS())
    assert guard.has_permission(_request(_user('receptionist'), 'PATCH'), NS())


def test_require_any_guard():
    guard = require_any(perms.VIEW_FINANCE, perms.VIEW_PAYROLL)()
    assert guard.has_permission(_request(_user('receptionist')), NS())
    assert not guard.has_permission(_request(_user('nurse')), NS())


def test_self_or_permission_guard():
    guard = self_or_permission(perms.VIEW_USERS, perms.MANAGE_USERS)()
    nurse = _user('nurse', pk=5)
    assert guard.has_permission(_request(nurse, 'PATCH'), NS(kwargs={'pk': 5}))
    assert not guard.has_permission(_request(nurse, 'PATCH'), NS(kwargs={'pk': 6}))
    assert not guard.has_permission(_request(nurse, 'GET'), NS(kwargs={'pk': 6}))


def test_require_role_guard():
    guard = perms.require_role('accountant')()
    assert guard.has_permission(_request(_user('accountant')), NS())
    assert guard.has_permission(_request(_user('admin')), NS())
    assert not guard.has_permission(_request(_user('doctor')), NS())
    with pytest.raises(Forbidden):
        guard.has_permission(_request(_user('accountant', active=False)), NS())
