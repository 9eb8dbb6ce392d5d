import logging
from typing import Optional, Any, Dict
from django.contrib.auth import get_user_model
from clinic.exceptions import ConflictOrIntegrityWarning
from clinic.models import AuditEvent

User = get_user_model()
logger = logging.getLogger(__name__)


def _user_or_none(user):
    if isinstance(user, User) and user.pk:
        return user
    return None


def log_action(*, user: Optional[User], action: str, object_type: Optional[str]=None, object_id: Optional[int]=None, detail: Optional[Dict[str, Any]]=None) -> AuditEvent:
    logger.info("audit %s %s:%s by %s", action, object_type, object_id, getattr(user, 'username', None) or '-')
    return AuditEvent.objects.create(
        user=_user_or_none(user),
        action=action,
        object_type=object_type, object_id=object_id,
        detail=_jsonable(detail or {}),
    )


def report_integrity_warning(warning: ConflictOrIntegrityWarning, *, user=None) -> None:
    """Log and audit a data inconsistency without failing the request."""
    logger.warning("integrity warning: %s (%s:%s)", warning.message, warning.object_type, warning.object_id)
    log_action(user=user, action='integrity_warning', object_type=warning.object_type,
               object_id=warning.object_id, detail={'message': warning.message, **warning.detail})


def _jsonable(value):
    # Decimal and date values are stored as strings inside the JSON detail
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)
