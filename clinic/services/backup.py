"""
Database backup, import and reset.

Backups are plain JSON: every domain collection serialized with Django's
``json`` serializer, plus the settings row.  Users are never exported.
An import replaces all domain data inside one transaction, so a bad file
leaves the database as it was.
"""
from __future__ import annotations

import json
import logging

from django.core import serializers
from django.core.management.color import no_style
from django.core.serializers.base import DeserializationError
from django.db import DatabaseError, connection, transaction
from django.utils import timezone

from clinic.exceptions import ValidationError
from clinic.models import (
    Advance,
    Bonus,
    CigarettePayment,
    Deduction,
    Expense,
    Graduate,
    Patient,
    Payment,
    Payroll,
    Settings,
    Staff,
)

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1

COLLECTIONS = (
    ('patients', Patient),
    ('payments', Payment),
    ('staff', Staff),
    ('payrolls', Payroll),
    ('bonuses', Bonus),
    ('advances', Advance),
    ('deductions', Deduction),
    ('graduates', Graduate),
    ('expenses', Expense),
    ('cigarettePayments', CigarettePayment),
)


def _dump(queryset) -> list:
    return json.loads(serializers.serialize('json', queryset))


def build_backup() -> dict:
    data = {name: _dump(model.objects.order_by('pk')) for name, model in COLLECTIONS}
    return {
        'version': BACKUP_VERSION,
        'createdAt': timezone.now().isoformat(),
        'data': data,
        'settings': _dump(Settings.objects.filter(pk=1)),
        'counts': {name: len(rows) for name, rows in data.items()},
    }


def reset_database() -> dict:
    """Delete all domain data; users and settings stay."""
    counts = {}
    with transaction.atomic():
        for name, model in reversed(COLLECTIONS):
            counts[name], _ = model.objects.all().delete()
    logger.warning("database reset: %s", counts)
    return counts


def _deserialize(name, model, rows) -> list:
    if not isinstance(rows, list):
        raise ValidationError({name: ['Expected a list of records.']})
    label = model._meta.label_lower
    for row in rows:
        if not isinstance(row, dict) or row.get('model') != label:
            raise ValidationError({name: [f'Every record must be a {label} object.']})
    try:
        return list(serializers.deserialize('python', rows, ignorenonexistent=True))
    except (DeserializationError, KeyError, TypeError, ValueError) as exc:
        raise ValidationError({name: [str(exc)]})


def import_backup(payload) -> dict:
    """Replace domain data with the content of a backup produced by :func:`build_backup`."""
    if not isinstance(payload, dict) or not isinstance(payload.get('data'), dict):
        raise ValidationError({'data': ['Backup must contain a "data" object.']})
    version = payload.get('version', BACKUP_VERSION)
    if version != BACKUP_VERSION:
        raise ValidationError({'version': [f'Unsupported backup version {version}.']})
    data = payload['data']
    unknown = set(data) - {name for name, _ in COLLECTIONS}
    if unknown:
        raise ValidationError({'data': [f'Unknown collections: {", ".join(sorted(unknown))}.']})

    parsed = [(name, model, _deserialize(name, model, data.get(name, []))) for name, model in COLLECTIONS]
    settings_rows = _deserialize('settings', Settings, payload.get('settings') or [])

    counts = {}
    try:
        with transaction.atomic():
            for name, model in reversed(COLLECTIONS):
                model.objects.all().delete()
            for name, model, objects in parsed:
                for obj in objects:
                    obj.save()
                counts[name] = len(objects)
            for obj in settings_rows:
                obj.save()
            _reset_sequences([model for _, model in COLLECTIONS] + [Settings])
    except DatabaseError as exc:
        logger.error("backup import failed: %s", exc)
        raise ValidationError({'data': [f'Backup could not be imported: {exc}']})
    logger.info("backup imported: %s", counts)
    return counts


def _reset_sequences(models) -> None:
    # primary keys were written explicitly; move sequences past them like loaddata does
    statements = connection.ops.sequence_reset_sql(no_style(), models)
    if statements:
        with connection.cursor() as cursor:
            for sql in statements:
                cursor.execute(sql)
