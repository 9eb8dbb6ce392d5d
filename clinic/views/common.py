"""
Helpers shared by the resource views.

Most resources follow the same list/create and retrieve/update/delete
shape; these helpers keep the individual views down to their decorators
and the one or two lines that differ.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.response import Response

from clinic.realtime.events import broadcast_refresh
from clinic.services.audit import log_action


def validated(serializer_cls, request, instance=None, partial=False) -> dict:
    s = serializer_cls(instance, data=request.data, partial=partial)
    s.is_valid(raise_exception=True)
    return dict(s.validated_data)


def list_or_create(request, repo, serializer_cls, *, create=None, records=None, refresh=None):
    """GET lists ``records`` (default: everything); POST validates and creates."""
    if request.method == 'GET':
        rows = repo.list() if records is None else records
        return Response(serializer_cls(rows, many=True).data)
    fields = validated(serializer_cls, request)
    obj = create(fields) if create else repo.create(fields)
    if refresh:
        broadcast_refresh(refresh)
    return Response(serializer_cls(obj).data, status=status.HTTP_201_CREATED)


def retrieve_update_destroy(request, pk, repo, serializer_cls, *, update=None, destroy=None,
                            refresh=None, audit: str | None = None):
    obj = repo.get(pk)
    if request.method == 'GET':
        return Response(serializer_cls(obj).data)
    if request.method == 'DELETE':
        if destroy:
            destroy(pk)
        else:
            repo.delete(pk)
        if audit:
            log_action(user=request.user, action=f'{audit}_delete', object_type=audit, object_id=int(pk))
        if refresh:
            broadcast_refresh(refresh)
        return Response(status=status.HTTP_204_NO_CONTENT)
    fields = validated(serializer_cls, request, instance=obj, partial=True)
    obj = update(pk, fields, obj) if update else repo.update(pk, fields)
    if audit:
        log_action(user=request.user, action=f'{audit}_update', object_type=audit, object_id=int(pk),
                   detail={'fields': sorted(fields)})
    if refresh:
        broadcast_refresh(refresh)
    return Response(serializer_cls(obj).data)
