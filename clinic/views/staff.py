from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.permissions import MANAGE_STAFF, VIEW_STAFF, read_write, require_permission
from clinic.repositories import default_repositories
from clinic.serializers.staff import StaffSerializer
from clinic.services.cigarettes import apply_cigarette_cost
from .common import list_or_create, retrieve_update_destroy


@api_view(['GET', 'POST'])
@permission_classes([read_write(VIEW_STAFF, MANAGE_STAFF)])
def staff_list(request):
    repos = default_repositories()
    return list_or_create(
        request, repos.staff, StaffSerializer,
        create=lambda fields: repos.staff.create(apply_cigarette_cost(fields)),
        refresh='staff',
    )


@api_view(['GET'])
@permission_classes([require_permission(VIEW_STAFF)])
def staff_active(request):
    repos = default_repositories()
    return Response(StaffSerializer(repos.staff.list_active_staff(), many=True).data)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([read_write(VIEW_STAFF, MANAGE_STAFF)])
def staff_detail(request, pk: int):
    repos = default_repositories()
    return retrieve_update_destroy(
        request, pk, repos.staff, StaffSerializer,
        update=lambda pk, fields, obj: repos.staff.update(pk, apply_cigarette_cost(fields, obj)),
        refresh='staff', audit='staff',
    )
