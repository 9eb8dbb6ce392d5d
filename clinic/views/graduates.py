from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from clinic.permissions import MANAGE_PATIENTS, VIEW_PATIENTS, read_write, require_permission
from clinic.repositories import default_repositories
from clinic.serializers.patient import GraduateSerializer
from clinic.services.cigarettes import apply_cigarette_cost
from .common import list_or_create, retrieve_update_destroy


@api_view(['GET', 'POST'])
@permission_classes([read_write(VIEW_PATIENTS, MANAGE_PATIENTS)])
def graduates_list(request):
    repos = default_repositories()
    return list_or_create(
        request, repos.graduates, GraduateSerializer,
        create=lambda fields: repos.graduates.create(apply_cigarette_cost(fields)),
        refresh='graduates',
    )


@api_view(['GET'])
@permission_classes([require_permission(VIEW_PATIENTS)])
def graduates_active(request):
    repos = default_repositories()
    return Response(GraduateSerializer(repos.graduates.list_active_graduates(), many=True).data)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([read_write(VIEW_PATIENTS, MANAGE_PATIENTS)])
def graduate_detail(request, pk: int):
    repos = default_repositories()
    return retrieve_update_destroy(
        request, pk, repos.graduates, GraduateSerializer,
        update=lambda pk, fields, obj: repos.graduates.update(pk, apply_cigarette_cost(fields, obj)),
        refresh='graduates',
    )
