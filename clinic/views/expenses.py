from rest_framework.decorators import api_view, permission_classes

from clinic.permissions import MANAGE_FINANCE, VIEW_FINANCE, read_write
from clinic.repositories import default_repositories
from clinic.serializers.finance import ExpenseSerializer
from .common import list_or_create, retrieve_update_destroy


@api_view(['GET', 'POST'])
@permission_classes([read_write(VIEW_FINANCE, MANAGE_FINANCE)])
def expenses_list(request):
    repos = default_repositories()
    records = None
    if request.method == 'GET' and request.query_params.get('category'):
        records = repos.expenses.list(category=request.query_params['category'])

    def create(fields):
        fields['created_by'] = request.user.username
        return repos.expenses.create(fields)

    return list_or_create(request, repos.expenses, ExpenseSerializer, create=create, records=records,
                          refresh='expenses')


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([read_write(VIEW_FINANCE, MANAGE_FINANCE)])
def expense_detail(request, pk: int):
    repos = default_repositories()
    return retrieve_update_destroy(request, pk, repos.expenses, ExpenseSerializer, refresh='expenses',
                                   audit='expense')
