import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from clinic.permissions import default_permissions
from clinic.tests.fakes import InMemoryRepositories


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttles and the dashboard both live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def repos():
    return InMemoryRepositories()


@pytest.fixture
def make_user(db):
    from clinic.models import User

    def make(username, role='receptionist', password='P@ssw0rd1', **extra):
        extra.setdefault('permissions', default_permissions(role))
        return User.objects.create_user(username=username, password=password, role=role, **extra)
    return make


@pytest.fixture
def client_for():
    def build(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return build
