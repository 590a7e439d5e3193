import pytest
from django.core.cache import cache
from django.core.files.storage import InMemoryStorage
from model_bakery import baker
from rest_framework.test import APIClient

from CoursePlatformApp.core.choices import UserRole
from CoursePlatformApp.core.storage import file_storage
from CoursePlatformApp.domain.services import course_service, lifecycle_service

PASSWORD = "pass1234"


@pytest.fixture(autouse=True)
def clear_cache():
    """Throttle counters live in the cache; keep tests independent."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def memory_storage(monkeypatch):
    """Route the file-storage collaborator to an in-memory backend."""
    backend = InMemoryStorage(base_url="/media/")
    monkeypatch.setattr(file_storage, "backend", backend)
    return backend


def make_user(role: UserRole, email: str):
    user = baker.make("users.User", email=email, username=email, role=role)
    user.set_password(PASSWORD)
    user.save()
    return user


@pytest.fixture
def admin():
    return make_user(UserRole.ADMIN, "admin@example.com")


@pytest.fixture
def tutor():
    return make_user(UserRole.TUTOR, "tutor@example.com")


@pytest.fixture
def other_tutor():
    return make_user(UserRole.TUTOR, "tutor2@example.com")


@pytest.fixture
def student():
    return make_user(UserRole.STUDENT, "student@example.com")


@pytest.fixture
def other_student():
    return make_user(UserRole.STUDENT, "student2@example.com")


@pytest.fixture
def course(tutor):
    return course_service.create_course(tutor, {"title": "Algorithms", "description": "", "is_public": True})


@pytest.fixture
def published_course(course, admin):
    return lifecycle_service.publish(admin, course.pk)


@pytest.fixture
def login():
    """Return a helper that authenticates an APIClient through the JWT token endpoint."""
    def _login(user) -> APIClient:
        client = APIClient()
        token = client.post(
            "/api/v1/auth/token/", {"email": user.email, "password": PASSWORD}, format="json"
        ).data["access"]
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client
    return _login
