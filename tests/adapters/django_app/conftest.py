"""
Fixtures for the Django adapter tests.

Settings come from ``src.config.settings_test`` (in-memory SQLite, sync
publisher, eager Celery). Members and categories are created with fixed
ids so the callers of the root conftest map onto real rows.
"""

import json

import pytest

from src.config.container import reset_container


@pytest.fixture(autouse=True)
def fresh_container():
    """Every test resolves its own container (and its singletons)."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def members(db):
    from src.adapters.django_app.complaints.models import MemberModel

    rows = [
        ("student-1", "Kenenisa Bekele", "student@haramaya.edu.et", "student"),
        ("student-2", "Hana Girma", "hana@haramaya.edu.et", "student"),
        ("staff-1", "Dr. Abebe Kebede", "staff@haramaya.edu.et", "staff"),
        ("staff-2", "Meron Alemu", "meron@haramaya.edu.et", "staff"),
        ("admin-1", "System Administrator", "admin@haramaya.edu.et", "admin"),
    ]
    return {
        member_id: MemberModel.objects.create(id=member_id, name=name, email=email, role=role)
        for member_id, name, email, role in rows
    }


@pytest.fixture
def categories(db):
    from src.adapters.django_app.complaints.models import CategoryModel

    return {
        "cat-it": CategoryModel.objects.create(id="cat-it", name="IT Services", icon="💻"),
        "cat-retired": CategoryModel.objects.create(id="cat-retired", name="Retired", is_active=False),
    }


@pytest.fixture
def api(client, members, categories):
    """
    Calls the JSON API as a given caller.

    Example:
        response = api("post", "/api/complaints/", student, {"title": ...})
    """

    def _call(method, url, caller=None, body=None):
        extra = {}
        if caller is not None:
            extra["HTTP_X_USER_ID"] = caller.user_id
            extra["HTTP_X_USER_ROLE"] = caller.role.value
        if body is not None:
            extra["data"] = body if isinstance(body, str) else json.dumps(body)
            extra["content_type"] = "application/json"
        return getattr(client, method)(url, **extra)

    return _call


@pytest.fixture
def filed(api, student):
    """A complaint filed by the student through the API."""
    response = api("post", "/api/complaints/", student, {
        "title": "WiFi down in Block 4",
        "description": "No internet connection in Block 4 since Monday.",
        "categoryId": "cat-it",
        "priority": "high",
    })
    assert response.status_code == 201
    return response.json()["complaint"]
