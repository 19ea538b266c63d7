"""
Global pytest configuration for VoiceHU.

Loaded automatically by pytest; provides callers, in-memory
collaborators and fully wired core services. Core tests never touch the
database.
"""

import pytest
from pathlib import Path

from src.adapters.django_app.events.publishers import InMemoryEventPublisher
from src.adapters.django_app.shared.unit_of_work import InMemoryUnitOfWork
from src.core.complaints.access import RoleScopedAccessFilter
from src.core.complaints.dtos import CreateComplaintInputDTO
from src.core.complaints.ports import (
    CategoryInfo,
    InMemoryCategoryCatalog,
    InMemoryComplaintRepository,
    InMemoryMemberDirectory,
    InMemoryTicketSequence,
    MemberInfo,
)
from src.core.complaints.ticket_ids import TicketIdentifierGenerator
from src.core.complaints.use_cases import (
    AddResponseService,
    AssignComplaintService,
    ComplaintStatsService,
    CreateComplaintService,
    DeleteComplaintService,
    GetComplaintService,
    ListComplaintsService,
    RateComplaintService,
    UpdateStatusService,
)
from src.core.notifications.dispatcher import NotificationDispatcher
from src.core.notifications.ports import InMemoryNotificationRepository
from src.core.shared.identity import Caller, Role


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: end to end flows, run with --run-integration"
    )


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="run integration tests",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-integration"):
        return

    skip_integration = pytest.mark.skip(reason="needs --run-integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(scope="session")
def project_root():
    return Path(__file__).parent.parent


# =============================================================================
# Callers
# =============================================================================

@pytest.fixture
def student():
    return Caller("student-1", Role.STUDENT)


@pytest.fixture
def other_student():
    return Caller("student-2", Role.STUDENT)


@pytest.fixture
def staff():
    return Caller("staff-1", Role.STAFF)


@pytest.fixture
def other_staff():
    return Caller("staff-2", Role.STAFF)


@pytest.fixture
def admin():
    return Caller("admin-1", Role.ADMIN)


# =============================================================================
# In-memory collaborators
# =============================================================================

@pytest.fixture
def complaint_repo():
    return InMemoryComplaintRepository()


@pytest.fixture
def category_catalog():
    return InMemoryCategoryCatalog([
        CategoryInfo(id="cat-it", name="IT Services", icon="💻", color="#f59e0b"),
        CategoryInfo(id="cat-library", name="Library Services", icon="📖", color="#14b8a6"),
        CategoryInfo(id="cat-retired", name="Retired", is_active=False),
    ])


@pytest.fixture
def member_directory():
    return InMemoryMemberDirectory([
        MemberInfo(id="student-1", name="Kenenisa Bekele", role="student", email="student@haramaya.edu.et"),
        MemberInfo(id="student-2", name="Hana Girma", role="student", email="hana@haramaya.edu.et"),
        MemberInfo(id="staff-1", name="Dr. Abebe Kebede", role="staff", email="staff@haramaya.edu.et"),
        MemberInfo(id="staff-2", name="Meron Alemu", role="staff", email="meron@haramaya.edu.et"),
        MemberInfo(id="admin-1", name="System Administrator", role="admin", email="admin@haramaya.edu.et"),
    ])


@pytest.fixture
def ticket_sequence():
    return InMemoryTicketSequence()


@pytest.fixture
def ticket_generator(ticket_sequence):
    return TicketIdentifierGenerator(ticket_sequence, prefix="VHU")


@pytest.fixture
def notification_repo():
    return InMemoryNotificationRepository()


@pytest.fixture
def dispatcher(notification_repo, member_directory):
    return NotificationDispatcher(notification_repo, member_directory)


@pytest.fixture
def publisher(dispatcher):
    """In-memory publisher with the dispatcher subscribed, as in sync mode."""
    publisher = InMemoryEventPublisher()
    dispatcher.subscribe(publisher)
    return publisher


@pytest.fixture
def uow(publisher):
    return InMemoryUnitOfWork(event_publisher=publisher)


@pytest.fixture
def access_filter():
    return RoleScopedAccessFilter(search_widens_staff_scope=True)


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def create_service(complaint_repo, category_catalog, member_directory, ticket_generator, uow):
    return CreateComplaintService(complaint_repo, category_catalog, member_directory, ticket_generator, uow)


@pytest.fixture
def status_service(complaint_repo, category_catalog, member_directory, uow):
    return UpdateStatusService(complaint_repo, category_catalog, member_directory, uow)


@pytest.fixture
def assign_service(complaint_repo, category_catalog, member_directory, uow):
    return AssignComplaintService(complaint_repo, category_catalog, member_directory, uow)


@pytest.fixture
def response_service(complaint_repo, category_catalog, member_directory, uow):
    return AddResponseService(complaint_repo, category_catalog, member_directory, uow)


@pytest.fixture
def rate_service(complaint_repo, category_catalog, member_directory, uow):
    return RateComplaintService(complaint_repo, category_catalog, member_directory, uow)


@pytest.fixture
def delete_service(complaint_repo, category_catalog, uow):
    return DeleteComplaintService(complaint_repo, category_catalog, uow)


@pytest.fixture
def get_service(complaint_repo, category_catalog, member_directory, access_filter):
    return GetComplaintService(complaint_repo, category_catalog, member_directory, access_filter)


@pytest.fixture
def list_service(complaint_repo, category_catalog, member_directory, access_filter):
    return ListComplaintsService(complaint_repo, category_catalog, member_directory, access_filter)


@pytest.fixture
def stats_service(complaint_repo, category_catalog, member_directory, access_filter):
    return ComplaintStatsService(complaint_repo, category_catalog, member_directory, access_filter)


@pytest.fixture
def file_complaint(create_service, student):
    """Files a complaint through the create use case and returns the output DTO."""

    def _file(caller=None, **overrides):
        data = {
            "title": "WiFi down in Block 4",
            "description": "No internet connection in Block 4 since Monday.",
            "category_id": "cat-it",
        }
        data.update(overrides)
        return create_service.execute(CreateComplaintInputDTO(caller=caller or student, **data))

    return _file
