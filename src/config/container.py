"""
Dependency Injection Container.

Wires the core use cases to their Django/Celery adapters with
dependency-injector.

Patterns:
- Singleton: one instance per process (repositories, dispatcher, publisher)
- Factory: new instance per resolution (services, Unit of Work)
- Configuration: values copied from Django settings in ``get_container``

Tests swap adapters with ``provider.override(...)``.
"""

from typing import Optional

from dependency_injector import containers, providers
from django.conf import settings

from src.adapters.django_app.complaints.repositories import (
    DjangoCategoryCatalog,
    DjangoComplaintRepository,
    DjangoEventStore,
    DjangoMemberDirectory,
    DjangoTicketSequence,
)
from src.adapters.django_app.events.publishers import get_event_publisher
from src.adapters.django_app.notifications.repositories import DjangoNotificationRepository
from src.adapters.django_app.shared.unit_of_work import DjangoUnitOfWork
from src.core.complaints.access import RoleScopedAccessFilter
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
from src.core.notifications.use_cases import (
    DeleteNotificationService,
    ListNotificationsService,
    MarkAllNotificationsReadService,
    MarkNotificationReadService,
)


class Container(containers.DeclarativeContainer):
    """
    Main Dependency Injection container.

    Layout:
    - Configuration
    - Repositories and ports
    - Events (dispatcher, publisher, store)
    - Unit of Work
    - Services / Use Cases

    Example:
        container = get_container()
        service = container.create_complaint_service()
        result = service.execute(input_dto)
    """

    config = providers.Configuration()

    # =========================================================================
    # Repositories
    # =========================================================================

    complaint_repository = providers.Singleton(DjangoComplaintRepository)

    category_catalog = providers.Singleton(DjangoCategoryCatalog)

    member_directory = providers.Singleton(DjangoMemberDirectory)

    notification_repository = providers.Singleton(DjangoNotificationRepository)

    ticket_sequence = providers.Singleton(DjangoTicketSequence)

    ticket_generator = providers.Singleton(
        TicketIdentifierGenerator,
        sequence=ticket_sequence,
        prefix=config.ticket_id_prefix,
    )

    access_filter = providers.Singleton(
        RoleScopedAccessFilter,
        search_widens_staff_scope=config.search_widens_staff_scope,
    )

    # =========================================================================
    # Events
    # =========================================================================

    notification_dispatcher = providers.Singleton(
        NotificationDispatcher,
        notification_repo=notification_repository,
        member_directory=member_directory,
    )

    event_publisher = providers.Singleton(
        get_event_publisher,
        mode=config.event_publisher_mode,
        dispatcher=notification_dispatcher,
    )

    event_store = providers.Singleton(DjangoEventStore)

    # =========================================================================
    # Unit of Work (new instance per operation)
    # =========================================================================

    unit_of_work = providers.Factory(
        DjangoUnitOfWork,
        event_publisher=event_publisher,
        event_store=event_store,
    )

    # =========================================================================
    # Complaint services
    # =========================================================================

    create_complaint_service = providers.Factory(
        CreateComplaintService,
        complaint_repo=complaint_repository,
        category_catalog=category_catalog,
        member_directory=member_directory,
        ticket_generator=ticket_generator,
        uow=unit_of_work,
    )

    update_status_service = providers.Factory(
        UpdateStatusService,
        complaint_repo=complaint_repository,
        category_catalog=category_catalog,
        member_directory=member_directory,
        uow=unit_of_work,
    )

    assign_complaint_service = providers.Factory(
        AssignComplaintService,
        complaint_repo=complaint_repository,
        category_catalog=category_catalog,
        member_directory=member_directory,
        uow=unit_of_work,
    )

    add_response_service = providers.Factory(
        AddResponseService,
        complaint_repo=complaint_repository,
        category_catalog=category_catalog,
        member_directory=member_directory,
        uow=unit_of_work,
    )

    rate_complaint_service = providers.Factory(
        RateComplaintService,
        complaint_repo=complaint_repository,
        category_catalog=category_catalog,
        member_directory=member_directory,
        uow=unit_of_work,
    )

    delete_complaint_service = providers.Factory(
        DeleteComplaintService,
        complaint_repo=complaint_repository,
        category_catalog=category_catalog,
        uow=unit_of_work,
    )

    # Reads (no UoW)
    get_complaint_service = providers.Factory(
        GetComplaintService,
        complaint_repo=complaint_repository,
        category_catalog=category_catalog,
        member_directory=member_directory,
        access_filter=access_filter,
    )

    list_complaints_service = providers.Factory(
        ListComplaintsService,
        complaint_repo=complaint_repository,
        category_catalog=category_catalog,
        member_directory=member_directory,
        access_filter=access_filter,
    )

    complaint_stats_service = providers.Factory(
        ComplaintStatsService,
        complaint_repo=complaint_repository,
        category_catalog=category_catalog,
        member_directory=member_directory,
        access_filter=access_filter,
    )

    # =========================================================================
    # Notification services
    # =========================================================================

    list_notifications_service = providers.Factory(
        ListNotificationsService,
        notification_repo=notification_repository,
        complaint_repo=complaint_repository,
    )

    mark_notification_read_service = providers.Factory(
        MarkNotificationReadService,
        notification_repo=notification_repository,
    )

    mark_all_notifications_read_service = providers.Factory(
        MarkAllNotificationsReadService,
        notification_repo=notification_repository,
    )

    delete_notification_service = providers.Factory(
        DeleteNotificationService,
        notification_repo=notification_repository,
    )


# =============================================================================
# Global container
# =============================================================================

_container: Optional[Container] = None


def settings_config() -> dict:
    """Container configuration taken from Django settings."""
    return {
        "ticket_id_prefix": getattr(settings, "TICKET_ID_PREFIX", "VHU"),
        "search_widens_staff_scope": getattr(settings, "COMPLAINTS_SEARCH_WIDENS_STAFF_SCOPE", True),
        "event_publisher_mode": getattr(settings, "EVENT_PUBLISHER_MODE", "sync"),
        "complaints_page_size": getattr(settings, "COMPLAINTS_PAGE_SIZE", 10),
        "notifications_page_size": getattr(settings, "NOTIFICATIONS_PAGE_SIZE", 20),
    }


def get_container() -> Container:
    """
    Process wide container, created on first use.

    Returns:
        Configured container
    """
    global _container

    if _container is None:
        _container = Container()
        _container.config.from_dict(settings_config())

    return _container


def reset_container() -> None:
    """Drops the global container (tests)."""
    global _container
    _container = None
