"""
JSON API views for notifications.

Endpoints:
- GET    /api/notifications/              The caller's notifications
- PUT    /api/notifications/read-all/     Mark all read
- PUT    /api/notifications/<id>/read/    Mark one read
- DELETE /api/notifications/<id>/         Delete one
"""

from django.http import HttpRequest, JsonResponse

from src.core.notifications.dtos import ListNotificationsQueryDTO

from ..shared.api import BaseAPIView, as_bool, json_response


class NotificationListView(BaseAPIView):
    """
    GET /api/notifications/

    Query params: page, limit, unreadOnly
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            page_size = self.get_container().config.notifications_page_size() or 20

            query = ListNotificationsQueryDTO.from_params(
                caller,
                request.GET,
                default_limit=page_size,
                unread_only=as_bool(request.GET.get('unreadOnly', request.GET.get('unread_only', False))),
            )
            result = self.get_service('list_notifications_service').execute(query)

            return json_response(True, **result.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class NotificationReadAllView(BaseAPIView):
    """PUT /api/notifications/read-all/"""

    def put(self, request: HttpRequest) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            changed = self.get_service('mark_all_notifications_read_service').execute(caller)
            return json_response(True, 'All notifications marked as read.', updated=changed)

        except Exception as e:
            return self.handle_exception(e)


class NotificationReadView(BaseAPIView):
    """PUT /api/notifications/<id>/read/"""

    def put(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            output = self.get_service('mark_notification_read_service').execute(pk, caller)
            return json_response(True, notification=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class NotificationDetailView(BaseAPIView):
    """DELETE /api/notifications/<id>/"""

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            self.get_service('delete_notification_service').execute(pk, caller)
            return json_response(True, 'Notification deleted.')

        except Exception as e:
            return self.handle_exception(e)
