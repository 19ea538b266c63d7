"""
JSON API views for the Complaints domain.

Endpoints:
- GET    /api/complaints/                 List complaints (role scoped)
- POST   /api/complaints/                 File a complaint
- GET    /api/complaints/stats/           Dashboard statistics
- GET    /api/complaints/<id>/            Complaint detail
- DELETE /api/complaints/<id>/            Delete a complaint
- PUT    /api/complaints/<id>/status/     Change status (staff, admin)
- PUT    /api/complaints/<id>/assign/     Assign (admin)
- POST   /api/complaints/<id>/respond/    Add a response
- PUT    /api/complaints/<id>/rate/       Rate the resolution (student)

Format:
- Input: JSON, camelCase or snake_case keys
- Output: ``{success, message?, ...payload}``
"""

import logging

from django.http import HttpRequest, JsonResponse

from src.core.complaints.dtos import (
    AddResponseInputDTO,
    AssignComplaintInputDTO,
    CreateComplaintInputDTO,
    DeleteComplaintInputDTO,
    ListComplaintsQueryDTO,
    RateComplaintInputDTO,
    UpdateStatusInputDTO,
    attachments_from_dicts,
)
from src.core.complaints.use_cases import require_role
from src.core.shared.identity import Role

from ..shared.api import BaseAPIView, as_bool, first_of, json_response

logger = logging.getLogger(__name__)


class ComplaintListCreateView(BaseAPIView):
    """
    GET /api/complaints/ - list
    POST /api/complaints/ - create
    """

    def get(self, request: HttpRequest) -> JsonResponse:
        """
        Query params:
        - page, limit
        - status, priority, category, assignedTo, submittedBy
        - search
        - sortBy, sortOrder
        """
        try:
            caller = self.get_caller(request)
            page_size = self.get_container().config.complaints_page_size() or 10
            query = ListComplaintsQueryDTO.from_params(caller, request.GET, default_limit=page_size)

            result = self.get_service('list_complaints_service').execute(query)

            return json_response(True, **result.to_dict(items_key='complaints'))

        except Exception as e:
            return self.handle_exception(e)

    def post(self, request: HttpRequest) -> JsonResponse:
        """
        Body JSON:
        {
            "title": "string",
            "description": "string",
            "categoryId": "string",
            "priority": "low|medium|high|urgent (optional)",
            "isAnonymous": false,
            "attachments": [{"filename", "originalName", "mimetype", "size", "path"}]
        }
        """
        try:
            caller = self.get_caller(request)
            data = self.parse_body(request)

            input_dto = CreateComplaintInputDTO(
                caller=caller,
                title=first_of(data, 'title', default=''),
                description=first_of(data, 'description', default=''),
                category_id=first_of(data, 'categoryId', 'category', 'category_id', default=''),
                priority=first_of(data, 'priority', default='medium'),
                is_anonymous=as_bool(first_of(data, 'isAnonymous', 'is_anonymous', default=False)),
                attachments=attachments_from_dicts(first_of(data, 'attachments', default=[])),
            )

            output = self.get_service('create_complaint_service').execute(input_dto)

            logger.info(f"API: complaint submitted: {output.ticket_id}")

            return json_response(
                True,
                'Complaint submitted successfully!',
                status=201,
                complaint=output.to_dict(),
            )

        except Exception as e:
            return self.handle_exception(e)


class ComplaintStatsView(BaseAPIView):
    """GET /api/complaints/stats/"""

    def get(self, request: HttpRequest) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            stats = self.get_service('complaint_stats_service').execute(caller)
            return json_response(True, stats=stats)

        except Exception as e:
            return self.handle_exception(e)


class ComplaintDetailView(BaseAPIView):
    """
    GET /api/complaints/<id>/
    DELETE /api/complaints/<id>/
    """

    def get(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            output = self.get_service('get_complaint_service').execute(pk, caller)
            return json_response(True, complaint=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)

    def delete(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            self.get_service('delete_complaint_service').execute(
                DeleteComplaintInputDTO(complaint_id=pk, caller=caller)
            )
            return json_response(True, 'Complaint deleted successfully.')

        except Exception as e:
            return self.handle_exception(e)


class ComplaintStatusView(BaseAPIView):
    """
    PUT /api/complaints/<id>/status/

    Body JSON: {"status": "...", "rejectionReason": "..."}
    """

    def put(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            data = self.parse_body(request)

            output = self.get_service('update_status_service').execute(
                UpdateStatusInputDTO(
                    complaint_id=pk,
                    caller=caller,
                    status=first_of(data, 'status', default=''),
                    rejection_reason=first_of(data, 'rejectionReason', 'rejection_reason'),
                )
            )

            return json_response(
                True,
                f'Complaint status updated to {output.status}.',
                complaint=output.to_dict(),
            )

        except Exception as e:
            return self.handle_exception(e)


class ComplaintAssignView(BaseAPIView):
    """
    PUT /api/complaints/<id>/assign/

    Body JSON: {"assignedTo": "<member id>"}
    """

    def put(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            data = self.parse_body(request)

            output = self.get_service('assign_complaint_service').execute(
                AssignComplaintInputDTO(
                    complaint_id=pk,
                    caller=caller,
                    assignee_id=first_of(data, 'assignedTo', 'assigned_to', 'staffId'),
                )
            )

            assignee = output.assigned_to or {}
            return json_response(
                True,
                f"Complaint assigned to {assignee.get('name', assignee.get('id'))}.",
                complaint=output.to_dict(),
            )

        except Exception as e:
            return self.handle_exception(e)


class ComplaintRespondView(BaseAPIView):
    """
    POST /api/complaints/<id>/respond/

    Body JSON: {"message": "...", "isInternal": false}
    """

    def post(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            data = self.parse_body(request)

            output = self.get_service('add_response_service').execute(
                AddResponseInputDTO(
                    complaint_id=pk,
                    caller=caller,
                    message=first_of(data, 'message', default=''),
                    is_internal=as_bool(first_of(data, 'isInternal', 'is_internal', default=False)),
                )
            )

            return json_response(True, 'Response added successfully.', complaint=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)


class ComplaintRateView(BaseAPIView):
    """
    PUT /api/complaints/<id>/rate/

    Body JSON: {"rating": 1-5, "feedback": "..."}
    """

    def put(self, request: HttpRequest, pk: str) -> JsonResponse:
        try:
            caller = self.get_caller(request)
            require_role(caller, Role.STUDENT)
            data = self.parse_body(request)

            output = self.get_service('rate_complaint_service').execute(
                RateComplaintInputDTO(
                    complaint_id=pk,
                    caller=caller,
                    rating=first_of(data, 'rating'),
                    feedback=first_of(data, 'feedback'),
                )
            )

            return json_response(True, 'Thank you for your feedback!', complaint=output.to_dict())

        except Exception as e:
            return self.handle_exception(e)
