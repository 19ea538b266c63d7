"""
JSON API plumbing shared by the Django apps.

- ``json_response``: the ``{success, message?, ...payload}`` envelope
- ``parse_json_body``: request body as a dict
- ``BaseAPIView``: caller identity, container access, exception mapping

Caller identity comes from the identity service in front of the desk as
two headers, ``X-User-Id`` and ``X-User-Role``.
"""

import json
import logging
from typing import Any, Dict, Optional

from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.core.shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainException,
    InternalError,
    NotFoundError,
    StateError,
    ValidationError,
)
from src.core.shared.identity import Caller

logger = logging.getLogger(__name__)

USER_ID_HEADER = 'X-User-Id'
USER_ROLE_HEADER = 'X-User-Role'


def json_response(success: bool, message: Optional[str] = None, status: int = 200, **payload) -> JsonResponse:
    """
    Builds the standard JSON envelope.

    Args:
        success: Whether the operation succeeded
        message: Human readable message (optional)
        status: HTTP status code
        **payload: Extra top level keys (``complaint=...``, ``stats=...``)
    """
    body: Dict[str, Any] = {'success': success}

    if message is not None:
        body['message'] = message

    body.update(payload)
    return JsonResponse(body, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Raises:
        ValueError: Malformed JSON or a non-object body
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def as_bool(value: Any) -> bool:
    """Accepts JSON booleans and form style strings ("true", "1")."""
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    return bool(value)


def first_of(data: Dict, *keys: str, default: Any = None) -> Any:
    """First present key; bodies accept camelCase and snake_case."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    Base view for the JSON API.

    Provides:
    - JSON body parsing
    - Caller identity from headers
    - DI container access
    - Exception to envelope mapping
    """

    def get_container(self):
        from src.config.container import get_container
        return get_container()

    def get_service(self, service_name: str):
        """Resolves a service provider by name."""
        return getattr(self.get_container(), service_name)()

    def get_caller(self, request: HttpRequest) -> Caller:
        """
        Raises:
            AuthenticationError: Missing id or unknown role
        """
        return Caller.of(
            request.headers.get(USER_ID_HEADER, ''),
            request.headers.get(USER_ROLE_HEADER, ''),
        )

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """
        Maps an exception to an HTTP response.

        Domain exceptions keep their message; anything else is logged and
        answered with a generic 500.
        """
        if isinstance(e, (ValidationError, ConflictError, StateError)):
            return json_response(False, e.message, status=400, error=e.code)

        if isinstance(e, AuthenticationError):
            return json_response(False, e.message, status=401, error=e.code)

        if isinstance(e, AuthorizationError):
            return json_response(False, e.message, status=403, error=e.code)

        if isinstance(e, NotFoundError):
            return json_response(False, e.message, status=404, error=e.code)

        if isinstance(e, InternalError):
            logger.error(f"Internal error: {e}")
            return json_response(False, e.message, status=500, error=e.code)

        if isinstance(e, DomainException):
            return json_response(False, e.message, status=400, error=e.code)

        if isinstance(e, ValueError):
            return json_response(False, str(e), status=400, error='BAD_REQUEST')

        logger.exception(f"Unexpected API error: {e}")
        return json_response(False, 'Server Error', status=500, error='INTERNAL_ERROR')


class HealthView(View):
    """Liveness check, no identity required."""

    def get(self, request: HttpRequest) -> JsonResponse:
        return json_response(True, 'VoiceHU API is running', health='ok')
