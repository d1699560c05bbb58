"""
Response envelope for the procurement API.

Every response leaves the API as:
{
    "status": "success" | "error",
    "message": "human readable message or empty",
    "data": {...} | [...] | null
}
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status as http_status
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """
    Route exceptions raised inside views through DRF and flatten the result.

    Django's own ValidationError is not known to DRF, so business-rule
    violations raised by models and services are turned into 400s here.
    Anything DRF does not handle either is logged and returned as a 500.
    """
    if isinstance(exc, DjangoValidationError):
        logger.warning("Business rule violation in %s: %s", _view_name(context), exc)
        return Response(
            {
                "status": "error",
                "message": validation_error_message(exc),
                "data": None,
            },
            status=http_status.HTTP_400_BAD_REQUEST,
        )

    response = exception_handler(exc, context)

    if response is None:
        logger.exception("Unhandled error in %s", _view_name(context), exc_info=exc)
        set_rollback()
        return Response(
            {
                "status": "error",
                "message": "An unexpected error occurred",
                "data": None,
            },
            status=http_status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = format_error_response(response.data, response.status_code)
    return response


def _view_name(context):
    view = (context or {}).get('view')
    return view.__class__.__name__ if view is not None else 'unknown view'


def validation_error_message(exc):
    """Collapse a Django ValidationError (message, list or dict) into one string."""
    if hasattr(exc, 'message_dict'):
        return "; ".join(
            f"{field}: {', '.join(messages)}" if field != '__all__' else ', '.join(messages)
            for field, messages in exc.message_dict.items()
        )
    return ", ".join(str(message) for message in exc.messages)


def format_error_response(errors, status_code):
    """
    Build the error envelope from DRF error payloads.

    - {"field": ["e1", "e2"]} -> "field: e1, e2"
    - {"detail": "text"}      -> "text"
    - ["e1", "e2"]            -> "e1, e2"
    """
    message = ""

    if isinstance(errors, dict):
        parts = []
        for field, field_errors in errors.items():
            if field == 'detail':
                message = str(field_errors)
            elif isinstance(field_errors, list):
                parts.append(f"{field}: {', '.join(format_error_item(e) for e in field_errors)}")
            elif isinstance(field_errors, dict):
                parts.append(f"{field}: {format_nested_errors(field_errors)}")
            else:
                parts.append(f"{field}: {field_errors}")

        if parts:
            message = "; ".join(parts)

    elif isinstance(errors, list):
        message = ", ".join(format_error_item(e) for e in errors)

    else:
        message = str(errors)

    return {
        "status": "error",
        "message": message,
        "data": None
    }


def format_error_item(item):
    if isinstance(item, dict):
        return format_nested_errors(item)
    return str(item)


def format_nested_errors(errors_dict):
    """Nested serializer errors, e.g. one entry per line item."""
    messages = []
    for key, value in errors_dict.items():
        if isinstance(value, list):
            messages.append(f"{key}: {', '.join(format_error_item(v) for v in value)}")
        elif isinstance(value, dict):
            messages.append(f"{key}: {format_nested_errors(value)}")
        else:
            messages.append(f"{key}: {value}")
    return "; ".join(messages)


class StandardizedJSONRenderer(JSONRenderer):
    """
    Wraps responses that did not go through success_response/error_response,
    e.g. paginated lists or the JWT token views.
    """

    def render(self, data, accepted_media_type=None, renderer_context=None):
        response = renderer_context.get('response') if renderer_context else None

        if response is not None and response.status_code == 204:
            return b''

        if response is not None and not self.is_already_formatted(data):
            if response.status_code >= 400:
                data = format_error_response(data, response.status_code)
            else:
                data = self.format_success_response(data)

        return super().render(data, accepted_media_type, renderer_context)

    def is_already_formatted(self, data):
        return isinstance(data, dict) and {'status', 'message', 'data'} <= set(data.keys())

    def format_success_response(self, data):
        if isinstance(data, dict) and 'detail' in data:
            return {"status": "success", "message": str(data['detail']), "data": None}
        if data is None or (isinstance(data, dict) and not data):
            return {"status": "success", "message": "", "data": None}
        return {"status": "success", "message": "", "data": data}


def success_response(data=None, message="", status_code=http_status.HTTP_200_OK):
    """
    Usage:
        return success_response(
            data=serializer.data,
            message="Purchase requisition approved",
            status_code=status.HTTP_201_CREATED
        )
    """
    return Response({
        "status": "success",
        "message": message,
        "data": data
    }, status=status_code)


def error_response(message, data=None, status_code=http_status.HTTP_400_BAD_REQUEST):
    """
    Usage:
        return error_response(
            message="Purchase Requisition not found",
            status_code=status.HTTP_404_NOT_FOUND
        )
    """
    return Response({
        "status": "error",
        "message": message,
        "data": data
    }, status=status_code)
