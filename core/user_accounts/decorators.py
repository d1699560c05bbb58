"""
Role checks for function-based views.
"""
import logging
from functools import wraps

from rest_framework import status

from procurement_hub.response_formatter import error_response

logger = logging.getLogger(__name__)


def require_role(*roles):
    """
    Only let users holding one of ``roles`` (or admins) through.

    Place it below @api_view so request is the DRF request:

        @api_view(['PUT'])
        @permission_classes([IsAuthenticated])
        @require_role('admin')
        def authorization_matrix(request):
            ...

    With several methods on one view, pass ``methods=`` through
    require_role_for() instead.
    """
    return require_role_for(None, *roles)


def require_role_for(methods, *roles):
    """Like require_role, but only enforced for the given HTTP methods."""
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(request, *args, **kwargs):
            enforced = methods is None or request.method in methods
            user = request.user
            if enforced and not (user.is_authenticated and user.has_role(*roles)):
                logger.warning(
                    "User %s (role %s) denied %s %s",
                    getattr(user, 'email', 'anonymous'),
                    getattr(user, 'role', None),
                    request.method,
                    request.path,
                )
                return error_response(
                    message=f"This action requires one of the roles: {', '.join(roles)}",
                    status_code=status.HTTP_403_FORBIDDEN
                )
            return view_func(request, *args, **kwargs)

        wrapper.required_roles = roles
        return wrapper
    return decorator
