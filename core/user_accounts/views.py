"""
User account endpoints: own profile and user administration.

Login is handled by the JWT token endpoints in procurement_hub.urls.
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.user_accounts.decorators import require_role
from core.user_accounts.models import CustomUser, UserRole
from core.user_accounts.serializers import (
    AdminUserCreationSerializer,
    AdminUserUpdateSerializer,
    UserListSerializer,
)
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def current_user(request):
    """
    GET /accounts/me/
    """
    serializer = UserListSerializer(request.user)
    return success_response(data=serializer.data, message="Profile retrieved successfully")


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role(UserRole.ADMIN)
@auto_paginate
def admin_user_list(request):
    """
    GET: List users (admin only)
    POST: Create a user with any role (admin only)

    Query Parameters for GET:
    - role: Filter by role
    - is_active: true/false
    """
    if request.method == 'GET':
        users = CustomUser.objects.all().order_by('name')

        role = request.query_params.get('role')
        if role:
            users = users.filter(role=role)

        is_active = request.query_params.get('is_active')
        if is_active is not None:
            users = users.filter(is_active=is_active.lower() == 'true')

        serializer = UserListSerializer(users, many=True)
        return Response(serializer.data)

    serializer = AdminUserCreationSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        logger.info("User %s created with role %s by %s", user.email, user.role, request.user.email)
        return success_response(
            data=UserListSerializer(user).data,
            message="User created successfully",
            status_code=status.HTTP_201_CREATED
        )
    return error_response(
        message="Invalid data provided",
        data=serializer.errors,
        status_code=status.HTTP_400_BAD_REQUEST
    )


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
@require_role(UserRole.ADMIN)
def admin_user_detail(request, user_id):
    """
    GET: Retrieve a user
    PUT/PATCH: Update name, phone number, role or active flag
    """
    user = get_object_or_404(CustomUser, pk=user_id)

    if request.method == 'GET':
        return success_response(data=UserListSerializer(user).data, message="User retrieved successfully")

    if user.pk == request.user.pk and request.data.get('role') not in (None, UserRole.ADMIN):
        return error_response(
            message="Admins cannot remove their own admin role",
            status_code=status.HTTP_400_BAD_REQUEST
        )

    serializer = AdminUserUpdateSerializer(user, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return success_response(data=UserListSerializer(user).data, message="User updated successfully")
    return error_response(
        message="Invalid data provided",
        data=serializer.errors,
        status_code=status.HTTP_400_BAD_REQUEST
    )
