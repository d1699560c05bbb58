"""
Supplier endpoints.

Reads are open to every authenticated user; changes need the procurement
role (admins pass every role check).
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.base.filters import parse_id
from core.notifications.services import NotificationService
from core.user_accounts.decorators import require_role, require_role_for
from core.user_accounts.models import UserRole
from procurement.suppliers.models import ComplianceDocument, Supplier, SupplierContact
from procurement.suppliers.serializers import (
    ComplianceDocumentSerializer,
    SupplierApproveSerializer,
    SupplierContactSerializer,
    SupplierContactsUpdateSerializer,
    SupplierCreateSerializer,
    SupplierDetailSerializer,
    SupplierListSerializer,
    SupplierUpdateSerializer,
)
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)

WRITE_METHODS = ('POST', 'PUT', 'PATCH', 'DELETE')


# ============================================================================
# SUPPLIER VIEWS
# ============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(WRITE_METHODS, UserRole.PROCUREMENT)
@auto_paginate
def supplier_list(request):
    """
    GET: List suppliers
    POST: Register a supplier (status pending until approved)

    Query Parameters for GET:
    - category: case-insensitive contains
    - is_active: true/false
    - status: pending, approved, suspended
    - search: name or email
    """
    if request.method == 'GET':
        queryset = Supplier.objects.all()

        category = request.query_params.get('category')
        if category:
            queryset = queryset.filter(category__icontains=category)

        is_active = request.query_params.get('is_active')
        if is_active is not None:
            queryset = queryset.active() if is_active.lower() == 'true' else queryset.inactive()

        status_filter = request.query_params.get('status')
        if status_filter:
            queryset = queryset.filter(status=status_filter)

        queryset = queryset.search(request.query_params.get('search'), ['name', 'email'])

        serializer = SupplierListSerializer(queryset, many=True)
        return Response(serializer.data)

    serializer = SupplierCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    supplier = serializer.save(created_by=request.user)
    data = SupplierDetailSerializer(supplier).data
    AuditService.record(
        AuditLog.ENTITY_SUPPLIER, supplier.pk, 'supplier_created',
        actor=request.user, after=data, request=request,
    )
    NotificationService.send_supplier_created(supplier)
    logger.info("Supplier %s registered by %s", supplier.email, request.user.email)

    return success_response(data=data, message="Supplier created successfully", status_code=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
@require_role_for(WRITE_METHODS, UserRole.PROCUREMENT)
def supplier_detail(request, pk):
    """
    GET: Retrieve a supplier with contacts and compliance documents
    PUT/PATCH: Update supplier fields
    DELETE: Deactivate the supplier
    """
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        return success_response(data=SupplierDetailSerializer(supplier).data, message="Supplier retrieved successfully")

    before = SupplierDetailSerializer(supplier).data

    if request.method == 'DELETE':
        supplier.deactivate()
        AuditService.record(
            AuditLog.ENTITY_SUPPLIER, supplier.pk, 'supplier_deactivated',
            actor=request.user, before={'is_active': True}, after={'is_active': False}, request=request,
        )
        logger.info("Supplier %s deactivated by %s", supplier.email, request.user.email)
        return success_response(data=SupplierDetailSerializer(supplier).data, message="Supplier deactivated successfully")

    old_status = supplier.status
    serializer = SupplierUpdateSerializer(supplier, data=request.data, partial=True)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    supplier = serializer.save()
    after = SupplierDetailSerializer(supplier).data
    AuditService.record(
        AuditLog.ENTITY_SUPPLIER, supplier.pk, 'supplier_updated',
        actor=request.user, before=before, after=after, request=request,
    )
    if supplier.status != old_status:
        NotificationService.send_supplier_status_change(supplier, old_status)

    return success_response(data=after, message="Supplier updated successfully")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@require_role(UserRole.PROCUREMENT)
def supplier_approve(request, pk):
    """
    POST: Approve a supplier for RFQs

    Expected data: {"approval_notes": "optional"}
    """
    supplier = get_object_or_404(Supplier, pk=pk)

    serializer = SupplierApproveSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        old_status = supplier.status
        supplier.approve(request.user, serializer.validated_data['approval_notes'])
    except ValidationError as e:
        return error_response(message=e.messages[0], status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_SUPPLIER, supplier.pk, 'supplier_approved',
        actor=request.user, before={'status': old_status},
        after={'status': supplier.status, 'approval_notes': supplier.approval_notes}, request=request,
    )
    NotificationService.send_supplier_approved(supplier)
    logger.info("Supplier %s approved by %s", supplier.email, request.user.email)

    return success_response(data=SupplierDetailSerializer(supplier).data, message="Supplier approved successfully")


# ============================================================================
# CONTACTS AND COMPLIANCE DOCUMENTS
# ============================================================================

@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
@require_role_for(WRITE_METHODS, UserRole.PROCUREMENT)
def supplier_contacts(request, pk):
    """
    GET: Contacts of a supplier
    PUT: Replace all contacts

    Expected data for PUT: {"contacts": [{"name": ..., "email": ..., "is_primary": true}]}
    """
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        serializer = SupplierContactSerializer(supplier.contacts.all(), many=True)
        return success_response(data=serializer.data, message="Contacts retrieved successfully")

    serializer = SupplierContactsUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid contacts",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    with transaction.atomic():
        supplier.contacts.all().delete()
        contacts = [
            SupplierContact.objects.create(supplier=supplier, **contact)
            for contact in serializer.validated_data['contacts']
        ]

    logger.info("Contacts of supplier %s replaced (%d)", supplier.email, len(contacts))
    return success_response(
        data=SupplierContactSerializer(contacts, many=True).data,
        message="Contacts updated successfully"
    )


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
@require_role_for(WRITE_METHODS, UserRole.PROCUREMENT)
def supplier_compliance_docs(request, pk):
    """
    GET: Compliance documents of a supplier
    POST: Add a document {"name", "url", "expiry_date"}
    DELETE: Remove a document {"document_id"} (also accepted as ?document_id=)
    """
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        serializer = ComplianceDocumentSerializer(supplier.compliance_documents.all(), many=True)
        return success_response(data=serializer.data, message="Compliance documents retrieved successfully")

    if request.method == 'POST':
        serializer = ComplianceDocumentSerializer(data=request.data)
        if not serializer.is_valid():
            return error_response(
                message="Invalid data provided",
                data=serializer.errors,
                status_code=status.HTTP_400_BAD_REQUEST
            )
        document = serializer.save(supplier=supplier)
        logger.info("Compliance document '%s' added to supplier %s", document.name, supplier.email)
        return success_response(
            data=ComplianceDocumentSerializer(document).data,
            message="Compliance document added successfully",
            status_code=status.HTTP_201_CREATED
        )

    document_id = request.data.get('document_id') or request.query_params.get('document_id')
    if not document_id:
        return error_response(message="Document ID is required", status_code=status.HTTP_400_BAD_REQUEST)

    document = ComplianceDocument.objects.filter(
        supplier=supplier, pk=parse_id(document_id, 'document_id')
    ).first()
    if document is None:
        return error_response(message="Compliance document not found", status_code=status.HTTP_404_NOT_FOUND)

    document.delete()
    return success_response(data=None, message="Compliance document removed successfully")
