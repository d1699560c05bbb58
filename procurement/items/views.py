"""
Item master endpoints.

Reads are open to every authenticated user; changes need the procurement
role. Prices are read from submitted quotes, never entered here.
"""
import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Case, IntegerField, Value, When
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.audit.models import AuditLog
from core.audit.services import AuditService
from core.base.filters import parse_id
from core.user_accounts.decorators import require_role, require_role_for
from core.user_accounts.models import UserRole
from procurement.items.models import Item, ItemSupplier, UnitOfMeasure
from procurement.items.serializers import (
    ItemApproveSerializer,
    ItemCreateSerializer,
    ItemDetailSerializer,
    ItemListSerializer,
    ItemSupplierCreateSerializer,
    ItemSupplierSerializer,
    ItemUpdateSerializer,
    PriceHistorySerializer,
    UnitOfMeasureSerializer,
)
from procurement.items.services import DEFAULT_TREND_PERIOD, ItemPriceService
from procurement_hub.pagination import auto_paginate
from procurement_hub.response_formatter import error_response, success_response

logger = logging.getLogger(__name__)

WRITE_METHODS = ('POST', 'PUT', 'PATCH', 'DELETE')
SEARCH_FIELDS = ['item_code', 'description', 'category', 'brand', 'model']


def _filtered_items(query_params):
    queryset = Item.objects.select_related('uom')

    queryset = queryset.search(query_params.get('search'), SEARCH_FIELDS)

    category = query_params.get('category')
    if category:
        queryset = queryset.filter(category__iexact=category)

    is_active = query_params.get('is_active')
    if is_active is not None:
        queryset = queryset.active() if is_active.lower() == 'true' else queryset.inactive()

    approval_status = query_params.get('approval_status')
    if approval_status:
        queryset = queryset.filter(approval_status=approval_status)

    uom = query_params.get('uom')
    if uom:
        queryset = queryset.filter(uom__code__iexact=uom)

    return queryset


# ============================================================================
# ITEM VIEWS
# ============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(WRITE_METHODS, UserRole.PROCUREMENT)
@auto_paginate
def item_list(request):
    """
    GET: List items
    POST: Add an item (approval pending)

    Query Parameters for GET:
    - search: code, description, category, brand or model
    - category: exact, case-insensitive
    - is_active: true/false
    - approval_status: pending, approved, rejected
    - uom: unit of measure code
    """
    if request.method == 'GET':
        serializer = ItemListSerializer(_filtered_items(request.query_params), many=True)
        return Response(serializer.data)

    serializer = ItemCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    item = serializer.save(created_by=request.user)
    data = ItemDetailSerializer(item).data
    AuditService.record(
        AuditLog.ENTITY_ITEM, item.pk, 'item_created',
        actor=request.user, after=data, request=request,
    )
    logger.info("Item %s created by %s", item.item_code, request.user.email)

    return success_response(data=data, message="Item created successfully", status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def item_search(request):
    """
    GET: Item lookup for material request entry

    Same filters as the item list. Approved items come first, then the
    newest. Also returns the categories in use so clients can build a
    filter list.
    """
    total_items = Item.objects.count()
    queryset = _filtered_items(request.query_params).annotate(
        approved_first=Case(
            When(approval_status=Item.APPROVAL_APPROVED, then=Value(0)),
            default=Value(1),
            output_field=IntegerField(),
        )
    ).order_by('approved_first', '-created_at', '-id')

    categories = list(
        Item.objects.active().order_by('category').values_list('category', flat=True).distinct()
    )

    return success_response(
        data={
            'results': ItemListSerializer(queryset, many=True).data,
            'categories': categories,
            'total_items': total_items,
            'filtered_count': queryset.count(),
        },
        message="Items retrieved successfully"
    )


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
@require_role_for(WRITE_METHODS, UserRole.PROCUREMENT)
def item_detail(request, pk):
    """
    GET: Retrieve an item with its suppliers
    PUT/PATCH: Update an item that is not approved yet
    DELETE: Deactivate an item that is not approved yet
    """
    item = get_object_or_404(Item.objects.select_related('uom', 'created_by', 'approved_by'), pk=pk)

    if request.method == 'GET':
        return success_response(data=ItemDetailSerializer(item).data, message="Item retrieved successfully")

    if item.is_approved:
        action = "delete" if request.method == 'DELETE' else "modify"
        return error_response(message=f"Cannot {action} approved item", status_code=status.HTTP_400_BAD_REQUEST)

    before = ItemDetailSerializer(item).data

    if request.method == 'DELETE':
        item.deactivate()
        AuditService.record(
            AuditLog.ENTITY_ITEM, item.pk, 'item_deactivated',
            actor=request.user, before={'is_active': True}, after={'is_active': False}, request=request,
        )
        logger.info("Item %s deactivated by %s", item.item_code, request.user.email)
        return success_response(data=ItemDetailSerializer(item).data, message="Item deactivated successfully")

    serializer = ItemUpdateSerializer(item, data=request.data, partial=True)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    item = serializer.save()
    after = ItemDetailSerializer(item).data
    AuditService.record(
        AuditLog.ENTITY_ITEM, item.pk, 'item_updated',
        actor=request.user, before=before, after=after, request=request,
    )

    return success_response(data=after, message="Item updated successfully")


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@require_role(UserRole.PROCUREMENT, UserRole.APPROVER)
def item_approve(request, pk):
    """
    POST: Approve or reject a pending item

    Expected data: {"decision": "approved" | "rejected", "approval_notes": "optional"}
    """
    item = get_object_or_404(Item, pk=pk)

    serializer = ItemApproveSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    old_status = item.approval_status
    try:
        item.review(request.user, serializer.validated_data['decision'], serializer.validated_data['approval_notes'])
    except ValidationError as e:
        return error_response(message=e.messages[0], status_code=status.HTTP_400_BAD_REQUEST)

    AuditService.record(
        AuditLog.ENTITY_ITEM, item.pk, f"item_{item.approval_status}",
        actor=request.user, before={'approval_status': old_status},
        after={'approval_status': item.approval_status, 'approval_notes': item.approval_notes}, request=request,
    )
    logger.info("Item %s %s by %s", item.item_code, item.approval_status, request.user.email)

    return success_response(data=ItemDetailSerializer(item).data, message=f"Item {item.approval_status} successfully")


# ============================================================================
# ITEM SUPPLIERS AND PRICES
# ============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(WRITE_METHODS, UserRole.PROCUREMENT)
def item_suppliers(request, pk):
    """
    GET: Suppliers able to deliver the item, primary first
    POST: Add a supplier capability

    Expected data for POST:
    {"supplier": 3, "is_primary_supplier": true, "capability_rating": "4.50", "notes": "..."}
    """
    item = get_object_or_404(Item, pk=pk)

    if request.method == 'GET':
        serializer = ItemSupplierSerializer(item.supplier_links.select_related('supplier'), many=True)
        return success_response(data=serializer.data, message="Item suppliers retrieved successfully")

    serializer = ItemSupplierCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    supplier = serializer.validated_data['supplier']
    if item.supplier_links.filter(supplier=supplier).exists():
        return error_response(
            message="Supplier capability already exists for this item",
            status_code=status.HTTP_400_BAD_REQUEST
        )

    with transaction.atomic():
        if serializer.validated_data.get('is_primary_supplier'):
            item.supplier_links.update(is_primary_supplier=False)
        link = serializer.save(item=item)

    data = ItemSupplierSerializer(link).data
    AuditService.record(
        AuditLog.ENTITY_ITEM, item.pk, 'item_supplier_added',
        actor=request.user, after=data, request=request,
    )

    return success_response(data=data, message="Supplier added successfully", status_code=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
@auto_paginate
def item_prices(request, pk):
    """
    GET: Price history of an item from submitted quotes, newest first

    Query Parameters:
    - supplier_id
    - date_from, date_to: YYYY-MM-DD, on the quote submission date
    """
    item = get_object_or_404(Item, pk=pk)

    supplier_id = request.query_params.get('supplier_id')
    if supplier_id:
        supplier_id = parse_id(supplier_id, 'supplier_id')

    queryset = ItemPriceService.price_history(
        item,
        supplier_id=supplier_id,
        date_from=request.query_params.get('date_from'),
        date_to=request.query_params.get('date_to'),
    )
    return Response(PriceHistorySerializer(queryset, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def item_price_trends(request, pk):
    """
    GET: Price trend of an item over a period

    Query Parameters:
    - period: 1month, 3months, 6months (default) or 1year
    - supplier_id
    """
    item = get_object_or_404(Item, pk=pk)

    supplier_id = request.query_params.get('supplier_id')
    if supplier_id:
        supplier_id = parse_id(supplier_id, 'supplier_id')

    try:
        data = ItemPriceService.price_trends(
            item,
            period=request.query_params.get('period', DEFAULT_TREND_PERIOD),
            supplier_id=supplier_id,
        )
    except ValidationError as e:
        return error_response(message=e.messages[0], status_code=status.HTTP_400_BAD_REQUEST)

    return success_response(data=data, message="Price trends retrieved successfully")


# ============================================================================
# UNITS OF MEASURE
# ============================================================================

@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
@require_role_for(WRITE_METHODS, UserRole.PROCUREMENT)
def uom_list(request):
    """
    GET: Active units of measure (?include_inactive=true for all)
    POST: Add a unit of measure
    """
    if request.method == 'GET':
        queryset = UnitOfMeasure.objects.all()
        if request.query_params.get('include_inactive', '').lower() != 'true':
            queryset = queryset.filter(is_active=True)
        return success_response(
            data=UnitOfMeasureSerializer(queryset, many=True).data,
            message="Units of measure retrieved successfully"
        )

    serializer = UnitOfMeasureSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            message="Invalid data provided",
            data=serializer.errors,
            status_code=status.HTTP_400_BAD_REQUEST
        )

    uom = serializer.save()
    logger.info("Unit of measure %s created by %s", uom.code, request.user.email)
    return success_response(
        data=UnitOfMeasureSerializer(uom).data,
        message="Unit of measure created successfully",
        status_code=status.HTTP_201_CREATED
    )
