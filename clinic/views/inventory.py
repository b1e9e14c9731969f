"""
Inventory items and stock transactions.

Quantities only change through stock transactions; an item's
``quantity`` field is accepted on create as the opening balance and is
ignored on update.
"""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import InventoryItem, StockTransaction
from clinic.permissions import IsInventoryRole, ReadOnly
from clinic.serializers.inventory import (
    InventoryItemSerializer,
    StockTransactionSerializer,
    StockTransactionUpdateSerializer,
)
from clinic.services import inventory as inventory_service
from clinic.services.formatting import truthy
from clinic.views.common import date_range, get_or_404, id_param, paginate

ITEM_FIELDS = {
    'name': 'name',
    'category': 'category',
    'description': 'description',
    'unit': 'unit',
    'reorderLevel': 'reorder_level',
    'unitPrice': 'unit_price',
    'supplier': 'supplier',
    'batchNumber': 'batch_number',
    'expiryDate': 'expiry_date',
    'location': 'location',
    'status': 'status',
}


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsInventoryRole])
def items(request):
    if request.method == 'GET':
        params = request.query_params
        qs = inventory_service.list_items(
            status=params.get('status'),
            category=params.get('category'),
            search=params.get('search'),
            low_stock=truthy(params.get('lowStock')),
        )
        return Response([inventory_service.format_item(i) for i in qs])

    s = InventoryItemSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    with transaction.atomic():
        code = vd.get('itemCode')
        if code:
            if InventoryItem.objects.filter(item_code=code).exists():
                raise ValidationError({'itemCode': 'Item code already exists'})
        else:
            code = inventory_service.next_item_code()
        fields = {m: vd[a] for a, m in ITEM_FIELDS.items() if vd.get(a) not in (None, '')}
        item = InventoryItem.objects.create(item_code=code, quantity=vd.get('quantity') or 0, **fields)
    return Response(inventory_service.format_item(item), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def items_summary(request):
    return Response(inventory_service.summary())


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsInventoryRole])
def item_detail(request, pk: int):
    item = get_or_404(InventoryItem.objects.all(), pk, 'inventory item')
    if request.method == 'GET':
        return Response(inventory_service.format_item(item))
    if request.method == 'PUT':
        s = InventoryItemSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        vd = s.validated_data
        code = vd.get('itemCode')
        if code and InventoryItem.objects.filter(item_code=code).exclude(id=item.id).exists():
            raise ValidationError({'itemCode': 'Item code already exists'})
        if code:
            item.item_code = code
        for api_f, model_f in ITEM_FIELDS.items():
            if api_f in vd:
                value = vd[api_f]
                setattr(item, model_f, value if value is not None or model_f == 'expiry_date' else '')
        item.save()
        return Response(inventory_service.format_item(item))
    item.status = 'Inactive'
    item.save(update_fields=['status', 'updated_at'])
    return Response({'message': 'Inventory item deactivated successfully'})


def _stock_transactions():
    return StockTransaction.objects.select_related('item', 'performed_by')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsInventoryRole])
def stock_transactions(request):
    if request.method == 'GET':
        params = request.query_params
        qs = _stock_transactions()
        item_id = id_param(params, 'itemId')
        if item_id:
            qs = qs.filter(item_id=item_id)
        if params.get('transactionType') and params['transactionType'] != 'all':
            qs = qs.filter(transaction_type=params['transactionType'])
        qs = date_range(qs, params, 'transaction_date').order_by('-transaction_date', '-id')
        return Response([inventory_service.format_stock_transaction(t) for t in paginate(qs, params)])

    s = StockTransactionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    get_or_404(InventoryItem.objects.all(), vd['itemId'], 'inventory item')
    txn = inventory_service.post_stock_transaction(
        item_id=vd['itemId'],
        adjustment_type=vd['adjustmentType'],
        quantity=vd['quantity'],
        reason=vd.get('reason') or None,
        transaction_type=vd.get('transactionType'),
        transaction_date=vd.get('transactionDate'),
        unit_price=vd.get('unitPrice'),
        reference_type=vd.get('referenceType') or '',
        reference_number=vd.get('referenceNumber') or '',
        notes=vd.get('notes') or '',
        user=request.user,
    )
    return Response(inventory_service.format_stock_transaction(txn), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsInventoryRole])
def stock_transaction_detail(request, pk: int):
    txn = get_or_404(_stock_transactions(), pk, 'stock transaction')
    if request.method == 'GET':
        return Response(inventory_service.format_stock_transaction(txn))
    if request.method == 'PUT':
        s = StockTransactionUpdateSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        for api_f, model_f in (('referenceType', 'reference_type'), ('referenceNumber', 'reference_number'),
                               ('notes', 'notes')):
            if api_f in s.validated_data:
                setattr(txn, model_f, s.validated_data[api_f])
        txn.save()
        return Response(inventory_service.format_stock_transaction(txn))
    inventory_service.reverse_stock_transaction(txn.id)
    return Response({'message': 'Stock transaction deleted and quantity reversed'})
