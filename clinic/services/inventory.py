"""
Inventory items and the stock transactions that move their quantity.

Every change to an item's quantity is a :class:`StockTransaction` with
a signed quantity.  Posting one adds the quantity to the item and
deleting one subtracts it again, both under a row lock on the item.
"""
from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Count, DecimalField, ExpressionWrapper, F, Q, Sum
from django.utils import timezone

from clinic.exceptions import DomainError, InsufficientStock
from clinic.models import InventoryItem, StockTransaction
from clinic.services.formatting import iso, money
from clinic.services.numbering import next_sequential

logger = logging.getLogger(__name__)

REASON_TO_TYPE = {
    'purchase': 'receipt',
    'return': 'return',
    'damage': 'wastage',
    'expiry': 'expiry',
    'correction': 'adjustment',
    'use': 'issue',
    'transfer': 'transfer',
    'other': 'adjustment',
}
ADJUSTMENT_TYPES = ('add', 'subtract')


def next_item_code() -> str:
    return next_sequential(InventoryItem, 'item_code', 'INV-')


def list_items(*, status=None, category=None, search=None, low_stock=False):
    qs = InventoryItem.objects.all()
    if status and status != 'all':
        qs = qs.filter(status=status)
    else:
        qs = qs.exclude(status='Expired')
    if category and category != 'all':
        qs = qs.filter(category=category)
    if search:
        qs = qs.filter(Q(name__icontains=search) | Q(item_code__icontains=search))
    if low_stock:
        qs = qs.filter(quantity__lte=F('reorder_level'))
    return qs.order_by('name', 'id')


def summary(today=None) -> dict:
    today = today or timezone.localdate()
    horizon = today + timedelta(days=settings.INVENTORY_EXPIRY_WINDOW_DAYS)
    qs = InventoryItem.objects.exclude(status='Expired')
    value = ExpressionWrapper(F('quantity') * F('unit_price'), output_field=DecimalField(max_digits=18, decimal_places=2))
    agg = qs.aggregate(
        totalItems=Count('id'),
        totalValue=Sum(value),
        lowStockItems=Count('id', filter=Q(quantity__lte=F('reorder_level'))),
        expiringItems=Count('id', filter=Q(expiry_date__isnull=False, expiry_date__lte=horizon)),
        categories=Count('category', distinct=True),
        locations=Count('location', distinct=True),
    )
    agg['totalValue'] = money(agg['totalValue'] or Decimal('0'))
    agg['categoryCounts'] = [
        {'category': row['category'], 'count': row['n']}
        for row in qs.values('category').annotate(n=Count('id')).order_by('category')
    ]
    return agg


def signed_quantity(adjustment_type: str, quantity: int) -> int:
    """``add`` makes the quantity positive, ``subtract`` negative."""
    if adjustment_type not in ADJUSTMENT_TYPES:
        raise DomainError(f'adjustmentType must be one of {", ".join(ADJUSTMENT_TYPES)}')
    quantity = abs(int(quantity))
    if quantity == 0:
        raise DomainError('quantity must not be zero')
    return quantity if adjustment_type == 'add' else -quantity


def transaction_type_for(reason: str | None, explicit: str | None = None) -> str:
    return explicit or REASON_TO_TYPE.get(reason or '', 'adjustment')


def _apply(item: InventoryItem, delta: int) -> None:
    if item.quantity + delta < 0:
        raise InsufficientStock(
            f'{item.name}: cannot remove {-delta}, only {item.quantity} {item.unit} in stock'
        )
    item.quantity += delta
    item.save(update_fields=['quantity', 'updated_at'])


def post_stock_transaction(*, item_id: int, adjustment_type: str, quantity: int, reason: str | None = None,
                           transaction_type: str | None = None, transaction_date=None,
                           unit_price: Decimal | None = None, reference_type: str = '',
                           reference_number: str = '', notes: str = '', user=None) -> StockTransaction:
    delta = signed_quantity(adjustment_type, quantity)
    with transaction.atomic():
        item = InventoryItem.objects.select_for_update().get(id=item_id)
        _apply(item, delta)
        price = unit_price if unit_price is not None else item.unit_price
        txn = StockTransaction.objects.create(
            transaction_number=next_sequential(StockTransaction, 'transaction_number', 'TXN-'),
            item=item,
            transaction_type=transaction_type_for(reason, transaction_type),
            transaction_date=transaction_date or timezone.localdate(),
            quantity=delta,
            unit_price=price,
            total_value=price * abs(delta),
            balance_after=item.quantity,
            reference_type=reference_type or '',
            reference_number=reference_number or '',
            reason=reason or '',
            notes=notes or '',
            performed_by=user if getattr(user, 'is_authenticated', False) else None,
        )
    logger.info('%s %s %+d -> %s', txn.transaction_number, item.item_code, delta, item.quantity)
    return txn


def reverse_stock_transaction(txn_id: int) -> None:
    """Delete a stock transaction and undo its effect on the item."""
    with transaction.atomic():
        txn = StockTransaction.objects.select_for_update().get(id=txn_id)
        item = InventoryItem.objects.select_for_update().get(id=txn.item_id)
        _apply(item, -txn.quantity)
        number = txn.transaction_number
        txn.delete()
    logger.info('reversed %s on %s, quantity now %s', number, item.item_code, item.quantity)


def format_item(i: InventoryItem) -> dict:
    return {
        'itemId': i.id,
        'itemCode': i.item_code,
        'name': i.name,
        'category': i.category,
        'description': i.description,
        'unit': i.unit,
        'quantity': i.quantity,
        'reorderLevel': i.reorder_level,
        'unitPrice': money(i.unit_price),
        'supplier': i.supplier,
        'batchNumber': i.batch_number,
        'expiryDate': iso(i.expiry_date),
        'location': i.location,
        'status': i.status,
        'lowStock': i.quantity <= i.reorder_level,
        'createdAt': iso(i.created_at),
        'updatedAt': iso(i.updated_at),
    }


def format_stock_transaction(t: StockTransaction) -> dict:
    return {
        'transactionId': t.id,
        'transactionNumber': t.transaction_number,
        'itemId': t.item_id,
        'itemName': t.item.name,
        'itemCode': t.item.item_code,
        'transactionType': t.transaction_type,
        'transactionDate': iso(t.transaction_date),
        'quantity': t.quantity,
        'unitPrice': money(t.unit_price) if t.unit_price is not None else None,
        'totalValue': money(t.total_value) if t.total_value is not None else None,
        'balanceAfter': t.balance_after,
        'referenceType': t.reference_type,
        'referenceNumber': t.reference_number,
        'reason': t.reason,
        'notes': t.notes,
        'performedBy': t.performed_by.username if t.performed_by else None,
        'createdAt': iso(t.created_at),
    }
