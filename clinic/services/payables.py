"""
Accounts payable: vendor invoices and the payments made against them.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from clinic.models import Payable
from clinic.services.formatting import iso, money
from clinic.services.payments import allocate_payment

logger = logging.getLogger(__name__)

_AMOUNT = DecimalField(max_digits=16, decimal_places=2)


def refresh_overdue(today=None) -> int:
    """Flag pending/partial invoices past their due date as overdue."""
    today = today or timezone.localdate()
    count = Payable.objects.filter(
        status__in=('pending', 'partial'),
        due_date__isnull=False,
        due_date__lt=today,
        outstanding_amount__gt=0,
    ).update(status='overdue', updated_at=timezone.now())
    if count:
        logger.info('marked %s payables overdue', count)
    return count


def set_total(payable: Payable, total: Decimal) -> None:
    payable.total_amount = total
    payable.outstanding_amount = total - (payable.paid_amount or Decimal('0'))


def record_payment(payable_id: int, amount: Decimal, payment_date=None) -> Payable:
    with transaction.atomic():
        payable = Payable.objects.select_for_update().select_related('vendor').get(id=payable_id)
        alloc = allocate_payment(payable.total_amount, payable.paid_amount, amount)
        payable.paid_amount = alloc.paid
        payable.outstanding_amount = alloc.outstanding
        payable.status = 'paid' if alloc.settled else 'partial'
        payable.last_payment_date = payment_date or timezone.localdate()
        payable.save()
    logger.info('payment %s on payable %s, outstanding %s', amount, payable.invoice_number, alloc.outstanding)
    return payable


def remove(payable: Payable) -> str:
    """Delete an invoice; paid invoices are cancelled instead."""
    if payable.status == 'paid':
        payable.status = 'cancelled'
        payable.save(update_fields=['status', 'updated_at'])
        return 'Payable invoice cancelled (was already paid)'
    payable.delete()
    return 'Payable invoice deleted successfully'


def summary(today=None) -> dict:
    today = today or timezone.localdate()
    zero = Value(Decimal('0'))
    paid_this_month = Q(status='paid', last_payment_date__year=today.year, last_payment_date__month=today.month)
    agg = Payable.objects.exclude(status='cancelled').aggregate(
        totalPayables=Count('id'),
        pendingAmount=Coalesce(Sum('outstanding_amount', filter=Q(status='pending')), zero, output_field=_AMOUNT),
        partialAmount=Coalesce(Sum('outstanding_amount', filter=Q(status='partial')), zero, output_field=_AMOUNT),
        overdueAmount=Coalesce(Sum('outstanding_amount', filter=Q(status='overdue')), zero, output_field=_AMOUNT),
        paidAmount=Coalesce(Sum('total_amount', filter=Q(status='paid')), zero, output_field=_AMOUNT),
        pendingCount=Count('id', filter=Q(status='pending')),
        overdueCount=Count('id', filter=Q(status='overdue')),
        paidThisMonthCount=Count('id', filter=paid_this_month),
        paidThisMonthAmount=Coalesce(Sum('total_amount', filter=paid_this_month), zero, output_field=_AMOUNT),
    )
    return {k: (money(v) if isinstance(v, Decimal) else v) for k, v in agg.items()}


def format_payable(p: Payable) -> dict:
    return {
        'payableId': p.id,
        'vendorId': p.vendor_id,
        'vendorName': p.vendor.vendor_name,
        'contactPerson': p.vendor.contact_person,
        'invoiceNumber': p.invoice_number,
        'invoiceDate': iso(p.invoice_date),
        'dueDate': iso(p.due_date),
        'totalAmount': money(p.total_amount),
        'paidAmount': money(p.paid_amount),
        'outstandingAmount': money(p.outstanding_amount),
        'status': p.status,
        'lastPaymentDate': iso(p.last_payment_date),
        'notes': p.notes,
        'createdAt': iso(p.created_at),
        'updatedAt': iso(p.updated_at),
    }
