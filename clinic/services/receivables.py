"""
Accounts receivable: patient balances owed against invoices.

Each invoice has at most one receivable.  Payments are mirrored onto the
invoice so that billing screens show the same balance.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from clinic.exceptions import DuplicateRecord
from clinic.models import Invoice, Receivable
from clinic.services.formatting import iso, money
from clinic.services.payments import allocate_payment

logger = logging.getLogger(__name__)

_AMOUNT = DecimalField(max_digits=16, decimal_places=2)


def refresh_overdue(today=None) -> int:
    today = today or timezone.localdate()
    return Receivable.objects.filter(
        status='current',
        due_date__isnull=False,
        due_date__lt=today,
        outstanding_amount__gt=0,
    ).update(status='overdue', updated_at=timezone.now())


def open_receivable(invoice: Invoice, *, total: Decimal | None = None, due_date=None, notes: str = '') -> Receivable:
    if Receivable.objects.filter(invoice=invoice).exists():
        raise DuplicateRecord('Receivable already exists for this invoice')
    total = invoice.balance if total is None else total
    return Receivable.objects.create(
        patient=invoice.patient,
        invoice=invoice,
        invoice_date=invoice.invoice_date,
        due_date=due_date or invoice.due_date,
        total_amount=total,
        outstanding_amount=total,
        status='current' if total > 0 else 'paid',
        notes=notes or '',
    )


def record_payment(receivable_id: int, amount: Decimal, payment_date=None) -> Receivable:
    with transaction.atomic():
        rec = (
            Receivable.objects.select_for_update()
            .select_related('patient', 'invoice')
            .get(id=receivable_id)
        )
        alloc = allocate_payment(rec.total_amount, rec.paid_amount, amount)
        rec.paid_amount = alloc.paid
        rec.outstanding_amount = alloc.outstanding
        rec.status = 'paid' if alloc.settled else 'current'
        rec.last_payment_date = payment_date or timezone.localdate()
        rec.save()

        invoice = rec.invoice
        invoice.paid_amount = alloc.paid
        invoice.balance = alloc.outstanding
        invoice.status = 'paid' if alloc.settled else 'partial'
        invoice.save(update_fields=['paid_amount', 'balance', 'status'])
    logger.info('payment %s on invoice %s, outstanding %s', amount, invoice.invoice_number, alloc.outstanding)
    return rec


def remove(rec: Receivable) -> str:
    """Delete a receivable; paid ones are written off instead."""
    if rec.status == 'paid':
        rec.status = 'written_off'
        rec.save(update_fields=['status', 'updated_at'])
        return 'Receivable written off (was already paid)'
    rec.delete()
    return 'Receivable deleted successfully'


def summary(today=None) -> dict:
    today = today or timezone.localdate()
    zero = Value(Decimal('0'))
    paid_this_month = Q(status='paid', last_payment_date__year=today.year, last_payment_date__month=today.month)
    agg = Receivable.objects.exclude(status='written_off').aggregate(
        totalReceivables=Count('id'),
        currentAmount=Coalesce(Sum('outstanding_amount', filter=Q(status='current')), zero, output_field=_AMOUNT),
        overdueAmount=Coalesce(Sum('outstanding_amount', filter=Q(status='overdue')), zero, output_field=_AMOUNT),
        paidAmount=Coalesce(Sum('total_amount', filter=Q(status='paid')), zero, output_field=_AMOUNT),
        currentCount=Count('id', filter=Q(status='current')),
        overdueCount=Count('id', filter=Q(status='overdue')),
        paidThisMonthCount=Count('id', filter=paid_this_month),
        paidThisMonthAmount=Coalesce(Sum('total_amount', filter=paid_this_month), zero, output_field=_AMOUNT),
    )
    return {k: (money(v) if isinstance(v, Decimal) else v) for k, v in agg.items()}


def format_receivable(r: Receivable) -> dict:
    return {
        'receivableId': r.id,
        'patientId': r.patient_id,
        'patientNumber': r.patient.patient_number,
        'patientName': r.patient.full_name,
        'invoiceId': r.invoice_id,
        'invoiceNumber': r.invoice.invoice_number,
        'invoiceDate': iso(r.invoice_date),
        'dueDate': iso(r.due_date),
        'totalAmount': money(r.total_amount),
        'paidAmount': money(r.paid_amount),
        'outstandingAmount': money(r.outstanding_amount),
        'status': r.status,
        'lastPaymentDate': iso(r.last_payment_date),
        'notes': r.notes,
        'createdAt': iso(r.created_at),
    }
