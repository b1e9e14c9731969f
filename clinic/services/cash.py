"""Cash office movements and the 30-day cash summary."""
from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

from django.db import transaction
from django.db.models import Case, Count, DecimalField, F, Q, Sum, Value, When
from django.db.models.functions import Coalesce
from django.utils import timezone

from clinic.models import CashTransaction
from clinic.services.formatting import iso, money
from clinic.services.numbering import next_daily
from clinic.services.staff import check_staff

_AMOUNT = DecimalField(max_digits=16, decimal_places=2)
SUMMARY_DAYS = 30


def record(data: dict, *, user=None) -> CashTransaction:
    check_staff(data.get('handledBy'), 'handledBy')
    with transaction.atomic():
        return CashTransaction.objects.create(
            transaction_number=next_daily(CashTransaction, 'transaction_number', 'CASH'),
            transaction_date=data['transactionDate'],
            transaction_type=data['transactionType'],
            amount=data['amount'],
            reference_number=data.get('referenceNumber') or '',
            reference_type=data.get('referenceType') or '',
            account_id=data.get('accountId'),
            cash_register=data.get('cashRegister') or '',
            handled_by_id=data.get('handledBy') or getattr(user, 'id', None),
            notes=data.get('notes') or '',
        )


def summary(today=None) -> dict:
    today = today or timezone.localdate()
    zero = Value(Decimal('0'))
    signed = Case(
        When(transaction_type='receipt', then=F('amount')),
        default=-F('amount'),
        output_field=_AMOUNT,
    )
    agg = CashTransaction.objects.filter(
        transaction_date__gte=today - timedelta(days=SUMMARY_DAYS)
    ).aggregate(
        totalTransactions=Count('id'),
        totalReceipts=Coalesce(Sum('amount', filter=Q(transaction_type='receipt')), zero, output_field=_AMOUNT),
        totalPayments=Coalesce(Sum('amount', filter=Q(transaction_type='payment')), zero, output_field=_AMOUNT),
        netCashFlow=Coalesce(Sum(signed), zero, output_field=_AMOUNT),
        activeDays=Count('transaction_date', distinct=True),
    )
    return {k: (money(v) if isinstance(v, Decimal) else v) for k, v in agg.items()}


def format_cash_transaction(t: CashTransaction) -> dict:
    return {
        'cashTransactionId': t.id,
        'transactionNumber': t.transaction_number,
        'transactionDate': iso(t.transaction_date),
        'transactionType': t.transaction_type,
        'amount': money(t.amount),
        'referenceNumber': t.reference_number,
        'referenceType': t.reference_type,
        'accountId': t.account_id,
        'cashRegister': t.cash_register,
        'handledBy': t.handled_by_id,
        'handledByName': (t.handled_by.get_full_name() or t.handled_by.username) if t.handled_by else None,
        'notes': t.notes,
        'createdAt': iso(t.created_at),
    }
