"""
General ledger: chart of accounts and double-entry journal lines.

An account's balance is derived, never stored: the sum of the amounts
it was debited minus the sum it was credited.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import DecimalField, OuterRef, Q, Subquery, Sum, Value
from django.db.models.functions import Coalesce
from rest_framework.exceptions import ValidationError

from clinic.models import Account, Transaction
from clinic.services.formatting import iso, money
from clinic.services.numbering import next_sequential

logger = logging.getLogger(__name__)

_AMOUNT = DecimalField(max_digits=16, decimal_places=2)


def _side_total(side: str):
    totals = (
        Transaction.objects.filter(**{side: OuterRef('pk')})
        .order_by()
        .values(side)
        .annotate(total=Sum('amount'))
        .values('total')[:1]
    )
    return Coalesce(Subquery(totals, output_field=_AMOUNT), Value(Decimal('0')), output_field=_AMOUNT)


def with_balances(qs):
    """Annotate ``total_debits``, ``total_credits`` and ``last_transaction``."""
    last = (
        Transaction.objects.filter(Q(debit_account=OuterRef('pk')) | Q(credit_account=OuterRef('pk')))
        .order_by('-transaction_date')
        .values('transaction_date')[:1]
    )
    return qs.annotate(
        total_debits=_side_total('debit_account'),
        total_credits=_side_total('credit_account'),
        last_transaction=Subquery(last),
    )


def account_balance(account: Account) -> Decimal:
    debits = account.debit_transactions.aggregate(s=Sum('amount'))['s'] or Decimal('0')
    credits = account.credit_transactions.aggregate(s=Sum('amount'))['s'] or Decimal('0')
    return debits - credits


def format_account(a: Account) -> dict:
    if hasattr(a, 'total_debits'):
        balance = a.total_debits - a.total_credits
        last = a.last_transaction
    else:
        balance = account_balance(a)
        last = None
    return {
        'accountId': a.id,
        'accountCode': a.account_code,
        'accountName': a.account_name,
        'accountType': a.account_type,
        'parentAccountId': a.parent_id,
        'description': a.description,
        'isActive': a.is_active,
        'balance': money(balance),
        'lastTransaction': iso(last),
    }


def _resolve_accounts(debit_id, credit_id) -> tuple[Account, Account]:
    if str(debit_id) == str(credit_id):
        raise ValidationError({'creditAccountId': 'Debit and credit accounts cannot be the same'})
    accounts = {a.id: a for a in Account.objects.filter(id__in=[debit_id, credit_id], is_active=True)}
    debit = accounts.get(int(debit_id))
    credit = accounts.get(int(credit_id))
    if debit is None:
        raise ValidationError({'debitAccountId': 'account not found or inactive'})
    if credit is None:
        raise ValidationError({'creditAccountId': 'account not found or inactive'})
    return debit, credit


def post_transaction(data: dict, *, user=None) -> Transaction:
    """Create a journal line from validated camelCase ``data``."""
    debit, credit = _resolve_accounts(data['debitAccountId'], data['creditAccountId'])
    with transaction.atomic():
        txn = Transaction.objects.create(
            transaction_number=next_sequential(Transaction, 'transaction_number', 'TRX-'),
            transaction_date=data['transactionDate'],
            description=data['description'],
            reference_number=data.get('referenceNumber') or '',
            reference_type=data.get('referenceType') or '',
            debit_account=debit,
            credit_account=credit,
            amount=data['amount'],
            notes=data.get('notes') or '',
            posted_by=user if getattr(user, 'is_authenticated', False) else None,
        )
    logger.info('posted %s %s Dr %s Cr %s', txn.transaction_number, txn.amount,
                debit.account_code, credit.account_code)
    return txn


def update_transaction(txn: Transaction, data: dict) -> Transaction:
    debit_id = data.get('debitAccountId', txn.debit_account_id)
    credit_id = data.get('creditAccountId', txn.credit_account_id)
    txn.debit_account, txn.credit_account = _resolve_accounts(debit_id, credit_id)
    for api_f, model_f in (
        ('transactionDate', 'transaction_date'),
        ('description', 'description'),
        ('referenceNumber', 'reference_number'),
        ('referenceType', 'reference_type'),
        ('amount', 'amount'),
        ('notes', 'notes'),
    ):
        if api_f in data:
            setattr(txn, model_f, data[api_f] if data[api_f] is not None else '')
    txn.save()
    return txn


def format_transaction(t: Transaction) -> dict:
    return {
        'transactionId': t.id,
        'transactionNumber': t.transaction_number,
        'transactionDate': iso(t.transaction_date),
        'description': t.description,
        'referenceNumber': t.reference_number,
        'referenceType': t.reference_type,
        'debitAccountId': t.debit_account_id,
        'debitAccountCode': t.debit_account.account_code,
        'debitAccountName': t.debit_account.account_name,
        'creditAccountId': t.credit_account_id,
        'creditAccountCode': t.credit_account.account_code,
        'creditAccountName': t.credit_account.account_name,
        'amount': money(t.amount),
        'notes': t.notes,
        'postedBy': t.posted_by.username if t.posted_by else None,
        'createdAt': iso(t.created_at),
    }
