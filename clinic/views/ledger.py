"""General ledger endpoints: chart of accounts and journal transactions."""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Account, Transaction
from clinic.permissions import IsFinanceRole
from clinic.serializers.ledger import AccountSerializer, TransactionSerializer
from clinic.services import ledger
from clinic.views.common import date_range, get_or_404, id_param, paginate

ACCOUNT_FIELDS = {
    'accountCode': 'account_code',
    'accountName': 'account_name',
    'accountType': 'account_type',
    'parentAccountId': 'parent_id',
    'description': 'description',
    'isActive': 'is_active',
}


def _save_account(account: Account, data: dict) -> Account:
    code = data.get('accountCode')
    if code and Account.objects.filter(account_code=code).exclude(id=account.id).exists():
        raise ValidationError({'accountCode': 'Account code already exists'})
    parent_id = data.get('parentAccountId')
    if parent_id is not None and (parent_id == account.id or not Account.objects.filter(id=parent_id).exists()):
        raise ValidationError({'parentAccountId': 'invalid parent account'})
    for api_f, model_f in ACCOUNT_FIELDS.items():
        if api_f in data:
            setattr(account, model_f, data[api_f] if data[api_f] is not None or model_f == 'parent_id' else '')
    account.save()
    return account


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def accounts(request):
    if request.method == 'GET':
        qs = Account.objects.filter(is_active=True)
        search = request.query_params.get('search')
        if search:
            qs = qs.filter(Q(account_code__icontains=search) | Q(account_name__icontains=search))
        account_type = request.query_params.get('accountType')
        if account_type and account_type != 'all':
            qs = qs.filter(account_type=account_type)
        qs = ledger.with_balances(qs).order_by('account_code')
        return Response([ledger.format_account(a) for a in paginate(qs, request.query_params)])

    s = AccountSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    account = _save_account(Account(), s.validated_data)
    return Response(ledger.format_account(account), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def account_detail(request, pk: int):
    account = get_or_404(ledger.with_balances(Account.objects.all()), pk, 'account')
    if request.method == 'GET':
        return Response(ledger.format_account(account))
    if request.method == 'PUT':
        s = AccountSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        _save_account(account, s.validated_data)
        return Response(ledger.format_account(get_or_404(ledger.with_balances(Account.objects.all()), pk)))
    account.is_active = False
    account.save(update_fields=['is_active', 'updated_at'])
    return Response({'message': 'Account deactivated successfully'})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def transactions(request):
    if request.method == 'GET':
        qs = Transaction.objects.select_related('debit_account', 'credit_account', 'posted_by')
        search = request.query_params.get('search')
        if search:
            qs = qs.filter(
                Q(transaction_number__icontains=search) | Q(description__icontains=search)
                | Q(reference_number__icontains=search)
            )
        qs = date_range(qs, request.query_params, 'transaction_date')
        account_id = id_param(request.query_params, 'accountId')
        if account_id:
            qs = qs.filter(Q(debit_account_id=account_id) | Q(credit_account_id=account_id))
        qs = qs.order_by('-transaction_date', '-id')
        return Response([ledger.format_transaction(t) for t in paginate(qs, request.query_params)])

    s = TransactionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    txn = ledger.post_transaction(s.validated_data, user=request.user)
    return Response(ledger.format_transaction(txn), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def transaction_detail(request, pk: int):
    qs = Transaction.objects.select_related('debit_account', 'credit_account', 'posted_by')
    txn = get_or_404(qs, pk, 'transaction')
    if request.method == 'GET':
        return Response(ledger.format_transaction(txn))
    if request.method == 'PUT':
        s = TransactionSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(ledger.format_transaction(ledger.update_transaction(txn, s.validated_data)))
    txn.delete()
    return Response({'message': 'Transaction deleted successfully'})
