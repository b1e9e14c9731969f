"""Cash office transactions, cash accounts and the 30-day summary."""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Account, CashTransaction
from clinic.permissions import IsFinanceRole
from clinic.serializers.finance import CashTransactionSerializer
from clinic.services import cash as cash_service
from clinic.services import ledger
from clinic.services.staff import check_staff
from clinic.views.common import date_range, get_or_404

UPDATABLE = {
    'transactionDate': 'transaction_date',
    'transactionType': 'transaction_type',
    'amount': 'amount',
    'referenceNumber': 'reference_number',
    'referenceType': 'reference_type',
    'accountId': 'account_id',
    'cashRegister': 'cash_register',
    'handledBy': 'handled_by_id',
    'notes': 'notes',
}


def _cash():
    return CashTransaction.objects.select_related('handled_by', 'account')


def _check_account(account_id):
    if account_id is not None and not Account.objects.filter(id=account_id).exists():
        raise ValidationError({'accountId': 'account not found'})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def cash_transactions(request):
    if request.method == 'GET':
        params = request.query_params
        qs = _cash()
        if params.get('transactionType') and params['transactionType'] != 'all':
            qs = qs.filter(transaction_type=params['transactionType'])
        if params.get('search'):
            term = params['search']
            qs = qs.filter(
                Q(transaction_number__icontains=term) | Q(reference_number__icontains=term)
                | Q(notes__icontains=term)
            )
        qs = date_range(qs, params, 'transaction_date').order_by('-transaction_date', '-id')
        return Response([cash_service.format_cash_transaction(t) for t in qs])

    s = CashTransactionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    _check_account(s.validated_data.get('accountId'))
    txn = cash_service.record(s.validated_data, user=request.user)
    return Response(cash_service.format_cash_transaction(get_or_404(_cash(), txn.id)),
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def cash_transaction_detail(request, pk: int):
    txn = get_or_404(_cash(), pk, 'cash transaction')
    if request.method == 'GET':
        return Response(cash_service.format_cash_transaction(txn))
    if request.method == 'DELETE':
        txn.delete()
        return Response({'message': 'Cash transaction deleted successfully'})
    s = CashTransactionSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    _check_account(vd.get('accountId'))
    check_staff(vd.get('handledBy'), 'handledBy')
    for api_f, model_f in UPDATABLE.items():
        if api_f in vd:
            value = vd[api_f]
            setattr(txn, model_f, value if value is not None or model_f in ('account_id', 'handled_by_id') else '')
    txn.save()
    return Response(cash_service.format_cash_transaction(get_or_404(_cash(), pk)))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def cash_accounts(request):
    """Asset-type ledger accounts that cash moves through, with balances."""
    params = request.query_params
    qs = Account.objects.filter(account_type='asset')
    state = params.get('status')
    if state == 'active':
        qs = qs.filter(is_active=True)
    elif state == 'inactive':
        qs = qs.filter(is_active=False)
    if params.get('search'):
        term = params['search']
        qs = qs.filter(Q(account_code__icontains=term) | Q(account_name__icontains=term))
    qs = ledger.with_balances(qs).order_by('account_code')
    return Response([ledger.format_account(a) for a in qs])


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def cash_stats(request):
    return Response(cash_service.summary())
