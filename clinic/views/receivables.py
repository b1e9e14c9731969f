"""Accounts receivable endpoints."""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Invoice, Receivable
from clinic.permissions import IsFinanceRole
from clinic.serializers.finance import PaymentSerializer, ReceivableSerializer
from clinic.services import receivables as receivable_service
from clinic.views.common import date_range, get_or_404, id_param


def _receivables():
    return Receivable.objects.select_related('patient', 'invoice')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def receivables(request):
    if request.method == 'GET':
        receivable_service.refresh_overdue()
        params = request.query_params
        qs = _receivables()
        if params.get('status') and params['status'] != 'all':
            qs = qs.filter(status=params['status'])
        patient_id = id_param(params, 'patientId')
        if patient_id:
            qs = qs.filter(patient_id=patient_id)
        if params.get('search'):
            term = params['search']
            qs = qs.filter(
                Q(invoice__invoice_number__icontains=term) | Q(patient__patient_number__icontains=term)
                | Q(patient__first_name__icontains=term) | Q(patient__last_name__icontains=term)
            )
        qs = date_range(qs, params, 'invoice_date')
        return Response([receivable_service.format_receivable(r) for r in qs.order_by('-invoice_date', '-id')])

    s = ReceivableSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    invoice = Invoice.objects.select_related('patient').filter(id=vd['invoiceId']).first()
    if invoice is None:
        raise ValidationError({'invoiceId': 'invoice not found'})
    rec = receivable_service.open_receivable(
        invoice, total=vd.get('totalAmount'), due_date=vd.get('dueDate'), notes=vd.get('notes') or '',
    )
    return Response(receivable_service.format_receivable(rec), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def receivable_detail(request, pk: int):
    rec = get_or_404(_receivables(), pk, 'receivable')
    if request.method == 'GET':
        return Response(receivable_service.format_receivable(rec))
    if request.method == 'DELETE':
        return Response({'message': receivable_service.remove(rec)})

    s = ReceivableSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if 'invoiceId' in vd and vd['invoiceId'] != rec.invoice_id:
        raise ValidationError({'invoiceId': 'the invoice of a receivable cannot change'})
    if 'dueDate' in vd:
        rec.due_date = vd['dueDate']
    if 'status' in vd:
        rec.status = vd['status']
    if 'notes' in vd:
        rec.notes = vd['notes'] or ''
    if 'totalAmount' in vd:
        rec.total_amount = vd['totalAmount']
        rec.outstanding_amount = vd['totalAmount'] - rec.paid_amount
    rec.save()
    return Response(receivable_service.format_receivable(rec))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def receivable_payment(request, pk: int):
    get_or_404(Receivable.objects.all(), pk, 'receivable')
    s = PaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    rec = receivable_service.record_payment(pk, s.validated_data['amount'], s.validated_data.get('paymentDate'))
    return Response(receivable_service.format_receivable(rec))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def receivable_stats(request):
    receivable_service.refresh_overdue()
    return Response(receivable_service.summary())
