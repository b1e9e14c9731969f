"""Service charge catalogue and patient invoices."""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Invoice, ServiceCharge
from clinic.permissions import IsFinanceRole, ReadOnly
from clinic.serializers.finance import ChargeSerializer
from clinic.services.billing import format_charge, format_invoice
from clinic.views.common import date_range, get_or_404, id_param, paginate

CHARGE_FIELDS = {
    'chargeCode': 'charge_code',
    'name': 'name',
    'category': 'category',
    'department': 'department',
    'chargeType': 'charge_type',
    'cost': 'cost',
    'description': 'description',
    'status': 'status',
}


def _save_charge(charge: ServiceCharge, data: dict) -> ServiceCharge:
    code = data.get('chargeCode')
    if code and ServiceCharge.objects.filter(charge_code=code).exclude(id=charge.id).exists():
        raise ValidationError({'chargeCode': 'Charge code already exists'})
    for api_f, model_f in CHARGE_FIELDS.items():
        if api_f in data:
            setattr(charge, model_f, data[api_f])
    if not charge.charge_type:
        charge.charge_type = 'Service'
    charge.save()
    return charge


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsFinanceRole])
def charges(request):
    if request.method == 'GET':
        params = request.query_params
        qs = ServiceCharge.objects.all()
        for key, field in (('status', 'status'), ('category', 'category'),
                           ('department', 'department'), ('chargeType', 'charge_type')):
            value = params.get(key)
            if value and value != 'all':
                qs = qs.filter(**{field: value})
        if params.get('search'):
            term = params['search']
            qs = qs.filter(Q(name__icontains=term) | Q(charge_code__icontains=term) | Q(description__icontains=term))
        return Response([format_charge(c) for c in qs.order_by('category', 'name')])

    s = ChargeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    charge = _save_charge(ServiceCharge(), s.validated_data)
    return Response(format_charge(charge), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsFinanceRole])
def charge_detail(request, pk: int):
    charge = get_or_404(ServiceCharge.objects.all(), pk, 'service charge')
    if request.method == 'GET':
        return Response(format_charge(charge))
    if request.method == 'PUT':
        s = ChargeSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(format_charge(_save_charge(charge, s.validated_data)))
    charge.status = 'Inactive'
    charge.save(update_fields=['status', 'updated_at'])
    return Response({'message': 'Service charge deactivated successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoices(request):
    params = request.query_params
    qs = Invoice.objects.select_related('patient')
    patient_id = id_param(params, 'patientId')
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if params.get('status') and params['status'] != 'all':
        qs = qs.filter(status=params['status'])
    qs = date_range(qs, params, 'invoice_date').order_by('-invoice_date', '-id')
    return Response([format_invoice(inv) for inv in paginate(qs, params)])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def invoice_detail(request, pk: int):
    inv = get_or_404(Invoice.objects.select_related('patient').prefetch_related('items'), pk, 'invoice')
    return Response(format_invoice(inv, with_items=True))
