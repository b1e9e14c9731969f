"""Accounts payable endpoints and the vendor list they reference."""
from __future__ import annotations

from django.db import transaction
from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Payable, Vendor
from clinic.permissions import IsFinanceRole
from clinic.serializers.finance import PayableSerializer, PaymentSerializer, VendorSerializer
from clinic.services import payables as payable_service
from clinic.views.common import date_range, get_or_404, id_param

VENDOR_FIELDS = {
    'vendorCode': 'vendor_code',
    'vendorName': 'vendor_name',
    'contactPerson': 'contact_person',
    'phone': 'phone',
    'email': 'email',
    'address': 'address',
}


def format_vendor(v: Vendor) -> dict:
    data = {'vendorId': v.id, 'isActive': v.is_active}
    data.update({api_f: getattr(v, model_f) for api_f, model_f in VENDOR_FIELDS.items()})
    return data


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def vendors(request):
    if request.method == 'GET':
        qs = Vendor.objects.filter(is_active=True)
        search = request.query_params.get('search')
        if search:
            qs = qs.filter(Q(vendor_name__icontains=search) | Q(vendor_code__icontains=search))
        return Response([format_vendor(v) for v in qs.order_by('vendor_name')])

    s = VendorSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    if Vendor.objects.filter(vendor_code=vd['vendorCode']).exists():
        raise ValidationError({'vendorCode': 'Vendor code already exists'})
    vendor = Vendor.objects.create(**{m: vd[a] for a, m in VENDOR_FIELDS.items() if a in vd})
    return Response(format_vendor(vendor), status=status.HTTP_201_CREATED)


def _payables():
    return Payable.objects.select_related('vendor')


def _check_vendor(vendor_id):
    if not Vendor.objects.filter(id=vendor_id).exists():
        raise ValidationError({'vendorId': 'vendor not found'})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def payables(request):
    if request.method == 'GET':
        payable_service.refresh_overdue()
        params = request.query_params
        qs = _payables()
        if params.get('status') and params['status'] != 'all':
            qs = qs.filter(status=params['status'])
        vendor_id = id_param(params, 'vendorId')
        if vendor_id:
            qs = qs.filter(vendor_id=vendor_id)
        if params.get('search'):
            term = params['search']
            qs = qs.filter(Q(invoice_number__icontains=term) | Q(vendor__vendor_name__icontains=term))
        qs = date_range(qs, params, 'invoice_date')
        return Response([payable_service.format_payable(p) for p in qs.order_by('-invoice_date', '-id')])

    s = PayableSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    _check_vendor(vd['vendorId'])
    if Payable.objects.filter(invoice_number=vd['invoiceNumber']).exists():
        raise ValidationError({'invoiceNumber': 'Invoice number already exists'})
    payable = Payable.objects.create(
        vendor_id=vd['vendorId'],
        invoice_number=vd['invoiceNumber'],
        invoice_date=vd['invoiceDate'],
        due_date=vd.get('dueDate'),
        total_amount=vd['totalAmount'],
        outstanding_amount=vd['totalAmount'],
        status=vd.get('status') or 'pending',
        notes=vd.get('notes') or '',
    )
    return Response(payable_service.format_payable(payable), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def payable_detail(request, pk: int):
    payable = get_or_404(_payables(), pk, 'payable')
    if request.method == 'GET':
        return Response(payable_service.format_payable(payable))
    if request.method == 'DELETE':
        return Response({'message': payable_service.remove(payable)})

    s = PayableSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    with transaction.atomic():
        if 'vendorId' in vd:
            _check_vendor(vd['vendorId'])
            payable.vendor_id = vd['vendorId']
        number = vd.get('invoiceNumber')
        if number and Payable.objects.filter(invoice_number=number).exclude(id=payable.id).exists():
            raise ValidationError({'invoiceNumber': 'Invoice number already exists'})
        for api_f, model_f in (('invoiceNumber', 'invoice_number'), ('invoiceDate', 'invoice_date'),
                               ('dueDate', 'due_date'), ('status', 'status')):
            if api_f in vd:
                setattr(payable, model_f, vd[api_f])
        if 'notes' in vd:
            payable.notes = vd['notes'] or ''
        if 'totalAmount' in vd:
            payable_service.set_total(payable, vd['totalAmount'])
        payable.save()
    return Response(payable_service.format_payable(get_or_404(_payables(), pk)))


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def payable_payment(request, pk: int):
    get_or_404(Payable.objects.all(), pk, 'payable')
    s = PaymentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    payable = payable_service.record_payment(pk, s.validated_data['amount'], s.validated_data.get('paymentDate'))
    return Response(payable_service.format_payable(payable))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsFinanceRole])
def payable_stats(request):
    payable_service.refresh_overdue()
    return Response(payable_service.summary())
