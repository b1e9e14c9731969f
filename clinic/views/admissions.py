"""
Ward, bed and admission endpoints for inpatient, maternity and ICU care.

The three admission kinds share one set of views; the URLconf passes
``kind`` so that each listing and lookup only sees its own admissions.
ICU bed endpoints are the bed endpoints restricted to ICU wards.
"""
from __future__ import annotations

from django.db.models import Count, Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.exceptions import BedUnavailable
from clinic.models import Admission, Bed, Delivery, Ward
from clinic.permissions import IsClinicalRole, ReadOnly
from clinic.serializers.admissions import (
    AdmissionSerializer,
    AdmissionUpdateSerializer,
    BedSerializer,
    DeliverySerializer,
    DischargeSerializer,
    MaternityAdmissionSerializer,
    MaternityAdmissionUpdateSerializer,
    WardSerializer,
)
from clinic.services import admissions as admission_service
from clinic.services.staff import check_staff
from clinic.views.common import get_or_404, id_param, paginate

WARD_FIELDS = {
    'wardCode': 'ward_code',
    'wardName': 'ward_name',
    'wardType': 'ward_type',
    'capacity': 'capacity',
    'dailyRate': 'daily_rate',
    'isActive': 'is_active',
}
BED_FIELDS = {
    'wardId': 'ward_id',
    'bedNumber': 'bed_number',
    'bedType': 'bed_type',
    'status': 'status',
    'isActive': 'is_active',
}
DELIVERY_FIELDS = {
    'deliveryDate': 'delivery_date',
    'deliveryType': 'delivery_type',
    'deliveryMode': 'delivery_mode',
    'complications': 'complications',
    'maternalOutcome': 'maternal_outcome',
    'assistedBy': 'assisted_by_id',
    'notes': 'notes',
}


# ---------------------------------------------------------------------
# Wards
# ---------------------------------------------------------------------
def _wards():
    return Ward.objects.annotate(occupied=Count('beds', filter=Q(beds__status='occupied')))


def _save_ward(ward: Ward, data: dict) -> Ward:
    code = data.get('wardCode')
    if code and Ward.objects.filter(ward_code=code).exclude(id=ward.id).exists():
        raise ValidationError({'wardCode': 'Ward code already exists'})
    for api_f, model_f in WARD_FIELDS.items():
        if api_f in data:
            setattr(ward, model_f, data[api_f])
    ward.save()
    return ward


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsClinicalRole])
def wards(request):
    if request.method == 'GET':
        qs = _wards().filter(is_active=True)
        ward_type = request.query_params.get('wardType')
        if ward_type and ward_type != 'all':
            qs = qs.filter(ward_type=ward_type)
        qs = paginate(qs.order_by('ward_name'), request.query_params)
        return Response([admission_service.format_ward(w, w.occupied) for w in qs])

    s = WardSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    ward = _save_ward(Ward(), s.validated_data)
    return Response(admission_service.format_ward(ward, 0), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsClinicalRole])
def ward_detail(request, pk: int):
    ward = get_or_404(_wards(), pk, 'ward')
    if request.method == 'GET':
        return Response(admission_service.format_ward(ward, ward.occupied))
    if request.method == 'PUT':
        s = WardSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        _save_ward(ward, s.validated_data)
        return Response(admission_service.format_ward(ward, ward.occupied))
    if ward.occupied:
        raise BedUnavailable('ward still has occupied beds')
    ward.is_active = False
    ward.save(update_fields=['is_active'])
    return Response({'message': 'Ward deactivated successfully'})


# ---------------------------------------------------------------------
# Beds
# ---------------------------------------------------------------------
def _beds(icu_only: bool):
    qs = Bed.objects.select_related('ward')
    return qs.filter(ward__ward_type='icu') if icu_only else qs


def _save_bed(bed: Bed, data: dict, icu_only: bool) -> Bed:
    ward_id = data.get('wardId', bed.ward_id)
    ward = Ward.objects.filter(id=ward_id).first()
    if ward is None:
        raise ValidationError({'wardId': 'ward not found'})
    if icu_only and ward.ward_type != 'icu':
        raise ValidationError({'wardId': 'ICU beds must belong to an ICU ward'})
    number = data.get('bedNumber', bed.bed_number)
    if Bed.objects.filter(ward_id=ward_id, bed_number=number).exclude(id=bed.id).exists():
        raise ValidationError({'bedNumber': 'Bed number already exists in this ward'})
    if data.get('status') == 'occupied' and bed.status != 'occupied':
        raise ValidationError({'status': 'beds become occupied only through an admission'})
    if bed.status == 'occupied':
        if data.get('status') not in (None, 'occupied') or data.get('isActive') is False:
            raise BedUnavailable('bed is occupied; discharge the patient first')
        if ward.id != bed.ward_id:
            raise BedUnavailable('an occupied bed cannot move to another ward')
    for api_f, model_f in BED_FIELDS.items():
        if api_f in data:
            setattr(bed, model_f, data[api_f])
    bed.save()
    return get_or_404(Bed.objects.select_related('ward'), bed.id)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsClinicalRole])
def beds(request, icu_only: bool = False):
    if request.method == 'GET':
        params = request.query_params
        qs = _beds(icu_only).filter(is_active=True)
        ward_id = id_param(params, 'wardId')
        if ward_id:
            qs = qs.filter(ward_id=ward_id)
        if params.get('status') and params['status'] != 'all':
            qs = qs.filter(status=params['status'])
        qs = paginate(qs.order_by('ward__ward_name', 'bed_number'), params)
        return Response([admission_service.format_bed(b) for b in qs])

    s = BedSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    bed = _save_bed(Bed(), s.validated_data, icu_only)
    return Response(admission_service.format_bed(bed), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsClinicalRole])
def bed_detail(request, pk: int, icu_only: bool = False):
    bed = get_or_404(_beds(icu_only), pk, 'bed')
    if request.method == 'GET':
        return Response(admission_service.format_bed(bed))
    if request.method == 'PUT':
        s = BedSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(admission_service.format_bed(_save_bed(bed, s.validated_data, icu_only)))
    if bed.status == 'occupied':
        raise BedUnavailable('bed is occupied; discharge the patient first')
    bed.is_active = False
    bed.save(update_fields=['is_active'])
    return Response({'message': 'Bed deactivated successfully'})


# ---------------------------------------------------------------------
# Admissions
# ---------------------------------------------------------------------
def _admissions(kind: str):
    return (
        Admission.objects.filter(admission_type=kind)
        .select_related('patient', 'bed__ward', 'admitting_doctor')
    )


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsClinicalRole])
def admissions(request, kind: str):
    if request.method == 'GET':
        params = request.query_params
        qs = _admissions(kind)
        if params.get('status') and params['status'] != 'all':
            qs = qs.filter(status=params['status'])
        ward_id = id_param(params, 'wardId')
        if ward_id:
            qs = qs.filter(bed__ward_id=ward_id)
        patient_id = id_param(params, 'patientId')
        if patient_id:
            qs = qs.filter(patient_id=patient_id)
        if params.get('search'):
            term = params['search']
            qs = qs.filter(
                Q(admission_number__icontains=term) | Q(patient__patient_number__icontains=term)
                | Q(patient__first_name__icontains=term) | Q(patient__last_name__icontains=term)
            )
        qs = paginate(qs.order_by('-admission_date', '-id'), params)
        return Response([admission_service.format_admission(a) for a in qs])

    serializer_class = MaternityAdmissionSerializer if kind == 'maternity' else AdmissionSerializer
    s = serializer_class(data=request.data)
    s.is_valid(raise_exception=True)
    admission = admission_service.admit(kind, s.validated_data, user=request.user)
    admission = get_or_404(_admissions(kind), admission.id)
    return Response(admission_service.format_admission(admission, with_details=True),
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsClinicalRole])
def admission_detail(request, pk: int, kind: str):
    admission = get_or_404(_admissions(kind), pk, 'admission')
    if request.method == 'GET':
        return Response(admission_service.format_admission(admission, with_details=True))
    if request.method == 'PUT':
        serializer_class = MaternityAdmissionUpdateSerializer if kind == 'maternity' else AdmissionUpdateSerializer
        s = serializer_class(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        admission_service.update_admission(admission, s.validated_data, user=request.user)
        return Response(admission_service.format_admission(get_or_404(_admissions(kind), pk), with_details=True))
    admission_service.cancel(admission, user=request.user)
    return Response({'message': 'Admission cancelled successfully'})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsClinicalRole])
def admission_discharge(request, pk: int, kind: str):
    admission = get_or_404(_admissions(kind), pk, 'admission')
    s = DischargeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    admission_service.discharge(admission, s.validated_data.get('dischargeDate'), user=request.user)
    return Response(admission_service.format_admission(get_or_404(_admissions(kind), pk)))


# ---------------------------------------------------------------------
# Deliveries
# ---------------------------------------------------------------------
def _deliveries():
    return Delivery.objects.select_related('admission__patient').prefetch_related('newborns')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsClinicalRole])
def deliveries(request):
    if request.method == 'GET':
        params = request.query_params
        qs = _deliveries()
        if params.get('deliveryType') and params['deliveryType'] != 'all':
            qs = qs.filter(delivery_type=params['deliveryType'])
        if params.get('search'):
            term = params['search']
            qs = qs.filter(
                Q(admission__admission_number__icontains=term)
                | Q(admission__patient__first_name__icontains=term)
                | Q(admission__patient__last_name__icontains=term)
            )
        qs = paginate(qs.order_by('-delivery_date', '-id'), params)
        return Response([admission_service.format_delivery(d) for d in qs])

    s = DeliverySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    admission = Admission.objects.filter(id=s.validated_data['admissionId']).first()
    if admission is None:
        raise ValidationError({'admissionId': 'admission not found'})
    delivery = admission_service.record_delivery(admission, s.validated_data, user=request.user)
    return Response(admission_service.format_delivery(get_or_404(_deliveries(), delivery.id)),
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsClinicalRole])
def delivery_detail(request, pk: int):
    delivery = get_or_404(_deliveries(), pk, 'delivery')
    if request.method == 'GET':
        return Response(admission_service.format_delivery(delivery))
    if request.method == 'DELETE':
        admission_service.remove_delivery(delivery, user=request.user)
        return Response({'message': 'Delivery deleted successfully'})
    s = DeliverySerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    check_staff(s.validated_data.get('assistedBy'), 'assistedBy')
    for api_f, model_f in DELIVERY_FIELDS.items():
        value = s.validated_data.get(api_f)
        if value is not None or (api_f in s.validated_data and model_f == 'assisted_by_id'):
            setattr(delivery, model_f, value)
    delivery.save()
    return Response(admission_service.format_delivery(get_or_404(_deliveries(), pk)))
