"""
Patient registry and department endpoints.

Any signed-in staff member may look patients up; registration, edits
and removal are limited to front-desk roles.  Deleting a patient only
marks the record as voided.
"""
from __future__ import annotations

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from clinic.models import Department, Invoice, Patient, User
from clinic.permissions import IsAdminRole, IsFrontDeskOrReadOnly, ReadOnly
from clinic.serializers.patient import DepartmentSerializer, PatientListQuerySerializer, PatientSerializer
from clinic.services import patients as patient_service
from clinic.services.audit import log_action
from clinic.services.billing import format_invoice
from clinic.views.common import get_or_404, paginate


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsFrontDeskOrReadOnly])
def patients(request):
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = patient_service.search_patients(q.validated_data.get('search'))
        return Response([patient_service.format_patient(p) for p in paginate(qs, request.query_params)])

    s = PatientSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient, follow_up = patient_service.register_patient(s.validated_data, user=request.user)
    data = patient_service.format_patient(patient)
    data['registration'] = follow_up
    return Response(data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsFrontDeskOrReadOnly])
def patient_detail(request, pk: int):
    patient = get_or_404(Patient.objects.filter(voided=False), pk, 'patient')
    if request.method == 'GET':
        return Response(patient_service.format_patient(patient))
    if request.method == 'PUT':
        s = PatientSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        patient = patient_service.update_patient(patient, s.validated_data)
        return Response(patient_service.format_patient(patient))
    patient.voided = True
    patient.save(update_fields=['voided', 'updated_at'])
    log_action(user=request.user, action='patient_void', object_type='patient', object_id=patient.id)
    return Response({'message': 'Patient deleted successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def patient_invoices(request, pk: int):
    patient = get_or_404(Patient.objects.all(), pk, 'patient')
    qs = Invoice.objects.filter(patient=patient).select_related('patient').order_by('-invoice_date', '-id')
    return Response([format_invoice(inv) for inv in qs])


# ---------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------
def format_department(d: Department) -> dict:
    return {
        'departmentId': d.id,
        'departmentName': d.name,
        'departmentCode': d.code,
        'description': d.description,
        'location': d.location,
        'headId': d.head_id,
        'headName': (d.head.get_full_name() or d.head.username) if d.head else None,
        'isActive': d.is_active,
        'createdAt': d.created_at.isoformat() if d.created_at else None,
    }


def _apply_department(dept: Department, data: dict) -> Department:
    for api_f, model_f in (('name', 'name'), ('code', 'code'), ('description', 'description'),
                           ('location', 'location'), ('isActive', 'is_active')):
        if api_f in data:
            setattr(dept, model_f, data[api_f])
    if 'headId' in data:
        head_id = data['headId']
        if head_id is not None and not User.objects.filter(id=head_id).exists():
            raise ValidationError({'headId': 'user not found'})
        dept.head_id = head_id
    name_taken = Department.objects.filter(name=dept.name).exclude(id=dept.id).exists()
    if name_taken:
        raise ValidationError({'name': 'Department name already exists'})
    dept.save()
    return dept


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, ReadOnly | IsAdminRole])
def departments(request):
    if request.method == 'GET':
        qs = Department.objects.select_related('head').filter(is_active=True)
        search = request.query_params.get('search')
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(code__icontains=search))
        return Response([format_department(d) for d in qs.order_by('name')])

    s = DepartmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    dept = _apply_department(Department(), s.validated_data)
    return Response(format_department(dept), status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, ReadOnly | IsAdminRole])
def department_detail(request, pk: int):
    dept = get_or_404(Department.objects.select_related('head'), pk, 'department')
    if request.method == 'GET':
        return Response(format_department(dept))
    if request.method == 'PUT':
        s = DepartmentSerializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)
        return Response(format_department(_apply_department(dept, s.validated_data)))
    dept.is_active = False
    dept.save(update_fields=['is_active', 'updated_at'])
    return Response({'message': 'Department deactivated successfully'})
