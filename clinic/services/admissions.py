"""
Ward admissions for inpatient, maternity and ICU care.

An admitted patient holds exactly one bed.  Admitting occupies the bed,
moving to another bed frees the old one, and discharging or cancelling
frees it again.  Bed rows are locked while their status changes.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic.exceptions import BedUnavailable, DomainError, DuplicateRecord
from clinic.models import Admission, AdmissionDiagnosis, Bed, Delivery, MaternityDetail, Newborn, Patient
from clinic.services.audit import log_action
from clinic.services.formatting import iso, money
from clinic.services.numbering import next_sequential
from clinic.services.staff import check_staff

logger = logging.getLogger(__name__)

NUMBER_PREFIX = {'inpatient': 'IP-', 'maternity': 'MAT-', 'icu': 'ICU-'}
MATERNITY_FIELDS = {
    'gestationWeeks': 'gestation_weeks',
    'expectedDeliveryDate': 'expected_delivery_date',
    'pregnancyNumber': 'pregnancy_number',
    'previousPregnancies': 'previous_pregnancies',
    'previousDeliveries': 'previous_deliveries',
    'previousComplications': 'previous_complications',
    'bloodGroup': 'blood_group',
    'rhesusFactor': 'rhesus_factor',
}
ADMISSION_FIELDS = {
    'admissionDiagnosis': 'admission_diagnosis',
    'admissionReason': 'admission_reason',
    'expectedDischargeDate': 'expected_discharge_date',
    'initialCondition': 'initial_condition',
    'notes': 'notes',
}


def _occupy(bed_id: int, admission_type: str) -> Bed:
    bed = Bed.objects.select_for_update().select_related('ward').filter(id=bed_id).first()
    if bed is None:
        raise ValidationError({'bedId': 'bed not found'})
    if not bed.is_active or bed.status != 'available':
        raise BedUnavailable(f'bed {bed} is {bed.status}')
    if admission_type == 'icu' and bed.ward.ward_type != 'icu':
        raise BedUnavailable(f'bed {bed} is not an ICU bed')
    bed.status = 'occupied'
    bed.save(update_fields=['status'])
    return bed


def _release(bed_id: int | None) -> None:
    if bed_id is None:
        return
    Bed.objects.filter(id=bed_id, status='occupied').update(status='available')


def _replace_diagnoses(admission: Admission, diagnoses: list[dict]) -> None:
    admission.diagnoses.all().delete()
    AdmissionDiagnosis.objects.bulk_create([
        AdmissionDiagnosis(
            admission=admission,
            diagnosis_code=d.get('diagnosisCode') or '',
            diagnosis_description=d['diagnosisDescription'],
            diagnosis_type=d.get('diagnosisType') or 'primary',
        )
        for d in diagnoses
    ])


def _admission_fields(data: dict) -> dict:
    fields = {}
    for a, m in ADMISSION_FIELDS.items():
        if a in data:
            value = data[a]
            fields[m] = value if (value is not None or m == 'expected_discharge_date') else ''
    return fields


def admit(admission_type: str, data: dict, *, user=None) -> Admission:
    """Admit ``data['patientId']`` to ``data['bedId']``."""
    if admission_type not in NUMBER_PREFIX:
        raise DomainError(f'unknown admission type: {admission_type}')
    with transaction.atomic():
        patient = Patient.objects.filter(id=data['patientId'], voided=False).first()
        if patient is None:
            raise ValidationError({'patientId': 'patient not found'})
        check_staff(data.get('admittingDoctorId'), 'admittingDoctorId')
        if Admission.objects.filter(patient=patient, status='admitted').exists():
            raise DuplicateRecord(f'{patient.patient_number} is already admitted')
        bed = _occupy(data['bedId'], admission_type)
        admission = Admission.objects.create(
            admission_number=next_sequential(Admission, 'admission_number', NUMBER_PREFIX[admission_type]),
            admission_type=admission_type,
            patient=patient,
            bed=bed,
            admitting_doctor_id=data.get('admittingDoctorId'),
            admission_date=data.get('admissionDate') or timezone.now(),
            status='admitted',
            **_admission_fields(data),
        )
        if data.get('diagnoses'):
            _replace_diagnoses(admission, data['diagnoses'])
        if admission_type == 'maternity':
            MaternityDetail.objects.create(
                admission=admission,
                **{m: data[a] for a, m in MATERNITY_FIELDS.items() if data.get(a) is not None},
            )
        log_action(user=user, action='admit', object_type='admission', object_id=admission.id,
                   detail={'number': admission.admission_number, 'bed': str(bed)})
    logger.info('admitted %s to %s as %s', patient.patient_number, bed, admission.admission_number)
    return admission


def discharge(admission: Admission, discharge_date=None, *, user=None) -> Admission:
    if admission.status != 'admitted':
        raise DomainError(f'admission is {admission.status}')
    with transaction.atomic():
        admission.status = 'discharged'
        admission.discharge_date = discharge_date or timezone.now()
        admission.save()
        _release(admission.bed_id)
        log_action(user=user, action='discharge', object_type='admission', object_id=admission.id)
    return admission


def update_admission(admission: Admission, data: dict, *, user=None) -> Admission:
    with transaction.atomic():
        admission = Admission.objects.select_for_update().get(id=admission.id)
        new_bed = data.get('bedId')
        if new_bed is not None and new_bed != admission.bed_id:
            if admission.status != 'admitted':
                raise DomainError('only current admissions can change bed')
            old_bed = admission.bed_id
            admission.bed = _occupy(new_bed, admission.admission_type)
            _release(old_bed)
        for m, value in _admission_fields(data).items():
            setattr(admission, m, value)
        if 'diagnoses' in data:
            _replace_diagnoses(admission, data['diagnoses'] or [])
        if admission.admission_type == 'maternity' and any(a in data for a in MATERNITY_FIELDS):
            detail, _ = MaternityDetail.objects.get_or_create(admission=admission)
            for a, m in MATERNITY_FIELDS.items():
                if a in data and data[a] is not None:
                    setattr(detail, m, data[a])
            detail.save()
        admission.save()
        status = data.get('status')
        if status == 'discharged' and admission.status == 'admitted':
            admission = discharge(admission, data.get('dischargeDate'), user=user)
        elif status == 'cancelled' and admission.status == 'admitted':
            admission = cancel(admission, user=user)
        elif status and status != admission.status:
            raise DomainError(f'cannot change status from {admission.status} to {status}')
    return admission


def cancel(admission: Admission, *, user=None) -> Admission:
    """Cancel an admission, freeing its bed if the patient still holds it."""
    with transaction.atomic():
        was_admitted = admission.status == 'admitted'
        admission.status = 'cancelled'
        admission.save(update_fields=['status', 'updated_at'])
        if was_admitted:
            _release(admission.bed_id)
        log_action(user=user, action='admission_cancel', object_type='admission', object_id=admission.id)
    return admission


def record_delivery(admission: Admission, data: dict, *, user=None) -> Delivery:
    if admission.admission_type != 'maternity':
        raise DomainError('deliveries can only be recorded on maternity admissions')
    check_staff(data.get('assistedBy'), 'assistedBy')
    with transaction.atomic():
        delivery = Delivery.objects.create(
            admission=admission,
            delivery_date=data.get('deliveryDate') or timezone.now(),
            delivery_type=data.get('deliveryType') or 'normal',
            delivery_mode=data.get('deliveryMode') or '',
            complications=data.get('complications') or '',
            maternal_outcome=data.get('maternalOutcome') or 'good',
            assisted_by_id=data.get('assistedBy'),
            notes=data.get('notes') or '',
        )
        for baby in data.get('newborns') or []:
            Newborn.objects.create(
                delivery=delivery,
                gender=baby['gender'],
                birth_weight=baby['birthWeight'],
                apgar_score_1min=baby.get('apgarScore1Min'),
                apgar_score_5min=baby.get('apgarScore5Min'),
                health_status=baby.get('healthStatus') or 'healthy',
                notes=baby.get('notes') or '',
            )
        MaternityDetail.objects.update_or_create(admission=admission, defaults={'delivered': True})
    return delivery


def remove_delivery(delivery: Delivery, *, user=None) -> None:
    """Delete a delivery with its newborns; the admission is undelivered once none remain."""
    with transaction.atomic():
        admission_id = delivery.admission_id
        delivery_id = delivery.id
        delivery.delete()
        if not Delivery.objects.filter(admission_id=admission_id).exists():
            MaternityDetail.objects.filter(admission_id=admission_id).update(delivered=False)
        log_action(user=user, action='delivery_delete', object_type='delivery', object_id=delivery_id)


def format_bed(b: Bed) -> dict:
    return {
        'bedId': b.id,
        'bedNumber': b.bed_number,
        'bedType': b.bed_type,
        'status': b.status,
        'isActive': b.is_active,
        'wardId': b.ward_id,
        'wardName': b.ward.ward_name,
        'wardType': b.ward.ward_type,
    }


def format_ward(w, occupied: int | None = None) -> dict:
    data = {
        'wardId': w.id,
        'wardCode': w.ward_code,
        'wardName': w.ward_name,
        'wardType': w.ward_type,
        'capacity': w.capacity,
        'dailyRate': money(w.daily_rate),
        'isActive': w.is_active,
    }
    if occupied is not None:
        data['occupiedBeds'] = occupied
    return data


def format_admission(a: Admission, with_details: bool = False) -> dict:
    data = {
        'admissionId': a.id,
        'admissionNumber': a.admission_number,
        'admissionType': a.admission_type,
        'patientId': a.patient_id,
        'patientName': a.patient.full_name,
        'patientNumber': a.patient.patient_number,
        'bedId': a.bed_id,
        'bedNumber': a.bed.bed_number if a.bed else None,
        'wardName': a.bed.ward.ward_name if a.bed else None,
        'admittingDoctorId': a.admitting_doctor_id,
        'doctorName': (a.admitting_doctor.get_full_name() or a.admitting_doctor.username) if a.admitting_doctor else None,
        'admissionDate': iso(a.admission_date),
        'expectedDischargeDate': iso(a.expected_discharge_date),
        'dischargeDate': iso(a.discharge_date),
        'admissionDiagnosis': a.admission_diagnosis,
        'admissionReason': a.admission_reason,
        'initialCondition': a.initial_condition,
        'status': a.status,
        'notes': a.notes,
    }
    if with_details:
        data['diagnoses'] = [
            {
                'diagnosisCode': d.diagnosis_code,
                'diagnosisDescription': d.diagnosis_description,
                'diagnosisType': d.diagnosis_type,
            }
            for d in a.diagnoses.all()
        ]
        if a.admission_type == 'maternity':
            detail = MaternityDetail.objects.filter(admission=a).first()
            data['maternity'] = {
                api_f: iso(getattr(detail, m)) if m == 'expected_delivery_date' else getattr(detail, m)
                for api_f, m in MATERNITY_FIELDS.items()
            } if detail else None
            if detail:
                data['maternity']['delivered'] = detail.delivered
    return data


def format_delivery(d: Delivery) -> dict:
    return {
        'deliveryId': d.id,
        'admissionId': d.admission_id,
        'admissionNumber': d.admission.admission_number,
        'patientName': d.admission.patient.full_name,
        'deliveryDate': iso(d.delivery_date),
        'deliveryType': d.delivery_type,
        'deliveryMode': d.delivery_mode,
        'complications': d.complications,
        'maternalOutcome': d.maternal_outcome,
        'assistedBy': d.assisted_by_id,
        'notes': d.notes,
        'newborns': [
            {
                'newbornId': n.id,
                'gender': n.gender,
                'birthWeight': money(n.birth_weight),
                'apgarScore1Min': n.apgar_score_1min,
                'apgarScore5Min': n.apgar_score_5min,
                'healthStatus': n.health_status,
                'notes': n.notes,
            }
            for n in d.newborns.all()
        ],
    }
