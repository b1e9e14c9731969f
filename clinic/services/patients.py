"""
Patient registry.

Registering a patient also bills the registration fee and places the
patient in the cashier queue.  That follow-up runs in a savepoint: if
it fails the error is logged and the registration itself still stands.
Deactivating the ``REG-FEE`` charge turns the fee off.
"""
from __future__ import annotations

import logging

from django.db import DatabaseError, transaction
from django.db.models import Q
from rest_framework.exceptions import APIException

from clinic.models import Patient
from clinic.services import billing, queue
from clinic.services.audit import log_action
from clinic.services.formatting import iso
from clinic.services.numbering import next_sequential

logger = logging.getLogger(__name__)

PATIENT_FIELDS = {
    'firstName': 'first_name',
    'middleName': 'middle_name',
    'lastName': 'last_name',
    'dateOfBirth': 'date_of_birth',
    'gender': 'gender',
    'phone': 'phone_number',
    'email': 'email',
    'address': 'address',
    'county': 'county',
    'subcounty': 'subcounty',
    'ward': 'ward',
    'idType': 'id_type',
    'idNumber': 'id_number',
    'nextOfKinName': 'next_of_kin_name',
    'nextOfKinPhone': 'next_of_kin_phone',
    'nextOfKinRelationship': 'next_of_kin_relationship',
    'bloodGroup': 'blood_group',
    'allergies': 'allergies',
    'medicalHistory': 'medical_history',
}


def search_patients(term: str | None):
    qs = Patient.objects.filter(voided=False)
    if term:
        qs = qs.filter(
            Q(first_name__icontains=term) | Q(last_name__icontains=term)
            | Q(patient_number__icontains=term) | Q(phone_number__icontains=term)
            | Q(email__icontains=term) | Q(id_number__icontains=term)
        )
    return qs.order_by('-created_at', '-id')


def register_patient(data: dict, *, user=None) -> tuple[Patient, dict]:
    """Create a patient from validated camelCase ``data``.

    Returns the patient and a dict describing the follow-up billing:
    ``{'invoiceNumber': ..., 'ticketNumber': ...}``, ``{'error': ...}``, or
    ``{'skipped': ...}`` when the registration fee has been deactivated.
    """
    with transaction.atomic():
        fields = {model_f: data[api_f] for api_f, model_f in PATIENT_FIELDS.items() if data.get(api_f) not in (None, '')}
        patient = Patient.objects.create(
            patient_number=next_sequential(Patient, 'patient_number', 'P-'),
            created_by=user if getattr(user, 'is_authenticated', False) else None,
            **fields,
        )
        follow_up = _bill_registration(patient, user)
        log_action(user=user, action='patient_register', object_type='patient', object_id=patient.id,
                   detail={'patientNumber': patient.patient_number, **follow_up})
    logger.info('registered patient %s', patient.patient_number)
    return patient, follow_up


def _bill_registration(patient: Patient, user) -> dict:
    try:
        with transaction.atomic():
            charge = billing.registration_fee_charge()
            if charge is None:
                return {'skipped': 'registration fee is inactive'}
            invoice = billing.create_invoice(
                patient, [(charge, 1)], user=user, notes='Registration fee payment',
            )
            entry = queue.enqueue(
                patient=patient, service_point='cashier', notes='Registration fees payment', user=user,
            )
    except (DatabaseError, APIException) as exc:
        logger.exception('registration billing failed for %s', patient.patient_number)
        return {'error': str(exc)}
    return {'invoiceNumber': invoice.invoice_number, 'ticketNumber': entry.ticket_number}


def update_patient(patient: Patient, data: dict) -> Patient:
    for api_f, model_f in PATIENT_FIELDS.items():
        if api_f in data:
            value = data[api_f]
            if value is None and model_f != 'date_of_birth':
                value = ''
            setattr(patient, model_f, value)
    patient.save()
    return patient


def format_patient(p: Patient) -> dict:
    data = {'patientId': p.id, 'patientNumber': p.patient_number, 'fullName': p.full_name}
    for api_f, model_f in PATIENT_FIELDS.items():
        value = getattr(p, model_f)
        data[api_f] = iso(value) if model_f == 'date_of_birth' else value
    data.update({
        'voided': p.voided,
        'createdAt': iso(p.created_at),
        'updatedAt': iso(p.updated_at),
    })
    return data
