"""
Patient invoices and the service charge catalogue.
"""
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from clinic.models import Invoice, InvoiceItem, Patient, ServiceCharge
from clinic.services.formatting import iso, money
from clinic.services.numbering import next_daily

REGISTRATION_CHARGE_CODE = 'REG-FEE'


def registration_fee_charge() -> ServiceCharge | None:
    """Return the active registration fee charge, creating it on first use.

    A fee that was deactivated in the catalogue stays off: ``None`` is
    returned and registration is not billed.
    """
    charge, _ = ServiceCharge.objects.get_or_create(
        charge_code=REGISTRATION_CHARGE_CODE,
        defaults={
            'name': 'Patient Registration Fee',
            'category': 'Registration',
            'cost': Decimal(settings.REGISTRATION_FEE),
            'description': 'Patient registration fee',
            'status': 'Active',
        },
    )
    return charge if charge.status == 'Active' else None


def create_invoice(patient: Patient, lines: list[tuple[ServiceCharge, int]], *, user=None,
                   notes: str = '', description: str | None = None) -> Invoice:
    """Bill ``patient`` for ``(charge, quantity)`` lines on a new pending invoice."""
    with transaction.atomic():
        total = sum((charge.cost * qty for charge, qty in lines), Decimal('0'))
        invoice = Invoice.objects.create(
            invoice_number=next_daily(Invoice, 'invoice_number', 'INV'),
            patient=patient,
            invoice_date=timezone.localdate(),
            total_amount=total,
            balance=total,
            status='pending',
            notes=notes,
            created_by=user if getattr(user, 'is_authenticated', False) else None,
        )
        for charge, qty in lines:
            InvoiceItem.objects.create(
                invoice=invoice,
                charge=charge,
                description=description or charge.name,
                quantity=qty,
                unit_price=charge.cost,
                total_price=charge.cost * qty,
            )
    return invoice


def format_charge(c: ServiceCharge) -> dict:
    return {
        'chargeId': c.id,
        'chargeCode': c.charge_code,
        'name': c.name,
        'category': c.category,
        'department': c.department,
        'chargeType': c.charge_type,
        'cost': money(c.cost),
        'description': c.description,
        'status': c.status,
        'createdAt': iso(c.created_at),
        'updatedAt': iso(c.updated_at),
    }


def format_invoice(inv: Invoice, with_items: bool = False) -> dict:
    data = {
        'invoiceId': inv.id,
        'invoiceNumber': inv.invoice_number,
        'patientId': inv.patient_id,
        'patientName': inv.patient.full_name,
        'patientNumber': inv.patient.patient_number,
        'invoiceDate': iso(inv.invoice_date),
        'dueDate': iso(inv.due_date),
        'totalAmount': money(inv.total_amount),
        'paidAmount': money(inv.paid_amount),
        'balance': money(inv.balance),
        'status': inv.status,
        'notes': inv.notes,
    }
    if with_items:
        data['items'] = [
            {
                'itemId': it.id,
                'chargeId': it.charge_id,
                'description': it.description,
                'quantity': it.quantity,
                'unitPrice': money(it.unit_price),
                'totalPrice': money(it.total_price),
            }
            for it in inv.items.all()
        ]
    return data
