"""
Patient registry tests: registration follow-up billing, required
fields, search and soft deletion.
"""
from decimal import Decimal

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from ..models import Department, Invoice, Patient, QueueEntry, ServiceCharge, User


class PatientAPITests(APITestCase):
    def setUp(self) -> None:
        self.clerk = User.objects.create_user(username="reception1", password="pass", role="registration")
        self.client.force_authenticate(self.clerk)

    def register(self, **extra):
        body = {"firstName": "Jane", "lastName": "Doe", "gender": "Female", "phone": "0712345678"}
        body.update(extra)
        return self.client.post(reverse("patients"), body, format="json")

    @override_settings(REGISTRATION_FEE="750.00")
    def test_registration_bills_fee_and_queues_at_cashier(self) -> None:
        resp = self.register()
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        self.assertEqual(resp.data["patientNumber"], "P-000001")
        self.assertEqual(resp.data["fullName"], "Jane Doe")

        follow_up = resp.data["registration"]
        invoice = Invoice.objects.get(invoice_number=follow_up["invoiceNumber"])
        self.assertEqual(invoice.total_amount, Decimal("750.00"))
        self.assertEqual(invoice.balance, Decimal("750.00"))
        self.assertEqual(invoice.items.get().charge.charge_code, "REG-FEE")

        entry = QueueEntry.objects.get(patient_id=resp.data["patientId"])
        self.assertEqual(entry.service_point, "cashier")
        self.assertEqual(entry.ticket_number, follow_up["ticketNumber"])
        self.assertEqual(entry.ticket_number, "C-001")

    def test_registration_reuses_existing_fee_charge(self) -> None:
        ServiceCharge.objects.create(charge_code="REG-FEE", name="Registration", cost=Decimal("200.00"))
        self.register()
        self.register(firstName="John")
        self.assertEqual(ServiceCharge.objects.filter(charge_code="REG-FEE").count(), 1)
        self.assertEqual(
            sorted(Invoice.objects.values_list("total_amount", flat=True)), [Decimal("200.00")] * 2
        )

    def test_inactive_fee_charge_skips_billing(self) -> None:
        ServiceCharge.objects.create(charge_code="REG-FEE", name="Registration", cost=Decimal("200.00"),
                                     status="Inactive")
        resp = self.register()
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        self.assertIn("skipped", resp.data["registration"])
        self.assertFalse(Invoice.objects.exists())
        self.assertFalse(QueueEntry.objects.exists())
        self.assertEqual(ServiceCharge.objects.get(charge_code="REG-FEE").status, "Inactive")

    def test_patient_numbers_are_sequential(self) -> None:
        first = self.register().data
        second = self.register(firstName="John").data
        self.assertEqual([first["patientNumber"], second["patientNumber"]], ["P-000001", "P-000002"])

    def test_names_are_required(self) -> None:
        resp = self.client.post(reverse("patients"), {"firstName": "Jane"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.data["ok"])
        self.assertIn("lastName", resp.data["error"]["message"])

        resp = self.register(firstName="   ")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Patient.objects.count(), 0)

    def test_markup_is_stripped_from_names(self) -> None:
        resp = self.register(firstName="<b>Jane</b>", lastName="<a href='x'>Doe</a>")
        self.assertEqual(resp.data["firstName"], "Jane")
        self.assertEqual(resp.data["lastName"], "Doe")

    def test_search_and_pagination(self) -> None:
        self.register()
        self.register(firstName="John", lastName="Smith", phone="0799000111")
        rows = self.client.get(reverse("patients"), {"search": "smith"}).data
        self.assertEqual([r["lastName"] for r in rows], ["Smith"])
        rows = self.client.get(reverse("patients"), {"search": "0799"}).data
        self.assertEqual(len(rows), 1)
        rows = self.client.get(reverse("patients"), {"page": 2, "limit": 1}).data
        self.assertEqual([r["firstName"] for r in rows], ["Jane"])

    def test_update_and_void(self) -> None:
        pid = self.register().data["patientId"]
        resp = self.client.put(reverse("patient_detail", args=[pid]), {"county": "Nairobi"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["county"], "Nairobi")
        self.assertEqual(resp.data["firstName"], "Jane")

        resp = self.client.delete(reverse("patient_detail", args=[pid]))
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(Patient.objects.get(id=pid).voided)
        self.assertEqual(self.client.get(reverse("patient_detail", args=[pid])).status_code, 404)
        self.assertEqual(self.client.get(reverse("patients")).data, [])

    def test_patient_invoices(self) -> None:
        pid = self.register().data["patientId"]
        rows = self.client.get(reverse("patient_invoices", args=[pid])).data
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["status"], "pending")


class DepartmentAPITests(APITestCase):
    def setUp(self) -> None:
        self.admin = User.objects.create_user(username="admin1", password="pass", role="admin")
        self.nurse = User.objects.create_user(username="nurse1", password="pass", role="nurse")

    def test_admin_manages_departments(self) -> None:
        self.client.force_authenticate(self.admin)
        resp = self.client.post(reverse("departments"), {"name": "Outpatient", "code": "OPD"}, format="json")
        self.assertEqual(resp.status_code, 201, resp.data)
        dept_id = resp.data["departmentId"]
        resp = self.client.delete(reverse("department_detail", args=[dept_id]))
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(Department.objects.get(id=dept_id).is_active)

    def test_non_admin_reads_only(self) -> None:
        Department.objects.create(name="Outpatient", code="OPD")
        self.client.force_authenticate(self.nurse)
        self.assertEqual(len(self.client.get(reverse("departments")).data), 1)
        resp = self.client.post(reverse("departments"), {"name": "Lab"}, format="json")
        self.assertEqual(resp.status_code, 403)
