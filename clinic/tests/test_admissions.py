"""
Ward tests: bed occupancy across admit, bed moves, discharge and the
ICU bed rule, plus maternity deliveries.
"""
from decimal import Decimal

from django.urls import reverse
from rest_framework.test import APITestCase

from ..models import Admission, Bed, Delivery, MaternityDetail, Newborn, Patient, User, Ward


class AdmissionAPITests(APITestCase):
    def setUp(self) -> None:
        self.doctor = User.objects.create_user(username="doctor1", password="pass", role="doctor")
        self.client.force_authenticate(self.doctor)
        self.general = Ward.objects.create(ward_code="GW-A", ward_name="General Ward A", ward_type="general",
                                           capacity=2, daily_rate=Decimal("2000"))
        self.icu = Ward.objects.create(ward_code="ICU-1", ward_name="ICU", ward_type="icu", capacity=1)
        self.maternity = Ward.objects.create(ward_code="MAT-1", ward_name="Maternity", ward_type="maternity",
                                             capacity=1)
        self.bed1 = Bed.objects.create(ward=self.general, bed_number="GW-A-01")
        self.bed2 = Bed.objects.create(ward=self.general, bed_number="GW-A-02")
        self.icu_bed = Bed.objects.create(ward=self.icu, bed_number="ICU-1-01", bed_type="icu")
        self.mat_bed = Bed.objects.create(ward=self.maternity, bed_number="MAT-1-01")
        self.patient = Patient.objects.create(patient_number="P-000001", first_name="Jane", last_name="Doe",
                                              gender="Female")
        self.other = Patient.objects.create(patient_number="P-000002", first_name="John", last_name="Smith")

    def admit(self, kind="inpatient", patient=None, bed=None, **extra):
        body = {"patientId": (patient or self.patient).id, "bedId": (bed or self.bed1).id}
        body.update(extra)
        return self.client.post(reverse(f"{kind}_admissions"), body, format="json")

    def bed_status(self, bed):
        return Bed.objects.get(id=bed.id).status

    def test_admit_occupies_bed(self) -> None:
        resp = self.admit(admissionDiagnosis="Pneumonia",
                          diagnoses=[{"diagnosisCode": "J18", "diagnosisDescription": "Pneumonia"}])
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["admissionNumber"], "IP-000001")
        self.assertEqual(resp.data["status"], "admitted")
        self.assertEqual(resp.data["wardName"], "General Ward A")
        self.assertEqual(resp.data["diagnoses"][0]["diagnosisType"], "primary")
        self.assertEqual(self.bed_status(self.bed1), "occupied")

        wards = {w["wardCode"]: w for w in self.client.get(reverse("wards")).data}
        self.assertEqual(wards["GW-A"]["occupiedBeds"], 1)

    def test_occupied_bed_cannot_be_taken(self) -> None:
        self.admit()
        resp = self.admit(patient=self.other)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"]["code"], "bed_unavailable")

    def test_patient_cannot_hold_two_admissions(self) -> None:
        self.admit()
        resp = self.admit(bed=self.bed2)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"]["code"], "duplicate")
        self.assertEqual(self.bed_status(self.bed2), "available")

    def test_move_bed_frees_old_one(self) -> None:
        pk = self.admit().data["admissionId"]
        resp = self.client.put(reverse("inpatient_admission_detail", args=[pk]), {"bedId": self.bed2.id},
                               format="json")
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(resp.data["bedId"], self.bed2.id)
        self.assertEqual(self.bed_status(self.bed1), "available")
        self.assertEqual(self.bed_status(self.bed2), "occupied")

    def test_discharge_frees_bed(self) -> None:
        pk = self.admit().data["admissionId"]
        resp = self.client.post(reverse("inpatient_admission_discharge", args=[pk]), {}, format="json")
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(resp.data["status"], "discharged")
        self.assertIsNotNone(resp.data["dischargeDate"])
        self.assertEqual(self.bed_status(self.bed1), "available")

        resp = self.client.post(reverse("inpatient_admission_discharge", args=[pk]), {}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_discharge_through_status_update(self) -> None:
        pk = self.admit().data["admissionId"]
        resp = self.client.put(reverse("inpatient_admission_detail", args=[pk]), {"status": "discharged"},
                               format="json")
        self.assertEqual(resp.data["status"], "discharged")
        self.assertEqual(self.bed_status(self.bed1), "available")

    def test_cancel_frees_bed(self) -> None:
        pk = self.admit().data["admissionId"]
        self.client.delete(reverse("inpatient_admission_detail", args=[pk]))
        self.assertEqual(Admission.objects.get(id=pk).status, "cancelled")
        self.assertEqual(self.bed_status(self.bed1), "available")

    def test_icu_admission_requires_icu_bed(self) -> None:
        resp = self.admit("icu", bed=self.bed1, initialCondition="critical")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.bed_status(self.bed1), "available")

        resp = self.admit("icu", bed=self.icu_bed, initialCondition="critical")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["admissionNumber"], "ICU-000001")
        self.assertEqual(resp.data["initialCondition"], "critical")

    def test_icu_bed_endpoints_only_see_icu_wards(self) -> None:
        rows = self.client.get(reverse("icu_beds")).data
        self.assertEqual([r["bedNumber"] for r in rows], ["ICU-1-01"])
        self.assertEqual(self.client.get(reverse("icu_bed_detail", args=[self.bed1.id])).status_code, 404)
        resp = self.client.post(reverse("icu_beds"), {"wardId": self.general.id, "bedNumber": "X"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_occupied_bed_cannot_be_deactivated(self) -> None:
        self.admit()
        resp = self.client.delete(reverse("bed_detail", args=[self.bed1.id]))
        self.assertEqual(resp.status_code, 400)
        self.assertTrue(Bed.objects.get(id=self.bed1.id).is_active)

    def test_admissions_are_scoped_by_kind(self) -> None:
        self.admit()
        self.assertEqual(len(self.client.get(reverse("inpatient_admissions")).data), 1)
        self.assertEqual(self.client.get(reverse("maternity_admissions")).data, [])

    def test_maternity_admission_and_delivery(self) -> None:
        resp = self.admit("maternity", bed=self.mat_bed, gestationWeeks=39, pregnancyNumber=2)
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["admissionNumber"], "MAT-000001")
        self.assertEqual(resp.data["maternity"]["gestationWeeks"], 39)
        pk = resp.data["admissionId"]

        resp = self.client.post(reverse("deliveries"), {
            "admissionId": pk,
            "deliveryType": "normal",
            "newborns": [{"gender": "Female", "birthWeight": "3.20", "apgarScore1Min": 8, "apgarScore5Min": 9}],
        }, format="json")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["newborns"][0]["birthWeight"], 3.2)
        self.assertTrue(MaternityDetail.objects.get(admission_id=pk).delivered)

    def test_delivery_requires_maternity_admission(self) -> None:
        pk = self.admit().data["admissionId"]
        resp = self.client.post(reverse("deliveries"), {"admissionId": pk}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_nurse_reads_but_registration_cannot_admit(self) -> None:
        clerk = User.objects.create_user(username="reception1", password="pass", role="registration")
        self.client.force_authenticate(clerk)
        self.assertEqual(self.client.get(reverse("beds")).status_code, 200)
        self.assertEqual(self.admit().status_code, 403)

    def test_unknown_admitting_doctor_is_rejected(self) -> None:
        resp = self.admit(admittingDoctorId=9999)
        self.assertEqual(resp.status_code, 400)
        self.assertIn("admittingDoctorId", resp.data["error"]["message"])
        self.assertEqual(Admission.objects.count(), 0)
        self.assertEqual(self.bed_status(self.bed1), "available")

        resp = self.admit(admittingDoctorId=self.doctor.id)
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["admittingDoctorId"], self.doctor.id)

    def record_delivery(self, admission_id, **extra):
        body = {"admissionId": admission_id, "newborns": [{"gender": "Male", "birthWeight": "2.90"}]}
        body.update(extra)
        return self.client.post(reverse("deliveries"), body, format="json")

    def test_delete_delivery_removes_newborns_and_resets_delivered(self) -> None:
        pk = self.admit("maternity", bed=self.mat_bed).data["admissionId"]
        first = self.record_delivery(pk).data["deliveryId"]
        second = self.record_delivery(pk).data["deliveryId"]

        resp = self.client.delete(reverse("delivery_detail", args=[first]))
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertFalse(Delivery.objects.filter(id=first).exists())
        self.assertEqual(Newborn.objects.count(), 1)
        self.assertTrue(MaternityDetail.objects.get(admission_id=pk).delivered)

        self.client.delete(reverse("delivery_detail", args=[second]))
        self.assertEqual(Newborn.objects.count(), 0)
        self.assertFalse(MaternityDetail.objects.get(admission_id=pk).delivered)
        self.assertEqual(self.client.get(reverse("delivery_detail", args=[second])).status_code, 404)

    def test_unknown_delivery_assistant_is_rejected(self) -> None:
        pk = self.admit("maternity", bed=self.mat_bed).data["admissionId"]
        resp = self.record_delivery(pk, assistedBy=9999)
        self.assertEqual(resp.status_code, 400)
        self.assertIn("assistedBy", resp.data["error"]["message"])
        self.assertEqual(Delivery.objects.count(), 0)

        delivery_id = self.record_delivery(pk, assistedBy=self.doctor.id).data["deliveryId"]
        resp = self.client.put(reverse("delivery_detail", args=[delivery_id]), {"assistedBy": 9999}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Delivery.objects.get(id=delivery_id).assisted_by_id, self.doctor.id)

    def test_bed_cannot_be_marked_occupied_by_hand(self) -> None:
        resp = self.client.put(reverse("bed_detail", args=[self.bed2.id]), {"status": "occupied"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.bed_status(self.bed2), "available")

    def test_occupied_bed_cannot_change_ward(self) -> None:
        self.admit()
        resp = self.client.put(reverse("bed_detail", args=[self.bed1.id]), {"wardId": self.maternity.id},
                               format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"]["code"], "bed_unavailable")
        self.assertEqual(Bed.objects.get(id=self.bed1.id).ward_id, self.general.id)

        resp = self.client.put(reverse("bed_detail", args=[self.bed1.id]), {"bedNumber": "GW-A-01B"},
                               format="json")
        self.assertEqual(resp.status_code, 200, resp.data)

    def test_malformed_id_filters_are_400(self) -> None:
        self.assertEqual(self.client.get(reverse("beds"), {"wardId": "abc"}).status_code, 400)
        resp = self.client.get(reverse("inpatient_admissions"), {"patientId": "x"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("patientId", resp.data["error"]["message"])
        self.assertEqual(self.client.get(reverse("inpatient_admissions"), {"wardId": self.general.id}).data, [])
