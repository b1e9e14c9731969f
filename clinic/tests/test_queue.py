"""
Integration tests for the service queue.

These cover the transition table, ticket numbering, priority ordering,
filtering, call-next and the statistics endpoint.  The tests use Django
REST Framework's APIClient within the APITestCase base class.
"""
from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from ..models import Patient, QueueEntry, QueueTransition, User
from ..services import queue as queue_service


class QueueAPITests(APITestCase):
    def setUp(self) -> None:
        self.nurse = User.objects.create_user(username="nurse1", password="nursepass", role="nurse")
        self.client.force_authenticate(self.nurse)
        self.p1 = Patient.objects.create(patient_number="P-000001", first_name="Jane", last_name="Doe")
        self.p2 = Patient.objects.create(patient_number="P-000002", first_name="John", last_name="Smith")
        self.p3 = Patient.objects.create(patient_number="P-000003", first_name="Amina", last_name="Ali")

    def enqueue(self, patient, service_point="triage", priority="normal"):
        resp = self.client.post(
            reverse("queue"),
            {"patientId": patient.id, "servicePoint": service_point, "priority": priority},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        return resp.data

    def set_status(self, queue_id, new_status, reason=None):
        body = {"status": new_status}
        if reason:
            body["reason"] = reason
        return self.client.put(reverse("queue_status", args=[queue_id]), body, format="json")

    def test_ticket_numbers_count_per_service_point(self) -> None:
        a = self.enqueue(self.p1, "triage")
        b = self.enqueue(self.p2, "triage")
        c = self.enqueue(self.p3, "pharmacy")
        self.assertEqual(a["ticketNumber"], "T-001")
        self.assertEqual(b["ticketNumber"], "T-002")
        self.assertEqual(c["ticketNumber"], "P-001")
        self.assertEqual(a["status"], "waiting")

    def test_patient_cannot_queue_twice_at_same_point(self) -> None:
        self.enqueue(self.p1, "triage")
        resp = self.client.post(reverse("queue"), {"patientId": self.p1.id, "servicePoint": "triage"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"]["code"], "duplicate")

    def test_unknown_patient_is_rejected(self) -> None:
        resp = self.client.post(reverse("queue"), {"patientId": 9999, "servicePoint": "triage"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(resp.data["ok"])

    def test_full_lifecycle_records_timestamps_and_history(self) -> None:
        entry = self.enqueue(self.p1)
        for new_status in ("called", "serving", "completed"):
            resp = self.set_status(entry["queueId"], new_status)
            self.assertEqual(resp.status_code, 200, resp.data)
            self.assertEqual(resp.data["status"], new_status)
        row = QueueEntry.objects.get(id=entry["queueId"])
        self.assertIsNotNone(row.called_time)
        self.assertIsNotNone(row.start_time)
        self.assertIsNotNone(row.end_time)
        history = list(
            QueueTransition.objects.filter(entry=row).order_by("id").values_list("from_status", "to_status")
        )
        self.assertEqual(
            history,
            [(None, "waiting"), ("waiting", "called"), ("called", "serving"), ("serving", "completed")],
        )
        detail = self.client.get(reverse("queue_detail", args=[row.id]))
        self.assertEqual(detail.data["allowedTransitions"], [])
        self.assertEqual(len(detail.data["transitionHistory"]), 4)
        self.assertEqual(detail.data["transitionHistory"][1]["operator"], "nurse1")

    def test_invalid_transition_is_rejected(self) -> None:
        entry = self.enqueue(self.p1)
        resp = self.set_status(entry["queueId"], "completed")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"]["code"], "invalid_transition")
        self.assertEqual(QueueEntry.objects.get(id=entry["queueId"]).status, "waiting")

    def test_finished_statuses_are_terminal(self) -> None:
        entry = self.enqueue(self.p1)
        self.assertEqual(self.set_status(entry["queueId"], "no-show").status_code, 200)
        for new_status in ("waiting", "called", "serving", "completed"):
            self.assertEqual(self.set_status(entry["queueId"], new_status).status_code, 400)

    def test_rescheduled_entry_rejoins_at_the_back(self) -> None:
        first = self.enqueue(self.p1)
        second = self.enqueue(self.p2)
        self.set_status(first["queueId"], "rescheduled", reason="patient stepped out")
        resp = self.set_status(first["queueId"], "waiting")
        self.assertEqual(resp.status_code, 200)
        rows = self.client.get(reverse("queue"), {"servicePoint": "triage"}).data
        self.assertEqual([r["queueId"] for r in rows], [second["queueId"], first["queueId"]])

    def test_list_orders_by_priority_then_arrival(self) -> None:
        normal = self.enqueue(self.p1, priority="normal")
        emergency = self.enqueue(self.p2, priority="emergency")
        urgent = self.enqueue(self.p3, priority="urgent")
        rows = self.client.get(reverse("queue")).data
        self.assertEqual(
            [r["queueId"] for r in rows],
            [emergency["queueId"], urgent["queueId"], normal["queueId"]],
        )

    def test_list_filters_and_hides_finished(self) -> None:
        a = self.enqueue(self.p1, "triage")
        self.enqueue(self.p2, "pharmacy", priority="urgent")
        b = self.enqueue(self.p3, "triage")
        self.set_status(b["queueId"], "cancelled")

        rows = self.client.get(reverse("queue"), {"servicePoint": "triage"}).data
        self.assertEqual([r["queueId"] for r in rows], [a["queueId"]])

        rows = self.client.get(reverse("queue"), {"servicePoint": "triage", "includeCompleted": "true"}).data
        self.assertEqual(len(rows), 2)

        rows = self.client.get(reverse("queue"), {"priority": "urgent"}).data
        self.assertEqual([r["servicePoint"] for r in rows], ["pharmacy"])

        rows = self.client.get(reverse("queue"), {"search": "doe"}).data
        self.assertEqual([r["patientNumber"] for r in rows], ["P-000001"])

        history = self.client.get(reverse("queue_history")).data
        self.assertEqual([r["queueId"] for r in history], [b["queueId"]])

    def test_call_next_picks_highest_priority(self) -> None:
        self.enqueue(self.p1, priority="normal")
        urgent = self.enqueue(self.p2, priority="urgent")
        resp = self.client.post(reverse("queue_call_next"), {"servicePoint": "triage"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["queueId"], urgent["queueId"])
        self.assertEqual(resp.data["status"], "called")

    def test_call_next_on_empty_queue(self) -> None:
        resp = self.client.post(reverse("queue_call_next"), {"servicePoint": "radiology"}, format="json")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.data["error"]["code"], "queue_empty")

    def test_archive_requires_finished_entry(self) -> None:
        entry = self.enqueue(self.p1)
        resp = self.client.post(reverse("queue_archive", args=[entry["queueId"]]))
        self.assertEqual(resp.status_code, 400)
        self.set_status(entry["queueId"], "cancelled")
        resp = self.client.post(reverse("queue_archive", args=[entry["queueId"]]))
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(QueueEntry.objects.get(id=entry["queueId"]).archived)

    def test_archive_completed_counts_finished(self) -> None:
        a = self.enqueue(self.p1)
        self.enqueue(self.p2)
        self.set_status(a["queueId"], "no-show")
        resp = self.client.post(reverse("queue_archive_completed"), {}, format="json")
        self.assertEqual(resp.data["count"], 1)

    def test_stats_counts_and_cache_invalidation(self) -> None:
        a = self.enqueue(self.p1, "triage", priority="emergency")
        self.enqueue(self.p2, "triage")
        stats = self.client.get(reverse("queue_stats")).data
        self.assertEqual(stats["byStatus"]["waiting"], 2)
        self.assertEqual(stats["waitingByPriority"]["emergency"], 1)
        self.assertEqual(stats["activeByServicePoint"]["triage"], 2)

        self.set_status(a["queueId"], "called")
        stats = self.client.get(reverse("queue_stats"), {"servicePoint": "triage"}).data
        self.assertEqual(stats["byStatus"]["waiting"], 1)
        self.assertEqual(stats["byStatus"]["called"], 1)

    def test_stats_rejects_unknown_service_point(self) -> None:
        resp = self.client.get(reverse("queue_stats"), {"servicePoint": "canteen"})
        self.assertEqual(resp.status_code, 400)

    def test_queue_requires_authentication(self) -> None:
        self.client.force_authenticate(None)
        resp = self.client.get(reverse("queue"))
        self.assertIn(resp.status_code, (401, 403))


def test_transition_table():
    assert queue_service.can_transition("waiting", "called")
    assert queue_service.can_transition("called", "waiting")
    assert queue_service.can_transition("serving", "cancelled")
    assert not queue_service.can_transition("waiting", "serving")
    assert not queue_service.can_transition("completed", "waiting")
    assert not queue_service.can_transition("no-show", "waiting")


def test_sort_and_filter_rows():
    now = timezone.now()
    rows = [
        {"queueId": 1, "priority": "normal", "arrivalTime": (now - timedelta(minutes=30)).isoformat(),
         "servicePoint": "triage", "status": "waiting", "patientName": "Jane Doe"},
        {"queueId": 2, "priority": "emergency", "arrivalTime": now.isoformat(),
         "servicePoint": "triage", "status": "waiting", "patientName": "John Smith"},
        {"queueId": 3, "priority": "normal", "arrivalTime": (now - timedelta(minutes=40)).isoformat(),
         "servicePoint": "pharmacy", "status": "called", "patientName": "Amina Ali"},
    ]
    assert [r["queueId"] for r in queue_service.sort_entries(rows)] == [2, 3, 1]
    assert [r["queueId"] for r in queue_service.filter_entries(rows, service_point="triage")] == [1, 2]
    assert [r["queueId"] for r in queue_service.filter_entries(rows, status="called")] == [3]
    assert len(queue_service.filter_entries(rows, service_point="all", status="all")) == 3
    assert [r["queueId"] for r in queue_service.filter_entries(rows, search="SMITH")] == [2]
