"""
Inventory tests: stock arithmetic, reversal and the summary.
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APITestCase

from ..exceptions import DomainError, InsufficientStock
from ..models import InventoryItem, StockTransaction, User
from ..services import inventory as inventory_service


def test_signed_quantity():
    assert inventory_service.signed_quantity("add", 5) == 5
    assert inventory_service.signed_quantity("subtract", 5) == -5
    assert inventory_service.signed_quantity("subtract", -5) == -5
    with pytest.raises(DomainError):
        inventory_service.signed_quantity("add", 0)
    with pytest.raises(DomainError):
        inventory_service.signed_quantity("multiply", 2)


@pytest.mark.parametrize("reason,expected", [
    ("purchase", "receipt"),
    ("damage", "wastage"),
    ("use", "issue"),
    ("correction", "adjustment"),
    ("other", "adjustment"),
    (None, "adjustment"),
])
def test_reason_maps_to_transaction_type(reason, expected):
    assert inventory_service.transaction_type_for(reason) == expected


def test_explicit_transaction_type_wins():
    assert inventory_service.transaction_type_for("purchase", "return") == "return"


class InventoryAPITests(APITestCase):
    def setUp(self) -> None:
        self.pharmacist = User.objects.create_user(username="pharmacy1", password="pass", role="pharmacy")
        self.client.force_authenticate(self.pharmacist)
        self.item = InventoryItem.objects.create(
            item_code="INV-000001", name="Paracetamol 500mg", category="Medication",
            unit="tablet", quantity=100, reorder_level=20, unit_price=Decimal("2.50"),
        )

    def adjust(self, adjustment_type, quantity, reason="use", **extra):
        body = {"itemId": self.item.id, "adjustmentType": adjustment_type, "quantity": quantity, "reason": reason}
        body.update(extra)
        return self.client.post(reverse("stock_transactions"), body, format="json")

    def test_add_and_subtract_update_quantity(self) -> None:
        resp = self.adjust("add", 50, reason="purchase")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["transactionNumber"], "TXN-000001")
        self.assertEqual(resp.data["transactionType"], "receipt")
        self.assertEqual(resp.data["quantity"], 50)
        self.assertEqual(resp.data["balanceAfter"], 150)
        self.assertEqual(resp.data["totalValue"], 125.0)

        resp = self.adjust("subtract", 30)
        self.assertEqual(resp.data["quantity"], -30)
        self.assertEqual(resp.data["transactionType"], "issue")
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 120)

    def test_cannot_go_below_zero(self) -> None:
        resp = self.adjust("subtract", 101)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.data["error"]["code"], "insufficient_stock")
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 100)
        self.assertFalse(StockTransaction.objects.exists())

    def test_quantity_must_be_positive(self) -> None:
        self.assertEqual(self.adjust("add", 0).status_code, 400)

    def test_delete_reverses_quantity(self) -> None:
        pk = self.adjust("subtract", 40).data["transactionId"]
        resp = self.client.delete(reverse("stock_transaction_detail", args=[pk]))
        self.assertEqual(resp.status_code, 200)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 100)
        self.assertFalse(StockTransaction.objects.filter(id=pk).exists())

    def test_reversal_that_would_go_negative_is_refused(self) -> None:
        added = self.adjust("add", 10, reason="purchase").data["transactionId"]
        self.adjust("subtract", 105)
        with self.assertRaises(InsufficientStock):
            inventory_service.reverse_stock_transaction(added)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 5)

    def test_update_only_touches_references(self) -> None:
        pk = self.adjust("add", 5, reason="purchase").data["transactionId"]
        resp = self.client.put(
            reverse("stock_transaction_detail", args=[pk]),
            {"referenceNumber": "PO-77", "notes": "late delivery", "quantity": 500},
            format="json",
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["referenceNumber"], "PO-77")
        self.assertEqual(resp.data["quantity"], 5)
        self.item.refresh_from_db()
        self.assertEqual(self.item.quantity, 105)

    def test_create_item_generates_code(self) -> None:
        resp = self.client.post(reverse("inventory"), {"name": "Gauze", "quantity": 10}, format="json")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["itemCode"], "INV-000002")
        self.assertEqual(resp.data["quantity"], 10)

    def test_low_stock_filter_and_summary(self) -> None:
        InventoryItem.objects.create(
            item_code="INV-000002", name="Syringe", category="Consumables", quantity=5, reorder_level=10,
            unit_price=Decimal("10.00"), expiry_date=timezone.localdate() + timedelta(days=10),
        )
        rows = self.client.get(reverse("inventory"), {"lowStock": "true"}).data
        self.assertEqual([r["name"] for r in rows], ["Syringe"])
        self.assertTrue(rows[0]["lowStock"])

        summary = self.client.get(reverse("inventory_summary")).data
        self.assertEqual(summary["totalItems"], 2)
        self.assertEqual(summary["totalValue"], 300.0)
        self.assertEqual(summary["lowStockItems"], 1)
        self.assertEqual(summary["expiringItems"], 1)
        self.assertEqual(summary["categories"], 2)

    def test_delete_item_deactivates(self) -> None:
        self.client.delete(reverse("inventory_detail", args=[self.item.id]))
        self.item.refresh_from_db()
        self.assertEqual(self.item.status, "Inactive")

    def test_transaction_filters_reject_malformed_values(self) -> None:
        self.adjust("add", 5, reason="purchase")
        url = reverse("stock_transactions")
        self.assertEqual(self.client.get(url, {"itemId": "x"}).status_code, 400)
        self.assertEqual(self.client.get(url, {"endDate": "2024-13-45"}).status_code, 400)
        self.assertEqual(len(self.client.get(url, {"itemId": self.item.id}).data), 1)
        today = timezone.localdate().isoformat()
        self.assertEqual(len(self.client.get(url, {"startDate": today, "endDate": today}).data), 1)
