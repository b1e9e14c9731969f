from datetime import timedelta
from decimal import Decimal
from io import StringIO

import pytest
from django.core.cache import cache
from django.core.management import call_command
from django.utils import timezone

from ..models import Bed, InventoryItem, Patient, Payable, QueueEntry, ServiceCharge, User, Vendor, Ward
from ..services import queue

pytestmark = pytest.mark.django_db


def run(name, *args):
    out = StringIO()
    call_command(name, *args, stdout=out)
    return out.getvalue()


def test_ensure_test_users_creates_one_login_per_role():
    output = run("ensure_test_users")
    assert "7 role accounts ready." in output
    admin = User.objects.get(username="admin1")
    assert admin.role == "admin"
    assert admin.is_staff
    assert admin.check_password("123456")
    assert set(User.objects.values_list("role", flat=True)) == {r for r, _ in User.ROLE_CHOICES}


def test_ensure_test_users_resets_existing_accounts():
    User.objects.create_user(username="billing1", password="other", role="nurse", is_active=False)
    output = run("ensure_test_users", "--password", "s3cret")
    assert "reset: billing1 (billing)" in output
    user = User.objects.get(username="billing1")
    assert user.role == "billing"
    assert user.is_active
    assert user.check_password("s3cret")


def test_populate_data_is_repeatable():
    run("populate_data", "--patients", "3")
    assert Ward.objects.count() == 3
    assert Bed.objects.filter(ward__ward_type="icu").count() == 4
    assert ServiceCharge.objects.filter(charge_code="REG-FEE").exists()
    assert InventoryItem.objects.get(name="Paracetamol 500mg").item_code.startswith("INV-")
    assert Patient.objects.count() == 3
    assert QueueEntry.objects.filter(service_point="triage").count() == 1

    run("populate_data", "--patients", "0")
    assert Ward.objects.count() == 3
    assert Bed.objects.count() == 20
    assert InventoryItem.objects.count() == 5


def test_refresh_caches_flags_overdue_and_warms_stats():
    vendor = Vendor.objects.create(vendor_code="VEN-9", vendor_name="Supplier")
    today = timezone.localdate()
    Payable.objects.create(
        vendor=vendor, invoice_number="INV-OLD", invoice_date=today - timedelta(days=60),
        due_date=today - timedelta(days=30), total_amount=Decimal("100"), outstanding_amount=Decimal("100"),
    )
    output = run("refresh_caches")
    assert "1 records now overdue" in output
    assert Payable.objects.get(invoice_number="INV-OLD").status == "overdue"
    assert cache.get(queue.STATS_KEY.format("all")) is not None
    assert cache.get(queue.STATS_KEY.format("triage")) is not None
