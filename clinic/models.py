"""
Database models for the HMIS backend.

These models capture the records the front-end works with: staff users,
departments, patients, the service queue, the general ledger, payables
and receivables, billing, cash, fixed assets, inventory and ward/bed
admissions.  Field names are snake_case here and converted to the
camelCase keys the front-end expects by the service formatters.
"""
from __future__ import annotations

from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Staff account with a role used by the permission classes."""
    ROLE_CHOICES = [
        ('admin', 'Administrator'),
        ('doctor', 'Doctor'),
        ('nurse', 'Nurse'),
        ('lab_technician', 'Lab Technician'),
        ('registration', 'Registration Clerk'),
        ('billing', 'Billing Officer'),
        ('pharmacy', 'Pharmacist'),
    ]
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='registration', db_index=True)
    department = models.ForeignKey(
        'Department', null=True, blank=True, on_delete=models.SET_NULL, related_name='staff'
    )

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Department(models.Model):
    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(max_length=20, blank=True)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255, blank=True)
    head = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='headed_departments'
    )
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name


class Patient(models.Model):
    GENDER_CHOICES = [
        ('Male', 'Male'),
        ('Female', 'Female'),
        ('Other', 'Other'),
    ]
    patient_number = models.CharField(max_length=20, unique=True)
    first_name = models.CharField(max_length=100)
    middle_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    phone_number = models.CharField(max_length=32, blank=True, db_index=True)
    email = models.EmailField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    county = models.CharField(max_length=100, blank=True)
    subcounty = models.CharField(max_length=100, blank=True)
    ward = models.CharField(max_length=100, blank=True)
    id_type = models.CharField(max_length=30, blank=True)
    id_number = models.CharField(max_length=50, blank=True)
    next_of_kin_name = models.CharField(max_length=200, blank=True)
    next_of_kin_phone = models.CharField(max_length=32, blank=True)
    next_of_kin_relationship = models.CharField(max_length=50, blank=True)
    blood_group = models.CharField(max_length=5, blank=True)
    allergies = models.TextField(blank=True)
    medical_history = models.TextField(blank=True)
    voided = models.BooleanField(default=False, db_index=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='registered_patients'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def full_name(self) -> str:
        return ' '.join(p for p in (self.first_name, self.middle_name, self.last_name) if p)

    def __str__(self) -> str:
        return f"{self.patient_number} {self.full_name}"


# ---------------------------------------------------------------------------
# Queue
# ---------------------------------------------------------------------------
class QueueEntry(models.Model):
    SERVICE_POINT_CHOICES = [
        ('triage', 'Triage'),
        ('consultation', 'Consultation'),
        ('pharmacy', 'Pharmacy'),
        ('laboratory', 'Laboratory'),
        ('radiology', 'Radiology'),
        ('billing', 'Billing'),
        ('cashier', 'Cashier'),
    ]
    PRIORITY_CHOICES = [
        ('normal', 'Normal'),
        ('urgent', 'Urgent'),
        ('emergency', 'Emergency'),
    ]
    STATUS_CHOICES = [
        ('waiting', 'Waiting'),
        ('called', 'Called'),
        ('serving', 'Serving'),
        ('completed', 'Completed'),
        ('no-show', 'No Show'),
        ('rescheduled', 'Rescheduled'),
        ('cancelled', 'Cancelled'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='queue_entries')
    ticket_number = models.CharField(max_length=20)
    service_point = models.CharField(max_length=20, choices=SERVICE_POINT_CHOICES, db_index=True)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='normal', db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='waiting', db_index=True)
    estimated_wait_minutes = models.PositiveIntegerField(null=True, blank=True)
    notes = models.TextField(blank=True)
    arrival_time = models.DateTimeField(db_index=True)
    called_time = models.DateTimeField(null=True, blank=True)
    start_time = models.DateTimeField(null=True, blank=True)
    end_time = models.DateTimeField(null=True, blank=True)
    archived = models.BooleanField(default=False, db_index=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='queue_entries'
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['service_point', 'status', 'arrival_time']),
        ]

    def __str__(self) -> str:
        return f"{self.ticket_number} ({self.status})"


class QueueTransition(models.Model):
    """Records a status transition for a queue entry."""
    entry = models.ForeignKey(QueueEntry, related_name='transitions', on_delete=models.CASCADE)
    from_status = models.CharField(max_length=20, null=True, blank=True)
    to_status = models.CharField(max_length=20)
    operator = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='queue_transitions'
    )
    timestamp = models.DateTimeField(auto_now_add=True)
    reason = models.CharField(max_length=255, blank=True)

    def __str__(self) -> str:
        return f"{self.entry_id}: {self.from_status} -> {self.to_status}"


# ---------------------------------------------------------------------------
# General ledger
# ---------------------------------------------------------------------------
class Account(models.Model):
    TYPE_CHOICES = [
        ('asset', 'Asset'),
        ('liability', 'Liability'),
        ('equity', 'Equity'),
        ('revenue', 'Revenue'),
        ('expense', 'Expense'),
    ]
    account_code = models.CharField(max_length=30, unique=True)
    account_name = models.CharField(max_length=255)
    account_type = models.CharField(max_length=20, choices=TYPE_CHOICES, db_index=True)
    parent = models.ForeignKey(
        'self', null=True, blank=True, on_delete=models.SET_NULL, related_name='children'
    )
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.account_code} {self.account_name}"


class Transaction(models.Model):
    """Double-entry journal line: one debit account, one credit account."""
    transaction_number = models.CharField(max_length=20, unique=True)
    transaction_date = models.DateField(db_index=True)
    description = models.CharField(max_length=255)
    reference_type = models.CharField(max_length=50, blank=True)
    reference_number = models.CharField(max_length=50, blank=True)
    debit_account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name='debit_transactions')
    credit_account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name='credit_transactions')
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    notes = models.TextField(blank=True)
    posted_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='ledger_transactions'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.transaction_number


# ---------------------------------------------------------------------------
# Payables / receivables / billing
# ---------------------------------------------------------------------------
class Vendor(models.Model):
    vendor_code = models.CharField(max_length=30, unique=True)
    vendor_name = models.CharField(max_length=255)
    contact_person = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    email = models.EmailField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.vendor_name


class Payable(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('partial', 'Partial'),
        ('paid', 'Paid'),
        ('overdue', 'Overdue'),
        ('cancelled', 'Cancelled'),
    ]
    vendor = models.ForeignKey(Vendor, on_delete=models.PROTECT, related_name='payables')
    invoice_number = models.CharField(max_length=50, unique=True)
    invoice_date = models.DateField(db_index=True)
    due_date = models.DateField(null=True, blank=True)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    outstanding_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    last_payment_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.invoice_number


class ServiceCharge(models.Model):
    STATUS_CHOICES = [
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
    ]
    charge_code = models.CharField(max_length=30, unique=True)
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True, db_index=True)
    department = models.CharField(max_length=100, blank=True)
    charge_type = models.CharField(max_length=50, default='Service')
    cost = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='Active', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.charge_code} {self.name}"


class Invoice(models.Model):
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('partial', 'Partial'),
        ('paid', 'Paid'),
        ('cancelled', 'Cancelled'),
    ]
    invoice_number = models.CharField(max_length=30, unique=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='invoices')
    invoice_date = models.DateField()
    due_date = models.DateField(null=True, blank=True)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='invoices'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.invoice_number


class InvoiceItem(models.Model):
    invoice = models.ForeignKey(Invoice, on_delete=models.CASCADE, related_name='items')
    charge = models.ForeignKey(ServiceCharge, null=True, blank=True, on_delete=models.SET_NULL)
    description = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=14, decimal_places=2)


class Receivable(models.Model):
    STATUS_CHOICES = [
        ('current', 'Current'),
        ('overdue', 'Overdue'),
        ('paid', 'Paid'),
        ('written_off', 'Written Off'),
    ]
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='receivables')
    invoice = models.OneToOneField(Invoice, on_delete=models.PROTECT, related_name='receivable')
    invoice_date = models.DateField(db_index=True)
    due_date = models.DateField(null=True, blank=True)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    outstanding_amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='current', db_index=True)
    last_payment_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"AR {self.invoice_id}"


# ---------------------------------------------------------------------------
# Cash office & fixed assets
# ---------------------------------------------------------------------------
class CashTransaction(models.Model):
    TYPE_CHOICES = [
        ('receipt', 'Receipt'),
        ('payment', 'Payment'),
        ('deposit', 'Deposit'),
        ('withdrawal', 'Withdrawal'),
    ]
    transaction_number = models.CharField(max_length=30, unique=True)
    transaction_date = models.DateField(db_index=True)
    transaction_type = models.CharField(max_length=20, choices=TYPE_CHOICES, db_index=True)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    reference_number = models.CharField(max_length=100, blank=True)
    reference_type = models.CharField(max_length=50, blank=True)
    account = models.ForeignKey(
        Account, null=True, blank=True, on_delete=models.SET_NULL, related_name='cash_transactions'
    )
    cash_register = models.CharField(max_length=50, blank=True)
    handled_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='cash_transactions'
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.transaction_number


class Asset(models.Model):
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('maintenance', 'Maintenance'),
        ('retired', 'Retired'),
        ('disposed', 'Disposed'),
    ]
    asset_code = models.CharField(max_length=30, unique=True)
    asset_name = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True, db_index=True)
    location = models.CharField(max_length=255, blank=True)
    department = models.ForeignKey(
        Department, null=True, blank=True, on_delete=models.SET_NULL, related_name='assets'
    )
    purchase_date = models.DateField(null=True, blank=True)
    purchase_cost = models.DecimalField(max_digits=14, decimal_places=2)
    current_value = models.DecimalField(max_digits=14, decimal_places=2)
    accumulated_depreciation = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0'))
    depreciation_method = models.CharField(max_length=30, default='straight_line')
    useful_life_years = models.PositiveIntegerField(null=True, blank=True)
    serial_number = models.CharField(max_length=100, blank=True)
    manufacturer = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active', db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.asset_code} {self.asset_name}"


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------
class InventoryItem(models.Model):
    STATUS_CHOICES = [
        ('Active', 'Active'),
        ('Inactive', 'Inactive'),
        ('Expired', 'Expired'),
    ]
    item_code = models.CharField(max_length=30, unique=True)
    name = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True, db_index=True)
    description = models.TextField(blank=True)
    unit = models.CharField(max_length=30, default='unit')
    quantity = models.IntegerField(default=0)
    reorder_level = models.IntegerField(default=0)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    supplier = models.CharField(max_length=255, blank=True)
    batch_number = models.CharField(max_length=100, blank=True)
    expiry_date = models.DateField(null=True, blank=True)
    location = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='Active', db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.item_code} {self.name}"


class StockTransaction(models.Model):
    TYPE_CHOICES = [
        ('receipt', 'Receipt'),
        ('issue', 'Issue'),
        ('adjustment', 'Adjustment'),
        ('transfer', 'Transfer'),
        ('return', 'Return'),
        ('wastage', 'Wastage'),
        ('expiry', 'Expiry'),
    ]
    transaction_number = models.CharField(max_length=20, unique=True)
    item = models.ForeignKey(InventoryItem, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=20, choices=TYPE_CHOICES, db_index=True)
    transaction_date = models.DateField(db_index=True)
    quantity = models.IntegerField(help_text="Signed change applied to the item quantity")
    unit_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    total_value = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    balance_after = models.IntegerField(default=0)
    reference_type = models.CharField(max_length=50, blank=True)
    reference_number = models.CharField(max_length=100, blank=True)
    reason = models.CharField(max_length=30, blank=True)
    notes = models.TextField(blank=True)
    performed_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='stock_transactions'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.transaction_number


# ---------------------------------------------------------------------------
# Wards, beds and admissions
# ---------------------------------------------------------------------------
class Ward(models.Model):
    TYPE_CHOICES = [
        ('general', 'General'),
        ('maternity', 'Maternity'),
        ('icu', 'ICU'),
        ('pediatric', 'Pediatric'),
        ('surgical', 'Surgical'),
        ('private', 'Private'),
    ]
    ward_code = models.CharField(max_length=20, unique=True)
    ward_name = models.CharField(max_length=255)
    ward_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='general', db_index=True)
    capacity = models.PositiveIntegerField(default=0)
    daily_rate = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.ward_name


class Bed(models.Model):
    STATUS_CHOICES = [
        ('available', 'Available'),
        ('occupied', 'Occupied'),
        ('maintenance', 'Maintenance'),
        ('reserved', 'Reserved'),
    ]
    ward = models.ForeignKey(Ward, on_delete=models.CASCADE, related_name='beds')
    bed_number = models.CharField(max_length=20)
    bed_type = models.CharField(max_length=30, default='standard')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='available', db_index=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        unique_together = [('ward', 'bed_number')]

    def __str__(self) -> str:
        return f"{self.ward.ward_code}-{self.bed_number}"


class Admission(models.Model):
    TYPE_CHOICES = [
        ('inpatient', 'Inpatient'),
        ('maternity', 'Maternity'),
        ('icu', 'ICU'),
    ]
    STATUS_CHOICES = [
        ('admitted', 'Admitted'),
        ('discharged', 'Discharged'),
        ('transferred', 'Transferred'),
        ('cancelled', 'Cancelled'),
    ]
    admission_number = models.CharField(max_length=20, unique=True)
    admission_type = models.CharField(max_length=20, choices=TYPE_CHOICES, db_index=True)
    patient = models.ForeignKey(Patient, on_delete=models.PROTECT, related_name='admissions')
    bed = models.ForeignKey(Bed, null=True, blank=True, on_delete=models.SET_NULL, related_name='admissions')
    admitting_doctor = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='admissions'
    )
    admission_date = models.DateTimeField()
    expected_discharge_date = models.DateField(null=True, blank=True)
    discharge_date = models.DateTimeField(null=True, blank=True)
    admission_diagnosis = models.CharField(max_length=255, blank=True)
    admission_reason = models.TextField(blank=True)
    initial_condition = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='admitted', db_index=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.admission_number


class AdmissionDiagnosis(models.Model):
    admission = models.ForeignKey(Admission, on_delete=models.CASCADE, related_name='diagnoses')
    diagnosis_code = models.CharField(max_length=30, blank=True)
    diagnosis_description = models.CharField(max_length=255)
    diagnosis_type = models.CharField(max_length=20, default='primary')


class MaternityDetail(models.Model):
    admission = models.OneToOneField(Admission, on_delete=models.CASCADE, related_name='maternity')
    gestation_weeks = models.PositiveIntegerField(null=True, blank=True)
    expected_delivery_date = models.DateField(null=True, blank=True)
    pregnancy_number = models.PositiveIntegerField(null=True, blank=True)
    previous_pregnancies = models.PositiveIntegerField(default=0)
    previous_deliveries = models.PositiveIntegerField(default=0)
    previous_complications = models.TextField(blank=True)
    blood_group = models.CharField(max_length=5, blank=True)
    rhesus_factor = models.CharField(max_length=10, blank=True)
    delivered = models.BooleanField(default=False)


class Delivery(models.Model):
    admission = models.ForeignKey(Admission, on_delete=models.CASCADE, related_name='deliveries')
    delivery_date = models.DateTimeField()
    delivery_type = models.CharField(max_length=30, default='normal')
    delivery_mode = models.CharField(max_length=50, blank=True)
    complications = models.TextField(blank=True)
    maternal_outcome = models.CharField(max_length=50, default='good')
    assisted_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='deliveries'
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"Delivery {self.id} for {self.admission_id}"


class Newborn(models.Model):
    delivery = models.ForeignKey(Delivery, on_delete=models.CASCADE, related_name='newborns')
    gender = models.CharField(max_length=10)
    birth_weight = models.DecimalField(max_digits=5, decimal_places=2, help_text="kg")
    apgar_score_1min = models.PositiveIntegerField(null=True, blank=True)
    apgar_score_5min = models.PositiveIntegerField(null=True, blank=True)
    health_status = models.CharField(max_length=30, default='healthy')
    notes = models.TextField(blank=True)


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------
class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['object_type', 'object_id', 'created_at']),
        ]
