"""
Django admin registrations for the clinic models.

Superusers can inspect and correct records at ``/admin/``.  Only light
configuration is applied: list columns, filters and search.
"""
from django.contrib import admin

from .models import (
    Account,
    Admission,
    Asset,
    AuditEvent,
    Bed,
    CashTransaction,
    Department,
    Delivery,
    InventoryItem,
    Invoice,
    InvoiceItem,
    Patient,
    Payable,
    QueueEntry,
    QueueTransition,
    Receivable,
    ServiceCharge,
    StockTransaction,
    Transaction,
    User,
    Vendor,
    Ward,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'department', 'is_staff', 'is_superuser')
    list_filter = ('role', 'department')
    search_fields = ('username', 'first_name', 'last_name', 'email')


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('name', 'code', 'location', 'head', 'is_active')
    search_fields = ('name', 'code')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('patient_number', 'first_name', 'last_name', 'gender', 'phone_number', 'voided')
    list_filter = ('gender', 'voided')
    search_fields = ('patient_number', 'first_name', 'last_name', 'phone_number', 'id_number')


class QueueTransitionInline(admin.TabularInline):
    model = QueueTransition
    extra = 0
    readonly_fields = ('from_status', 'to_status', 'operator', 'timestamp', 'reason')


@admin.register(QueueEntry)
class QueueEntryAdmin(admin.ModelAdmin):
    list_display = ('ticket_number', 'patient', 'service_point', 'priority', 'status', 'arrival_time', 'archived')
    list_filter = ('service_point', 'status', 'priority', 'archived')
    search_fields = ('ticket_number', 'patient__patient_number', 'patient__last_name')
    inlines = [QueueTransitionInline]


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ('account_code', 'account_name', 'account_type', 'is_active')
    list_filter = ('account_type', 'is_active')
    search_fields = ('account_code', 'account_name')


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ('transaction_number', 'transaction_date', 'debit_account', 'credit_account', 'amount')
    search_fields = ('transaction_number', 'description', 'reference_number')


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ('vendor_code', 'vendor_name', 'contact_person', 'is_active')
    search_fields = ('vendor_code', 'vendor_name')


@admin.register(Payable)
class PayableAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'vendor', 'invoice_date', 'due_date', 'total_amount',
                    'outstanding_amount', 'status')
    list_filter = ('status',)
    search_fields = ('invoice_number', 'vendor__vendor_name')


@admin.register(Receivable)
class ReceivableAdmin(admin.ModelAdmin):
    list_display = ('invoice', 'patient', 'due_date', 'total_amount', 'outstanding_amount', 'status')
    list_filter = ('status',)


@admin.register(ServiceCharge)
class ServiceChargeAdmin(admin.ModelAdmin):
    list_display = ('charge_code', 'name', 'category', 'cost', 'status')
    list_filter = ('status', 'category')
    search_fields = ('charge_code', 'name')


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'patient', 'invoice_date', 'total_amount', 'balance', 'status')
    list_filter = ('status',)
    search_fields = ('invoice_number', 'patient__patient_number')
    inlines = [InvoiceItemInline]


@admin.register(CashTransaction)
class CashTransactionAdmin(admin.ModelAdmin):
    list_display = ('transaction_number', 'transaction_date', 'transaction_type', 'amount', 'handled_by')
    list_filter = ('transaction_type',)


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    list_display = ('asset_code', 'asset_name', 'category', 'purchase_cost', 'current_value', 'status')
    list_filter = ('status', 'category')
    search_fields = ('asset_code', 'asset_name', 'serial_number')


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ('item_code', 'name', 'category', 'quantity', 'reorder_level', 'status')
    list_filter = ('status', 'category')
    search_fields = ('item_code', 'name')


@admin.register(StockTransaction)
class StockTransactionAdmin(admin.ModelAdmin):
    list_display = ('transaction_number', 'item', 'transaction_type', 'quantity', 'balance_after')
    list_filter = ('transaction_type',)


@admin.register(Ward)
class WardAdmin(admin.ModelAdmin):
    list_display = ('ward_code', 'ward_name', 'ward_type', 'capacity', 'is_active')
    list_filter = ('ward_type',)


@admin.register(Bed)
class BedAdmin(admin.ModelAdmin):
    list_display = ('ward', 'bed_number', 'bed_type', 'status', 'is_active')
    list_filter = ('status', 'ward')


@admin.register(Admission)
class AdmissionAdmin(admin.ModelAdmin):
    list_display = ('admission_number', 'admission_type', 'patient', 'bed', 'admission_date', 'status')
    list_filter = ('admission_type', 'status')
    search_fields = ('admission_number', 'patient__patient_number')


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ('admission', 'delivery_date', 'delivery_type', 'maternal_outcome')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'user', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
