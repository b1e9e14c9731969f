"""
URL mappings for the HMIS API.

Paths mirror those the web front-end calls in ``lib/api.ts``.  Trailing
slashes are deliberately omitted (``APPEND_SLASH`` is off).
"""
from django.urls import path

from .views import admissions, assets, billing, cash, health, inventory, ledger, patients, payables
from .views import queue, receivables, theme
from .views.auth import jwt_refresh_view, login_view, logout_view, me_view

ADMISSION_KINDS = ('inpatient', 'maternity', 'icu')

urlpatterns = [
    path('healthz', health.healthz, name='healthz'),
    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),
    path('api/auth/logout', logout_view, name='logout_view'),
    path('api/auth/me', me_view, name='me_view'),
    # Patients & departments
    path('api/patients', patients.patients, name='patients'),
    path('api/patients/<int:pk>', patients.patient_detail, name='patient_detail'),
    path('api/patients/<int:pk>/invoices', patients.patient_invoices, name='patient_invoices'),
    path('api/departments', patients.departments, name='departments'),
    path('api/departments/<int:pk>', patients.department_detail, name='department_detail'),
    # Queue
    path('api/queue', queue.queue_entries, name='queue'),
    path('api/queue/stats', queue.queue_stats, name='queue_stats'),
    path('api/queue/history', queue.queue_history, name='queue_history'),
    path('api/queue/call-next', queue.queue_call_next, name='queue_call_next'),
    path('api/queue/archive-completed', queue.queue_archive_completed, name='queue_archive_completed'),
    path('api/queue/<int:pk>', queue.queue_entry_detail, name='queue_detail'),
    path('api/queue/<int:pk>/status', queue.queue_entry_status, name='queue_status'),
    path('api/queue/<int:pk>/archive', queue.queue_entry_archive, name='queue_archive'),
    # General ledger
    path('api/ledger/accounts', ledger.accounts, name='ledger_accounts'),
    path('api/ledger/accounts/<int:pk>', ledger.account_detail, name='ledger_account_detail'),
    path('api/ledger/transactions', ledger.transactions, name='ledger_transactions'),
    path('api/ledger/transactions/<int:pk>', ledger.transaction_detail, name='ledger_transaction_detail'),
    # Payables & receivables
    path('api/vendors', payables.vendors, name='vendors'),
    path('api/payables', payables.payables, name='payables'),
    path('api/payables/stats/summary', payables.payable_stats, name='payable_stats'),
    path('api/payables/<int:pk>', payables.payable_detail, name='payable_detail'),
    path('api/payables/<int:pk>/payment', payables.payable_payment, name='payable_payment'),
    path('api/receivables', receivables.receivables, name='receivables'),
    path('api/receivables/stats/summary', receivables.receivable_stats, name='receivable_stats'),
    path('api/receivables/<int:pk>', receivables.receivable_detail, name='receivable_detail'),
    path('api/receivables/<int:pk>/payment', receivables.receivable_payment, name='receivable_payment'),
    # Billing
    path('api/billing/charges', billing.charges, name='charges'),
    path('api/billing/charges/<int:pk>', billing.charge_detail, name='charge_detail'),
    path('api/billing/invoices', billing.invoices, name='invoices'),
    path('api/billing/invoices/<int:pk>', billing.invoice_detail, name='invoice_detail'),
    # Cash office
    path('api/cash/transactions', cash.cash_transactions, name='cash_transactions'),
    path('api/cash/transactions/<int:pk>', cash.cash_transaction_detail, name='cash_transaction_detail'),
    path('api/cash/accounts', cash.cash_accounts, name='cash_accounts'),
    path('api/cash/stats/summary', cash.cash_stats, name='cash_stats'),
    # Fixed assets
    path('api/assets', assets.assets, name='assets'),
    path('api/assets/stats/summary', assets.asset_stats, name='asset_stats'),
    path('api/assets/<int:pk>', assets.asset_detail, name='asset_detail'),
    # Inventory
    path('api/inventory', inventory.items, name='inventory'),
    path('api/inventory/summary', inventory.items_summary, name='inventory_summary'),
    path('api/inventory/<int:pk>', inventory.item_detail, name='inventory_detail'),
    path('api/inventory/transactions', inventory.stock_transactions, name='stock_transactions'),
    path('api/inventory/transactions/<int:pk>', inventory.stock_transaction_detail,
         name='stock_transaction_detail'),
    # Wards and beds
    path('api/inpatient/wards', admissions.wards, name='wards'),
    path('api/inpatient/wards/<int:pk>', admissions.ward_detail, name='ward_detail'),
    path('api/inpatient/beds', admissions.beds, name='beds'),
    path('api/inpatient/beds/<int:pk>', admissions.bed_detail, name='bed_detail'),
    path('api/icu/beds', admissions.beds, {'icu_only': True}, name='icu_beds'),
    path('api/icu/beds/<int:pk>', admissions.bed_detail, {'icu_only': True}, name='icu_bed_detail'),
    # Maternity deliveries
    path('api/maternity/deliveries', admissions.deliveries, name='deliveries'),
    path('api/maternity/deliveries/<int:pk>', admissions.delivery_detail, name='delivery_detail'),
    # Theme
    path('api/theme/contrast', theme.contrast, name='theme_contrast'),
    path('api/theme/palettes', theme.palettes, name='theme_palettes'),
]

# Admissions: /api/<kind>/admissions for inpatient, maternity and ICU
for kind in ADMISSION_KINDS:
    urlpatterns += [
        path(f'api/{kind}/admissions', admissions.admissions, {'kind': kind}, name=f'{kind}_admissions'),
        path(f'api/{kind}/admissions/<int:pk>', admissions.admission_detail, {'kind': kind},
             name=f'{kind}_admission_detail'),
        path(f'api/{kind}/admissions/<int:pk>/discharge', admissions.admission_discharge, {'kind': kind},
             name=f'{kind}_admission_discharge'),
    ]
