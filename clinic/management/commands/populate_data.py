"""
Management command to populate the database with demo data.
"""
import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from clinic.models import Account, Bed, Department, InventoryItem, Patient, ServiceCharge, User, Vendor, Ward
from clinic.services import billing, patients, queue
from clinic.services.inventory import next_item_code


class Command(BaseCommand):
    help = 'Populate database with demo data'

    def add_arguments(self, parser):
        parser.add_argument('--patients', type=int, default=10, help='number of demo patients to register')

    def handle(self, *args, **options):
        self.stdout.write('Creating demo data...')

        with transaction.atomic():
            departments = self.create_departments()
            staff = self.create_staff(departments)
            self.create_charges()
            self.create_accounts()
            self.create_vendors()
            self.create_wards()
            self.create_inventory()
        self.create_patients(options['patients'], staff)

        self.stdout.write(self.style.SUCCESS('Demo data created!'))

    def create_departments(self):
        departments_data = [
            ('Outpatient', 'OPD', 'Block A'),
            ('Pharmacy', 'PHA', 'Block A'),
            ('Laboratory', 'LAB', 'Block B'),
            ('Radiology', 'RAD', 'Block B'),
            ('Maternity', 'MAT', 'Block C'),
            ('Finance', 'FIN', 'Admin Block'),
        ]
        departments = {}
        for name, code, location in departments_data:
            dept, created = Department.objects.get_or_create(
                name=name, defaults={'code': code, 'location': location}
            )
            departments[code] = dept
            if created:
                self.stdout.write(f'Created department: {name}')
        return departments

    def create_staff(self, departments):
        staff_data = [
            ('admin', 'admin', 'System', 'Admin', 'FIN', True),
            ('dr_otieno', 'doctor', 'James', 'Otieno', 'OPD', False),
            ('dr_wanjiku', 'doctor', 'Grace', 'Wanjiku', 'MAT', False),
            ('nurse_achieng', 'nurse', 'Mary', 'Achieng', 'OPD', False),
            ('lab_kamau', 'lab_technician', 'Peter', 'Kamau', 'LAB', False),
            ('reg_mutua', 'registration', 'Ann', 'Mutua', 'OPD', False),
            ('bill_njeri', 'billing', 'Lucy', 'Njeri', 'FIN', False),
            ('pharm_omondi', 'pharmacy', 'Brian', 'Omondi', 'PHA', False),
        ]
        staff = []
        for username, role, first, last, dept, is_super in staff_data:
            user, created = User.objects.get_or_create(
                username=username,
                defaults={
                    'role': role,
                    'first_name': first,
                    'last_name': last,
                    'department': departments[dept],
                    'password': make_password('123456'),
                    'is_staff': is_super,
                    'is_superuser': is_super,
                },
            )
            staff.append(user)
            if created:
                self.stdout.write(f'Created user: {username} ({role})')
        return staff

    def create_charges(self):
        billing.registration_fee_charge()
        charges_data = [
            ('CONS-GEN', 'General Consultation', 'Consultation', 'Outpatient', '500.00'),
            ('LAB-FBC', 'Full Blood Count', 'Laboratory', 'Laboratory', '800.00'),
            ('LAB-MAL', 'Malaria Test', 'Laboratory', 'Laboratory', '300.00'),
            ('RAD-XRAY', 'Chest X-Ray', 'Radiology', 'Radiology', '1500.00'),
            ('IP-BED', 'Inpatient Bed Day', 'Inpatient', 'Outpatient', '2000.00'),
        ]
        for code, name, category, department, cost in charges_data:
            ServiceCharge.objects.get_or_create(
                charge_code=code,
                defaults={'name': name, 'category': category, 'department': department, 'cost': Decimal(cost)},
            )

    def create_accounts(self):
        accounts_data = [
            ('1000', 'Cash on Hand', 'asset'),
            ('1010', 'Bank Account', 'asset'),
            ('1100', 'Accounts Receivable', 'asset'),
            ('2000', 'Accounts Payable', 'liability'),
            ('3000', 'Owner Equity', 'equity'),
            ('4000', 'Patient Service Revenue', 'revenue'),
            ('5000', 'Medical Supplies Expense', 'expense'),
            ('5100', 'Salaries Expense', 'expense'),
        ]
        for code, name, account_type in accounts_data:
            Account.objects.get_or_create(
                account_code=code, defaults={'account_name': name, 'account_type': account_type}
            )

    def create_vendors(self):
        vendors_data = [
            ('VEN-001', 'MedSupplies Ltd', 'John Kariuki'),
            ('VEN-002', 'PharmaCare Distributors', 'Esther Wambui'),
            ('VEN-003', 'LabTech Equipment', 'Samuel Kiprop'),
        ]
        for code, name, contact in vendors_data:
            Vendor.objects.get_or_create(vendor_code=code, defaults={'vendor_name': name, 'contact_person': contact})

    def create_wards(self):
        wards_data = [
            ('GW-A', 'General Ward A', 'general', 10, '2000.00'),
            ('MAT-1', 'Maternity Ward', 'maternity', 6, '2500.00'),
            ('ICU-1', 'Intensive Care Unit', 'icu', 4, '15000.00'),
        ]
        for code, name, ward_type, capacity, rate in wards_data:
            ward, created = Ward.objects.get_or_create(
                ward_code=code,
                defaults={'ward_name': name, 'ward_type': ward_type, 'capacity': capacity,
                          'daily_rate': Decimal(rate)},
            )
            if not created:
                continue
            Bed.objects.bulk_create([
                Bed(ward=ward, bed_number=f'{code}-{n:02d}', bed_type='icu' if ward_type == 'icu' else 'standard')
                for n in range(1, capacity + 1)
            ])
            self.stdout.write(f'Created ward: {name} with {capacity} beds')

    def create_inventory(self):
        today = timezone.localdate()
        items_data = [
            ('Paracetamol 500mg', 'Medication', 'tablet', 2000, 500, '2.00', 365),
            ('Amoxicillin 250mg', 'Medication', 'capsule', 800, 300, '5.50', 180),
            ('Surgical Gloves', 'Consumables', 'box', 40, 20, '650.00', None),
            ('Syringe 5ml', 'Consumables', 'piece', 150, 200, '12.00', 720),
            ('ORS Sachets', 'Medication', 'sachet', 60, 100, '15.00', 20),
        ]
        for name, category, unit, qty, reorder, price, shelf_days in items_data:
            if InventoryItem.objects.filter(name=name).exists():
                continue
            InventoryItem.objects.create(
                item_code=next_item_code(),
                name=name,
                category=category,
                unit=unit,
                quantity=qty,
                reorder_level=reorder,
                unit_price=Decimal(price),
                expiry_date=today + timedelta(days=shelf_days) if shelf_days else None,
                location='Main Store',
            )

    def create_patients(self, count, staff):
        first_names = ['Amina', 'Brian', 'Cynthia', 'David', 'Faith', 'George', 'Halima', 'Isaac', 'Joy', 'Kevin']
        last_names = ['Mwangi', 'Odhiambo', 'Kiptoo', 'Njoroge', 'Wekesa', 'Chebet', 'Mohamed', 'Atieno']
        clerk = next((u for u in staff if u.role == 'registration'), None)
        existing = Patient.objects.count()
        for n in range(count):
            data = {
                'firstName': random.choice(first_names),
                'lastName': random.choice(last_names),
                'gender': random.choice(['Male', 'Female']),
                'phone': f'07{random.randint(10000000, 99999999)}',
                'dateOfBirth': timezone.localdate() - timedelta(days=random.randint(365, 365 * 80)),
            }
            patient, follow_up = patients.register_patient(data, user=clerk)
            if n % 3 == 0:
                queue.enqueue(patient=patient, service_point='triage',
                              priority=random.choice(list(queue.PRIORITY_RANK)), user=clerk)
            self.stdout.write(f'Registered {patient.patient_number}: {follow_up}')
        self.stdout.write(f'Patients: {existing} -> {Patient.objects.count()}')
