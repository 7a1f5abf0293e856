"""
Management command to populate the database with demo data.
"""
from datetime import date, time, timedelta
from decimal import Decimal
import random

from django.contrib.auth.hashers import make_password
from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.models import (
    User, Profile, InventoryItem, Appointment, Vaccination, Message, Notification
)
from clinic.serializers.appointments import CATEGORY_CHOICES, CIVIL_STATUS_CHOICES, SEX_CHOICES, compute_age


class Command(BaseCommand):
    help = 'Populate database with demo data'

    def add_arguments(self, parser):
        parser.add_argument('--patients', type=int, default=8)
        parser.add_argument('--seed', type=int, default=None)

    def handle(self, *args, **options):
        if options['seed'] is not None:
            random.seed(options['seed'])
        self.stdout.write('Creating demo data...')

        admin = self.create_admin()
        items = self.create_inventory()
        patients = self.create_patients(options['patients'])
        appointments = self.create_appointments(patients, admin)
        self.create_vaccinations(appointments, items, admin)
        self.create_messages(patients, admin)

        self.stdout.write(self.style.SUCCESS('Demo data created.'))

    def create_admin(self):
        admin, _ = User.objects.get_or_create(
            username='admin@wecare.test',
            defaults={'email': 'admin@wecare.test', 'role': User.ROLE_ADMIN, 'password': make_password('wecare123')},
        )
        Profile.objects.get_or_create(user=admin, defaults={'full_name': 'Clinic Admin'})
        return admin

    def create_inventory(self):
        today = date.today()
        rows = [
            ('Verorab 0.5ml', 'Purified Vero cell rabies vaccine', Decimal('40'), 10, 1, today + timedelta(days=300)),
            ('Speeda 0.5ml', 'Rabies vaccine, Vero cell', Decimal('6'), 10, 1, today + timedelta(days=20)),
            ('Abhayrab 2.5ml', 'Multi-dose rabies vaccine', Decimal('12.50'), 5, 5, today + timedelta(days=180)),
            ('Equine RIG', 'Equine rabies immunoglobulin', Decimal('3'), 5, 1, today - timedelta(days=2)),
            ('Tetanus toxoid', 'TT booster', Decimal('25'), 10, 1, None),
        ]
        items = []
        for name, description, stock, threshold, per_vial, expires in rows:
            item, _ = InventoryItem.objects.get_or_create(
                name=name,
                defaults={
                    'description': description,
                    'stock': stock,
                    'low_stock_threshold': threshold,
                    'doses_per_vial': per_vial,
                    'expiration_date': expires,
                },
            )
            items.append(item)
        self.stdout.write(f'  inventory: {len(items)} items')
        return items

    def create_patients(self, count):
        first = ['Juan', 'Maria', 'Jose', 'Ana', 'Mark', 'Grace', 'Paolo', 'Liza', 'Carlo', 'Rina']
        last = ['Santos', 'Reyes', 'Cruz', 'Bautista', 'Garcia', 'Mendoza', 'Torres', 'Flores']
        patients = []
        for i in range(1, count + 1):
            email = f'patient{i}@wecare.test'
            user, created = User.objects.get_or_create(
                username=email,
                defaults={'email': email, 'role': User.ROLE_PATIENT, 'password': make_password('wecare123')},
            )
            if created:
                Profile.objects.create(
                    user=user,
                    full_name=f'{random.choice(first)} {random.choice(last)}',
                    contact_number=f'+63917{random.randint(1000000, 9999999)}',
                    address=f'Barangay {random.randint(1, 40)}, Quezon City',
                    birthday=date(random.randint(1960, 2015), random.randint(1, 12), random.randint(1, 28)),
                    sex=random.choice(SEX_CHOICES[:2]),
                )
            patients.append(user)
        self.stdout.write(f'  patients: {len(patients)}')
        return patients

    def create_appointments(self, patients, admin):
        appointments = []
        statuses = [Appointment.STATUS_SUBMITTED, Appointment.STATUS_PENDING, Appointment.STATUS_SETTLED,
                    Appointment.STATUS_SETTLED, Appointment.STATUS_CANCELLED]
        for patient in patients:
            profile = patient.profile
            status = random.choice(statuses)
            bite_day = date.today() - timedelta(days=random.randint(0, 14))
            appt = Appointment.objects.create(
                user=patient,
                full_name=profile.full_name,
                address=profile.address,
                birthday=profile.birthday,
                age=compute_age(profile.birthday) if profile.birthday else None,
                sex=profile.sex,
                civil_status=random.choice(CIVIL_STATUS_CHOICES),
                contact_number=profile.contact_number,
                date_of_bite=bite_day,
                bite_address=profile.address,
                time_of_bite=time(random.randint(6, 21), random.choice([0, 15, 30, 45])),
                category=random.choice(CATEGORY_CHOICES),
                animal=random.choice(['dog', 'cat']),
                ownership=[random.choice(['owned', 'stray'])],
                animal_state=random.choice(['healthy', 'unknown']),
                animal_vaccinated_12mo=random.choice([True, False]),
                wound_washed=True,
                wound_antiseptic=random.choice([True, False]),
                allergies_food=False,
                allergies_drugs=False,
                site_of_bite=random.choice(['left leg', 'right hand', 'ankle']),
                status=status,
                processed_by=admin if status != Appointment.STATUS_SUBMITTED else None,
                settled_at=timezone.now() if status == Appointment.STATUS_SETTLED else None,
            )
            Notification.objects.create(user=admin, type=Notification.TYPE_APPOINTMENT, payload={
                'appointment_id': str(appt.id), 'status': Appointment.STATUS_SUBMITTED, 'full_name': appt.full_name,
            })
            appointments.append(appt)
        self.stdout.write(f'  appointments: {len(appointments)}')
        return appointments

    def create_vaccinations(self, appointments, items, admin):
        usable = [i for i in items if i.status == InventoryItem.STATUS_ACTIVE]
        count = 0
        for appt in appointments:
            if appt.status != Appointment.STATUS_SETTLED:
                continue
            item = random.choice(usable)
            for dose in range(1, random.randint(1, Vaccination.MAX_DOSES) + 1):
                Vaccination.objects.create(
                    patient=appt.user,
                    appointment=appt,
                    vaccine_item=item,
                    dose_number=dose,
                    status=Vaccination.STATUS_COMPLETED,
                    administered_at=timezone.now() - timedelta(days=(3 - dose) * 7),
                    admin_user=admin,
                )
                count += 1
        self.stdout.write(f'  vaccinations: {count}')

    def create_messages(self, patients, admin):
        count = 0
        for patient in patients[:3]:
            Message.objects.create(sender=patient, recipient=admin,
                                   content='Good day, what should I bring for my next dose?')
            Message.objects.create(sender=admin, recipient=patient,
                                   content='Please bring your vaccination card and a valid ID.')
            count += 2
        self.stdout.write(f'  messages: {count}')
