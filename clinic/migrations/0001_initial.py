import uuid

import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models

import clinic.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(
                    default=False,
                    help_text='Designates that this user has all permissions without explicitly assigning them.',
                    verbose_name='superuser status')),
                ('username', models.CharField(
                    error_messages={'unique': 'A user with that username already exists.'},
                    help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.',
                    max_length=150, unique=True,
                    validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                    verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(
                    default=False,
                    help_text='Designates whether the user can log into this admin site.',
                    verbose_name='staff status')),
                ('is_active', models.BooleanField(
                    default=True,
                    help_text='Designates whether this user should be treated as active. '
                              'Unselect this instead of deleting accounts.',
                    verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('role', models.CharField(
                    choices=[('admin', 'Administrator'), ('patient', 'Patient'), ('provider', 'Provider')],
                    db_index=True, default='patient', max_length=10)),
                ('groups', models.ManyToManyField(
                    blank=True,
                    help_text='The groups this user belongs to. A user will get all permissions granted to each of '
                              'their groups.',
                    related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(
                    blank=True, help_text='Specific permissions for this user.', related_name='user_set',
                    related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'abstract': False,
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('full_name', models.CharField(blank=True, max_length=255)),
                ('phone', models.CharField(blank=True, max_length=32)),
                ('contact_number', models.CharField(blank=True, max_length=32)),
                ('address', models.TextField(blank=True)),
                ('birthday', models.DateField(blank=True, null=True)),
                ('sex', models.CharField(blank=True, max_length=16)),
                ('avatar', models.FileField(blank=True, max_length=512, upload_to=clinic.models._avatar_upload)),
                ('sms_opt_out', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE, related_name='profile',
                    to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name='InventoryItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('stock', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('low_stock_threshold', models.IntegerField(default=10)),
                ('doses_per_vial', models.PositiveIntegerField(default=1)),
                ('expiration_date', models.DateField(blank=True, null=True)),
                ('status', models.CharField(
                    choices=[('active', 'active'), ('inactive', 'inactive')],
                    db_index=True, default='active', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('full_name', models.CharField(max_length=255)),
                ('address', models.TextField(blank=True, null=True)),
                ('birthday', models.DateField(blank=True, null=True)),
                ('age', models.IntegerField(blank=True, null=True)),
                ('sex', models.CharField(blank=True, max_length=16, null=True)),
                ('civil_status', models.CharField(blank=True, max_length=16, null=True)),
                ('contact_number', models.CharField(max_length=32)),
                ('date_of_bite', models.DateField(blank=True, null=True)),
                ('bite_address', models.TextField(blank=True, null=True)),
                ('time_of_bite', models.TimeField(blank=True, null=True)),
                ('category', models.CharField(
                    blank=True, choices=[('I', 'I'), ('II', 'II'), ('III', 'III')], max_length=3, null=True)),
                ('animal', models.CharField(
                    blank=True,
                    choices=[('dog', 'dog'), ('cat', 'cat'), ('venomous_snake', 'venomous_snake'),
                             ('other', 'other')],
                    max_length=16, null=True)),
                ('animal_other', models.CharField(blank=True, max_length=255, null=True)),
                ('ownership', models.JSONField(blank=True, default=list)),
                ('animal_state', models.CharField(
                    blank=True,
                    choices=[('healthy', 'healthy'), ('sick', 'sick'), ('died', 'died'), ('killed', 'killed'),
                             ('unknown', 'unknown')],
                    max_length=10, null=True)),
                ('animal_vaccinated_12mo', models.BooleanField(blank=True, null=True)),
                ('vaccinated_by', models.CharField(
                    blank=True, choices=[('barangay', 'barangay'), ('doh', 'doh'), ('other', 'other')],
                    max_length=10, null=True)),
                ('vaccinated_by_other', models.CharField(blank=True, max_length=255, null=True)),
                ('wound_washed', models.BooleanField(blank=True, null=True)),
                ('wound_antiseptic', models.BooleanField(blank=True, null=True)),
                ('wound_herbal', models.TextField(blank=True, null=True)),
                ('wound_antibiotics', models.TextField(blank=True, null=True)),
                ('wound_other', models.TextField(blank=True, null=True)),
                ('allergies_food', models.BooleanField(blank=True, null=True)),
                ('allergies_drugs', models.BooleanField(blank=True, null=True)),
                ('allergies_other', models.TextField(blank=True, null=True)),
                ('site_of_bite', models.TextField(blank=True, null=True)),
                ('status', models.CharField(
                    choices=[('submitted', 'submitted'), ('pending', 'pending'), ('settled', 'settled'),
                             ('cancelled', 'cancelled')],
                    db_index=True, default='submitted', max_length=10)),
                ('settled_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('processed_by', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='processed_appointments', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='appointments',
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['user', 'created_at'], name='appt_user_created_idx'),
                    models.Index(fields=['status', 'created_at'], name='appt_status_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Vaccination',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('dose_number', models.PositiveSmallIntegerField()),
                ('status', models.CharField(
                    choices=[('scheduled', 'scheduled'), ('completed', 'completed'), ('cancelled', 'cancelled')],
                    db_index=True, default='scheduled', max_length=10)),
                ('administered_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('admin_user', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='administered_vaccinations', to=settings.AUTH_USER_MODEL)),
                ('appointment', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='vaccinations', to='clinic.appointment')),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='vaccinations',
                    to=settings.AUTH_USER_MODEL)),
                ('vaccine_item', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='vaccinations', to='clinic.inventoryitem')),
            ],
            options={
                'indexes': [models.Index(fields=['patient', 'status'], name='vacc_patient_status_idx')],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('dose_number__gte', 1), ('dose_number__lte', 3)),
                        name='vaccination_dose_number_1_to_3',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Message',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('content', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('recipient', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='received_messages',
                    to=settings.AUTH_USER_MODEL)),
                ('sender', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='sent_messages',
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['sender', 'recipient', 'created_at'], name='msg_pair_created_idx'),
                    models.Index(fields=['recipient', 'read_at'], name='msg_recipient_read_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(
                    choices=[('appointment_update', 'appointment_update'),
                             ('vaccination_update', 'vaccination_update'), ('message', 'message')],
                    max_length=24)),
                ('payload', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='notifications',
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [models.Index(fields=['user', 'read_at'], name='notif_user_read_idx')],
            },
        ),
        migrations.CreateModel(
            name='PhoneVerification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('phone', models.CharField(max_length=32)),
                ('code', models.CharField(max_length=6)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('expires_at', models.DateTimeField()),
                ('consumed_at', models.DateTimeField(blank=True, null=True)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='phone_verifications',
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [models.Index(fields=['user', 'phone', 'code'], name='otp_user_phone_code_idx')],
            },
        ),
        migrations.CreateModel(
            name='SmsDispatch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('to', models.CharField(max_length=32)),
                ('body', models.TextField()),
                ('provider', models.CharField(max_length=16)),
                ('provider_message_id', models.CharField(blank=True, db_index=True, max_length=64)),
                ('status', models.CharField(default='sent', max_length=24)),
                ('error', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='AuditEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(max_length=64)),
                ('object_type', models.CharField(blank=True, max_length=64, null=True)),
                ('object_id', models.CharField(blank=True, max_length=64, null=True)),
                ('detail', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='audit_action_created_idx'),
                    models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_created_idx'),
                ],
            },
        ),
    ]
