from decimal import Decimal

import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


def money(**kwargs):
    return models.DecimalField(max_digits=12, decimal_places=2, **kwargs)


CIGARETTE_TYPE_CHOICES = [('none', 'None'), ('half_pack', 'Half pack'), ('full_pack', 'Full pack')]


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
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('full_name', models.CharField(blank=True, max_length=255)),
                ('role', models.CharField(choices=[('admin', 'Administrator'), ('doctor', 'Doctor'), ('nurse', 'Nurse'), ('receptionist', 'Receptionist'), ('accountant', 'Accountant')], db_index=True, default='receptionist', max_length=20)),
                ('permissions', models.JSONField(blank=True, default=list)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
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
            name='Patient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('national_id', models.CharField(max_length=32, unique=True)),
                ('admission_date', models.DateField()),
                ('discharge_date', models.DateField(blank=True, null=True)),
                ('room_number', models.CharField(blank=True, max_length=20)),
                ('insurance', models.CharField(choices=[('none', 'None'), ('government', 'Government'), ('private', 'Private'), ('company', 'Company')], default='none', max_length=20)),
                ('patient_type', models.CharField(choices=[('detox', 'Detox'), ('recovery', 'Recovery')], db_index=True, default='detox', max_length=20)),
                ('daily_cost', money(validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('daily_cigarette_type', models.CharField(choices=CIGARETTE_TYPE_CHOICES, default='none', max_length=20)),
                ('daily_cigarette_cost', money(default=Decimal('0'))),
                ('status', models.CharField(choices=[('active', 'Active'), ('discharged', 'Discharged')], db_index=True, default='active', max_length=20)),
                ('total_paid', money(default=Decimal('0'))),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('patient_id', models.BigIntegerField(db_index=True)),
                ('amount', money()),
                ('payment_date', models.DateField(db_index=True)),
                ('payment_method', models.CharField(choices=[('cash', 'Cash'), ('card', 'Card'), ('transfer', 'Transfer'), ('check', 'Check')], default='cash', max_length=20)),
                ('notes', models.TextField(blank=True)),
                ('created_by', models.CharField(blank=True, max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'indexes': [models.Index(fields=['patient_id', 'payment_date'], name='payment_patient_date_idx')],
            },
        ),
        migrations.CreateModel(
            name='Staff',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('role', models.CharField(max_length=100)),
                ('department', models.CharField(max_length=100)),
                ('monthly_salary', money(validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('hire_date', models.DateField()),
                ('phone_number', models.CharField(blank=True, max_length=32)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('daily_cigarette_type', models.CharField(choices=CIGARETTE_TYPE_CHOICES, default='none', max_length=20)),
                ('daily_cigarette_cost', money(default=Decimal('0'))),
                ('is_active', models.BooleanField(db_index=True, default=True)),
            ],
            options={
                'verbose_name_plural': 'staff',
            },
        ),
        migrations.CreateModel(
            name='Payroll',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('staff_id', models.BigIntegerField(db_index=True)),
                ('month', models.CharField(help_text='YYYY-MM', max_length=7)),
                ('base_salary', money(default=Decimal('0'))),
                ('bonuses', money(default=Decimal('0'))),
                ('advances', money(default=Decimal('0'))),
                ('deductions', money(default=Decimal('0'))),
                ('net_salary', money(default=Decimal('0'))),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('cancelled', 'Cancelled')], default='pending', max_length=20)),
                ('paid_date', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_by', models.CharField(blank=True, max_length=150)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'unique_together': {('staff_id', 'month')},
            },
        ),
        migrations.CreateModel(
            name='Bonus',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('staff_id', models.BigIntegerField(db_index=True)),
                ('amount', money()),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('type', models.CharField(choices=[('performance', 'Performance'), ('holiday', 'Holiday'), ('overtime', 'Overtime'), ('special', 'Special'), ('other', 'Other')], default='performance', max_length=20)),
                ('date', models.DateField()),
                ('notes', models.TextField(blank=True)),
            ],
            options={
                'verbose_name_plural': 'bonuses',
            },
        ),
        migrations.CreateModel(
            name='Advance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('staff_id', models.BigIntegerField(db_index=True)),
                ('amount', money()),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('repayment_months', models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(24)])),
                ('monthly_deduction', money(default=Decimal('0'))),
                ('remaining_amount', money(default=Decimal('0'))),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('request_date', models.DateField()),
                ('approved_by', models.CharField(blank=True, max_length=150)),
                ('notes', models.TextField(blank=True)),
            ],
        ),
        migrations.CreateModel(
            name='Deduction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('staff_id', models.BigIntegerField(db_index=True)),
                ('amount', money()),
                ('reason', models.CharField(blank=True, max_length=255)),
                ('type', models.CharField(choices=[('absence', 'Absence'), ('late', 'Late'), ('penalty', 'Penalty'), ('insurance', 'Insurance'), ('tax', 'Tax'), ('loan_repayment', 'Loan repayment'), ('other', 'Other')], default='penalty', max_length=20)),
                ('date', models.DateField()),
                ('notes', models.TextField(blank=True)),
            ],
        ),
        migrations.CreateModel(
            name='Graduate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('daily_cigarette_type', models.CharField(choices=CIGARETTE_TYPE_CHOICES, default='none', max_length=20)),
                ('daily_cigarette_cost', money(default=Decimal('0'))),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('notes', models.TextField(blank=True)),
            ],
        ),
        migrations.CreateModel(
            name='Expense',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.CharField(max_length=255)),
                ('amount', money()),
                ('category', models.CharField(db_index=True, max_length=100)),
                ('date', models.DateField(db_index=True)),
                ('created_by', models.CharField(blank=True, max_length=150)),
            ],
        ),
        migrations.CreateModel(
            name='CigarettePayment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('person_type', models.CharField(choices=[('patient', 'Patient'), ('graduate', 'Graduate'), ('staff', 'Staff')], max_length=20)),
                ('person_id', models.BigIntegerField()),
                ('person_name', models.CharField(blank=True, max_length=255)),
                ('payment_type', models.CharField(choices=[('cash', 'Cash'), ('cigarettes', 'Cigarettes')], default='cash', max_length=20)),
                ('amount', money()),
                ('date', models.DateField(db_index=True)),
                ('notes', models.TextField(blank=True)),
                ('created_by', models.CharField(blank=True, max_length=150)),
            ],
            options={
                'indexes': [models.Index(fields=['person_type', 'person_id'], name='cigpay_person_idx')],
            },
        ),
        migrations.CreateModel(
            name='Settings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('hospital_name', models.CharField(default='Dar Al Hayat Rehab Center', max_length=255)),
                ('default_currency', models.CharField(default='EGP', max_length=16)),
                ('username', models.CharField(blank=True, max_length=150)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('phone', models.CharField(blank=True, max_length=32)),
                ('patient_alerts', models.BooleanField(default=True)),
                ('payment_alerts', models.BooleanField(default=True)),
                ('staff_alerts', models.BooleanField(default=True)),
                ('financial_alerts', models.BooleanField(default=True)),
                ('auto_backup', models.BooleanField(default=True)),
                ('data_compression', models.BooleanField(default=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'settings',
            },
        ),
        migrations.CreateModel(
            name='AuditEvent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(max_length=64)),
                ('object_type', models.CharField(blank=True, max_length=64, null=True)),
                ('object_id', models.BigIntegerField(blank=True, null=True)),
                ('detail', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['action', 'created_at'], name='audit_action_idx'),
                    models.Index(fields=['object_type', 'object_id', 'created_at'], name='audit_object_idx'),
                ],
            },
        ),
    ]
