"""
URL mappings for the rehab center API.

This module registers all API endpoints with their corresponding view
functions.  Trailing slashes are deliberately omitted to match the
paths the front-end calls.
"""
from django.urls import path

from .auth_views import jwt_refresh_view, login_view, logout_view, me_view
from .views import health
from .views.cigarettes import cigarette_payments, cigarette_stats
from .views.dashboard import dashboard_stats, reports_summary
from .views.expenses import expense_detail, expenses_list
from .views.graduates import graduate_detail, graduates_active, graduates_list
from .views.patients import (
    patient_account,
    patient_detail,
    patient_discharge,
    patient_recalculate,
    patients_active,
    patients_list,
)
from .views.payments import payment_detail, payments_by_patient, payments_list
from .views.payroll import (
    advance_approve,
    advance_detail,
    advance_reject,
    advances_by_staff,
    advances_list,
    bonus_detail,
    bonuses_by_staff,
    bonuses_list,
    deduction_detail,
    deductions_by_staff,
    deductions_list,
    payroll_detail,
    payrolls_by_month,
    payrolls_by_staff,
    payrolls_generate,
    payrolls_list,
)
from .views.staff import staff_active, staff_detail, staff_list
from .views.system import database_backup, database_import, database_reset, settings_view
from .views.users import user_detail, users_active, users_list

urlpatterns = [
    # Health check
    path('healthz', health.healthz, name='healthz'),

    # Authentication
    path('api/auth/login', login_view, name='login_view'),
    path('api/auth/logout', logout_view, name='logout_view'),
    path('api/auth/me', me_view, name='me_view'),
    path('api/auth/refresh', jwt_refresh_view, name='jwt_refresh_view'),

    # Patients
    path('api/patients', patients_list, name='patients_list'),
    path('api/patients/active', patients_active, name='patients_active'),
    path('api/patients/<int:pk>', patient_detail, name='patient_detail'),
    path('api/patients/<int:pk>/discharge', patient_discharge, name='patient_discharge'),
    path('api/patients/<int:pk>/account', patient_account, name='patient_account'),
    path('api/patients/<int:pk>/recalculate', patient_recalculate, name='patient_recalculate'),

    # Payments
    path('api/payments', payments_list, name='payments_list'),
    path('api/payments/patient/<int:patient_id>', payments_by_patient, name='payments_by_patient'),
    path('api/payments/<int:pk>', payment_detail, name='payment_detail'),

    # Staff
    path('api/staff', staff_list, name='staff_list'),
    path('api/staff/active', staff_active, name='staff_active'),
    path('api/staff/<int:pk>', staff_detail, name='staff_detail'),

    # Payroll ledger
    path('api/payrolls', payrolls_list, name='payrolls_list'),
    path('api/payrolls/generate', payrolls_generate, name='payrolls_generate'),
    path('api/payrolls/staff/<int:staff_id>', payrolls_by_staff, name='payrolls_by_staff'),
    path('api/payrolls/month/<str:month>', payrolls_by_month, name='payrolls_by_month'),
    path('api/payrolls/<int:pk>', payroll_detail, name='payroll_detail'),
    path('api/bonuses', bonuses_list, name='bonuses_list'),
    path('api/bonuses/staff/<int:staff_id>', bonuses_by_staff, name='bonuses_by_staff'),
    path('api/bonuses/<int:pk>', bonus_detail, name='bonus_detail'),
    path('api/advances', advances_list, name='advances_list'),
    path('api/advances/staff/<int:staff_id>', advances_by_staff, name='advances_by_staff'),
    path('api/advances/<int:pk>', advance_detail, name='advance_detail'),
    path('api/advances/<int:pk>/approve', advance_approve, name='advance_approve'),
    path('api/advances/<int:pk>/reject', advance_reject, name='advance_reject'),
    path('api/deductions', deductions_list, name='deductions_list'),
    path('api/deductions/staff/<int:staff_id>', deductions_by_staff, name='deductions_by_staff'),
    path('api/deductions/<int:pk>', deduction_detail, name='deduction_detail'),

    # Graduates and the cigarette allowance
    path('api/graduates', graduates_list, name='graduates_list'),
    path('api/graduates/active', graduates_active, name='graduates_active'),
    path('api/graduates/<int:pk>', graduate_detail, name='graduate_detail'),
    path('api/cigarettes/stats', cigarette_stats, name='cigarette_stats'),
    path('api/cigarettes/payments', cigarette_payments, name='cigarette_payments'),

    # Expenses
    path('api/expenses', expenses_list, name='expenses_list'),
    path('api/expenses/<int:pk>', expense_detail, name='expense_detail'),

    # Users
    path('api/users', users_list, name='users_list'),
    path('api/users/active', users_active, name='users_active'),
    path('api/users/<int:pk>', user_detail, name='user_detail'),

    # Dashboard & reports
    path('api/dashboard/stats', dashboard_stats, name='dashboard_stats'),
    path('api/reports/summary', reports_summary, name='reports_summary'),

    # Settings & database
    path('api/settings', settings_view, name='settings_view'),
    path('api/database/backup', database_backup, name='database_backup'),
    path('api/database/import', database_import, name='database_import'),
    path('api/database/reset', database_reset, name='database_reset'),
]
