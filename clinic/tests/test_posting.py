"""
Payment posting, payroll and cigarette services against in-memory
repositories.  The last tests hit the ORM repository directly.
"""
import threading
from datetime import date
from decimal import Decimal

import pytest

from clinic.exceptions import ConflictOrIntegrityWarning, NotFound, ValidationError
from clinic.services import cigarettes, payments, payroll
from clinic.services.finance import ZERO


@pytest.fixture
def warnings():
    return []


@pytest.fixture
def warn(warnings):
    def collect(warning, user=None):
        warnings.append(warning)
    return collect


@pytest.fixture
def patient(repos):
    return repos.patients.create({
        'name': 'Karim', 'national_id': '1001', 'admission_date': date(2024, 1, 1),
        'discharge_date': date(2024, 1, 11), 'daily_cost': Decimal('500'),
        'daily_cigarette_cost': Decimal('50'),
    })


def _pay(repos, warn, patient_id, amount):
    return payments.create_payment(
        {'patient_id': patient_id, 'amount': Decimal(amount), 'payment_date': date(2024, 1, 5)},
        repos=repos, warn=warn,
    )


def test_create_payment_posts_to_total(repos, warn, patient):
    _pay(repos, warn, patient.id, '2000')
    _pay(repos, warn, patient.id, '1000')
    assert patient.total_paid == Decimal('3000')
    account = payments.account_for(patient.id, repos=repos)
    assert account['balance'] == Decimal('2500')
    assert account['state'] == 'owing'
    assert len(account['payments']) == 2


def test_update_payment_posts_the_difference(repos, warn, patient):
    p = _pay(repos, warn, patient.id, '1000')
    payments.update_payment(p.id, {'amount': Decimal('1500')}, repos=repos, warn=warn)
    assert patient.total_paid == Decimal('1500')
    payments.update_payment(p.id, {'amount': Decimal('200')}, repos=repos, warn=warn)
    assert patient.total_paid == Decimal('200')


def test_moving_a_payment_between_patients(repos, warn, warnings, patient):
    other = repos.patients.create({'name': 'Omar', 'admission_date': date(2024, 1, 1), 'daily_cost': Decimal('100')})
    p = _pay(repos, warn, patient.id, '700')
    payments.update_payment(p.id, {'patient_id': other.id, 'amount': Decimal('800')}, repos=repos, warn=warn)
    assert patient.total_paid == 0
    assert other.total_paid == Decimal('800')
    assert warnings == []


def test_delete_payment_reverses_and_clamps_at_zero(repos, warn, patient):
    p = _pay(repos, warn, patient.id, '400')
    # running total drifted below the payment amount
    repos.patients.set_total_paid(patient.id, Decimal('100'))
    payments.delete_payment(p.id, repos=repos, warn=warn)
    assert patient.total_paid == 0
    assert repos.payments.list() == []


def test_payment_for_missing_patient_is_stored_with_warning(repos, warn, warnings):
    p = _pay(repos, warn, 999, '300')
    assert repos.payments.find(p.id) is p
    assert len(warnings) == 1
    assert isinstance(warnings[0], ConflictOrIntegrityWarning)
    assert warnings[0].object_id == 999


@pytest.mark.parametrize('amount', ['0', '-5'])
def test_non_positive_amount_rejected(repos, warn, patient, amount):
    with pytest.raises(ValidationError):
        _pay(repos, warn, patient.id, amount)
    assert patient.total_paid == 0


def test_payment_requires_patient(repos, warn):
    with pytest.raises(ValidationError):
        payments.create_payment({'amount': Decimal('10')}, repos=repos, warn=warn)


def test_concurrent_payments_all_count(repos, warn, patient):
    threads, amount = 20, Decimal('25.50')
    start = threading.Barrier(threads)

    def worker():
        start.wait()
        for _ in range(5):
            _pay(repos, warn, patient.id, amount)

    pool = [threading.Thread(target=worker) for _ in range(threads)]
    for t in pool:
        t.start()
    for t in pool:
        t.join()
    assert patient.total_paid == amount * threads * 5
    assert len(repos.payments.list()) == threads * 5


def test_recalculate_fixes_drift(repos, warn, patient):
    _pay(repos, warn, patient.id, '300')
    _pay(repos, warn, patient.id, '200')
    repos.patients.set_total_paid(patient.id, Decimal('9'))
    assert payments.recalculate_total_paid(patient.id, repos=repos) == Decimal('500')
    assert patient.total_paid == Decimal('500')


def test_account_for_unknown_patient(repos):
    with pytest.raises(NotFound):
        payments.account_for(42, repos=repos)


# payroll

@pytest.fixture
def staff(repos):
    return repos.staff.create({'name': 'Mona', 'role': 'nurse', 'department': 'ward',
                               'monthly_salary': Decimal('8000'), 'hire_date': date(2023, 5, 1)})


def test_generate_payroll_for_month(repos, staff):
    repos.staff.create({'name': 'Gone', 'role': 'cook', 'department': 'kitchen', 'is_active': False,
                        'monthly_salary': Decimal('3000'), 'hire_date': date(2022, 1, 1)})
    repos.bonuses.create({'staff_id': staff.id, 'amount': Decimal('500'), 'date': date(2024, 3, 3)})
    repos.bonuses.create({'staff_id': staff.id, 'amount': Decimal('999'), 'date': date(2024, 2, 28)})
    repos.deductions.create({'staff_id': staff.id, 'amount': Decimal('200'), 'date': date(2024, 3, 31)})
    advance = payroll.create_advance({'staff_id': staff.id, 'amount': Decimal('1200'), 'repayment_months': 4},
                                     repos=repos)
    payroll.decide_advance(advance.id, True, repos=repos)

    created, existing = payroll.generate_monthly_payroll('2024-03', repos=repos)
    assert existing == []
    assert len(created) == 1
    row = created[0]
    assert (row.base_salary, row.bonuses, row.advances, row.deductions) == (
        Decimal('8000'), Decimal('500'), Decimal('300.00'), Decimal('200'))
    assert row.net_salary == Decimal('8000')
    assert row.status == 'pending'

    created, existing = payroll.generate_monthly_payroll('2024-03', repos=repos)
    assert created == []
    assert existing == [row]


def test_generate_rejects_bad_month(repos):
    with pytest.raises(ValidationError):
        payroll.generate_monthly_payroll('March', repos=repos)


def test_update_payroll_recomputes_net_and_repays_advances(repos, staff):
    advance = payroll.create_advance({'staff_id': staff.id, 'amount': Decimal('1000'), 'repayment_months': 3},
                                     repos=repos)
    assert advance.monthly_deduction == Decimal('333.33')
    payroll.decide_advance(advance.id, True, repos=repos)
    row = payroll.create_payroll({'staff_id': staff.id, 'month': '2024-04', 'base_salary': Decimal('8000')},
                                 repos=repos)
    assert row.net_salary == Decimal('8000')
    assert row.advance_shares == {}

    row = payroll.update_payroll(row.id, {'bonuses': Decimal('500'), 'advances': Decimal('300'),
                                          'deductions': Decimal('200')}, repos=repos)
    assert row.net_salary == Decimal('8000')
    assert row.advance_shares == {str(advance.id): '300'}

    row = payroll.update_payroll(row.id, {'status': 'paid'}, repos=repos)
    assert row.paid_date == date.today()
    assert row.repaid_at is not None
    assert advance.remaining_amount == Decimal('700')

    # already paid: no second installment
    payroll.update_payroll(row.id, {'status': 'paid', 'notes': 'again'}, repos=repos)
    assert advance.remaining_amount == Decimal('700')


def test_last_installment_takes_only_what_is_owed(repos, staff):
    advance = payroll.create_advance({'staff_id': staff.id, 'amount': Decimal('1000'), 'repayment_months': 3},
                                     repos=repos)
    payroll.decide_advance(advance.id, True, repos=repos)
    deducted = []
    for month in ('2024-01', '2024-02', '2024-03', '2024-04', '2024-05'):
        (row,), _ = payroll.generate_monthly_payroll(month, repos=repos)
        deducted.append(row.advances)
        assert row.net_salary == Decimal('8000') - row.advances
        payroll.update_payroll(row.id, {'status': 'paid'}, repos=repos)

    assert deducted == [Decimal('333.33'), Decimal('333.33'), Decimal('333.33'), Decimal('0.01'), ZERO]
    assert sum(deducted) == Decimal('1000')
    assert advance.remaining_amount == 0


def test_unpaid_payrolls_do_not_deduct_past_the_balance(repos, staff):
    advance = payroll.create_advance({'staff_id': staff.id, 'amount': Decimal('500'), 'repayment_months': 2},
                                     repos=repos)
    payroll.decide_advance(advance.id, True, repos=repos)
    amounts = [payroll.generate_monthly_payroll(m, repos=repos)[0][0].advances
               for m in ('2024-01', '2024-02', '2024-03')]
    assert amounts == [Decimal('250.00'), Decimal('250.00'), ZERO]


def test_advance_approved_after_generation_is_not_repaid(repos, staff):
    (row,), _ = payroll.generate_monthly_payroll('2024-03', repos=repos)
    assert row.advances == 0
    advance = payroll.create_advance({'staff_id': staff.id, 'amount': Decimal('1200'), 'repayment_months': 4},
                                     repos=repos)
    payroll.decide_advance(advance.id, True, repos=repos)

    payroll.update_payroll(row.id, {'status': 'paid'}, repos=repos)
    assert advance.remaining_amount == Decimal('1200')


def test_repayment_runs_once_per_payroll(repos, staff):
    advance = payroll.create_advance({'staff_id': staff.id, 'amount': Decimal('1200'), 'repayment_months': 4},
                                     repos=repos)
    payroll.decide_advance(advance.id, True, repos=repos)
    (row,), _ = payroll.generate_monthly_payroll('2024-03', repos=repos)

    payroll.update_payroll(row.id, {'status': 'paid'}, repos=repos)
    payroll.update_payroll(row.id, {'status': 'pending'}, repos=repos)
    payroll.update_payroll(row.id, {'status': 'paid'}, repos=repos)
    assert advance.remaining_amount == Decimal('900.00')


def test_repayment_never_goes_below_zero(repos, staff):
    advance = payroll.create_advance({'staff_id': staff.id, 'amount': Decimal('100'), 'repayment_months': 1},
                                     repos=repos)
    payroll.decide_advance(advance.id, True, repos=repos)
    (row,), _ = payroll.generate_monthly_payroll('2024-03', repos=repos)
    repos.advances.update(advance.id, {'remaining_amount': Decimal('40')})
    payroll.apply_advance_repayments(row, repos=repos)
    assert advance.remaining_amount == 0


def test_duplicate_payroll_rejected(repos, staff):
    payroll.create_payroll({'staff_id': staff.id, 'month': '2024-04'}, repos=repos)
    with pytest.raises(ValidationError):
        payroll.create_payroll({'staff_id': staff.id, 'month': '2024-04'}, repos=repos)


def test_advance_validation(repos, staff):
    with pytest.raises(ValidationError):
        payroll.create_advance({'staff_id': staff.id, 'amount': Decimal('100'), 'repayment_months': 30},
                               repos=repos)
    with pytest.raises(NotFound):
        payroll.create_advance({'staff_id': 77, 'amount': Decimal('100'), 'repayment_months': 2}, repos=repos)


def test_advance_decided_once(repos, staff):
    advance = payroll.create_advance({'staff_id': staff.id, 'amount': Decimal('600'), 'repayment_months': 2},
                                     repos=repos)
    assert advance.status == 'pending'
    assert advance.remaining_amount == Decimal('600')
    payroll.decide_advance(advance.id, False, repos=repos)
    assert advance.status == 'rejected'
    with pytest.raises(ValidationError):
        payroll.decide_advance(advance.id, True, repos=repos)


# cigarettes

def test_cigarette_cost_derived_from_type():
    fields = cigarettes.apply_cigarette_cost({'daily_cigarette_type': 'half_pack'})
    assert fields['daily_cigarette_cost'] == Decimal('25')
    fields = cigarettes.apply_cigarette_cost({'daily_cigarette_type': 'full_pack', 'daily_cigarette_cost': Decimal('45')})
    assert fields['daily_cigarette_cost'] == Decimal('45')
    fields = cigarettes.apply_cigarette_cost({})
    assert fields['daily_cigarette_type'] == 'none'
    assert fields['daily_cigarette_cost'] == 0


def test_cigarette_cost_kept_on_unrelated_update():
    existing = type('P', (), {'daily_cigarette_type': 'full_pack', 'daily_cigarette_cost': Decimal('40')})()
    assert cigarettes.apply_cigarette_cost({'name': 'x'}, existing) == {'name': 'x'}


def test_cigarette_overview_groups(repos):
    repos.patients.create({'name': 'a', 'patient_type': 'detox', 'daily_cigarette_type': 'full_pack',
                           'daily_cigarette_cost': Decimal('50'), 'admission_date': date(2024, 1, 1),
                           'daily_cost': Decimal('1')})
    repos.patients.create({'name': 'b', 'patient_type': 'recovery', 'daily_cigarette_type': 'half_pack',
                           'daily_cigarette_cost': Decimal('25'), 'admission_date': date(2024, 1, 1),
                           'daily_cost': Decimal('1')})
    repos.patients.create({'name': 'c', 'status': 'discharged', 'daily_cigarette_type': 'full_pack',
                           'daily_cigarette_cost': Decimal('50'), 'admission_date': date(2024, 1, 1),
                           'daily_cost': Decimal('1')})
    repos.graduates.create({'name': 'g', 'daily_cigarette_type': 'half_pack', 'daily_cigarette_cost': Decimal('25')})
    overview = cigarettes.cigarette_overview(repos=repos)
    assert overview['groups']['detoxPatients']['count'] == 1
    assert overview['groups']['recoveryPatients']['halfPackCount'] == 1
    assert overview['totals']['totalDailyCost'] == Decimal('100')


def test_cigarette_payment_fills_person_name(repos, staff):
    record = cigarettes.record_cigarette_payment(
        {'person_type': 'staff', 'person_id': staff.id, 'amount': Decimal('50'), 'payment_type': 'cash',
         'date': date(2024, 3, 1)}, repos=repos)
    assert record.person_name == 'Mona'
    summary = cigarettes.cigarette_payment_summary(repos=repos)
    assert summary['staff']['total'] == Decimal('50')


def test_cigarette_payment_validation(repos, staff):
    with pytest.raises(ValidationError):
        cigarettes.record_cigarette_payment({'person_type': 'visitor', 'person_id': 1, 'amount': 5}, repos=repos)
    with pytest.raises(NotFound):
        cigarettes.record_cigarette_payment({'person_type': 'graduate', 'person_id': 5, 'amount': 5}, repos=repos)


# ORM repository

@pytest.mark.django_db
def test_orm_increment_is_clamped_at_zero():
    from clinic.models import Patient
    from clinic.repositories import default_repositories

    repos = default_repositories()
    p = Patient.objects.create(name='Sara', national_id='2002', admission_date=date(2024, 1, 1),
                               daily_cost=Decimal('100'))
    assert repos.patients.increment_total_paid(p.id, Decimal('150')) is True
    assert repos.patients.increment_total_paid(p.id, Decimal('-400')) is True
    p.refresh_from_db()
    assert p.total_paid == 0
    assert repos.patients.increment_total_paid(p.id + 100, Decimal('5')) is False


@pytest.mark.django_db
def test_orm_payment_posting_with_audit_on_missing_patient():
    from clinic.models import AuditEvent, Payment

    payment = payments.create_payment({'patient_id': 12345, 'amount': Decimal('20'),
                                       'payment_date': date(2024, 2, 2)})
    assert Payment.objects.filter(pk=payment.pk).exists()
    event = AuditEvent.objects.get(action='integrity_warning')
    assert event.object_id == 12345


@pytest.mark.django_db(transaction=True)
def test_orm_increment_ignores_stale_reads():
    from clinic.models import Patient
    from clinic.repositories import default_repositories

    repos = default_repositories()
    p = Patient.objects.create(name='Hoda', national_id='3003', admission_date=date(2024, 1, 1),
                               daily_cost=Decimal('100'))
    amount = Decimal('125.50')
    # every writer read the row before any of them posted
    snapshots = [Patient.objects.get(pk=p.pk) for _ in range(6)]
    for snapshot in snapshots:
        assert snapshot.total_paid == 0
        assert repos.patients.increment_total_paid(snapshot.pk, amount) is True
    stale = Patient.objects.get(pk=p.pk)
    payments.create_payment({'patient_id': p.pk, 'amount': amount, 'payment_date': date(2024, 2, 2)})
    assert repos.patients.increment_total_paid(stale.pk, amount) is True

    p.refresh_from_db()
    assert p.total_paid == amount * 8
