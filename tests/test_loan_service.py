"""
Tests for the loan record store and the calculation workflow.
"""
from datetime import datetime

import pytest

from app.core.exceptions import NotFoundError
from app.loans.models import AmortizationSchedule, Loan, InterestRateType, RepaymentFrequency
from app.loans.repository import LoanRepository
from app.loans.schemas import LoanCalculationRequest
from app.loans.service import calculate_loan, get_loan_for_user, list_loans, to_loan_response

START = datetime(2024, 3, 1, 12, 0)


def make_request(**overrides) -> LoanCalculationRequest:
    payload = {
        "amount": 10000,
        "years": "1",
        "months": "0",
        "interest_rate": 1,
        "compound": "monthly",
        "pay_back": "monthly",
    }
    payload.update(overrides)
    return LoanCalculationRequest(**payload)


class FailingRepository(LoanRepository):
    """Fails part way through writing the schedule."""

    def __init__(self, db, fail_after: int):
        super().__init__(db)
        self.fail_after = fail_after
        self.written = 0

    def create_schedule_entry(self, loan_id, row):
        if self.written == self.fail_after:
            raise RuntimeError("disk full")
        self.written += 1
        return super().create_schedule_entry(loan_id, row)


def test_calculate_loan_persists_loan_and_schedule(db_session, user):
    repository = LoanRepository(db_session)

    loan, total = calculate_loan(repository, make_request(), user.id, "corr-1", start_date=START)

    assert loan.user_id == user.id
    assert loan.principal_amount == 10000
    assert loan.term_months == 12
    assert loan.interest_rate_type == InterestRateType.MONTHLY
    assert loan.repayment_frequency == RepaymentFrequency.MONTHLY
    assert loan.monthly_payment == 888.49
    assert len(loan.amortization_schedules) == 12
    assert total == pytest.approx(10661.85, abs=0.01)

    dates = [entry.payment_date for entry in loan.amortization_schedules]
    assert dates == sorted(dates)
    assert dates[0] == datetime(2024, 4, 1, 12, 0)


def test_yearly_loan_has_one_row_per_year(db_session, user):
    repository = LoanRepository(db_session)
    request = make_request(years="5", interest_rate=6, compound="annually", pay_back="yearly")

    loan, _ = calculate_loan(repository, request, user.id, "corr-2", start_date=START)

    assert loan.term_months == 60
    assert len(loan.amortization_schedules) == 5


def test_failed_schedule_write_rolls_back_everything(db_session, user):
    repository = FailingRepository(db_session, fail_after=3)

    with pytest.raises(RuntimeError):
        calculate_loan(repository, make_request(), user.id, "corr-3", start_date=START)

    assert db_session.query(Loan).count() == 0
    assert db_session.query(AmortizationSchedule).count() == 0


def test_find_unknown_loan_returns_none(db_session):
    assert LoanRepository(db_session).find_loan_with_schedule("missing") is None


def test_loan_of_another_user_is_not_found(db_session, user):
    repository = LoanRepository(db_session)
    loan, _ = calculate_loan(repository, make_request(), user.id, "corr-4", start_date=START)

    with pytest.raises(NotFoundError):
        get_loan_for_user(repository, loan.id, "someone-else")

    assert get_loan_for_user(repository, loan.id, user.id).id == loan.id


def test_list_loans_returns_only_callers_loans(db_session, user):
    repository = LoanRepository(db_session)
    calculate_loan(repository, make_request(), user.id, "corr-5", start_date=START)
    calculate_loan(repository, make_request(amount=500), user.id, "corr-6", start_date=START)

    assert len(list_loans(repository, user.id)) == 2
    assert list_loans(repository, "someone-else") == []


def test_response_recomputes_total_for_stored_loan(db_session, user):
    repository = LoanRepository(db_session)
    loan, total = calculate_loan(repository, make_request(), user.id, "corr-7", start_date=START)

    response = to_loan_response(repository.find_loan_with_schedule(loan.id))

    assert response.total_to_be_paid == total
    dumped = response.model_dump(by_alias=True)
    assert "amortizationSchedules" in dumped
    assert "totalToBePaid" in dumped
    assert dumped["amortizationSchedules"][0]["principalPaid"] == loan.amortization_schedules[0].principal_paid


def test_month_end_payment_dates_spill_into_next_month(db_session, user):
    repository = LoanRepository(db_session)
    request = make_request(years="0", months="2")

    loan, _ = calculate_loan(repository, request, user.id, "corr-8", start_date=datetime(2024, 1, 31))

    assert [entry.payment_date for entry in loan.amortization_schedules] == [
        datetime(2024, 3, 2),
        datetime(2024, 4, 2),
    ]


def test_stored_interest_rounds_half_cent_up(db_session, user):
    """0.25 at 50% for one month accrues exactly 0.125 interest."""
    repository = LoanRepository(db_session)
    request = make_request(amount=0.25, years="0", months="1", interest_rate=50)

    loan, _ = calculate_loan(repository, request, user.id, "corr-9", start_date=START)

    entry = loan.amortization_schedules[0]
    assert entry.interest_paid == 0.13
    assert entry.principal_paid == 0.25
    assert entry.balance == 0.0
