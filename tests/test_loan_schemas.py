"""
Unit tests for the loan calculation request boundary.
"""
import pytest
from pydantic import ValidationError

from app.loans.models import InterestRateType, RepaymentFrequency
from app.loans.schemas import LoanCalculationRequest


def make_payload(**overrides):
    payload = {
        "amount": 10000,
        "years": "1",
        "months": "6",
        "interest_rate": 5,
        "compound": "annually",
        "pay_back": "monthly",
    }
    payload.update(overrides)
    return payload


def test_wire_values_are_normalized():
    data = LoanCalculationRequest(**make_payload())

    assert data.compound == InterestRateType.ANNUAL
    assert data.pay_back == RepaymentFrequency.MONTHLY
    assert data.years == 1
    assert data.months == 6
    assert data.term_months == 18


@pytest.mark.parametrize("compound, pay_back, expected_compound, expected_pay_back", [
    ("monthly", "monthly", InterestRateType.MONTHLY, RepaymentFrequency.MONTHLY),
    ("annually", "yearly", InterestRateType.ANNUAL, RepaymentFrequency.ANNUAL),
    ("MONTHLY", "ANNUAL", InterestRateType.MONTHLY, RepaymentFrequency.ANNUAL),
    (" Annually ", "Yearly", InterestRateType.ANNUAL, RepaymentFrequency.ANNUAL),
])
def test_choice_aliases(compound, pay_back, expected_compound, expected_pay_back):
    data = LoanCalculationRequest(**make_payload(compound=compound, pay_back=pay_back, months="0"))

    assert data.compound == expected_compound
    assert data.pay_back == expected_pay_back


def test_integer_term_parts_accepted():
    data = LoanCalculationRequest(**make_payload(years=2, months=3))

    assert data.term_months == 27


@pytest.mark.parametrize("field, value", [
    ("amount", "10000"),
    ("amount", True),
    ("amount", -100),
    ("amount", 0),
    ("interest_rate", "5"),
    ("interest_rate", -1),
    ("years", "one"),
    ("months", "-2"),
    ("compound", "weekly"),
    ("pay_back", "quarterly"),
    ("interest_rate", float("inf")),
    ("amount", float("nan")),
    ("amount", float("-inf")),
    ("months", "100000000"),
])
def test_invalid_fields_rejected(field, value):
    with pytest.raises(ValidationError):
        LoanCalculationRequest(**make_payload(**{field: value}))


def test_missing_field_rejected():
    payload = make_payload()
    del payload["pay_back"]

    with pytest.raises(ValidationError):
        LoanCalculationRequest(**payload)


def test_zero_length_term_rejected():
    with pytest.raises(ValidationError, match="at least one month"):
        LoanCalculationRequest(**make_payload(years="0", months="0"))


def test_yearly_repayment_requires_whole_years():
    with pytest.raises(ValidationError, match="whole years"):
        LoanCalculationRequest(**make_payload(pay_back="yearly"))


def test_zero_rate_accepted():
    data = LoanCalculationRequest(**make_payload(interest_rate=0))

    assert data.interest_rate == 0


def test_longest_term_accepted():
    data = LoanCalculationRequest(**make_payload(years="100", months="0"))

    assert data.term_months == 1200


def test_term_over_one_hundred_years_rejected():
    with pytest.raises(ValidationError, match="cannot exceed 1200 months"):
        LoanCalculationRequest(**make_payload(years="100", months="1"))


def test_non_finite_rate_message():
    with pytest.raises(ValidationError, match="Interest Rate must be a finite number"):
        LoanCalculationRequest(**make_payload(interest_rate=float("inf")))
