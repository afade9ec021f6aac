"""
Amortization engine.
Pure functions: fixed periodic payment (annuity formula) and the
payment-by-payment schedule with principal/interest split and running balance.

Formula: PMT = P * i / (1 - (1 + i)^-n)
"""
import calendar
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List

from app.core.exceptions import ValidationError
from app.loans.models import InterestRateType, RepaymentFrequency

TWOPLACES = Decimal("0.01")

# 100 years
MAX_TERM_MONTHS = 1200


def to_cents(value: float) -> float:
    """Rounds the exact binary value of `value` to cents, halves away from zero."""
    return float(Decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP))


def add_months(value: datetime, months: int) -> datetime:
    """
    Moves `value` forward by calendar months keeping the day of month.
    Days past the end of the target month spill into the next one,
    so Jan 31 + 1 month is Mar 2 in a leap year.
    """
    year, month_index = divmod(value.month - 1 + months, 12)
    year += value.year
    month = month_index + 1
    last_day = calendar.monthrange(year, month)[1]

    if value.day <= last_day:
        return value.replace(year=year, month=month)
    return value.replace(year=year, month=month, day=1) + timedelta(days=value.day - 1)


@dataclass(frozen=True)
class LoanTerms:
    """Normalized loan terms. `interest_rate` is in percent units (5 means 5%)."""
    principal: float
    interest_rate: float
    term_months: int
    interest_rate_type: InterestRateType
    repayment_frequency: RepaymentFrequency


@dataclass(frozen=True)
class ScheduleRow:
    payment_date: datetime
    principal_paid: float
    interest_paid: float
    balance: float


@dataclass
class AmortizationResult:
    payment: float
    total_to_be_paid: float
    schedule: List[ScheduleRow] = field(default_factory=list)


def monthly_base_rate(interest_rate: float, interest_rate_type: InterestRateType) -> float:
    """Converts a percent rate into the decimal monthly rate every other figure derives from."""
    rate = interest_rate / 100
    if interest_rate_type == InterestRateType.ANNUAL:
        rate = rate / 12
    return rate


def payment_periods(term_months: int, repayment_frequency: RepaymentFrequency) -> int:
    if term_months < 1:
        raise ValidationError("Loan term must be at least one month")
    if term_months > MAX_TERM_MONTHS:
        raise ValidationError(f"Loan term cannot exceed {MAX_TERM_MONTHS} months")

    if repayment_frequency == RepaymentFrequency.ANNUAL:
        if term_months % 12:
            raise ValidationError("Yearly repayment requires a term in whole years")
        return term_months // 12
    return term_months


def periodic_rate(terms: LoanTerms) -> float:
    rate = monthly_base_rate(terms.interest_rate, terms.interest_rate_type)
    if terms.repayment_frequency == RepaymentFrequency.ANNUAL:
        return rate * 12
    return rate


def calculate_payment(terms: LoanTerms) -> float:
    """
    Fixed amount paid every period so the loan is retired after n periods.
    A zero rate degenerates to an even split of the principal.
    """
    n = payment_periods(terms.term_months, terms.repayment_frequency)
    rate = periodic_rate(terms)

    if rate == 0:
        return terms.principal / n

    return (terms.principal * rate) / (1 - (1 + rate) ** -n)


def generate_amortization_schedule(terms: LoanTerms, start_date: datetime) -> AmortizationResult:
    """
    Builds one row per repayment period, starting one period after `start_date`.

    The payment date is a running value advanced by one period per row, so a
    month-end spill (Jan 31 -> Mar 2) carries into later rows.
    Figures are rounded to cents per row; the running balance is kept unrounded.
    """
    n = payment_periods(terms.term_months, terms.repayment_frequency)
    rate = periodic_rate(terms)
    payment = calculate_payment(terms)
    step = 12 if terms.repayment_frequency == RepaymentFrequency.ANNUAL else 1

    schedule: List[ScheduleRow] = []
    remaining_balance = terms.principal
    total_to_be_paid = 0.0
    payment_date = start_date

    for _ in range(n):
        interest_paid = remaining_balance * rate
        principal_paid = payment - interest_paid
        remaining_balance -= principal_paid
        total_to_be_paid += payment
        payment_date = add_months(payment_date, step)

        schedule.append(ScheduleRow(
            payment_date=payment_date,
            principal_paid=to_cents(principal_paid),
            interest_paid=to_cents(interest_paid),
            balance=max(0.0, to_cents(remaining_balance))
        ))

    return AmortizationResult(
        payment=payment,
        total_to_be_paid=to_cents(total_to_be_paid),
        schedule=schedule
    )
