"""
Pydantic schemas for the loan calculation boundary.
Wire values ("monthly", "annually", "yearly") are normalized to the closed
enums once, here; nothing downstream sees raw strings.
"""
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.loans.amortization import MAX_TERM_MONTHS
from app.loans.models import InterestRateType, RepaymentFrequency

# Messages returned when a required field is absent from the request body
REQUIRED_FIELD_MESSAGES: Dict[str, str] = {
    "amount": "Principal Amount required",
    "years": "Years required",
    "months": "Months required",
    "compound": "Compound required",
    "interest_rate": "Interest Rate required",
    "pay_back": "Pay back required",
}

COMPOUND_ALIASES: Dict[str, InterestRateType] = {
    "monthly": InterestRateType.MONTHLY,
    "annually": InterestRateType.ANNUAL,
    "annual": InterestRateType.ANNUAL,
    "yearly": InterestRateType.ANNUAL,
}

PAY_BACK_ALIASES: Dict[str, RepaymentFrequency] = {
    "monthly": RepaymentFrequency.MONTHLY,
    "yearly": RepaymentFrequency.ANNUAL,
    "annually": RepaymentFrequency.ANNUAL,
    "annual": RepaymentFrequency.ANNUAL,
}


def _normalize_choice(value: Any, aliases: Dict[str, Any], label: str) -> Any:
    if isinstance(value, str):
        normalized = aliases.get(value.strip().lower())
        if normalized is None:
            raise ValueError(f"{label} must be one of: {', '.join(sorted(aliases))}")
        return normalized
    return value


def _require_number(value: Any, label: str) -> Any:
    # bool is an int subclass and numeric strings would be coerced by pydantic
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{label} must be a number")
    if not math.isfinite(value):
        raise ValueError(f"{label} must be a finite number")
    return value


def _parse_whole_number(value: Any, label: str) -> Any:
    if isinstance(value, bool):
        raise ValueError(f"{label} must be a whole number")
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            raise ValueError(f"{label} must be a whole number")
        return int(value)
    return value


class LoanCalculationRequest(BaseModel):
    """Loan calculation request payload."""
    amount: float = Field(..., gt=0, description="Principal amount")
    years: int = Field(..., ge=0, le=100, description="Term years")
    months: int = Field(..., ge=0, description="Additional term months")
    interest_rate: float = Field(..., ge=0, description="Nominal rate in percent (5 = 5%)")
    compound: InterestRateType = Field(..., description="'monthly' or 'annually'")
    pay_back: RepaymentFrequency = Field(..., description="'monthly' or 'yearly'")

    model_config = ConfigDict(allow_inf_nan=False)

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v: Any) -> Any:
        return _require_number(v, "Principal Amount")

    @field_validator('interest_rate', mode='before')
    @classmethod
    def validate_interest_rate(cls, v: Any) -> Any:
        return _require_number(v, "Interest Rate")

    @field_validator('years', 'months', mode='before')
    @classmethod
    def validate_term_part(cls, v: Any, info: ValidationInfo) -> Any:
        return _parse_whole_number(v, info.field_name.capitalize())

    @field_validator('compound', mode='before')
    @classmethod
    def validate_compound(cls, v: Any) -> Any:
        return _normalize_choice(v, COMPOUND_ALIASES, "Compound")

    @field_validator('pay_back', mode='before')
    @classmethod
    def validate_pay_back(cls, v: Any) -> Any:
        return _normalize_choice(v, PAY_BACK_ALIASES, "Pay back")

    @model_validator(mode='after')
    def validate_term(self) -> 'LoanCalculationRequest':
        if self.term_months < 1:
            raise ValueError("Loan term must be at least one month")
        if self.term_months > MAX_TERM_MONTHS:
            raise ValueError(f"Loan term cannot exceed {MAX_TERM_MONTHS} months")
        if self.pay_back == RepaymentFrequency.ANNUAL and self.term_months % 12:
            raise ValueError("Yearly repayment requires a term in whole years")
        return self

    @property
    def term_months(self) -> int:
        return self.years * 12 + self.months


class ScheduleEntryResponse(BaseModel):
    """Represents a single row in the amortization schedule."""
    id: str
    loan_id: str
    payment_date: datetime
    principal_paid: float
    interest_paid: float
    balance: float = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class LoanResponse(BaseModel):
    id: str
    user_id: str
    principal_amount: float
    interest_rate: float
    interest_rate_type: InterestRateType
    term_months: int
    repayment_frequency: RepaymentFrequency
    monthly_payment: float
    created_at: datetime
    amortization_schedules: List[ScheduleEntryResponse]
    total_to_be_paid: Optional[float] = None

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class LoanCalculationResponse(BaseModel):
    message: str
    loan: LoanResponse
