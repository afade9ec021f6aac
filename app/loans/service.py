"""
Loan calculation workflow: compute the payment, persist the loan and its
schedule in one transaction, then read the stored record back.
"""
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from app.core.exceptions import NotFoundError
from app.core.logger import logger, audit_log
from app.loans.amortization import LoanTerms, calculate_payment, generate_amortization_schedule, to_cents
from app.loans.models import Loan
from app.loans.repository import LoanRepository
from app.loans.schemas import LoanCalculationRequest, LoanResponse


def terms_from_request(data: LoanCalculationRequest) -> LoanTerms:
    return LoanTerms(
        principal=data.amount,
        interest_rate=data.interest_rate,
        term_months=data.term_months,
        interest_rate_type=data.compound,
        repayment_frequency=data.pay_back
    )


def terms_from_loan(loan: Loan) -> LoanTerms:
    return LoanTerms(
        principal=loan.principal_amount,
        interest_rate=loan.interest_rate,
        term_months=loan.term_months,
        interest_rate_type=loan.interest_rate_type,
        repayment_frequency=loan.repayment_frequency
    )


def calculate_loan(
    repository: LoanRepository,
    data: LoanCalculationRequest,
    user_id: str,
    correlation_id: str,
    start_date: Optional[datetime] = None
) -> Tuple[Loan, float]:
    """
    Runs the amortization engine and stores the result for `user_id`.
    Returns the stored loan (schedule loaded) and the total to be paid.
    Loan and schedule rows are committed together or not at all.
    """
    terms = terms_from_request(data)
    start_date = start_date or datetime.now(timezone.utc)

    payment = calculate_payment(terms)
    result = generate_amortization_schedule(terms, start_date)

    try:
        loan = repository.create_loan(user_id, terms, monthly_payment=to_cents(payment))
        loan_id = loan.id
        for row in result.schedule:
            repository.create_schedule_entry(loan_id, row)
        repository.commit()
    except Exception:
        repository.rollback()
        raise

    logger.info(
        f"Loan calculated: id={loan_id}, principal={terms.principal}, periods={len(result.schedule)}, "
        f"payment={to_cents(payment)}",
        extra={"correlation_id": correlation_id}
    )
    audit_log(
        action="loan_calculation",
        user=user_id,
        resource=f"loan_id={loan_id}",
        details={"correlation_id": correlation_id, "principal": terms.principal, "term_months": terms.term_months}
    )

    stored = repository.find_loan_with_schedule(loan_id)
    if stored is None:
        raise NotFoundError("Loan not found")
    return stored, result.total_to_be_paid


def get_loan_for_user(repository: LoanRepository, loan_id: str, user_id: str) -> Loan:
    """Loans owned by someone else are reported as missing."""
    loan = repository.find_loan_with_schedule(loan_id)
    if loan is None or loan.user_id != user_id:
        raise NotFoundError("Loan not found")
    return loan


def list_loans(repository: LoanRepository, user_id: str) -> List[Loan]:
    return repository.list_loans_for_user(user_id)


def to_loan_response(loan: Loan, total_to_be_paid: Optional[float] = None) -> LoanResponse:
    """
    Serializes a stored loan. When the total is not supplied it is recomputed
    from the stored terms with the same arithmetic used at calculation time.
    """
    if total_to_be_paid is None:
        total_to_be_paid = generate_amortization_schedule(terms_from_loan(loan), loan.created_at).total_to_be_paid

    response = LoanResponse.model_validate(loan)
    response.total_to_be_paid = total_to_be_paid
    return response
