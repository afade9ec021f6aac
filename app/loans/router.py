"""
FastAPI router for loan calculation endpoints.
"""
from typing import List
from uuid import uuid4

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.auth.dependencies import get_current_user
from app.auth.models import User
from app.core.database import get_db
from app.core.logger import get_logger_with_correlation
from app.loans.repository import LoanRepository
from app.loans.schemas import LoanCalculationRequest, LoanCalculationResponse, LoanResponse
from app.loans.service import calculate_loan, get_loan_for_user, list_loans, to_loan_response

router = APIRouter()


def get_loan_repository(db: Session = Depends(get_db)) -> LoanRepository:
    return LoanRepository(db)


@router.post("/calculate-loan", response_model=LoanCalculationResponse)
def calculate_loan_endpoint(
    data: LoanCalculationRequest,
    request: Request,
    repository: LoanRepository = Depends(get_loan_repository),
    current_user: User = Depends(get_current_user)
) -> LoanCalculationResponse:
    """
    Calculates a fixed-payment loan and stores its amortization schedule.

    - **amount**: Principal amount
    - **years** / **months**: Term, combined into months
    - **interest_rate**: Nominal rate in percent
    - **compound**: `monthly` (rate is already monthly) or `annually`
    - **pay_back**: `monthly` or `yearly` repayments
    """
    correlation_id = getattr(request.state, "correlation_id", None) or str(uuid4())
    logger = get_logger_with_correlation(correlation_id)
    logger.info(f"Starting loan calculation: {data.model_dump()}")

    loan, total_to_be_paid = calculate_loan(repository, data, current_user.id, correlation_id)

    return LoanCalculationResponse(
        message="Loan calculation successful",
        loan=to_loan_response(loan, total_to_be_paid)
    )


@router.get("/", response_model=List[LoanResponse])
def list_my_loans(
    repository: LoanRepository = Depends(get_loan_repository),
    current_user: User = Depends(get_current_user)
) -> List[LoanResponse]:
    return [to_loan_response(loan) for loan in list_loans(repository, current_user.id)]


@router.get("/{loan_id}", response_model=LoanResponse)
def get_loan(
    loan_id: str,
    repository: LoanRepository = Depends(get_loan_repository),
    current_user: User = Depends(get_current_user)
) -> LoanResponse:
    """Retrieves a stored loan with its schedule."""
    return to_loan_response(get_loan_for_user(repository, loan_id, current_user.id))
