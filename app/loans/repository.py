"""
Loan record store.
Wraps an explicitly provided Session; it never opens sessions of its own.
Writes are flushed but not committed, so callers decide the transaction boundary.
"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from app.loans.amortization import LoanTerms, ScheduleRow
from app.loans.models import AmortizationSchedule, Loan


class LoanRepository:
    def __init__(self, db: Session):
        self.db = db

    def create_loan(self, user_id: str, terms: LoanTerms, monthly_payment: float) -> Loan:
        loan = Loan(
            user_id=user_id,
            principal_amount=terms.principal,
            interest_rate=terms.interest_rate,
            interest_rate_type=terms.interest_rate_type,
            term_months=terms.term_months,
            repayment_frequency=terms.repayment_frequency,
            monthly_payment=monthly_payment
        )
        self.db.add(loan)
        self.db.flush()
        return loan

    def create_schedule_entry(self, loan_id: str, row: ScheduleRow) -> AmortizationSchedule:
        entry = AmortizationSchedule(
            loan_id=loan_id,
            payment_date=row.payment_date,
            principal_paid=row.principal_paid,
            interest_paid=row.interest_paid,
            balance=row.balance
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def find_loan_with_schedule(self, loan_id: str) -> Optional[Loan]:
        stmt = (
            select(Loan)
            .where(Loan.id == loan_id)
            .options(selectinload(Loan.amortization_schedules))
            .execution_options(populate_existing=True)
        )
        return self.db.scalars(stmt).first()

    def list_loans_for_user(self, user_id: str) -> List[Loan]:
        stmt = (
            select(Loan)
            .where(Loan.user_id == user_id)
            .options(selectinload(Loan.amortization_schedules))
            .order_by(Loan.created_at.desc())
        )
        return list(self.db.scalars(stmt).all())

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
