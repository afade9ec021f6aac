"""
Persistence models for calculated loans and their amortization schedules.
A loan and its schedule are written once and never updated.
"""
import enum
from datetime import datetime, timezone
from typing import List
from uuid import uuid4

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base
from app.auth.models import User


class InterestRateType(str, enum.Enum):
    """Whether the supplied rate is already monthly or an annual rate."""
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"


class RepaymentFrequency(str, enum.Enum):
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"


class Loan(Base):
    """Entity representing one loan calculation request."""

    __tablename__ = "loans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    principal_amount: Mapped[float] = mapped_column(Float, nullable=False)
    interest_rate: Mapped[float] = mapped_column(Float, nullable=False)
    interest_rate_type: Mapped[InterestRateType] = mapped_column(Enum(InterestRateType), nullable=False)
    term_months: Mapped[int] = mapped_column(Integer, nullable=False)
    repayment_frequency: Mapped[RepaymentFrequency] = mapped_column(Enum(RepaymentFrequency), nullable=False)
    monthly_payment: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    user: Mapped[User] = relationship("User", back_populates="loans")
    amortization_schedules: Mapped[List["AmortizationSchedule"]] = relationship(
        "AmortizationSchedule",
        back_populates="loan",
        order_by="AmortizationSchedule.payment_date",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Loan(id={self.id}, principal={self.principal_amount}, term_months={self.term_months})>"


class AmortizationSchedule(Base):
    """One repayment period of a loan."""

    __tablename__ = "amortization_schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    loan_id: Mapped[str] = mapped_column(ForeignKey("loans.id"), nullable=False, index=True)
    payment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    principal_paid: Mapped[float] = mapped_column(Float, nullable=False)
    interest_paid: Mapped[float] = mapped_column(Float, nullable=False)
    balance: Mapped[float] = mapped_column(Float, nullable=False)

    loan: Mapped[Loan] = relationship("Loan", back_populates="amortization_schedules")
