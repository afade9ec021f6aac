from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from typing import List, TYPE_CHECKING
from uuid import uuid4
from app.core.database import Base

if TYPE_CHECKING:
    from app.loans.models import Loan


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    loans: Mapped[List["Loan"]] = relationship("Loan", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
