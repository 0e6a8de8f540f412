from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from ..core.db.database import Base

PAYMENT_PENDING = "pending"
PAYMENT_SUCCEEDED = "succeeded"
PAYMENT_FAILED = "failed"


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True, autoincrement=True, init=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)

    provider_session_id: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None, index=True)
    provider_payment_id: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None, unique=True)
    amount: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)  # minor units
    currency: Mapped[str | None] = mapped_column(String(10), nullable=True, default=None)
    status: Mapped[str] = mapped_column(String(20), default=PAYMENT_PENDING, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default_factory=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), default=None)
