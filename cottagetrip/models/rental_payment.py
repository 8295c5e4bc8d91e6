import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, UniqueConstraint, CheckConstraint, false
from sqlalchemy.sql import func
from cottagetrip.db.session import Base


class RentalPayment(Base):
    """Whether a member has paid their share of the pinned rental.

    ``amount_cents`` mirrors the member's split on the pinned rental and is
    overwritten every time the split changes.
    """

    __tablename__ = "rental_payments"
    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="unique_rental_payment_per_user"),
        CheckConstraint("amount_cents >= 0", name="ck_rental_payment_amount_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False, index=True)
    amount_cents = Column(Integer, nullable=False)
    paid = Column(Boolean, nullable=False, default=False, server_default=false())
    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
