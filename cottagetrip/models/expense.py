import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Boolean, Index, CheckConstraint, false, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from cottagetrip.db.session import Base

PINNED_RENTAL_WHERE = text("is_cottage_rental AND pinned")


class Expense(Base):
    __tablename__ = "expenses"
    __table_args__ = (
        CheckConstraint("amount_cents >= 0", name="ck_expense_amount_non_negative"),
        # at most one pinned cottage rental per room
        Index(
            "one_cottage_rental_per_room",
            "room_id",
            unique=True,
            postgresql_where=PINNED_RENTAL_WHERE,
            sqlite_where=PINNED_RENTAL_WHERE,
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    amount_cents = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, server_default="CAD")
    paid_by_user_id = Column(String(36), nullable=False)
    created_by_user_id = Column(String(36), nullable=False)
    receipt_path = Column(String, nullable=True)
    is_cottage_rental = Column(Boolean, nullable=False, default=False, server_default=false())
    pinned = Column(Boolean, nullable=False, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    splits = relationship(
        "ExpenseSplit",
        back_populates="expense",
        cascade="all, delete-orphan",
        order_by="ExpenseSplit.position",
    )

    @property
    def is_pinned_rental(self) -> bool:
        return bool(self.is_cottage_rental and self.pinned)
