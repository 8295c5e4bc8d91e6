import uuid

from sqlalchemy import Column, Integer, String, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from cottagetrip.db.session import Base


class ExpenseSplit(Base):
    __tablename__ = "expense_splits"
    __table_args__ = (
        UniqueConstraint("expense_id", "user_id", name="uq_expense_split_user"),
        CheckConstraint("amount_cents >= 0", name="ck_split_amount_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    expense_id = Column(String(36), ForeignKey("expenses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), nullable=False)
    amount_cents = Column(Integer, nullable=False)
    # order of the member list the split was computed from
    position = Column(Integer, nullable=False, default=0)

    expense = relationship("Expense", back_populates="splits")
