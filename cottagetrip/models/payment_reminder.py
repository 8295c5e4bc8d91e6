import uuid

from sqlalchemy import Column, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from cottagetrip.db.session import Base


class PaymentReminder(Base):
    __tablename__ = "payment_reminders"
    __table_args__ = (
        UniqueConstraint(
            "room_id", "from_user_id", "to_user_id", "reminder_type",
            name="unique_reminder_per_pair_per_room_per_type",
        ),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    from_user_id = Column(String(36), nullable=False, index=True)
    to_user_id = Column(String(36), nullable=False, index=True)
    reminder_type = Column(String, nullable=False, server_default="settlement")
    last_sent_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
