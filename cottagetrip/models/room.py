import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from cottagetrip.db.session import Base


class Room(Base):
    __tablename__ = "rooms"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=True)
    owner_id = Column(String(36), nullable=False)
    currency = Column(String(3), nullable=False, server_default="CAD")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    members = relationship(
        "RoomMember",
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="RoomMember.id",
    )
