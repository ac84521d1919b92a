import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from collabhub.models.base import Base, enum_check, utcnow

FRIENDSHIP_STATUSES = ("pending", "accepted", "declined")


class Friendship(Base):
    __tablename__ = "friendships"

    # Directed request; the reverse orientation is rejected by friend_service
    requester_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    addressee_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("requester_id", "addressee_id", name="uq_friendships_pair"),
        CheckConstraint("requester_id != addressee_id", name="not_self"),
        CheckConstraint(enum_check("status", FRIENDSHIP_STATUSES), name="status"),
    )
