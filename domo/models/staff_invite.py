import uuid

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.sql import func
from ..database import Base
from .enums import InviteStatus


class StaffInvite(Base):
    """Single-use offer of the staff role and a household binding.

    ``user_id`` first points at the pending user the invite was issued
    against; once the invite is consumed it is stamped with the canonical user.
    """

    __tablename__ = "staff_invite"

    id = Column(Integer, primary_key=True, index=True)
    token = Column(
        String(36),
        unique=True,
        index=True,
        nullable=False,
        default=lambda: str(uuid.uuid4()),
    )

    email = Column(String, index=True, nullable=True)
    mobile = Column(String, index=True, nullable=True)
    name = Column(String, nullable=True)
    nickname = Column(String, nullable=True)
    role = Column(String, nullable=True)  # specific staff role, e.g. "yaya"

    household_id = Column(
        String(36), ForeignKey("households.id", ondelete="CASCADE"), nullable=True
    )
    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    status = Column(String(10), nullable=False, default=InviteStatus.NEW.value)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __table_args__ = (Index("idx_staff_invite_status_created", "status", "created_at"),)

    @property
    def display_name(self):
        return self.name or self.nickname

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.display_name,
            "role": self.role,
            "household_id": self.household_id,
            "status": self.status,
            "user_id": self.user_id,
        }
