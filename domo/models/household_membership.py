from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from ..database import Base
from sqlalchemy import Index
from sqlalchemy.orm import relationship


class HouseholdMembership(Base):
    __tablename__ = "household_members"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    household_id = Column(
        String(36), ForeignKey("households.id", ondelete="CASCADE"), nullable=False
    )

    joined_at = Column(DateTime, server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="household_memberships")
    household = relationship("Household", back_populates="memberships")

    __table_args__ = (
        Index("idx_unique_household_member", "user_id", "household_id", unique=True),
    )
