from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import TaskStatus


class Task(Base):
    """Household chore; assignee and author both reference users.id.

    Only the user references matter here: a merged placeholder's chores must
    follow it to the canonical user.
    """

    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    status = Column(String(20), default=TaskStatus.PENDING.value)

    household_id = Column(
        String(36), ForeignKey("households.id", ondelete="CASCADE"), nullable=True
    )
    assigned_to = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"))

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    household = relationship("Household", back_populates="tasks")
