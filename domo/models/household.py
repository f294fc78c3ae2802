from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .user import new_uuid


class Household(Base):
    __tablename__ = "households"

    id = Column(String(36), primary_key=True, default=new_uuid)
    name = Column(String, nullable=False)
    owner_id = Column(
        String(36),
        ForeignKey(
            "users.id", ondelete="SET NULL", use_alter=True, name="fk_households_owner"
        ),
        nullable=True,
    )
    join_code = Column(String(6), unique=True, index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    memberships = relationship(
        "HouseholdMembership", back_populates="household", cascade="all, delete-orphan"
    )
    residents = relationship(
        "User", foreign_keys="User.household_id", back_populates="household"
    )
    tasks = relationship("Task", back_populates="household")

    @classmethod
    def join_code_exists(cls, db_session, join_code: str) -> bool:
        return (
            db_session.query(cls.id).filter(cls.join_code == join_code).first()
            is not None
        )
