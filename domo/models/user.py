import uuid

from sqlalchemy import (
    Column,
    String,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import UserRole


def new_uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Canonical and pending user profiles share this table.

    A canonical row has ``authid`` set (equal to ``id``) and
    ``is_pending_signup`` false. A pending row has no ``authid`` and exists only
    until the first signup that claims it.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_uuid)
    authid = Column(String(36), unique=True, index=True, nullable=True)

    email = Column(String, index=True, nullable=True)
    mobile_no = Column(String, index=True, nullable=True)

    # User profile
    full_name = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    nick_name = Column(String, nullable=True)
    profile_picture = Column(String, nullable=True)
    user_color = Column(String(16), nullable=True)

    role = Column(String(20), nullable=False, default=UserRole.AMO.value)
    specific_role = Column(String, nullable=True)

    household_id = Column(
        String(36), ForeignKey("households.id", ondelete="SET NULL"), nullable=True
    )

    # Auth / onboarding status
    primary_auth_method = Column(String(20), nullable=True)
    oauth_linked = Column(Boolean, default=False)
    onboarded = Column(Boolean, default=False)
    onboarding_page = Column(String, nullable=True)
    is_pending_signup = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Constraints; pending placeholders may share contacts with a settled user
    __table_args__ = (
        Index(
            "uq_user_email",
            "email",
            unique=True,
            sqlite_where=~is_pending_signup,
            postgresql_where=~is_pending_signup,
        ),
        Index(
            "uq_user_mobile_no",
            "mobile_no",
            unique=True,
            sqlite_where=~is_pending_signup,
            postgresql_where=~is_pending_signup,
        ),
        Index("idx_user_pending_lookup", "is_pending_signup", "authid"),
    )

    household = relationship(
        "Household", foreign_keys=[household_id], back_populates="residents"
    )
    household_memberships = relationship("HouseholdMembership", back_populates="user")

    @classmethod
    def find_by_authid(cls, db_session, authid: str):
        """Find canonical user bound to an auth identity"""
        return db_session.query(cls).filter(cls.authid == authid).first()

    @classmethod
    def pending_predicate(cls, user_id: str):
        """Predicate that only matches a still-claimable pending row"""
        return (
            cls.id == user_id,
            cls.is_pending_signup == True,  # noqa: E712
            cls.authid.is_(None),
        )
