from sqlalchemy import Column, Integer, String
from sqlalchemy.sql import func
from ..database import Base
from ..utils.constants import AppConstants


class UserColor(Base):
    __tablename__ = "user_colors"

    id = Column(Integer, primary_key=True, index=True)
    color = Column(String(16), unique=True, nullable=False)

    @classmethod
    def pick_random(cls, db_session) -> str:
        """Random palette color, or the default when the palette is empty"""
        row = db_session.query(cls.color).order_by(func.random()).first()
        return row[0] if row else AppConstants.DEFAULT_USER_COLOR

    @classmethod
    def seed_defaults(cls, db_session) -> int:
        """Insert the default palette; returns number of rows added"""
        existing = {c for (c,) in db_session.query(cls.color).all()}
        added = 0
        for color in AppConstants.DEFAULT_COLOR_PALETTE:
            if color not in existing:
                db_session.add(cls(color=color))
                added += 1
        db_session.commit()
        return added
