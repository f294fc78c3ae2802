#!/usr/bin/env python3
"""
Database Setup Module
Creates database tables and seeds the user color palette.

Run with: python -m domo.database_setup
"""
import logging

from .database import engine, Base, session_scope
from .models import (  # noqa: F401  (registers every table on Base)
    User,
    Household,
    HouseholdMembership,
    StaffInvite,
    UserColor,
    Task,
)

logger = logging.getLogger(__name__)


def setup_database() -> int:
    """Create all tables, then seed colors; returns the number of colors added"""
    logger.info("Creating all database tables...")
    Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        added = UserColor.seed_defaults(db)

    tables = sorted(Base.metadata.tables.keys())
    logger.info(f"Created {len(tables)} tables: {', '.join(tables)}")
    logger.info(f"Seeded {added} user colors")
    return added


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    setup_database()
