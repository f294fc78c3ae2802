"""Shared test fixtures and configuration.

Points the app at a throwaway SQLite file and blanks the Supabase settings
before any domo import, then provides per-test databases, row factories and
an in-memory auth provider.
"""

import os
import tempfile

# Patch env vars BEFORE any domo imports (load_dotenv never overrides these)
_TMP_DIR = tempfile.mkdtemp(prefix="domo-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'app.db')}"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_ANON_KEY"] = ""
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = ""

import uuid
from datetime import datetime

import pytest
from sqlalchemy.orm import sessionmaker

from domo.database import Base, build_engine
from domo import models  # noqa: F401
from domo.models.user import User, new_uuid
from domo.models.household import Household
from domo.models.household_membership import HouseholdMembership
from domo.models.staff_invite import StaffInvite
from domo.services.auth_provider import AuthProvider, AuthIdentity
from domo.services.errors import AuthError, InputError
from domo.services.household_service import random_join_code


class FakeAuthProvider(AuthProvider):
    """Auth provider double that keeps identities in memory"""

    def __init__(self):
        self.identities = {}
        self.tokens = {}
        self.created = []
        self.fail_with = None

    def create_user(self, email, password, metadata):
        if self.fail_with:
            raise InputError(self.fail_with)
        if any(i.email == email for i in self.identities.values()):
            raise InputError("A user with this email address has already been registered")
        identity = AuthIdentity(
            id=str(uuid.uuid4()), email=email, provider="email", metadata=dict(metadata)
        )
        self.identities[identity.id] = identity
        self.created.append((email, password, dict(metadata)))
        return identity

    def get_user(self, access_token):
        identity_id = self.tokens.get(access_token)
        if identity_id is None:
            raise AuthError("Could not validate credentials")
        return self.identities[identity_id]

    def add_session(self, token, identity_id=None, email=None, phone=None,
                    provider="google", metadata=None):
        identity = AuthIdentity(
            id=identity_id or str(uuid.uuid4()),
            email=email,
            phone=phone,
            provider=provider,
            metadata=metadata or {},
        )
        self.identities[identity.id] = identity
        self.tokens[token] = identity.id
        return identity


@pytest.fixture
def engine(tmp_path):
    """Engine bound to a temp-file SQLite DB with every table created."""
    engine = build_engine(f"sqlite:///{tmp_path / 'test_domo.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def auth_provider():
    return FakeAuthProvider()


@pytest.fixture
def make_household(db):
    def _make(name="Santos household", owner_id=None, join_code=None):
        household = Household(
            name=name, owner_id=owner_id, join_code=join_code or random_join_code()
        )
        db.add(household)
        db.commit()
        db.refresh(household)
        return household

    return _make


@pytest.fixture
def make_pending_user(db):
    """Placeholder user that has never signed in."""

    def _make(email=None, mobile_no=None, household_id=None, full_name=None,
              first_name=None, created_at=None):
        user = User(
            email=email,
            mobile_no=mobile_no,
            household_id=household_id,
            full_name=full_name,
            first_name=first_name,
            is_pending_signup=True,
        )
        if created_at is not None:
            user.created_at = created_at
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_settled_user(db):
    def _make(email=None, mobile_no=None, household_id=None, role="amo",
              authid=None):
        user_id = authid or new_uuid()
        user = User(
            id=user_id,
            authid=user_id,
            email=email,
            mobile_no=mobile_no,
            household_id=household_id,
            role=role,
            is_pending_signup=False,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_invite(db):
    def _make(email=None, mobile=None, name="Rosa", role="yaya",
              household_id=None, user_id=None, status="new", created_at=None):
        invite = StaffInvite(
            email=email,
            mobile=mobile,
            name=name,
            role=role,
            household_id=household_id,
            user_id=user_id,
            status=status,
        )
        if created_at is not None:
            invite.created_at = created_at
        db.add(invite)
        db.commit()
        db.refresh(invite)
        return invite

    return _make


@pytest.fixture
def add_member(db):
    def _add(household_id, user_id):
        db.add(HouseholdMembership(household_id=household_id, user_id=user_id))
        db.commit()

    return _add


@pytest.fixture
def jan():
    return datetime(2024, 1, 15, 9, 0, 0)


@pytest.fixture
def feb():
    return datetime(2024, 2, 15, 9, 0, 0)
