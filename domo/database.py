from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from supabase import create_client, Client
import os
from dotenv import load_dotenv
from contextlib import contextmanager

load_dotenv()

# Database URLs
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./domo.db")
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")


def build_engine(database_url: str):
    return create_engine(
        database_url,
        connect_args=(
            {"check_same_thread": False} if "sqlite" in database_url else {}
        ),
        pool_pre_ping=True,  # Good for PostgreSQL connections
        pool_recycle=300,  # Recycle connections every 5 minutes
    )


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Supabase clients (auth provider)
supabase: Client = None
supabase_admin: Client = None

if SUPABASE_URL and SUPABASE_ANON_KEY:
    supabase = create_client(SUPABASE_URL, SUPABASE_ANON_KEY)

if SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY:
    # Admin client is required to create auth users on behalf of the caller
    supabase_admin = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_supabase_admin() -> Client:
    """Get Supabase admin client for administrative operations"""
    if not supabase_admin:
        raise RuntimeError(
            "Supabase admin client not initialized. Check SUPABASE_SERVICE_ROLE_KEY."
        )
    return supabase_admin


def init_db():
    """Initialize database tables"""
    from . import models  # noqa: F401  (registers every table on Base)

    Base.metadata.create_all(bind=engine)


def check_db_connection() -> dict:
    """Check database connectivity"""
    status = {"sqlalchemy": False, "supabase": False, "supabase_admin": False}

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        status["sqlalchemy"] = True
    except Exception:
        pass

    status["supabase"] = supabase is not None
    status["supabase_admin"] = supabase_admin is not None

    return status
