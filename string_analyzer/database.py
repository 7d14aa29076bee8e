from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
import logging

from string_analyzer import config

logger = logging.getLogger(__name__)

Base = declarative_base()


# ------------------------------------------------------------------------------
# DATABASE URL HANDLING
# ------------------------------------------------------------------------------
def normalize_database_url(url: str) -> str:
    """Point plain mysql:// URLs at the pymysql driver"""
    if url.startswith("mysql://"):
        # SQLAlchemy expects "mysql+pymysql://"
        return url.replace("mysql://", "mysql+pymysql://", 1)
    return url


# ------------------------------------------------------------------------------
# DATABASE ENGINE & SESSION
# ------------------------------------------------------------------------------
def create_session_factory(url: str = None):
    """Build an engine for ``url`` and return a bound session factory."""
    url = normalize_database_url(url or config.DATABASE_URL)
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}

    try:
        engine = create_engine(
            url,
            connect_args=connect_args,
            pool_pre_ping=True,   # prevents "server has gone away" issues
        )
    except Exception as e:
        logger.error(f"❌ Failed to create SQLAlchemy engine: {e}")
        raise

    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ------------------------------------------------------------------------------
# INITIALIZATION
# ------------------------------------------------------------------------------
def init_db(session_factory):
    """Create tables for the string store (safe to call repeatedly)."""
    from string_analyzer.models import string  # noqa: F401  ensure models are registered
    engine = session_factory.kw["bind"]
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("✅ Database tables created successfully.")
    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}")
        raise
