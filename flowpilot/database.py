"""
Database Session Management - Core database connectivity layer
"""

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Generator
import logging

from flowpilot.core.config import settings

logger = logging.getLogger(__name__)

def _engine_options(database_url: str) -> dict:
    """
    Engine keyword arguments for the configured backend.

    Server databases get a sized connection pool. SQLite is used for local
    runs and tests: an in-memory database must share one connection across
    threads, so it uses StaticPool.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        options = {"connect_args": {"check_same_thread": False}}  # Sessions may cross threads in TestClient
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_size": settings.DB_POOL_SIZE,  # Number of persistent connections
        "max_overflow": settings.DB_MAX_OVERFLOW,  # Additional connections when pool is exhausted
        "pool_timeout": settings.DB_POOL_TIMEOUT,  # Wait time for available connection
        "pool_pre_ping": True,  # Verify connection health before using
    }

# Create database engine with connection pooling
engine = create_engine(
    settings.DATABASE_URL,  # PostgreSQL by default, sqlite:// for tests
    echo=settings.DEBUG,  # Log all SQL queries in debug mode
    **_engine_options(settings.DATABASE_URL),  # Pool settings depend on the backend
)

# Log new connections; on SQLite also switch on foreign keys
@event.listens_for(engine, "connect")
def receive_connect(dbapi_conn, connection_record):
    logger.debug("🔌 New database connection established")
    if engine.dialect.name == "sqlite":
        # SQLite ignores ON DELETE CASCADE unless enabled per connection
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

# Track connection lifecycle
@event.listens_for(engine, "close")
def receive_close(dbapi_conn, connection_record):
    logger.debug("🔌 Database connection closed")

# Session factory - creates new sessions for each request
SessionLocal = sessionmaker(
    autocommit=False,  # Require explicit commits
    autoflush=False,  # Flush explicitly or on commit
    bind=engine,  # Sessions use the engine configured above
)

# Base class for all SQLAlchemy models
Base = declarative_base()

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides database session per request.
    Automatically handles session lifecycle and cleanup.
    """
    db = SessionLocal()  # One session per request
    try:
        yield db  # Handed to the endpoint
    except Exception as e:
        logger.error(f"❌ Database error during request: {str(e)}", exc_info=True)
        db.rollback()  # Rollback failed transaction to prevent partial commits
        raise  # Let the exception handlers build the response
    finally:
        db.close()  # Always return the connection to the pool
        logger.debug("✅ Database session closed")

def init_db() -> None:
    """
    Create all tables.
    Idempotent: existing tables are left untouched.
    """
    logger.info("🏗️  Creating database tables...")
    try:
        from flowpilot.models import user, project, task, audit_log  # noqa: F401 - registers models with Base
        Base.metadata.create_all(bind=engine)  # Only missing tables are created
        logger.info("✅ Database tables created successfully")
    except Exception as e:
        logger.error(f"❌ Failed to create database tables: {str(e)}", exc_info=True)
        raise

def seed_default_users(db: Session) -> int:
    """
    Create the initial admin and developer accounts when the users table is empty.

    Returns:
        Number of users created (0 when users already exist)
    """
    from flowpilot.core.security import hash_password
    from flowpilot.models import User

    existing_users = db.query(User).count()  # Seed only an empty database
    if existing_users:
        logger.info(f"👥 Found {existing_users} existing users. Skipping seeding.")
        return 0

    logger.info("🌱 No users found. Seeding initial users...")
    initial_users = [
        User(
            name="admin",
            email=settings.ADMIN_EMAIL,
            full_name="Administrator",
            password=hash_password(settings.ADMIN_PASSWORD),  # Stored as bcrypt hash
        ),
        User(
            name="developer",
            email=settings.DEVELOPER_EMAIL,
            full_name="Developer User",
            password=hash_password(settings.DEVELOPER_PASSWORD),
        ),
    ]
    try:
        db.add_all(initial_users)
        db.commit()  # Both accounts or neither
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to seed users: {str(e)}", exc_info=True)
        raise

    for user in initial_users:
        logger.info(f"✅ Created user: {user.name} ({user.email})")
    return len(initial_users)

def check_db_connection() -> bool:
    """
    Verify database connectivity - used for health checks and startup validation.
    Returns True if connection successful, False otherwise.
    """
    try:
        with SessionLocal() as db:  # Short-lived session, closed on exit
            db.execute(text("SELECT 1"))  # Cheapest round trip to the server
        logger.debug("✅ Database connection successful")
        return True
    except Exception as e:
        logger.error(f"❌ Database connection failed: {str(e)}", exc_info=True)
        return False

def get_pool_stats() -> dict:
    """
    Get current database connection pool statistics.
    Pools without sizing (SQLite) report only their class name.
    """
    pool = engine.pool  # QueuePool for servers, StaticPool for in-memory SQLite
    stats = {"pool_class": type(pool).__name__}
    for name in ("size", "checkedout", "overflow", "checkedin"):
        metric = getattr(pool, name, None)  # StaticPool has no sizing methods
        if callable(metric):
            stats[name] = metric()
    return stats

def close_db_connections():
    """
    Gracefully close all database connections.
    Called during application shutdown.
    """
    logger.info("🔌 Closing database connections...")
    engine.dispose()  # Close every pooled connection
    logger.info("✅ All database connections closed")
