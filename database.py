from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
import os
from dotenv import load_dotenv

from utils.logger_factory import new_logger

# Load environment variables from .env file
load_dotenv()

# Fall back to a local SQLite file when DATABASE_URL is not set
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./reservations.db")


def build_engine(database_url: str):
    # For SQLite, need connect_args so the thread pool can share connections
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_size=5,          # modest pool to reduce wait timeouts
        max_overflow=5,       # allow short bursts
        pool_pre_ping=True,   # recycle dead/stale connections automatically
        pool_recycle=1800,    # recycle every 30 minutes
        pool_timeout=30
    )


engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None):
    """Create both tables if missing and confirm the store answers.

    Called once at process start; any exception here is meant to stop the process.
    """
    log = new_logger("init_db")
    bind = bind or engine
    # Import models so they register on Base.metadata
    import models  # noqa: F401
    Base.metadata.create_all(bind=bind)
    with bind.connect() as conn:
        conn.execute(text("SELECT 1"))
    log.info("Connected to database and verified tables")


def close_db(bind=None):
    log = new_logger("close_db")
    (bind or engine).dispose()
    log.info("Database engine disposed")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
