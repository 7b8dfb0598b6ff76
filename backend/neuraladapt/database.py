import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from neuraladapt.config import SQLALCHEMY_DATABASE_URL

logger = logging.getLogger(__name__)

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # FastAPI may touch the session from a worker thread
    connect_args = {"check_same_thread": False}

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create the tables if they do not exist yet. There are no migrations."""
    import neuraladapt.models  # noqa: F401  registers every model on Base

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info(f"Database ready at {target.url}")
