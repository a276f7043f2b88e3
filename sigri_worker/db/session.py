import logging

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import sessionmaker

from sigri_worker.db.tables import Base

logger = logging.getLogger(__name__)


def create_db_engine(url: str, **kwargs) -> Engine:
    """Create the SQLAlchemy engine used by the job store."""
    if url.startswith("postgres://"):
        # SQLAlchemy only accepts the postgresql:// scheme
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("sqlite"):
        # Concurrent claimers wait on the file lock instead of failing immediately
        kwargs.setdefault("connect_args", {"timeout": 30, "check_same_thread": False})
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _sqlite_pragmas)
        return engine
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


def _sqlite_pragmas(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, expire_on_commit=False)


def check_connection(engine: Engine) -> None:
    """Raise if the database cannot be reached."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def init_schema(engine: Engine) -> None:
    """Create the automation tables when they do not exist yet."""
    Base.metadata.create_all(engine)
    logger.info("Database schema ensured", extra={"tables": sorted(Base.metadata.tables)})
