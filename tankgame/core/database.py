from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from tankgame.core.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL


def make_connect_args(url: str) -> dict:
    """SQLite needs cross-thread access and a busy timeout so a locked file fails fast."""
    if url.startswith("sqlite"):
        return {"check_same_thread": False, "timeout": settings.DB_TIMEOUT_SECONDS}
    return {}


def enable_sqlite_savepoints(bind) -> None:
    """
    Let SQLAlchemy own BEGIN on pysqlite connections.

    pysqlite defers BEGIN until the first DML statement, which turns an
    outermost SAVEPOINT into its own transaction. Savepoints are how the store
    retries inserts without losing the surrounding transaction.
    """
    @event.listens_for(bind, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(bind, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=make_connect_args(SQLALCHEMY_DATABASE_URL),
    echo=settings.DEBUG
)
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    enable_sqlite_savepoints(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
