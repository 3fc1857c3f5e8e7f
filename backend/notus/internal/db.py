import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from notus.env import DATABASE_ECHO, DATABASE_POOL_SIZE, DATABASE_URL, SRC_LOG_LEVELS
from sqlalchemy import BigInteger, Integer, create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, QueuePool

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["DB"])

Base = declarative_base()


def _configure_sqlite(engine: Engine) -> None:
    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT.
    # Take over transaction demarcation and turn on foreign keys.
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    Data-access handle shared by the tables and lifecycle services.

    One instance is built by the process entry point (or a test fixture)
    and handed to every component that reads or writes the database.
    """

    def __init__(
        self,
        url: str = DATABASE_URL,
        echo: bool = DATABASE_ECHO,
        pool_size: Optional[int] = DATABASE_POOL_SIZE,
    ):
        self.url = url

        if url.startswith("sqlite"):
            self.engine = create_engine(
                url, connect_args={"check_same_thread": False}, echo=echo
            )
            _configure_sqlite(self.engine)
        elif pool_size is not None and pool_size > 0:
            self.engine = create_engine(
                url,
                pool_size=pool_size,
                max_overflow=pool_size * 2,
                pool_pre_ping=True,
                poolclass=QueuePool,
                echo=echo,
            )
        elif pool_size == 0:
            self.engine = create_engine(
                url, pool_pre_ping=True, poolclass=NullPool, echo=echo
            )
        else:
            self.engine = create_engine(url, pool_pre_ping=True, echo=echo)

        self.SessionLocal = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False
        )

    def create_all(self) -> None:
        # Register every table on Base before creating them
        import notus.models.users  # noqa: F401
        import notus.models.documents  # noqa: F401
        import notus.models.folders  # noqa: F401
        import notus.models.shares  # noqa: F401
        import notus.models.deleted_accounts  # noqa: F401
        import notus.models.trash_documents  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self, db: Optional[Session] = None) -> Iterator[Session]:
        """
        Yield ``db`` when the caller already holds a session, so table
        methods can take part in an outer transaction. Otherwise open a
        short-lived session and close it afterwards.
        """
        if db is not None:
            yield db
            return

        session = self.SessionLocal()
        try:
            yield session
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit on success, roll back on any exception."""
        with self.SessionLocal() as session:
            with session.begin():
                yield session


# Numeric primary keys. SQLite only autoincrements INTEGER PRIMARY KEY, and
# tables opt into sqlite_autoincrement so deleted ids are never handed out again.
IdType = BigInteger().with_variant(Integer, "sqlite")


def flush_or_commit(session: Session, db: Optional[Session]) -> None:
    """Flush inside a caller-owned transaction, commit a session we opened."""
    if db is None:
        session.commit()
    else:
        session.flush()
