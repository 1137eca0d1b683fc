"""
Database engine, session factory, column types and base model.

Nothing here is created at import time: the SQL ledger store builds
its own engine and session factory from a URL, so the process entry
point decides which database (if any) is used.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import create_engine, event, Numeric, String
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.types import TypeDecorator

from ledger_core.money import CENTS

# Execution option marking a connection whose transaction will write
WRITE_TRANSACTION = "ledger_write_transaction"


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Money(TypeDecorator):
    """
    Exact decimal column.

    PostgreSQL gets NUMERIC(19, 4). SQLite has no exact decimal
    type and would silently store floats, so there the value is
    kept as its decimal string instead.
    """

    impl = Numeric(19, 4)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(40))
        return dialect.type_descriptor(Numeric(19, 4, asdecimal=True))

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value)
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(str(value)).quantize(CENTS)


# --- Base Model Class ---
# Every database model (Account, TransactionEntry, Transfer)
# inherits from this class. SQLAlchemy uses it to track
# all models and generate the correct SQL for table creation.
class Base(DeclarativeBase):
    pass


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    pool_pre_ping=True tests connections before using them,
    which handles cases where the database restarted or a
    connection went stale.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        _use_immediate_transactions(engine)
        return engine

    return create_engine(database_url, pool_pre_ping=True)


def _use_immediate_transactions(engine: Engine) -> None:
    # pysqlite defers BEGIN until the first write, so two transfers
    # could both read a balance before either takes the write lock.
    # Connections flagged with WRITE_TRANSACTION take the lock when the
    # transaction starts; everything else gets a plain deferred BEGIN.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(connection):
        if connection.get_execution_options().get(WRITE_TRANSACTION):
            connection.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            connection.exec_driver_sql("BEGIN")


def build_session_factory(engine: Engine) -> sessionmaker:
    """
    Session factory bound to an engine.

    autoflush=False means SQLAlchemy won't send SQL to the
    database until we explicitly flush or commit. Snapshots are
    built before commit, so expiring on commit is unnecessary.
    """
    return sessionmaker(
        bind=engine,
        autoflush=False,
        expire_on_commit=False,
    )
