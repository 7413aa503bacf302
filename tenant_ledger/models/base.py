"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Tenant-owned models also mix in
TenantScopedMixin, which is what the access gate keys its row
filtering on.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from decimal import Decimal
from functools import lru_cache

from sqlalchemy import create_engine, event, ForeignKey, Numeric, String, Uuid
from sqlalchemy.engine import Engine
from sqlalchemy.orm import (
    sessionmaker, DeclarativeBase, Mapped, mapped_column, declared_attr,
)
from sqlalchemy.pool import QueuePool
from sqlalchemy.types import TypeDecorator

from tenant_ledger.config import get_settings


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# --- Money ---

MONEY_PRECISION = 19
MONEY_SCALE = 4
# Largest magnitude a Numeric(19, 4) column holds
MAX_MONEY = Decimal(10) ** (MONEY_PRECISION - MONEY_SCALE) - Decimal("0.0001")


class Money(TypeDecorator):
    """
    Exact decimal amount, NUMERIC(19, 4) in the database.

    SQLite has no exact decimal type (its NUMERIC goes through a
    float), so there the value is stored as its canonical text and
    parsed back into a Decimal on load. Amounts are never used in SQL
    arithmetic; the balance ledger adds them in Python.
    """

    impl = Numeric(MONEY_PRECISION, MONEY_SCALE)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String(MONEY_PRECISION + 2))
        return dialect.type_descriptor(
            Numeric(MONEY_PRECISION, MONEY_SCALE, asdecimal=True)
        )

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value).quantize(Decimal(1).scaleb(-MONEY_SCALE))
        if dialect.name == "sqlite":
            return str(value)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


# --- Base Model Class ---
class Base(DeclarativeBase):
    pass


class TenantScopedMixin:
    """
    Marks a model as owned by a tenant.

    ScopedSession filters every SELECT of these models by the bound
    tenant and refuses to flush rows that belong to another one.
    """

    @declared_attr
    def tenant_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            Uuid, ForeignKey("tenants.id"), nullable=False, index=True
        )


# --- Connection pool ---

_checkout_limit: ContextVar[float | None] = ContextVar(
    "checkout_limit", default=None
)


@contextmanager
def checkout_limit(seconds: float | None):
    """
    Cap how long a pool checkout in this context may wait.

    None leaves the pool's own timeout in charge. The cap only ever
    shortens the wait, never extends it.
    """
    token = _checkout_limit.set(seconds)
    try:
        yield
    finally:
        _checkout_limit.reset(token)


class DeadlineAwarePool(QueuePool):
    """
    QueuePool whose checkout wait honours checkout_limit().

    QueuePool reads self._timeout each time it waits for a free
    connection; here that read returns the smaller of the configured
    pool_timeout and the caller's remaining time.
    """

    @property
    def _timeout(self) -> float:
        limit = _checkout_limit.get()
        if limit is None:
            return self._pool_timeout
        return max(0.0, min(self._pool_timeout, limit))

    @_timeout.setter
    def _timeout(self, value: float) -> None:
        self._pool_timeout = value

    def recreate(self):
        # Keep the configured timeout, not a caller's cap
        with checkout_limit(None):
            return super().recreate()


# --- Engine ---
def create_db_engine(url: str, **pool_options) -> Engine:
    """
    Create an engine for the given URL.

    pool_pre_ping=True tests connections before using them, which
    handles a restarted database or a stale connection. Pooled
    engines use DeadlineAwarePool so the access gate can bound a
    checkout by the caller's deadline.

    For SQLite we apply SQLAlchemy's pysqlite transaction recipe:
    the driver's own transaction handling is switched off and every
    transaction starts with BEGIN IMMEDIATE. Concurrent writers then
    queue on the busy timeout instead of deadlocking on a lock
    upgrade, which keeps balance updates serialized in tests.
    """
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
        if ":memory:" not in url and url.rstrip("/") != "sqlite:":
            pool_options.setdefault("poolclass", DeadlineAwarePool)
        engine = create_engine(url, connect_args=connect_args, **pool_options)

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    pool_options.setdefault("poolclass", DeadlineAwarePool)
    return create_engine(url, pool_pre_ping=True, **pool_options)


@lru_cache()
def get_engine() -> Engine:
    """Application engine, built lazily from settings."""
    settings = get_settings()
    return create_db_engine(
        settings.DATABASE_URL,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
    )


@lru_cache()
def get_session_factory() -> sessionmaker:
    # autocommit=False: we control commits explicitly, all-or-nothing.
    # autoflush=False: SQL is only sent when we flush or commit.
    return sessionmaker(
        bind=get_engine(),
        autocommit=False,
        autoflush=False,
    )


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a plain database session for a single request.

    Only used for infrastructure checks such as /health. Ledger
    operations go through the AccessGate instead. The try/finally
    guarantees the connection goes back to the pool.
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
