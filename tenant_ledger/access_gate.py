"""
Access gate: tenant-scoped units of work.

Every account and journal operation runs inside AccessGate.scope(),
which hands out a ScopedSession bound to exactly one tenant. The
binding is enforced by the session itself rather than by each query
remembering to filter:

- every ORM SELECT gets a tenant_id criteria on every tenant-scoped
  entity (do_orm_execute + with_loader_criteria), so rows of other
  tenants are simply invisible, even when their id is known;
- every flush is checked, and new rows are stamped with the bound
  tenant while rows carrying another tenant_id are rejected.

Tenants and reference data are global and stay visible. Operations
on them use AccessGate.directory(), whose DirectorySession refuses to
touch tenant-scoped tables at all.

Both context managers follow the same protocol: acquire a pooled
connection up front, commit on success, roll back on any failure,
translate storage exceptions into ledger errors, and always close
the session so its connection returns to the pool.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import event, text
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, with_loader_criteria

from tenant_ledger.config import get_settings
from tenant_ledger.deadline import Deadline
from tenant_ledger.errors import (
    LedgerError,
    DeadlineExceededError,
    FailedPreconditionError,
    InternalError,
    NotFoundError,
    TenantScopeViolation,
    UnavailableError,
)
from tenant_ledger.identifiers import parse_uuid
from tenant_ledger.models.base import TenantScopedMixin, checkout_limit
from tenant_ledger.models.tenant import Tenant

logger = logging.getLogger(__name__)


class ScopedSession(Session):
    """A session bound to one tenant for its whole lifetime."""

    @property
    def tenant_id(self) -> uuid.UUID:
        return self.info["tenant_id"]

    @property
    def deadline(self) -> Deadline:
        return self.info["deadline"]

    def owned(self, model):
        """Explicit tenant predicate, for counts and subqueries."""
        return model.tenant_id == self.tenant_id


class DirectorySession(Session):
    """A session limited to global tables (tenants, reference data)."""

    @property
    def deadline(self) -> Deadline:
        return self.info["deadline"]


# --- Read filtering ---

@event.listens_for(ScopedSession, "do_orm_execute")
def _filter_by_tenant(execute_state):
    # Relationship and column loads inherit the criteria from the
    # statement that loaded their parent.
    if (
        execute_state.is_select
        and not execute_state.is_column_load
        and not execute_state.is_relationship_load
    ):
        tenant_id = execute_state.session.info["tenant_id"]
        execute_state.statement = execute_state.statement.options(
            with_loader_criteria(
                TenantScopedMixin,
                lambda cls: cls.tenant_id == tenant_id,
                include_aliases=True,
            )
        )


@event.listens_for(DirectorySession, "do_orm_execute")
def _reject_tenant_rows(execute_state):
    for mapper in execute_state.all_mappers:
        if issubclass(mapper.class_, TenantScopedMixin):
            raise TenantScopeViolation(
                f"{mapper.class_.__name__} is tenant-scoped and cannot be "
                f"accessed outside a tenant scope"
            )


# --- Write guard ---

@event.listens_for(ScopedSession, "before_flush")
def _guard_tenant_writes(session, flush_context, instances):
    tenant_id = session.info["tenant_id"]

    for obj in session.new:
        if not isinstance(obj, TenantScopedMixin):
            continue
        if obj.tenant_id is None:
            obj.tenant_id = tenant_id
        elif obj.tenant_id != tenant_id:
            raise TenantScopeViolation(
                f"cannot write {type(obj).__name__} for another tenant"
            )

    for obj in list(session.dirty) + list(session.deleted):
        if isinstance(obj, TenantScopedMixin) and obj.tenant_id != tenant_id:
            raise TenantScopeViolation(
                f"cannot modify {type(obj).__name__} of another tenant"
            )


@event.listens_for(DirectorySession, "before_flush")
def _guard_directory_writes(session, flush_context, instances):
    for obj in list(session.new) + list(session.dirty) + list(session.deleted):
        if isinstance(obj, TenantScopedMixin):
            raise TenantScopeViolation(
                f"cannot write {type(obj).__name__} outside a tenant scope"
            )


def _translate_storage_error(exc: sa_exc.SQLAlchemyError) -> LedgerError:
    """Map a SQLAlchemy exception onto the ledger error kinds."""
    if isinstance(exc, sa_exc.IntegrityError):
        return FailedPreconditionError(f"constraint violated: {exc.orig}")
    if isinstance(exc, sa_exc.TimeoutError):
        logger.warning("Session pool exhausted: %s", exc)
        return UnavailableError("no database session available")
    if isinstance(exc, (sa_exc.OperationalError, sa_exc.DisconnectionError)):
        logger.warning("Database unavailable: %s", exc)
        return UnavailableError(f"database unavailable: {exc.orig}")
    logger.error("Unexpected storage failure", exc_info=exc)
    return InternalError(f"storage failure: {exc}")


class AccessGate:
    """
    Hands out tenant-scoped and directory sessions.

    One gate per engine. Sessions are never shared: each call to
    scope() or directory() checks out its own pooled connection and
    gives it back when the block exits.
    """

    def __init__(self, engine: Engine, set_tenant_context: bool | None = None):
        self.engine = engine
        if set_tenant_context is None:
            set_tenant_context = get_settings().DB_SET_TENANT_CONTEXT
        self.set_tenant_context = set_tenant_context

        # expire_on_commit=False keeps loaded rows readable after the
        # session closes, so services can build responses from them.
        self._scoped_factory = sessionmaker(
            bind=engine,
            class_=ScopedSession,
            autoflush=False,
            expire_on_commit=False,
        )
        self._directory_factory = sessionmaker(
            bind=engine,
            class_=DirectorySession,
            autoflush=False,
            expire_on_commit=False,
        )

    @contextmanager
    def scope(
        self, tenant_id, deadline: Deadline | None = None
    ) -> Iterator[ScopedSession]:
        """
        Run a unit of work bound to one tenant.

        Raises NotFoundError if the tenant does not exist.
        """
        tenant_id = parse_uuid(tenant_id, "tenant ID")
        deadline = deadline or Deadline.none()
        deadline.check("session acquisition")

        session = self._scoped_factory(
            info={"tenant_id": tenant_id, "deadline": deadline}
        )
        with self._unit_of_work(session, deadline):
            self._bind_tenant(session, tenant_id)
            yield session

    @contextmanager
    def directory(
        self, deadline: Deadline | None = None
    ) -> Iterator[DirectorySession]:
        """Run a unit of work against global tables only."""
        deadline = deadline or Deadline.none()
        deadline.check("session acquisition")

        session = self._directory_factory(info={"deadline": deadline})
        with self._unit_of_work(session, deadline):
            yield session

    @contextmanager
    def _unit_of_work(self, session: Session, deadline: Deadline):
        try:
            # Check out the connection now so pool exhaustion surfaces
            # before any work is attempted. The wait for a free
            # connection is capped by the caller's remaining time.
            with checkout_limit(deadline.remaining):
                session.connection()
            deadline.check("session acquisition")
            yield
            deadline.check("commit")
            session.commit()
        except BaseException as exc:
            self._rollback_quietly(session)
            if isinstance(exc, sa_exc.TimeoutError) and deadline.expired:
                raise DeadlineExceededError(
                    "deadline exceeded during session acquisition"
                ) from exc
            if isinstance(exc, sa_exc.SQLAlchemyError):
                raise _translate_storage_error(exc) from exc
            raise
        finally:
            session.close()

    def _rollback_quietly(self, session: Session) -> None:
        # A failed rollback must not mask the error that caused it
        try:
            session.rollback()
        except sa_exc.SQLAlchemyError:
            logger.warning("Rollback failed", exc_info=True)

    def _bind_tenant(self, session: ScopedSession, tenant_id: uuid.UUID):
        if session.get(Tenant, tenant_id) is None:
            raise NotFoundError(f"tenant {tenant_id} not found")

        if self.set_tenant_context and self.engine.dialect.name == "postgresql":
            # is_local=true: the setting dies with the transaction and
            # never leaks to the next user of this pooled connection.
            try:
                session.execute(
                    text("SELECT set_config('app.current_tenant_id', :tid, true)"),
                    {"tid": str(tenant_id)},
                )
            except sa_exc.SQLAlchemyError as exc:
                raise InternalError(
                    f"unable to set tenant context: {exc}"
                ) from exc
