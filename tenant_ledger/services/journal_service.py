"""
Journal service: the core of the ledger.

This service enforces the fundamental rules:
1. Every journal entry has at least two lines
2. Every amount is an exact, non-negative decimal
3. Total debits equal total credits
4. Every line's account belongs to the entry's tenant
5. The entry and the balance updates it implies commit together

No other service writes journal entries or changes balances.
Entries are immutable: there is no update, void or delete.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy import select, func
from sqlalchemy.orm import selectinload

from tenant_ledger.access_gate import AccessGate, ScopedSession
from tenant_ledger.deadline import Deadline
from tenant_ledger.errors import (
    FailedPreconditionError,
    InvalidInputError,
    NotFoundError,
)
from tenant_ledger.identifiers import parse_uuid
from tenant_ledger.models.account import Account
from tenant_ledger.models.base import (
    MAX_MONEY,
    MONEY_PRECISION,
    MONEY_SCALE,
    utcnow,
)
from tenant_ledger.models.journal_entry import JournalEntry, JournalEntryLine
from tenant_ledger.schemas.journal import (
    JournalEntryCreate,
    JournalEntryResponse,
    JournalEntryPage,
)
from tenant_ledger.services.balance_ledger import BalanceLedger
from tenant_ledger.services.pagination import clamp_page

logger = logging.getLogger(__name__)

MIN_LINES = 2


@dataclass
class _ParsedLine:
    account_id: uuid.UUID
    debit: Decimal
    credit: Decimal
    description: str


def parse_amount(raw: str, field: str, index: int) -> Decimal:
    """
    Parse one line amount as an exact decimal.

    Rejects anything that is not a finite, non-negative number that
    fits the money columns: at most four decimal places and at most
    fifteen integer digits. Empty means zero.
    """
    if raw is None or raw.strip() == "":
        return Decimal("0")
    try:
        amount = Decimal(raw.strip())
    except InvalidOperation:
        raise InvalidInputError(
            f"invalid {field} amount at line {index}"
        ) from None

    if not amount.is_finite() or amount < 0:
        raise InvalidInputError(f"invalid {field} amount at line {index}")
    if amount.as_tuple().exponent < -MONEY_SCALE:
        raise InvalidInputError(
            f"{field} amount at line {index} has more than "
            f"{MONEY_SCALE} decimal places"
        )
    if amount > MAX_MONEY:
        raise InvalidInputError(
            f"{field} amount at line {index} has more than "
            f"{MONEY_PRECISION - MONEY_SCALE} integer digits"
        )
    return amount


def _as_utc_naive(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class JournalService:

    def __init__(self, gate: AccessGate):
        self.gate = gate

    def create_journal_entry(
        self,
        tenant_id,
        request: JournalEntryCreate,
        deadline: Deadline | None = None,
    ) -> JournalEntryResponse:
        """
        Validate and commit a journal entry as one unit of work.

        Validation (line count, amounts, balance) runs before anything
        is written. The header, the lines and the balance deltas are
        then written in the tenant's scoped transaction; if any step
        fails the gate rolls the whole thing back.
        """
        with self.gate.scope(tenant_id, deadline) as db:
            lines = self._parse_lines(request)
            metadata = self._parse_metadata(request.metadata)
            self._check_balanced(lines)

            self._check_accounts(db, lines)
            db.deadline.check("journal entry persistence")

            entry = self._persist(db, request, metadata, lines)

            BalanceLedger(db).apply_deltas(
                [(line.account_id, line.debit, line.credit) for line in lines]
            )
            response = JournalEntryResponse.model_validate(entry)

        logger.info(
            "Committed journal entry %s (%d lines) for tenant %s",
            response.id, len(response.lines), response.tenant_id,
        )
        return response

    def get_journal_entry(
        self, tenant_id, entry_id, deadline: Deadline | None = None
    ) -> JournalEntryResponse:
        """Return an entry with its lines in creation order."""
        entry_id = parse_uuid(entry_id, "journal entry ID")

        with self.gate.scope(tenant_id, deadline) as db:
            entry = db.execute(
                select(JournalEntry)
                .where(JournalEntry.id == entry_id)
                .options(selectinload(JournalEntry.lines))
            ).scalar_one_or_none()

            if entry is None:
                raise NotFoundError(f"journal entry {entry_id} not found")
            return JournalEntryResponse.model_validate(entry)

    def list_journal_entries(
        self,
        tenant_id,
        account_id=None,
        from_date: datetime | None = None,
        to_date: datetime | None = None,
        page: int = 1,
        page_size: int = 50,
        deadline: Deadline | None = None,
    ) -> JournalEntryPage:
        """
        List entries, latest entry_date first, then newest created.

        With account_id, only entries having at least one line on that
        account are returned, each entry once. Date bounds are
        inclusive.
        """
        window = clamp_page(page, page_size)
        if account_id is not None:
            account_id = parse_uuid(account_id, "account ID")
        from_date = _as_utc_naive(from_date)
        to_date = _as_utc_naive(to_date)

        with self.gate.scope(tenant_id, deadline) as db:
            conditions = [db.owned(JournalEntry)]
            if account_id is not None:
                conditions.append(
                    JournalEntry.id.in_(
                        select(JournalEntryLine.journal_entry_id).where(
                            db.owned(JournalEntryLine),
                            JournalEntryLine.account_id == account_id,
                        )
                    )
                )
            if from_date is not None:
                conditions.append(JournalEntry.entry_date >= from_date)
            if to_date is not None:
                conditions.append(JournalEntry.entry_date <= to_date)

            total_count = db.execute(
                select(func.count(JournalEntry.id)).where(*conditions)
            ).scalar_one()

            entries = db.execute(
                select(JournalEntry)
                .where(*conditions)
                .options(selectinload(JournalEntry.lines))
                .order_by(
                    JournalEntry.entry_date.desc(),
                    JournalEntry.created_at.desc(),
                    JournalEntry.id.desc(),
                )
                .limit(window.page_size)
                .offset(window.offset)
            ).scalars().all()

            return JournalEntryPage(
                items=[JournalEntryResponse.model_validate(e) for e in entries],
                total_count=total_count,
                page=window.page,
                page_size=window.page_size,
            )

    # --- Validation ---

    def _parse_lines(self, request: JournalEntryCreate) -> list[_ParsedLine]:
        if len(request.lines) < MIN_LINES:
            raise InvalidInputError(
                "journal entry must have at least two lines"
            )

        parsed = []
        for index, line in enumerate(request.lines):
            try:
                account_id = parse_uuid(line.account_id)
            except InvalidInputError:
                raise InvalidInputError(
                    f"invalid account ID at line {index}"
                ) from None

            parsed.append(_ParsedLine(
                account_id=account_id,
                debit=parse_amount(line.debit, "debit", index),
                credit=parse_amount(line.credit, "credit", index),
                description=line.description,
            ))
        return parsed

    def _parse_metadata(self, metadata) -> dict | None:
        if metadata is None or metadata == "":
            return None
        if isinstance(metadata, dict):
            return metadata
        try:
            value = json.loads(metadata)
        except json.JSONDecodeError:
            raise InvalidInputError("invalid metadata JSON") from None
        if not isinstance(value, dict):
            raise InvalidInputError("metadata must be a JSON object")
        return value

    def _check_balanced(self, lines: list[_ParsedLine]) -> None:
        total_debits = sum((line.debit for line in lines), Decimal("0"))
        total_credits = sum((line.credit for line in lines), Decimal("0"))

        if total_debits != total_credits:
            logger.warning(
                "Rejected unbalanced journal entry: debits=%s credits=%s",
                total_debits, total_credits,
            )
            raise FailedPreconditionError(
                f"entry not balanced: debits={total_debits}, "
                f"credits={total_credits}"
            )

    def _check_accounts(self, db: ScopedSession, lines: list[_ParsedLine]) -> None:
        """
        Every account must be visible in this tenant's scope and active,
        and all of them must share one currency.
        """
        account_ids = {line.account_id for line in lines}
        accounts = db.execute(
            select(Account).where(Account.id.in_(account_ids))
        ).scalars().all()
        accounts_by_id = {a.id: a for a in accounts}

        missing = account_ids - set(accounts_by_id)
        if missing:
            raise NotFoundError(
                "accounts not found: "
                + ", ".join(sorted(str(m) for m in missing))
            )

        for account in accounts:
            if not account.is_active:
                raise FailedPreconditionError(
                    f"account {account.account_number} is not active"
                )

        currencies = {a.currency_code for a in accounts}
        if len(currencies) > 1:
            raise FailedPreconditionError(
                "journal entry mixes currencies: "
                + ", ".join(sorted(currencies))
            )

    # --- Persistence ---

    def _persist(
        self,
        db: ScopedSession,
        request: JournalEntryCreate,
        metadata: dict | None,
        lines: list[_ParsedLine],
    ) -> JournalEntry:
        now = utcnow()
        entry = JournalEntry(
            tenant_id=db.tenant_id,
            reference_number=request.reference_number,
            description=request.description,
            entry_date=_as_utc_naive(request.entry_date) or now,
            entry_metadata=metadata,
            created_at=now,
            updated_at=now,
        )
        db.add(entry)
        db.flush()

        for index, line in enumerate(lines):
            db.add(JournalEntryLine(
                tenant_id=db.tenant_id,
                journal_entry_id=entry.id,
                account_id=line.account_id,
                line_number=index,
                debit=line.debit,
                credit=line.credit,
                description=line.description,
                created_at=now,
            ))
        db.flush()

        # Load the lines back in their stored order for the response
        db.refresh(entry, attribute_names=["lines"])
        return entry
