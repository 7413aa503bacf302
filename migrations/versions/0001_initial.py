"""initial ledger schema

Creates tenants, reference catalogs, accounts, balances and journal
tables, and seeds the account types and currencies.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from datetime import datetime, timezone
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from tenant_ledger.models.base import Money
from tenant_ledger.services.reference_service import ACCOUNT_TYPES, CURRENCIES


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_tenants_name", "tenants", ["name"])

    account_types = op.create_table(
        "account_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(20), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column(
            "normal_balance",
            sa.Enum("DEBIT", "CREDIT", name="normal_balance_enum"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    currencies = op.create_table(
        "currencies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("code", sa.String(3), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("symbol", sa.String(10), nullable=False),
        sa.Column("precision", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )

    op.create_table(
        "accounts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False
        ),
        sa.Column("account_number", sa.String(50), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "account_type_id",
            sa.Integer(),
            sa.ForeignKey("account_types.id"),
            nullable=False,
        ),
        sa.Column(
            "currency_code",
            sa.String(3),
            sa.ForeignKey("currencies.code"),
            nullable=False,
        ),
        sa.Column(
            "parent_account_id",
            sa.Uuid(),
            sa.ForeignKey("accounts.id"),
            nullable=True,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint(
            "tenant_id", "account_number", name="uq_accounts_tenant_number"
        ),
    )
    op.create_index("ix_accounts_tenant_id", "accounts", ["tenant_id"])
    op.create_index("ix_accounts_account_type_id", "accounts", ["account_type_id"])
    op.create_index("ix_accounts_currency_code", "accounts", ["currency_code"])
    op.create_index("ix_accounts_created_at", "accounts", ["created_at"])

    op.create_table(
        "account_balances",
        sa.Column(
            "account_id",
            sa.Uuid(),
            sa.ForeignKey("accounts.id"),
            primary_key=True,
        ),
        sa.Column(
            "tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False
        ),
        sa.Column("debit_balance", Money(), nullable=False),
        sa.Column("credit_balance", Money(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("debit_balance >= 0", name="ck_balance_debit_nonneg"),
        sa.CheckConstraint("credit_balance >= 0", name="ck_balance_credit_nonneg"),
    )
    op.create_index(
        "ix_account_balances_tenant_id", "account_balances", ["tenant_id"]
    )

    op.create_table(
        "journal_entries",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False
        ),
        sa.Column("reference_number", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("entry_date", sa.DateTime(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index(
        "ix_journal_entries_tenant_id", "journal_entries", ["tenant_id"]
    )
    op.create_index(
        "ix_journal_entries_entry_date", "journal_entries", ["entry_date"]
    )

    op.create_table(
        "journal_entry_lines",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column(
            "tenant_id", sa.Uuid(), sa.ForeignKey("tenants.id"), nullable=False
        ),
        sa.Column(
            "journal_entry_id",
            sa.Uuid(),
            sa.ForeignKey("journal_entries.id"),
            nullable=False,
        ),
        sa.Column(
            "account_id", sa.Uuid(), sa.ForeignKey("accounts.id"), nullable=False
        ),
        sa.Column("line_number", sa.Integer(), nullable=False),
        sa.Column("debit", Money(), nullable=False),
        sa.Column("credit", Money(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("debit >= 0", name="ck_line_debit_nonneg"),
        sa.CheckConstraint("credit >= 0", name="ck_line_credit_nonneg"),
    )
    op.create_index(
        "ix_journal_entry_lines_tenant_id", "journal_entry_lines", ["tenant_id"]
    )
    op.create_index(
        "ix_journal_entry_lines_journal_entry_id",
        "journal_entry_lines",
        ["journal_entry_id"],
    )
    op.create_index(
        "ix_journal_entry_lines_account_id", "journal_entry_lines", ["account_id"]
    )

    now = datetime.now(timezone.utc).replace(tzinfo=None)
    op.bulk_insert(account_types, [
        {
            "id": type_id, "code": code, "name": name,
            "normal_balance": normal_balance.value,
            "created_at": now, "updated_at": now,
        }
        for type_id, code, name, normal_balance in ACCOUNT_TYPES
    ])
    op.bulk_insert(currencies, [
        {
            "id": currency_id, "code": code, "name": name,
            "symbol": symbol, "precision": precision,
            "created_at": now, "updated_at": now,
        }
        for currency_id, code, name, symbol, precision in CURRENCIES
    ])


def downgrade() -> None:
    op.drop_table("journal_entry_lines")
    op.drop_table("journal_entries")
    op.drop_table("account_balances")
    op.drop_table("accounts")
    op.drop_table("currencies")
    op.drop_table("account_types")
    op.drop_table("tenants")
    sa.Enum(name="normal_balance_enum").drop(op.get_bind(), checkfirst=True)
