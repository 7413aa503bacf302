"""
Tests for the reference catalogs and their seeding.
"""

from tenant_ledger.models.enums import NormalBalance
from tenant_ledger.services.reference_service import seed_reference_data


class TestAccountTypes:

    def test_listed_by_id(self, reference_service):
        types = reference_service.list_account_types()

        assert [t.id for t in types] == [1, 2, 3, 4, 5]
        assert [t.code for t in types] == [
            "ASSET", "LIABILITY", "EQUITY", "REVENUE", "EXPENSE",
        ]

    def test_normal_balances(self, reference_service):
        normal = {t.code: t.normal_balance for t in reference_service.list_account_types()}

        assert normal["ASSET"] == NormalBalance.DEBIT
        assert normal["EXPENSE"] == NormalBalance.DEBIT
        assert normal["LIABILITY"] == NormalBalance.CREDIT
        assert normal["EQUITY"] == NormalBalance.CREDIT
        assert normal["REVENUE"] == NormalBalance.CREDIT


class TestCurrencies:

    def test_listed_by_code(self, reference_service):
        codes = [c.code for c in reference_service.list_currencies()]
        assert codes == ["EUR", "GBP", "IRR", "JPY", "USD"]

    def test_precision(self, reference_service):
        precision = {c.code: c.precision for c in reference_service.list_currencies()}
        assert precision["USD"] == 2
        assert precision["JPY"] == 0


class TestSeedReferenceData:

    def test_seeding_twice_adds_nothing(self, gate, reference_service):
        # conftest has already seeded once
        with gate.directory() as db:
            seed_reference_data(db)

        assert len(reference_service.list_account_types()) == 5
        assert len(reference_service.list_currencies()) == 5
