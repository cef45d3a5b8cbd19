"""Tests for CreditLedger — conditional debits, refunds, and the transaction trail."""

import pytest

from sitecraft.exceptions import InsufficientCreditsError
from sitecraft.models import CreditTransaction
from sitecraft.services.credit_ledger import CreditLedger, KIND_DEBIT, KIND_GRANT, KIND_REFUND
from tests.conftest import make_user


class TestDebit:

    def test_debit_reduces_balance(self, db):
        make_user(db, credits=10)
        ledger = CreditLedger(db)
        assert ledger.debit("test-user", 5, "revision") == 5
        assert ledger.balance("test-user") == 5

    def test_debit_exact_balance_allowed(self, db):
        make_user(db, credits=5)
        assert CreditLedger(db).debit("test-user", 5, "revision") == 0

    def test_insufficient_balance_leaves_balance_untouched(self, db):
        make_user(db, credits=3)
        ledger = CreditLedger(db)
        with pytest.raises(InsufficientCreditsError) as exc_info:
            ledger.debit("test-user", 5, "revision")
        assert exc_info.value.status_code == 403
        assert ledger.balance("test-user") == 3
        assert db.query(CreditTransaction).count() == 0

    def test_unknown_user_is_insufficient(self, db):
        with pytest.raises(InsufficientCreditsError):
            CreditLedger(db).debit("nobody", 5, "revision")

    def test_non_positive_amount_rejected(self, db):
        make_user(db, credits=10)
        with pytest.raises(ValueError):
            CreditLedger(db).debit("test-user", 0, "revision")

    def test_repeated_debits_stop_at_zero(self, db):
        make_user(db, credits=12)
        ledger = CreditLedger(db)
        ledger.debit("test-user", 5, "revision")
        ledger.debit("test-user", 5, "revision")
        with pytest.raises(InsufficientCreditsError):
            ledger.debit("test-user", 5, "revision")
        assert ledger.balance("test-user") == 2


class TestCreditAndHistory:

    def test_refund_restores_balance(self, db):
        make_user(db, credits=10)
        ledger = CreditLedger(db)
        ledger.debit("test-user", 5, "revision", project_id="p1")
        assert ledger.credit("test-user", 5, "revision", project_id="p1") == 10

    def test_every_movement_is_recorded(self, db):
        make_user(db, credits=0)
        ledger = CreditLedger(db)
        ledger.credit("test-user", 20, "initial grant", kind=KIND_GRANT)
        ledger.debit("test-user", 5, "revision", project_id="p1")
        ledger.credit("test-user", 5, "revision", project_id="p1")

        kinds = [t.kind for t in ledger.history("test-user")]
        assert kinds == [KIND_REFUND, KIND_DEBIT, KIND_GRANT]
        assert all(t.amount > 0 for t in ledger.history("test-user"))

    def test_balance_of_unknown_user_is_zero(self, db):
        assert CreditLedger(db).balance("nobody") == 0
