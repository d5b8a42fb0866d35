"""
Tests for the account ledger.

This module tests monthly growth, clamped debits and transfers, and the
net-worth aggregates of the run-scoped ledger.
"""

import pytest

from wealthplan.models.account_ledger import AccountLedger, create_ledger


@pytest.fixture
def ledger():
    return create_ledger(
        {"cash": 1000.0, "investments": 5000.0, "scheme_a": 2000.0},
        {"cash": 0.12, "investments": 0.06, "scheme_a": 0.024},
    )


class TestCreateLedger:
    """Test ledger creation."""

    def test_core_accounts_open(self, ledger):
        """Test that liquid and scheme accounts open even at zero."""
        for kind in ("cash", "investments", "scheme_a", "scheme_b", "scheme_c"):
            assert ledger.is_open(kind)
        assert ledger.balance("scheme_b") == 0.0

    def test_annuity_account_opens_only_with_balance(self, ledger):
        """Test that the annuity source is not open without a starting balance."""
        assert not ledger.is_open("scheme_annuity")

        funded = create_ledger({"scheme_annuity": 100.0}, {})
        assert funded.balance("scheme_annuity") == 100.0

    def test_unknown_account_rejected(self):
        """Test that only known account kinds can be opened."""
        with pytest.raises(ValueError, match="Unknown account kind"):
            AccountLedger().open_account("crypto")


class TestGrowth:
    """Test monthly growth."""

    def test_monthly_rate_is_annual_over_twelve(self, ledger):
        """Test balance *= 1 + annual/12 for each account."""
        interest = ledger.apply_growth()

        assert ledger.balance("cash") == pytest.approx(1010.0)
        assert ledger.balance("investments") == pytest.approx(5025.0)
        assert ledger.balance("scheme_a") == pytest.approx(2004.0)
        assert interest["cash"] == pytest.approx(10.0)

    def test_rate_override(self, ledger):
        """Test that an override replaces the configured rate for one step."""
        ledger.apply_growth({"investments": -0.12})

        assert ledger.balance("investments") == pytest.approx(4950.0)
        assert ledger.balance("cash") == pytest.approx(1010.0)


class TestFlows:
    """Test credits, debits and transfers."""

    def test_debit_clamps_at_zero(self, ledger):
        """Test that a debit never draws more than the balance."""
        drawn = ledger.debit("cash", 1500.0)

        assert drawn == 1000.0
        assert ledger.balance("cash") == 0.0

    def test_credit_ignores_non_positive(self, ledger):
        """Test that zero or negative credits leave the balance unchanged."""
        assert ledger.credit("cash", -50.0) == 0.0
        assert ledger.balance("cash") == 1000.0

    def test_credit_opens_account(self, ledger):
        """Test that crediting an unopened account opens it."""
        ledger.credit("scheme_annuity", 10.0)
        assert ledger.balance("scheme_annuity") == 10.0

    def test_transfer_clamped(self, ledger):
        """Test that a transfer moves at most the source balance."""
        moved = ledger.transfer("scheme_a", "scheme_annuity", 5000.0)

        assert moved == 2000.0
        assert ledger.balance("scheme_a") == 0.0
        assert ledger.balance("scheme_annuity") == 2000.0

    def test_zero(self, ledger):
        """Test emptying an account."""
        assert ledger.zero("investments") == 5000.0
        assert ledger.balance("investments") == 0.0


class TestAggregates:
    """Test net worth aggregates."""

    def test_totals(self, ledger):
        """Test net worth and liquid totals."""
        assert ledger.total_net_worth() == pytest.approx(8000.0)
        assert ledger.total_liquid() == pytest.approx(6000.0)

    def test_snapshot_reports_every_kind(self, ledger):
        """Test that unopened accounts are reported as zero."""
        snapshot = ledger.snapshot()

        assert snapshot["scheme_annuity"] == 0.0
        assert len(snapshot) == 6
