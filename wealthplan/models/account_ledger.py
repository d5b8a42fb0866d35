"""
Account ledger for a single projection run.

The ledger holds the named balances (cash, market investments and the
mandatory-scheme sub-accounts) together with their annual growth rates. It is
the only mutable state of a run and is owned by the engine for the duration
of that run.
"""

import logging
from typing import Dict, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

AccountKind = Literal[
    "cash", "investments", "scheme_a", "scheme_b", "scheme_c", "scheme_annuity"
]

ACCOUNT_KINDS: Tuple[str, ...] = (
    "cash",
    "investments",
    "scheme_a",
    "scheme_b",
    "scheme_c",
    "scheme_annuity",
)
LIQUID_ACCOUNTS: Tuple[str, ...] = ("cash", "investments")
SCHEME_ACCOUNTS: Tuple[str, ...] = ("scheme_a", "scheme_b", "scheme_c")


class AccountLedger(BaseModel):
    """Named balances with per-account growth and clamped transfers."""

    balances: Dict[str, float] = Field(
        default_factory=dict, description="Balance per open account"
    )
    growth_rates: Dict[str, float] = Field(
        default_factory=dict, description="Annual growth rate per account"
    )

    def open_account(self, kind: str, balance: float = 0.0) -> None:
        """Open an account if it does not exist yet."""
        if kind not in ACCOUNT_KINDS:
            raise ValueError(f"Unknown account kind: {kind}")
        if kind not in self.balances:
            self.balances[kind] = balance
            logger.debug(f"Opened account {kind} with balance {balance:.2f}")

    def is_open(self, kind: str) -> bool:
        return kind in self.balances

    def balance(self, kind: str) -> float:
        """Current balance of an account (0 when not open)."""
        return self.balances.get(kind, 0.0)

    def apply_growth(
        self, rate_overrides: Optional[Mapping[str, float]] = None
    ) -> Dict[str, float]:
        """
        Grow every open account by one month.

        Args:
            rate_overrides: Annual rates replacing the configured ones for
                this step only (e.g. a sampled market return)

        Returns:
            Interest earned per account
        """
        interest = {}
        for kind, balance in self.balances.items():
            annual_rate = self.growth_rates.get(kind, 0.0)
            if rate_overrides and kind in rate_overrides:
                annual_rate = rate_overrides[kind]
            earned = balance * (annual_rate / 12)
            self.balances[kind] = balance + earned
            interest[kind] = earned
        return interest

    def credit(self, kind: str, amount: float) -> float:
        """Add ``amount`` to an account, opening it if needed."""
        if amount <= 0:
            return 0.0
        self.open_account(kind)
        self.balances[kind] += amount
        return amount

    def debit(self, kind: str, amount: float) -> float:
        """
        Draw up to ``amount`` from an account.

        The draw is clamped to the available balance, so the account never
        goes below zero through a debit.

        Returns:
            The amount actually drawn
        """
        available = max(0.0, self.balance(kind))
        drawn = min(max(0.0, amount), available)
        if drawn > 0:
            self.balances[kind] -= drawn
        return drawn

    def transfer(self, source: str, target: str, amount: float) -> float:
        """Move up to ``amount`` between accounts; returns the amount moved."""
        moved = self.debit(source, amount)
        self.credit(target, moved)
        return moved

    def zero(self, kind: str) -> float:
        """Empty an account and return what it held."""
        held = self.balance(kind)
        if kind in self.balances:
            self.balances[kind] = 0.0
        return held

    def total_net_worth(self) -> float:
        """Sum of all account balances."""
        return sum(self.balances.values())

    def total_liquid(self) -> float:
        """Cash plus investments."""
        return sum(self.balance(kind) for kind in LIQUID_ACCOUNTS)

    def snapshot(self) -> Dict[str, float]:
        """Balances of every account kind, unopened accounts reported as 0."""
        return {kind: self.balance(kind) for kind in ACCOUNT_KINDS}


def create_ledger(
    starting_balances: Mapping[str, float], growth_rates: Mapping[str, float]
) -> AccountLedger:
    """
    Create a fresh run-scoped ledger.

    Cash, investments and the three scheme sub-accounts are always open; the
    annuity-source account only when a starting balance is supplied for it.
    """
    ledger = AccountLedger(growth_rates=dict(growth_rates))
    for kind in LIQUID_ACCOUNTS + SCHEME_ACCOUNTS:
        ledger.open_account(kind, starting_balances.get(kind, 0.0))
    annuity_balance = starting_balances.get("scheme_annuity", 0.0)
    if annuity_balance > 0:
        ledger.open_account("scheme_annuity", annuity_balance)
    return ledger
