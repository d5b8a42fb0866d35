"""
Working/retired phase tracking and one-time scheme events.

The phase machine observes the simulated age every step. It flips the person
from working to retired once, and fires two structural events on the scheme
sub-accounts, each guarded by a flag so it happens exactly once per run:

* consolidation: sub-accounts B then A fund the annuity-source account up to
  an inflated target amount;
* annuity activation: the annuity-source balance is converted into a fixed
  monthly payout and the account is zeroed.

When a cap is configured for sub-account C, any excess above it is swept to
sub-account B before consolidation and to the annuity-source account after.
"""

import logging
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .account_ledger import AccountLedger
from .sanitize import SanitizedModel
from .time_grid import inflate

logger = logging.getLogger(__name__)

ANNUITY_SOURCE = "scheme_annuity"

# 2025 reference figures
DEFAULT_CONSOLIDATION_BASELINE = 205800.0
DEFAULT_PAYOUT_RATIO = 1700.0 / 205800.0


class SchemePolicy(SanitizedModel):
    """Jurisdiction policy data driving the scheme's structural events."""

    consolidation_age: float = Field(
        default=55.0, description="Age at which B and A fund the annuity source"
    )
    annuity_age: float = Field(
        default=65.0, description="Age at which the annuity payout starts"
    )
    consolidation_baseline: float = Field(
        default=DEFAULT_CONSOLIDATION_BASELINE,
        description="Consolidation target in today's dollars",
    )
    consolidation_growth_rate: float = Field(
        default=0.035, description="Annual growth of the consolidation target"
    )
    payout_ratio: float = Field(
        default=DEFAULT_PAYOUT_RATIO,
        description="Monthly payout per unit of annuity-source balance",
    )
    scheme_c_cap: Optional[float] = Field(
        default=None, description="Cap on sub-account C today (None = uncapped)"
    )
    scheme_c_cap_growth_rate: float = Field(
        default=0.04, description="Annual growth of the sub-account C cap"
    )
    scheme_c_cap_freeze_age: float = Field(
        default=65.0, description="Age after which the cap stops growing"
    )


class PhaseEvent(BaseModel):
    """A structural event fired during one step."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["retirement", "consolidation", "annuity_activation", "cap_overflow"]
    amount: float = 0.0


class PhaseStateMachine(BaseModel):
    """Run-scoped phase state with exactly-once event guards."""

    policy: SchemePolicy = Field(default_factory=SchemePolicy)
    retirement_age: float = Field(..., description="Age at which work stops")
    start_age: float = Field(..., description="Age at the first step")

    phase: Literal["working", "retired"] = "working"
    consolidation_fired: bool = False
    annuity_activated: bool = False
    annuity_monthly_payout: float = 0.0

    @property
    def is_retired(self) -> bool:
        return self.phase == "retired"

    def consolidation_target(self) -> float:
        """Target amount, inflated from today's baseline to the consolidation age."""
        years = self.policy.consolidation_age - self.start_age
        if years <= 0:
            return self.policy.consolidation_baseline
        return inflate(
            self.policy.consolidation_baseline,
            self.policy.consolidation_growth_rate,
            years,
        )

    def observe(self, age: float, ledger: AccountLedger) -> List[PhaseEvent]:
        """
        Update the phase for ``age`` and fire any event now due.

        Args:
            age: Fractional age at this step
            ledger: The run's ledger, mutated by the events

        Returns:
            Events fired at this step, in firing order
        """
        events = []

        if not self.is_retired and age >= self.retirement_age:
            self.phase = "retired"
            events.append(PhaseEvent(kind="retirement"))

        if not self.consolidation_fired and age >= self.policy.consolidation_age:
            events.append(self._consolidate(ledger))

        if (
            not self.annuity_activated
            and self.consolidation_fired
            and age >= self.policy.annuity_age
        ):
            events.append(self._activate_annuity(ledger))

        return events

    def _consolidate(self, ledger: AccountLedger) -> PhaseEvent:
        self.consolidation_fired = True
        ledger.open_account(ANNUITY_SOURCE)

        remaining = max(0.0, self.consolidation_target() - ledger.balance(ANNUITY_SOURCE))
        moved = 0.0
        for source in ("scheme_b", "scheme_a"):
            if remaining <= 0:
                break
            transferred = ledger.transfer(source, ANNUITY_SOURCE, remaining)
            remaining -= transferred
            moved += transferred

        logger.debug(f"Consolidated {moved:.2f} into {ANNUITY_SOURCE}")
        return PhaseEvent(kind="consolidation", amount=moved)

    def _activate_annuity(self, ledger: AccountLedger) -> PhaseEvent:
        self.annuity_activated = True
        converted = ledger.zero(ANNUITY_SOURCE)
        self.annuity_monthly_payout = converted * self.policy.payout_ratio

        logger.debug(
            f"Annuity activated: {converted:.2f} converted to "
            f"{self.annuity_monthly_payout:.2f}/month"
        )
        return PhaseEvent(kind="annuity_activation", amount=converted)

    def scheme_c_cap_at(self, age: float) -> Optional[float]:
        """Sub-account C cap at ``age``; grows until the freeze age."""
        if self.policy.scheme_c_cap is None:
            return None
        years = min(age, self.policy.scheme_c_cap_freeze_age) - self.start_age
        return inflate(
            self.policy.scheme_c_cap, self.policy.scheme_c_cap_growth_rate, max(0.0, years)
        )

    def sweep_scheme_c_overflow(
        self, age: float, ledger: AccountLedger
    ) -> Optional[PhaseEvent]:
        """Move any sub-account C excess above its cap."""
        cap = self.scheme_c_cap_at(age)
        if cap is None:
            return None

        overflow = ledger.balance("scheme_c") - cap
        if overflow <= 0:
            return None

        target = ANNUITY_SOURCE if self.consolidation_fired else "scheme_b"
        moved = ledger.transfer("scheme_c", target, overflow)
        return PhaseEvent(kind="cap_overflow", amount=moved)
