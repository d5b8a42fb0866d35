"""
Projection frame model.

One immutable ProjectionFrame is emitted per simulated month. Frames carry
the per-category income and outflow amounts of the step, the outcome of the
cash-then-investments draw cascade, and the ending balance of every account.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class ProjectionFrame(BaseModel):
    """Read-only snapshot of one projection step."""

    model_config = ConfigDict(frozen=True)

    # Position
    step: int = Field(..., ge=0, description="Zero-based step index")
    age: int = Field(..., description="Whole age in years")
    age_exact: float = Field(..., description="Fractional age")
    calendar_year: int = Field(..., description="Calendar year")
    calendar_month: int = Field(..., ge=1, le=12, description="Calendar month")
    is_retired: bool = Field(default=False, description="Retired at this step")

    # Income
    base_income: float = Field(default=0.0, description="Base income (working)")
    scheme_annuity_income: float = Field(
        default=0.0, description="Scheme annuity payout"
    )
    retirement_income: float = Field(
        default=0.0, description="Other retirement income (override)"
    )
    additional_income: float = Field(default=0.0, description="Additional income items")
    total_income: float = Field(default=0.0, description="Sum of all income")

    # Outflows
    education_expense: float = Field(default=0.0, description="Dependents' education")
    retirement_expense: float = Field(
        default=0.0, description="Retirement living expense"
    )
    investment_contribution: float = Field(
        default=0.0, description="Investment contribution funded from cash"
    )
    withdrawals: float = Field(default=0.0, description="Discretionary withdrawals")
    total_outflow: float = Field(
        default=0.0, description="Requested outflow, including any income deficit"
    )

    # Draw cascade
    cash_drawn: float = Field(default=0.0, description="Outflow funded from cash")
    investments_drawn: float = Field(
        default=0.0, description="Outflow funded from investments"
    )
    shortfall: float = Field(default=0.0, ge=0, description="Outflow left unfunded")

    # Scheme flows and events
    scheme_contribution: float = Field(
        default=0.0, description="Contribution credited to sub-accounts A/B/C"
    )
    consolidation_transfer: float = Field(
        default=0.0, description="Amount moved into the annuity source"
    )
    annuity_activated: bool = Field(
        default=False, description="Annuity activation fired at this step"
    )

    interest_earned: float = Field(default=0.0, description="Growth across all accounts")
    net_flow: float = Field(default=0.0, description="Total income less total outflow")

    # Ending balances
    cash: float = 0.0
    investments: float = 0.0
    scheme_a: float = 0.0
    scheme_b: float = 0.0
    scheme_c: float = 0.0
    scheme_annuity: float = 0.0
    total_net_worth: float = Field(default=0.0, description="Sum of all balances")
    total_liquid: float = Field(default=0.0, description="Cash plus investments")

    def to_row(self) -> Dict[str, Any]:
        """Flat dictionary for tabular display and JSON responses."""
        return self.model_dump()
