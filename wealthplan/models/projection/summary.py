"""
Caller-side reductions over projection frames.

The engine only emits monthly frames. These helpers re-aggregate them by
year for display, shape them into chart series and reduce them to the
scalars shown on summary cards.
"""

from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from .frame import ProjectionFrame

# Per-step amounts summed within a year; everything else is taken from the
# year's last frame
FLOW_FIELDS = (
    "base_income",
    "scheme_annuity_income",
    "retirement_income",
    "additional_income",
    "total_income",
    "education_expense",
    "retirement_expense",
    "investment_contribution",
    "withdrawals",
    "total_outflow",
    "cash_drawn",
    "investments_drawn",
    "shortfall",
    "scheme_contribution",
    "consolidation_transfer",
    "interest_earned",
    "net_flow",
)


def aggregate_yearly(frames: Sequence[ProjectionFrame]) -> List[ProjectionFrame]:
    """
    Collapse monthly frames into one frame per whole age.

    Flows are summed over the months of each age; balances, position and
    flags come from the age's last month (``annuity_activated`` is set when
    activation happened in any month of that age).
    """
    groups: Dict[int, List[ProjectionFrame]] = {}
    for frame in frames:
        groups.setdefault(frame.age, []).append(frame)

    yearly = []
    for months in groups.values():
        last = months[-1]
        update = {name: sum(getattr(m, name) for m in months) for name in FLOW_FIELDS}
        update["annuity_activated"] = any(m.annuity_activated for m in months)
        yearly.append(last.model_copy(update=update))
    return yearly


def chart_series(
    frames: Sequence[ProjectionFrame], field: str, yearly: bool = True
) -> List[Dict[str, float]]:
    """
    Build a ``[{x, y}]`` series of one frame field against age.

    Args:
        frames: Monthly frames from the engine
        field: Name of the frame field to plot
        yearly: Aggregate by age first (x is the whole age); otherwise
            x is the fractional age of every month

    Returns:
        List of points
    """
    if field not in ProjectionFrame.model_fields:
        raise ValueError(f"Unknown frame field: {field}")

    if yearly:
        return [
            {"x": frame.age, "y": getattr(frame, field)}
            for frame in aggregate_yearly(frames)
        ]
    return [{"x": frame.age_exact, "y": getattr(frame, field)} for frame in frames]


class ProjectionSummary(BaseModel):
    """Scalar reductions shown on summary cards."""

    final_net_worth: float = Field(..., description="Net worth at the horizon")
    final_cash: float = Field(..., description="Cash balance at the horizon")
    final_investments: float = Field(..., description="Investments at the horizon")
    peak_net_worth: float = Field(..., description="Highest net worth reached")
    peak_net_worth_age: float = Field(..., description="Age of the peak")
    net_worth_at_retirement: Optional[float] = Field(
        default=None, description="Net worth in the first retired month"
    )
    total_interest_earned: float = Field(..., description="Growth across the run")
    total_shortfall: float = Field(..., description="Unfunded outflow across the run")
    first_shortfall_age: Optional[float] = Field(
        default=None, description="Age at which funds first run out"
    )
    annuity_monthly_payout: float = Field(
        default=0.0, description="Scheme annuity payout once activated"
    )
    life_expectancy: Optional[float] = Field(
        default=None, description="Age the plan has to last to"
    )
    funds_last_to_life_expectancy: Optional[bool] = Field(
        default=None, description="No shortfall before life expectancy"
    )


def summarize(
    frames: Sequence[ProjectionFrame], life_expectancy: Optional[float] = None
) -> ProjectionSummary:
    """Reduce a frame array to summary-card scalars."""
    if not frames:
        raise ValueError("Cannot summarize an empty projection")

    final = frames[-1]
    peak = max(frames, key=lambda frame: frame.total_net_worth)
    retired = next((frame for frame in frames if frame.is_retired), None)
    first_shortfall = next((frame for frame in frames if frame.shortfall > 0), None)
    annuity = next(
        (frame for frame in frames if frame.scheme_annuity_income > 0), None
    )

    lasts = None
    if life_expectancy is not None:
        lasts = first_shortfall is None or first_shortfall.age_exact >= life_expectancy

    return ProjectionSummary(
        final_net_worth=final.total_net_worth,
        final_cash=final.cash,
        final_investments=final.investments,
        peak_net_worth=peak.total_net_worth,
        peak_net_worth_age=peak.age_exact,
        net_worth_at_retirement=retired.total_net_worth if retired else None,
        total_interest_earned=sum(frame.interest_earned for frame in frames),
        total_shortfall=sum(frame.shortfall for frame in frames),
        first_shortfall_age=first_shortfall.age_exact if first_shortfall else None,
        annuity_monthly_payout=annuity.scheme_annuity_income if annuity else 0.0,
        life_expectancy=life_expectancy,
        funds_last_to_life_expectancy=lasts,
    )
