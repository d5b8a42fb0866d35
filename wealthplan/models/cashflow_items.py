"""
Time-boxed cashflow items shared by income and withdrawal schedules.

An item is either paid once, at its start month, or recurs at a monthly,
quarterly or yearly cadence between its start and (optional) end month.
"""

from typing import List, Literal, Optional, Sequence, Tuple, Union

from pydantic import Field, field_validator

from .sanitize import SanitizedModel
from .time_grid import ProjectionClock

CADENCE_MONTHS = {"monthly": 1, "quarterly": 3, "yearly": 12}


class CashflowItem(SanitizedModel):
    """A user-defined income or withdrawal line."""

    id: Union[int, str] = Field(default=0, description="Caller-assigned identifier")
    name: str = Field(default="", description="Display name")
    amount: float = Field(default=0.0, description="Amount per occurrence")
    kind: Literal["one_time", "recurring"] = Field(
        default="recurring", description="Paid once or on a cadence"
    )
    cadence: Literal["monthly", "quarterly", "yearly"] = Field(
        default="monthly", description="Recurrence cadence (recurring only)"
    )
    start_age: float = Field(default=0.0, description="Age of first payment")
    start_month: Optional[int] = Field(
        default=None, description="Calendar month (1-12) of first payment"
    )
    end_age: Optional[float] = Field(
        default=None, description="Age of last payment (None = open-ended)"
    )
    end_month: Optional[int] = Field(
        default=None, description="Calendar month (1-12) of last payment"
    )

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v):
        # Stored records spell it "onetime"
        if v == "onetime":
            return "one_time"
        return v

    @field_validator("start_month", "end_month")
    @classmethod
    def clamp_month(cls, v: Optional[int]) -> Optional[int]:
        if v is None:
            return v
        return min(12, max(1, v))

    def step_window(self, clock: ProjectionClock) -> Tuple[int, Optional[int]]:
        """Resolve the item's first and last step (inclusive)."""
        start = clock.step_for(self.start_age, self.start_month)
        if self.end_age is None:
            return start, None
        end = clock.step_for(self.end_age, self.end_month or 12)
        return start, end


class IncomeItem(CashflowItem):
    """Additional income stream (rental, dividends, side business, ...)."""


class ExpenseItem(CashflowItem):
    """Discretionary withdrawal (renovation, car, travel, ...)."""


class ScheduledItem(SanitizedModel):
    """A cashflow item resolved to step indices."""

    amount: float
    kind: Literal["one_time", "recurring"]
    cadence: Literal["monthly", "quarterly", "yearly"]
    start_step: int
    end_step: Optional[int] = None

    def is_due(self, step: int) -> bool:
        """Whether the item pays out at ``step``."""
        if step < self.start_step:
            return False
        if self.kind == "one_time":
            return step == self.start_step
        if self.end_step is not None and step > self.end_step:
            return False
        return (step - self.start_step) % CADENCE_MONTHS[self.cadence] == 0


def schedule_items(
    items: Sequence[CashflowItem], clock: ProjectionClock
) -> List[ScheduledItem]:
    """Resolve items against a clock so per-step lookups are pure arithmetic."""
    scheduled = []
    for item in items:
        start, end = item.step_window(clock)
        scheduled.append(
            ScheduledItem(
                amount=item.amount,
                kind=item.kind,
                cadence=item.cadence,
                start_step=start,
                end_step=end,
            )
        )
    return scheduled


def total_due(items: Sequence[ScheduledItem], step: int) -> float:
    """Sum of every scheduled item paying out at ``step``."""
    return sum(item.amount for item in items if item.is_due(step))
