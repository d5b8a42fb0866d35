"""
Time grid for monthly projection steps.

This module maps a simulation step index onto the simulated person's
fractional age and the calendar month, and provides the inflation helpers
shared by the income and expense schedules.
"""

from datetime import date
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

MONTHS_PER_YEAR = 12


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end`` (day of month ignored)."""
    return (end.year - start.year) * MONTHS_PER_YEAR + (end.month - start.month)


def age_at(date_of_birth: date, reference: date) -> float:
    """Fractional age in years, at month granularity."""
    return months_between(date_of_birth, reference) / MONTHS_PER_YEAR


def inflate(amount: float, rate: float, years: float) -> float:
    """Grow ``amount`` from today's dollars by ``rate`` over ``years``."""
    if years == 0 or rate == 0:
        return amount
    return amount * (1 + rate) ** years


class StepPoint(BaseModel):
    """Position of one simulation step in age and calendar time."""

    model_config = ConfigDict(frozen=True)

    step: int = Field(..., ge=0, description="Zero-based month index")
    age_exact: float = Field(..., description="Fractional age at this step")
    calendar_year: int = Field(..., description="Calendar year of this step")
    calendar_month: int = Field(..., ge=1, le=12, description="Calendar month")

    @property
    def age(self) -> int:
        return int(self.age_exact // 1)

    @property
    def years_elapsed(self) -> float:
        """Fractional years since the reference date."""
        return self.step / MONTHS_PER_YEAR


class ProjectionClock(BaseModel):
    """Monthly clock running from the current age to the horizon age."""

    model_config = ConfigDict(frozen=True)

    reference_date: date = Field(..., description="Snapshot date of step 0")
    current_age: float = Field(..., ge=0, description="Age at the reference date")
    horizon_age: float = Field(..., description="Age at which the run stops")

    @property
    def total_steps(self) -> int:
        """Number of monthly steps; at least one."""
        months = round((self.horizon_age - self.current_age) * MONTHS_PER_YEAR)
        return max(1, int(months))

    def point(self, step: int) -> StepPoint:
        """Get the age and calendar date of a step."""
        month_offset = self.reference_date.month - 1 + step
        return StepPoint(
            step=step,
            age_exact=self.current_age + step / MONTHS_PER_YEAR,
            calendar_year=self.reference_date.year + month_offset // MONTHS_PER_YEAR,
            calendar_month=month_offset % MONTHS_PER_YEAR + 1,
        )

    def step_for(self, age: float, month: Optional[int] = None) -> int:
        """
        Step index at which the person is ``age`` in calendar ``month``.

        Args:
            age: Age in years
            month: Calendar month (1-12); defaults to the reference month

        Returns:
            Step index, which may be negative or beyond the horizon
        """
        if month is None:
            month = self.reference_date.month
        years_ahead = round((age - self.current_age) * MONTHS_PER_YEAR)
        return int(years_ahead) + (month - self.reference_date.month)

    def steps(self) -> Tuple[StepPoint, ...]:
        return tuple(self.point(step) for step in range(self.total_steps))
