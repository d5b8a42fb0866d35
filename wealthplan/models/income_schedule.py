"""
Income schedule for monthly projections.

This module resolves, for any simulated month, the base income (a flat
savings capacity or an age-tiered amount), the user's additional time-boxed
income streams, and the scheme annuity payout once it has been activated.
"""

from typing import TYPE_CHECKING, List, Literal, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .cashflow_items import IncomeItem, ScheduledItem, schedule_items, total_due
from .resolvers import resolve_first
from .sanitize import SanitizedModel
from .time_grid import ProjectionClock

if TYPE_CHECKING:
    from .phase_machine import PhaseStateMachine


class IncomeTier(SanitizedModel):
    """Base income applying while ``start_age <= age < end_age``."""

    start_age: float = Field(default=0.0, description="First age of the band")
    end_age: float = Field(default=0.0, description="Age the band stops (exclusive)")
    amount: float = Field(default=0.0, description="Monthly amount within the band")

    def covers(self, age: float) -> bool:
        return self.start_age <= age < self.end_age


class CareerEvent(SanitizedModel):
    """A change to simple-mode base income at a given age and month."""

    kind: Literal["increment", "decrement", "pause", "resume"] = Field(
        default="increment", description="Pay rise, pay cut, career break or return"
    )
    age: float = Field(default=0.0, description="Age at which the event happens")
    month: Optional[int] = Field(default=None, description="Calendar month (1-12)")
    amount: float = Field(
        default=0.0,
        description="Change in monthly income; for resume, the new income (0 = unchanged)",
    )
    duration_months: int = Field(default=24, description="Length of a career break")


class BaseIncomeSettings(SanitizedModel):
    """How the base (salary-derived) income stream is modelled."""

    mode: Literal["simple", "tiered"] = Field(
        default="simple", description="Flat amount or age-tiered bands"
    )
    override: Optional[float] = Field(
        default=None, description="Flat monthly amount replacing the computed default"
    )
    tiers: List[IncomeTier] = Field(
        default_factory=list, description="Age bands for tiered mode; first match wins"
    )
    retirement_income_override: Optional[float] = Field(
        default=None, description="Flat monthly income once retired (pension, rent...)"
    )
    career_events: List[CareerEvent] = Field(
        default_factory=list, description="Pay changes and breaks (simple mode)"
    )


class ScheduledCareerEvent(BaseModel):
    """A career event resolved to its step index."""

    step: int
    kind: str
    amount: float
    duration_months: int


class IncomeSchedule(BaseModel):
    """Pure per-step income lookup for one projection run."""

    settings: BaseIncomeSettings = Field(
        default_factory=BaseIncomeSettings, description="Base income settings"
    )
    default_monthly_amount: float = Field(
        default=0.0, description="Computed savings capacity used in simple mode"
    )
    additional_items: List[ScheduledItem] = Field(
        default_factory=list, description="Additional income resolved to steps"
    )
    career_events: List[ScheduledCareerEvent] = Field(
        default_factory=list, description="Career events ordered by step"
    )

    @classmethod
    def build(
        cls,
        settings: BaseIncomeSettings,
        additional_incomes: Sequence[IncomeItem],
        clock: ProjectionClock,
        default_monthly_amount: float = 0.0,
    ) -> "IncomeSchedule":
        """Create a schedule with every item resolved against ``clock``."""
        events = [
            ScheduledCareerEvent(
                step=clock.step_for(event.age, event.month),
                kind=event.kind,
                amount=event.amount,
                duration_months=max(1, event.duration_months),
            )
            for event in settings.career_events
        ]
        events.sort(key=lambda event: event.step)
        return cls(
            settings=settings,
            default_monthly_amount=default_monthly_amount,
            additional_items=schedule_items(additional_incomes, clock),
            career_events=events,
        )

    def simple_base_amount(self) -> float:
        """Simple-mode amount before career events: override, else default."""
        return resolve_first(self.settings.override, self.default_monthly_amount)

    def _career_state(self, step: int) -> Tuple[float, bool]:
        """Simple-mode amount and pause flag after every event up to ``step``."""
        amount = self.simple_base_amount()
        paused_until: Optional[int] = None
        for event in self.career_events:
            if event.step > step:
                break
            if event.kind == "increment":
                amount += event.amount
            elif event.kind == "decrement":
                amount = max(0.0, amount - event.amount)
            elif event.kind == "pause":
                paused_until = event.step + event.duration_months
            elif event.kind == "resume":
                paused_until = None
                if event.amount > 0:
                    amount = event.amount
        paused = paused_until is not None and step < paused_until
        return amount, paused

    def is_career_paused(self, step: int) -> bool:
        """Whether a career break is in effect at ``step`` (simple mode only)."""
        if self.settings.mode != "simple":
            return False
        return self._career_state(step)[1]

    def resolve_base_income(self, age: float, step: int, is_retired: bool) -> float:
        """
        Resolve the base income for one step.

        Args:
            age: Fractional age at the step
            step: Step index
            is_retired: Whether the person has retired

        Returns:
            Monthly base income; once retired, the retirement income override
            (or 0 when none is set)
        """
        if is_retired:
            return resolve_first(self.settings.retirement_income_override)

        if self.settings.mode == "tiered":
            for tier in self.settings.tiers:
                if tier.covers(age):
                    return tier.amount
            return 0.0

        amount, paused = self._career_state(step)
        return 0.0 if paused else amount

    def resolve_additional_income(self, step: int) -> float:
        """Sum of additional income items paying out at ``step``."""
        return total_due(self.additional_items, step)

    def resolve_scheme_annuity_income(self, phase: "PhaseStateMachine") -> float:
        """Monthly annuity payout; 0 until activation, then held constant."""
        if not phase.annuity_activated:
            return 0.0
        return phase.annuity_monthly_payout
