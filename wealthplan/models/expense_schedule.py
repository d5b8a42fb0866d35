"""
Expense schedule for monthly projections.

This module resolves the outflows required in each simulated month:
dependents' education costs, retirement living expenses inflated from today's
dollars, the user's discretionary withdrawals, and the investment
contribution taken from income while working.
"""

from datetime import date
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .cashflow_items import ExpenseItem, ScheduledItem, schedule_items, total_due
from .resolvers import resolve_investment_amount
from .sanitize import SanitizedModel
from .time_grid import MONTHS_PER_YEAR, ProjectionClock, inflate, months_between


class Dependent(SanitizedModel):
    """A child whose education the household funds."""

    name: str = Field(default="", description="Display name")
    date_of_birth: Optional[date] = Field(default=None, description="Date of birth")
    gender: Literal["male", "female"] = Field(default="female", description="Gender")

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def blank_date_of_birth(cls, v):
        if v == "":
            return None
        return v

    def age_at(self, year: int, month: int) -> Optional[float]:
        """Fractional age in the given calendar month (None without a DOB)."""
        if self.date_of_birth is None:
            return None
        return months_between(self.date_of_birth, date(year, month, 1)) / MONTHS_PER_YEAR


class EducationSettings(SanitizedModel):
    """Two-stage education cost model, in today's dollars."""

    inflation_rate: float = Field(
        default=0.0, description="Annual education cost inflation"
    )
    monthly_cost: float = Field(
        default=800.0, description="Pre-tertiary cost per month"
    )
    pre_tertiary_start_age: float = Field(
        default=7.0, description="Age pre-tertiary schooling starts"
    )
    pre_tertiary_duration: float = Field(
        default=10.0, description="Years of pre-tertiary schooling"
    )
    tertiary_annual_cost: float = Field(
        default=8750.0, description="Tertiary cost per year"
    )
    tertiary_duration: float = Field(default=4.0, description="Years of tertiary study")
    tertiary_start_age_male: float = Field(
        default=21.0, description="Tertiary start age for males (after national service)"
    )
    tertiary_start_age_female: float = Field(
        default=19.0, description="Tertiary start age for females"
    )

    def tertiary_start_age(self, gender: str) -> float:
        if gender == "male":
            return self.tertiary_start_age_male
        return self.tertiary_start_age_female


class RetirementExpenseSettings(SanitizedModel):
    """Retirement living expense baseline."""

    override: Optional[float] = Field(
        default=None, description="Monthly living expense in retirement (today's dollars)"
    )
    fraction_of_expenses: float = Field(
        default=0.7, description="Share of pre-retirement expenses when no override"
    )
    inflation_rate: float = Field(default=0.03, description="Annual inflation")


class InvestmentContributionSettings(SanitizedModel):
    """Monthly amount moved from income into the investments account."""

    override_amount: Optional[float] = Field(
        default=None, description="Fixed monthly amount"
    )
    percent: float = Field(
        default=0.0, description="Percent of base income when no fixed amount"
    )


class OutflowBreakdown(BaseModel):
    """Required outflows for one step, tagged by category."""

    model_config = ConfigDict(frozen=True)

    education: float = 0.0
    retirement_living: float = 0.0
    withdrawals: float = 0.0
    investment_contribution: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.education
            + self.retirement_living
            + self.withdrawals
            + self.investment_contribution
        )


class ExpenseSchedule(BaseModel):
    """Pure per-step outflow lookup for one projection run."""

    dependents: List[Dependent] = Field(default_factory=list)
    education: EducationSettings = Field(default_factory=EducationSettings)
    retirement_baseline: float = Field(
        default=0.0, description="Resolved retirement living expense, today's dollars"
    )
    retirement_inflation_rate: float = Field(default=0.03)
    investment: InvestmentContributionSettings = Field(
        default_factory=InvestmentContributionSettings
    )
    withdrawal_items: List[ScheduledItem] = Field(default_factory=list)

    @classmethod
    def build(
        cls,
        dependents: Sequence[Dependent],
        education: EducationSettings,
        retirement_baseline: float,
        retirement_inflation_rate: float,
        investment: InvestmentContributionSettings,
        withdrawals: Sequence[ExpenseItem],
        clock: ProjectionClock,
    ) -> "ExpenseSchedule":
        """Create a schedule with withdrawals resolved against ``clock``."""
        return cls(
            dependents=list(dependents),
            education=education,
            retirement_baseline=retirement_baseline,
            retirement_inflation_rate=retirement_inflation_rate,
            investment=investment,
            withdrawal_items=schedule_items(withdrawals, clock),
        )

    def resolve_education_expense(
        self, year: int, month: int, years_elapsed: float
    ) -> float:
        """
        Education cost for all dependents in one calendar month.

        Each stage window is half-open ``[start, start + duration)`` on the
        dependent's fractional age. Costs are inflated from today's dollars
        by whole years elapsed since the reference date.
        """
        settings = self.education
        total = 0.0
        for dependent in self.dependents:
            age = dependent.age_at(year, month)
            if age is None:
                continue

            pre_start = settings.pre_tertiary_start_age
            if pre_start <= age < pre_start + settings.pre_tertiary_duration:
                total += settings.monthly_cost

            tertiary_start = settings.tertiary_start_age(dependent.gender)
            if tertiary_start <= age < tertiary_start + settings.tertiary_duration:
                total += settings.tertiary_annual_cost / MONTHS_PER_YEAR

        return inflate(total, settings.inflation_rate, int(years_elapsed))

    def resolve_retirement_living_expense(
        self, is_retired: bool, years_from_start: float
    ) -> float:
        """Living expense once retired: ``baseline * (1 + r) ** years``."""
        if not is_retired:
            return 0.0
        return inflate(
            self.retirement_baseline, self.retirement_inflation_rate, years_from_start
        )

    def resolve_discretionary_withdrawals(self, step: int) -> float:
        """Sum of withdrawal items due at ``step``."""
        return total_due(self.withdrawal_items, step)

    def resolve_investment_contribution(
        self, is_retired: bool, base_income: float
    ) -> float:
        """Investment contribution; 0 once retired."""
        if is_retired:
            return 0.0
        return resolve_investment_amount(
            self.investment.override_amount, base_income, self.investment.percent
        )

    def resolve(
        self,
        step: int,
        year: int,
        month: int,
        is_retired: bool,
        base_income: float,
    ) -> OutflowBreakdown:
        """All outflow categories for one step."""
        years_elapsed = step / MONTHS_PER_YEAR
        return OutflowBreakdown(
            education=self.resolve_education_expense(year, month, years_elapsed),
            retirement_living=self.resolve_retirement_living_expense(
                is_retired, years_elapsed
            ),
            withdrawals=self.resolve_discretionary_withdrawals(step),
            investment_contribution=self.resolve_investment_contribution(
                is_retired, base_income
            ),
        )

    def education_cost_outlook(self, dependent: Dependent, reference_date: date) -> float:
        """
        Total remaining education cost of one dependent, in inflated dollars.

        Sums every remaining year of both stages from the dependent's whole
        age at ``reference_date``, inflating each year by the years from now.
        """
        age = dependent.age_at(reference_date.year, reference_date.month)
        if age is None:
            return 0.0

        settings = self.education
        current_age = int(age)
        tertiary_start = settings.tertiary_start_age(dependent.gender)
        stages = [
            (
                settings.pre_tertiary_start_age,
                settings.pre_tertiary_duration,
                settings.monthly_cost * MONTHS_PER_YEAR,
            ),
            (tertiary_start, settings.tertiary_duration, settings.tertiary_annual_cost),
        ]

        total = 0.0
        for start, duration, yearly_cost in stages:
            first_year = int(max(start, current_age))
            last_year = int(start + duration)  # exclusive
            for stage_age in range(first_year, last_year):
                years_from_now = stage_age - current_age
                total += inflate(yearly_cost, settings.inflation_rate, years_from_now)
        return total
