"""
Projection configuration models.

A ProjectionConfig is the complete, immutable input of one projection run:
the person, starting balances and growth rates, income and expense settings,
scheme policy and the horizon. Partial updates go through the ``with_*``
methods, each returning a new validated config.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, field_validator, model_validator

from .cashflow_items import ExpenseItem, IncomeItem
from .contribution_rules import ContributionRuleTable
from .expense_schedule import (
    Dependent,
    EducationSettings,
    InvestmentContributionSettings,
    RetirementExpenseSettings,
)
from .income_schedule import BaseIncomeSettings, IncomeTier
from .phase_machine import SchemePolicy
from .resolvers import (
    resolve_life_expectancy,
    resolve_retirement_expense_baseline,
    resolve_savings_capacity,
    resolve_take_home,
)
from .sanitize import SanitizedModel
from .time_grid import ProjectionClock, age_at

logger = logging.getLogger(__name__)


class PersonProfile(SanitizedModel):
    """The person whose finances are projected."""

    reference_date: date = Field(..., description="Snapshot date of the projection")
    date_of_birth: Optional[date] = Field(default=None, description="Date of birth")
    current_age: Optional[float] = Field(
        default=None, description="Age at the reference date (overrides the DOB)"
    )
    gender: Literal["male", "female"] = Field(default="male", description="Gender")
    retirement_age: float = Field(default=65.0, description="Target retirement age")
    gross_monthly_income: float = Field(
        default=0.0, description="Gross monthly wage subject to contributions"
    )
    take_home_override: Optional[float] = Field(
        default=None, description="Monthly take-home pay, if known"
    )
    monthly_expenses: float = Field(
        default=0.0, description="Total monthly expenses today"
    )
    life_expectancy: Optional[float] = Field(
        default=None, description="Life expectancy (default by gender)"
    )

    @field_validator("date_of_birth", mode="before")
    @classmethod
    def blank_date_of_birth(cls, v):
        if v == "":
            return None
        return v

    @property
    def age(self) -> float:
        """Current age: explicit value, else derived from DOB and reference date."""
        if self.current_age is not None:
            return max(0.0, self.current_age)
        if self.date_of_birth is not None:
            return max(0.0, age_at(self.date_of_birth, self.reference_date))
        return 0.0

    @property
    def expected_lifespan(self) -> float:
        return resolve_life_expectancy(self.life_expectancy, self.gender)


class StartingBalances(SanitizedModel):
    """Balance of each account at the reference date."""

    cash: float = 0.0
    investments: float = 0.0
    scheme_a: float = 0.0
    scheme_b: float = 0.0
    scheme_c: float = 0.0
    scheme_annuity: float = 0.0


class GrowthRates(SanitizedModel):
    """Annual growth rate of each account."""

    cash: float = 0.0005
    investments: float = 0.05
    scheme_a: float = 0.025
    scheme_b: float = 0.04
    scheme_c: float = 0.04
    scheme_annuity: float = 0.0408


class ProjectionConfig(SanitizedModel):
    """Complete input of one projection run."""

    person: PersonProfile
    starting_balances: StartingBalances = Field(default_factory=StartingBalances)
    growth_rates: GrowthRates = Field(default_factory=GrowthRates)
    base_income: BaseIncomeSettings = Field(default_factory=BaseIncomeSettings)
    additional_incomes: List[IncomeItem] = Field(default_factory=list)
    withdrawals: List[ExpenseItem] = Field(default_factory=list)
    dependents: List[Dependent] = Field(default_factory=list)
    education: EducationSettings = Field(default_factory=EducationSettings)
    retirement_expense: RetirementExpenseSettings = Field(
        default_factory=RetirementExpenseSettings
    )
    investment: InvestmentContributionSettings = Field(
        default_factory=InvestmentContributionSettings
    )
    contribution_rules: ContributionRuleTable = Field(
        default_factory=ContributionRuleTable
    )
    scheme_policy: SchemePolicy = Field(default_factory=SchemePolicy)
    horizon_age: float = Field(default=100.0, description="Age at which the run stops")

    @model_validator(mode="before")
    @classmethod
    def clamp_annuity_age(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("scheme_policy") is None:
            return data

        policy = SchemePolicy.model_validate(data["scheme_policy"])
        if policy.annuity_age < policy.consolidation_age:
            logger.warning(
                f"Annuity age {policy.annuity_age} precedes consolidation age "
                f"{policy.consolidation_age}; clamping to {policy.consolidation_age}"
            )
            policy = SchemePolicy.model_validate(
                {**policy.model_dump(), "annuity_age": policy.consolidation_age}
            )
        return {**data, "scheme_policy": policy}

    # Derived values

    def clock(self) -> ProjectionClock:
        return ProjectionClock(
            reference_date=self.person.reference_date,
            current_age=self.person.age,
            horizon_age=self.horizon_age,
        )

    def gross_wage(self) -> float:
        """Monthly wage subject to contributions.

        The stated gross income when given, otherwise the gross estimated
        back from a take-home override, otherwise zero.
        """
        if self.person.gross_monthly_income > 0:
            return self.person.gross_monthly_income
        take_home = self.person.take_home_override
        if take_home is not None and take_home > 0:
            return self.contribution_rules.estimate_gross_from_take_home(
                take_home, self.person.age
            )
        return 0.0

    def take_home(self) -> float:
        """Monthly take-home pay: override, else gross less employee contribution."""
        computed = None
        if self.person.gross_monthly_income > 0:
            computed = self.contribution_rules.compute_contribution(
                self.person.gross_monthly_income, self.person.age
            ).take_home
        return resolve_take_home(self.person.take_home_override, computed)

    def savings_capacity(self) -> float:
        """Default simple-mode base income."""
        return resolve_savings_capacity(
            None, self.take_home(), self.person.monthly_expenses
        )

    def retirement_expense_baseline(self) -> float:
        settings = self.retirement_expense
        return resolve_retirement_expense_baseline(
            settings.override,
            self.person.monthly_expenses,
            settings.fraction_of_expenses,
        )

    # Named updates

    def _replace(self, **changes: Any) -> "ProjectionConfig":
        data: Dict[str, Any] = self.model_dump()
        data.update(changes)
        return type(self).model_validate(data)

    def _replace_section(self, section: str, **changes: Any) -> "ProjectionConfig":
        data = getattr(self, section).model_dump()
        data.update(changes)
        return self._replace(**{section: data})

    def with_person(self, **changes: Any) -> "ProjectionConfig":
        return self._replace_section("person", **changes)

    def with_retirement_age(self, retirement_age: float) -> "ProjectionConfig":
        return self.with_person(retirement_age=retirement_age)

    def with_starting_balances(self, **balances: float) -> "ProjectionConfig":
        return self._replace_section("starting_balances", **balances)

    def with_growth_rates(self, **rates: float) -> "ProjectionConfig":
        return self._replace_section("growth_rates", **rates)

    def with_horizon_age(self, horizon_age: float) -> "ProjectionConfig":
        return self._replace(horizon_age=horizon_age)

    def with_simple_income(self, override: Optional[float]) -> "ProjectionConfig":
        return self._replace_section("base_income", mode="simple", override=override)

    def with_income_tiers(self, tiers: List[IncomeTier]) -> "ProjectionConfig":
        return self._replace_section(
            "base_income", mode="tiered", tiers=[tier.model_dump() for tier in tiers]
        )

    def with_additional_income(self, item: IncomeItem) -> "ProjectionConfig":
        items = [existing.model_dump() for existing in self.additional_incomes]
        return self._replace(additional_incomes=items + [item.model_dump()])

    def without_additional_income(self, item_id: Any) -> "ProjectionConfig":
        items = [i.model_dump() for i in self.additional_incomes if i.id != item_id]
        return self._replace(additional_incomes=items)

    def with_withdrawal(self, item: ExpenseItem) -> "ProjectionConfig":
        items = [existing.model_dump() for existing in self.withdrawals]
        return self._replace(withdrawals=items + [item.model_dump()])

    def without_withdrawal(self, item_id: Any) -> "ProjectionConfig":
        items = [w.model_dump() for w in self.withdrawals if w.id != item_id]
        return self._replace(withdrawals=items)

    def with_dependent(self, dependent: Dependent) -> "ProjectionConfig":
        dependents = [existing.model_dump() for existing in self.dependents]
        return self._replace(dependents=dependents + [dependent.model_dump()])

    def with_education(self, **changes: Any) -> "ProjectionConfig":
        return self._replace_section("education", **changes)

    def with_retirement_expense(self, **changes: Any) -> "ProjectionConfig":
        return self._replace_section("retirement_expense", **changes)

    def with_investment(self, **changes: Any) -> "ProjectionConfig":
        return self._replace_section("investment", **changes)

    def with_scheme_policy(self, **changes: Any) -> "ProjectionConfig":
        return self._replace_section("scheme_policy", **changes)
