"""
Age-banded contribution rules for the mandatory retirement scheme.

This module provides the contribution rate table: employee and employer rates
that taper with age, the split of each contribution across the scheme's three
sub-accounts, and the monthly wage ceiling above which no contribution is due.
The defaults reproduce the 2025 published rates and are policy data, not
algorithm; callers may supply their own bands.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


class Allocation(BaseModel):
    """Split of a contribution across sub-accounts A, B and C."""

    model_config = ConfigDict(frozen=True)

    a: float = Field(..., ge=0, le=1, description="Share credited to sub-account A")
    b: float = Field(..., ge=0, le=1, description="Share credited to sub-account B")
    c: float = Field(..., ge=0, le=1, description="Share credited to sub-account C")

    @field_validator("c")
    @classmethod
    def validate_total(cls, v: float, info: ValidationInfo) -> float:
        total = info.data.get("a", 0.0) + info.data.get("b", 0.0) + v
        if not (0.99 <= total <= 1.01):  # Published splits are rounded
            raise ValueError(f"Allocation must sum to 1.0, got {total:.4f}")
        return v


class ContributionBand(BaseModel):
    """Contribution rates applying up to (and including) ``max_age``."""

    model_config = ConfigDict(frozen=True)

    max_age: Optional[float] = Field(
        default=None, description="Inclusive upper age bound (None = no bound)"
    )
    employee_rate: float = Field(..., ge=0, le=1, description="Employee share of wage")
    employer_rate: float = Field(..., ge=0, le=1, description="Employer share of wage")
    allocation: Allocation = Field(..., description="Sub-account split")


class ContributionRates(BaseModel):
    """Rates resolved for one age."""

    model_config = ConfigDict(frozen=True)

    employee_rate: float
    employer_rate: float
    allocation: Allocation

    @property
    def total_rate(self) -> float:
        return self.employee_rate + self.employer_rate


class ContributionBreakdown(BaseModel):
    """Monthly contribution for one gross wage at one age."""

    model_config = ConfigDict(frozen=True)

    employee: float = Field(..., description="Employee contribution")
    employer: float = Field(..., description="Employer contribution")
    total: float = Field(..., description="Employee plus employer contribution")
    to_a: float = Field(..., description="Amount credited to sub-account A")
    to_b: float = Field(..., description="Amount credited to sub-account B")
    to_c: float = Field(..., description="Amount credited to sub-account C")
    contributable_wage: float = Field(..., description="Wage subject to contribution")
    excess_wage: float = Field(..., description="Wage above the ceiling (informational)")
    take_home: float = Field(..., description="Gross wage less employee contribution")


def _band(max_age, employee, employer, a, b, c) -> ContributionBand:
    return ContributionBand(
        max_age=max_age,
        employee_rate=employee,
        employer_rate=employer,
        allocation=Allocation(a=a, b=b, c=c),
    )


DEFAULT_WAGE_CEILING = 7400.0  # 2025 monthly ordinary wage ceiling

DEFAULT_BANDS: List[ContributionBand] = [
    _band(35, 0.20, 0.17, 0.6216, 0.1622, 0.2162),
    _band(45, 0.20, 0.17, 0.5676, 0.1892, 0.2432),
    _band(50, 0.20, 0.17, 0.5135, 0.2162, 0.2703),
    _band(55, 0.20, 0.17, 0.4324, 0.2703, 0.2973),
    _band(60, 0.17, 0.155, 0.2973, 0.3514, 0.3514),
    _band(65, 0.115, 0.12, 0.1362, 0.3915, 0.4723),
    _band(70, 0.075, 0.09, 0.1212, 0.3030, 0.5758),
    _band(None, 0.05, 0.075, 0.08, 0.265, 0.655),
]


class ContributionRuleTable(BaseModel):
    """Pure age lookup of contribution rates and sub-account allocation."""

    model_config = ConfigDict(frozen=True)

    bands: List[ContributionBand] = Field(
        default_factory=lambda: list(DEFAULT_BANDS),
        description="Bands ordered by ascending max_age; last band open-ended",
    )
    wage_ceiling: float = Field(
        default=DEFAULT_WAGE_CEILING, ge=0, description="Monthly wage ceiling"
    )

    @field_validator("bands")
    @classmethod
    def validate_bands(cls, v: List[ContributionBand]) -> List[ContributionBand]:
        if not v:
            raise ValueError("At least one contribution band is required")
        bounds = [band.max_age for band in v[:-1]]
        if any(bound is None for bound in bounds):
            raise ValueError("Only the last band may be open-ended")
        if bounds != sorted(bounds):
            raise ValueError("Bands must be ordered by ascending max_age")
        return v

    def rates_for_age(self, age: float) -> ContributionRates:
        """
        Get the contribution rates applying at an age.

        Args:
            age: Fractional age in years

        Returns:
            Employee and employer rates with the sub-account allocation
        """
        band = self.bands[-1]
        for candidate in self.bands:
            if candidate.max_age is None or age <= candidate.max_age:
                band = candidate
                break
        return ContributionRates(
            employee_rate=band.employee_rate,
            employer_rate=band.employer_rate,
            allocation=band.allocation,
        )

    def compute_contribution(self, gross_income: float, age: float) -> ContributionBreakdown:
        """
        Compute the monthly contribution on a gross wage.

        Contributions apply to ``min(gross_income, wage_ceiling)``; the part of
        the wage above the ceiling is reported but attracts no contribution.
        """
        gross = max(0.0, gross_income)
        contributable = min(gross, self.wage_ceiling)
        rates = self.rates_for_age(age)

        employee = contributable * rates.employee_rate
        employer = contributable * rates.employer_rate
        total = employee + employer

        return ContributionBreakdown(
            employee=employee,
            employer=employer,
            total=total,
            to_a=total * rates.allocation.a,
            to_b=total * rates.allocation.b,
            to_c=total * rates.allocation.c,
            contributable_wage=contributable,
            excess_wage=max(0.0, gross - self.wage_ceiling),
            take_home=gross - employee,
        )

    def estimate_gross_from_take_home(self, take_home: float, age: float) -> float:
        """
        Estimate the gross wage that yields a given take-home pay.

        Below the ceiling the employee contribution is proportional to the
        wage; above it the contribution is fixed at the capped amount.
        """
        net = max(0.0, take_home)
        employee_rate = self.rates_for_age(age).employee_rate
        if employee_rate >= 1:
            return net

        threshold = self.wage_ceiling * (1 - employee_rate)
        if net <= threshold:
            return net / (1 - employee_rate)
        return net + self.wage_ceiling * employee_rate
