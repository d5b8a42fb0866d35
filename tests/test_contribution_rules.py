"""
Tests for the contribution rule table.

This module tests age-banded rate lookup, the wage ceiling, the split of a
contribution across sub-accounts and the reverse take-home computation.
"""

import pytest
from pydantic import ValidationError

from wealthplan.models.contribution_rules import (
    DEFAULT_WAGE_CEILING,
    Allocation,
    ContributionBand,
    ContributionRuleTable,
)


@pytest.fixture
def table():
    return ContributionRuleTable()


class TestRatesForAge:
    """Test age band lookup."""

    def test_full_rate_when_young(self, table):
        """Test the full rate below the first threshold."""
        rates = table.rates_for_age(30)

        assert rates.employee_rate == 0.20
        assert rates.employer_rate == 0.17
        assert rates.total_rate == pytest.approx(0.37)

    def test_band_upper_bound_is_inclusive(self, table):
        """Test that an age equal to a band bound stays in that band."""
        assert table.rates_for_age(55).employee_rate == 0.20
        assert table.rates_for_age(55.5).employee_rate == 0.17

    def test_rates_taper_with_age(self, table):
        """Test that total rates step down in the older bands."""
        totals = [table.rates_for_age(age).total_rate for age in (50, 58, 63, 68, 75)]
        assert totals == sorted(totals, reverse=True)

    def test_open_ended_last_band(self, table):
        """Test that very old ages use the last band."""
        rates = table.rates_for_age(95)
        assert rates.employee_rate == 0.05
        assert rates.employer_rate == 0.075

    def test_allocations_sum_to_one(self, table):
        """Test that every default band allocates the whole contribution."""
        for band in table.bands:
            allocation = band.allocation
            assert allocation.a + allocation.b + allocation.c == pytest.approx(
                1.0, abs=0.01
            )


class TestComputeContribution:
    """Test the monthly contribution computation."""

    def test_below_ceiling(self, table):
        """Test that the whole wage is contributable below the ceiling."""
        result = table.compute_contribution(5000, 30)

        assert result.employee == pytest.approx(1000)
        assert result.employer == pytest.approx(850)
        assert result.total == pytest.approx(1850)
        assert result.excess_wage == 0
        assert result.take_home == pytest.approx(4000)

    def test_wage_ceiling_caps_contribution(self, table):
        """Test that the excess above the ceiling is reported but not charged."""
        result = table.compute_contribution(10000, 30)

        assert result.contributable_wage == DEFAULT_WAGE_CEILING
        assert result.excess_wage == pytest.approx(10000 - DEFAULT_WAGE_CEILING)
        assert result.employee == pytest.approx(DEFAULT_WAGE_CEILING * 0.20)
        assert result.take_home == pytest.approx(10000 - DEFAULT_WAGE_CEILING * 0.20)

    def test_split_follows_allocation(self, table):
        """Test that the total is split by the band's allocation."""
        result = table.compute_contribution(5000, 30)
        allocation = table.rates_for_age(30).allocation

        assert result.to_a == pytest.approx(result.total * allocation.a)
        assert result.to_b == pytest.approx(result.total * allocation.b)
        assert result.to_c == pytest.approx(result.total * allocation.c)

    def test_negative_wage_is_zero(self, table):
        """Test that a negative wage contributes nothing."""
        result = table.compute_contribution(-100, 30)
        assert result.total == 0


class TestReverseComputation:
    """Test estimating gross wage from take-home pay."""

    def test_round_trip_below_ceiling(self, table):
        """Test that the estimate reproduces the take-home pay."""
        gross = table.estimate_gross_from_take_home(4000, 30)
        assert gross == pytest.approx(5000)

    def test_above_ceiling(self, table):
        """Test the capped employee contribution above the ceiling."""
        gross = table.estimate_gross_from_take_home(9000, 30)
        assert gross == pytest.approx(9000 + DEFAULT_WAGE_CEILING * 0.20)
        assert table.compute_contribution(gross, 30).take_home == pytest.approx(9000)


class TestValidation:
    """Test rule table validation."""

    def test_allocation_must_sum_to_one(self):
        """Test that an allocation not summing to 1 is rejected."""
        with pytest.raises(ValidationError, match="sum"):
            Allocation(a=0.5, b=0.2, c=0.1)

    def test_bands_must_be_ordered(self):
        """Test that bands out of age order are rejected."""
        allocation = Allocation(a=0.6, b=0.2, c=0.2)
        with pytest.raises(ValidationError, match="ascending"):
            ContributionRuleTable(
                bands=[
                    ContributionBand(
                        max_age=60, employee_rate=0.2, employer_rate=0.1, allocation=allocation
                    ),
                    ContributionBand(
                        max_age=50, employee_rate=0.2, employer_rate=0.1, allocation=allocation
                    ),
                    ContributionBand(
                        max_age=None, employee_rate=0.1, employer_rate=0.1, allocation=allocation
                    ),
                ]
            )

    def test_custom_wage_ceiling(self):
        """Test that the ceiling is configuration."""
        table = ContributionRuleTable(wage_ceiling=6000)
        assert table.compute_contribution(8000, 30).excess_wage == pytest.approx(2000)
