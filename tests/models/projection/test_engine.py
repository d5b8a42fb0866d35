"""
Tests for the projection engine.

This module tests determinism, growth, phase gating of contributions, the
exactly-once structural events, the draw cascade and the reference
scenarios.
"""

from datetime import date

import pytest

from wealthplan.models.projection import ProjectionEngine, run_projection
from wealthplan.models.scenario import ProjectionConfig

REFERENCE = date(2025, 1, 1)


def make_config(**overrides):
    data = {
        "person": {
            "reference_date": REFERENCE,
            "current_age": 30,
            "retirement_age": 65,
        },
        "horizon_age": 90,
    }
    data.update(overrides)
    return ProjectionConfig.model_validate(data)


@pytest.fixture
def working_config():
    """A wage earner with contributions, expenses and a one-off withdrawal."""
    return make_config(
        person={
            "reference_date": REFERENCE,
            "current_age": 45,
            "retirement_age": 62,
            "gross_monthly_income": 6000,
            "monthly_expenses": 3000,
        },
        starting_balances={
            "cash": 20000,
            "investments": 50000,
            "scheme_a": 80000,
            "scheme_b": 60000,
            "scheme_c": 40000,
        },
        investment={"percent": 10},
        withdrawals=[{"id": 1, "amount": 40000, "kind": "one_time", "start_age": 50}],
        horizon_age=95,
    )


class TestDeterminism:
    """Test that runs are pure functions of their config."""

    def test_identical_runs(self, working_config):
        """Test that two runs yield identical frames."""
        first = run_projection(working_config)
        second = ProjectionEngine().run(working_config)

        assert [f.model_dump() for f in first] == [f.model_dump() for f in second]

    def test_frame_count_and_positions(self, working_config):
        """Test one frame per month with contiguous steps."""
        frames = run_projection(working_config)

        assert len(frames) == 50 * 12
        assert [frame.step for frame in frames] == list(range(600))
        assert frames[0].calendar_year == 2025
        assert frames[12].calendar_year == 2026


class TestGrowth:
    """Test account growth."""

    def test_balances_strictly_increase_without_flows(self):
        """Test monotonic growth with zero income and expense."""
        config = make_config(
            base_income={"override": 0},
            starting_balances={
                "cash": 1000,
                "investments": 1000,
                "scheme_a": 1000,
                "scheme_b": 1000,
                "scheme_c": 1000,
            },
            horizon_age=50,
        )
        frames = run_projection(config)

        for kind in ("cash", "investments", "scheme_a", "scheme_b", "scheme_c"):
            series = [getattr(frame, kind) for frame in frames]
            assert all(b > a for a, b in zip(series, series[1:])), kind

    def test_growth_applied_before_flows(self):
        """Test that the first step grows the starting balance only."""
        config = make_config(
            base_income={"override": 1000},
            starting_balances={"cash": 12000},
            growth_rates={"cash": 0.12},
            horizon_age=31,
        )
        first = run_projection(config)[0]

        assert first.interest_earned == pytest.approx(120)
        assert first.cash == pytest.approx(12000 * 1.01 + 1000)


class TestPhaseGating:
    """Test that contributions stop once retired."""

    def test_no_contribution_when_retired(self, working_config):
        frames = run_projection(working_config)

        assert any(frame.scheme_contribution > 0 for frame in frames)
        for frame in frames:
            if frame.is_retired:
                assert frame.scheme_contribution == 0

    def test_retirement_flag_is_monotonic(self, working_config):
        flags = [frame.is_retired for frame in run_projection(working_config)]
        first_retired = flags.index(True)

        assert not any(flags[:first_retired])
        assert all(flags[first_retired:])

    def test_career_pause_skips_contribution(self):
        """Test that a career break stops scheme contributions."""
        config = make_config(
            person={
                "reference_date": REFERENCE,
                "current_age": 30,
                "gross_monthly_income": 5000,
            },
            base_income={
                "career_events": [{"kind": "pause", "age": 31, "duration_months": 12}]
            },
            horizon_age=33,
        )
        frames = run_projection(config)

        assert frames[11].scheme_contribution > 0
        assert all(frame.scheme_contribution == 0 for frame in frames[12:24])
        assert frames[24].scheme_contribution > 0


class TestStructuralEvents:
    """Test consolidation and annuity activation across a run."""

    def test_events_fire_once_at_or_after_their_ages(self, working_config):
        frames = run_projection(working_config)
        policy = working_config.scheme_policy

        consolidations = [f for f in frames if f.consolidation_transfer > 0]
        activations = [f for f in frames if f.annuity_activated]

        assert len(consolidations) == 1
        assert len(activations) == 1
        assert consolidations[0].age_exact >= policy.consolidation_age
        assert activations[0].age_exact >= policy.annuity_age

    def test_annuity_income_constant_after_activation(self, working_config):
        """Test that the payout starts at activation and stays flat."""
        frames = run_projection(working_config)
        start = next(i for i, f in enumerate(frames) if f.annuity_activated)

        assert all(f.scheme_annuity_income == 0 for f in frames[:start])
        payouts = {round(f.scheme_annuity_income, 6) for f in frames[start:]}
        assert len(payouts) == 1
        assert payouts.pop() > 0
        assert frames[start].scheme_annuity == 0

    def test_started_past_both_ages(self):
        """Test that both events fire on the first step when already due."""
        config = make_config(
            person={"reference_date": REFERENCE, "current_age": 70, "retirement_age": 65},
            starting_balances={"scheme_b": 100000},
            growth_rates={"scheme_b": 0},
            horizon_age=72,
        )
        frames = run_projection(config)

        assert frames[0].consolidation_transfer == pytest.approx(100000)
        assert frames[0].annuity_activated
        assert sum(f.annuity_activated for f in frames) == 1


class TestCascade:
    """Test the cash, then investments, then shortfall cascade."""

    def test_cascade_accounts_for_every_outflow(self, working_config):
        for frame in run_projection(working_config):
            funded = frame.cash_drawn + frame.investments_drawn + frame.shortfall
            assert funded == pytest.approx(frame.total_outflow)
            assert frame.shortfall >= 0

    def test_investments_drawn_only_when_cash_runs_out(self):
        """Test that investments are tapped only after cash is exhausted."""
        config = make_config(
            base_income={"override": 0},
            starting_balances={"cash": 1000, "investments": 5000},
            growth_rates={"cash": 0, "investments": 0},
            withdrawals=[{"amount": 800, "start_age": 30}],
            horizon_age=40,
        )
        frames = run_projection(config)

        assert frames[0].cash_drawn == 800
        assert frames[0].investments_drawn == 0
        assert frames[1].cash_drawn == pytest.approx(200)
        assert frames[1].investments_drawn == pytest.approx(600)
        for frame in frames:
            if frame.investments_drawn > 0:
                assert frame.cash == 0

    def test_shortfall_recorded_not_raised(self):
        """Test that the run completes with shortfalls once funds are gone."""
        config = make_config(
            base_income={"override": 0},
            starting_balances={"cash": 1000},
            growth_rates={"cash": 0},
            withdrawals=[{"amount": 600, "start_age": 30}],
            horizon_age=31,
        )
        frames = run_projection(config)

        assert len(frames) == 12
        assert frames[1].shortfall == pytest.approx(200)
        assert frames[5].shortfall == pytest.approx(600)
        assert frames[-1].cash == 0

    def test_negative_income_becomes_outflow(self):
        """Test that negative savings capacity is drawn like an expense."""
        config = make_config(
            person={
                "reference_date": REFERENCE,
                "current_age": 30,
                "take_home_override": 2000,
                "monthly_expenses": 2500,
            },
            starting_balances={"cash": 10000},
            growth_rates={"cash": 0, "scheme_a": 0, "scheme_b": 0, "scheme_c": 0},
            horizon_age=31,
        )
        first = run_projection(config)[0]

        assert first.base_income == pytest.approx(-500)
        assert first.total_outflow == pytest.approx(500)
        assert first.cash == pytest.approx(9500)

    def test_investment_contribution_credited_to_investments(self):
        config = make_config(
            base_income={"override": 4000},
            investment={"percent": 25},
            growth_rates={"cash": 0, "investments": 0},
            horizon_age=31,
        )
        frames = run_projection(config)

        assert frames[0].investment_contribution == 1000
        assert frames[0].investments == pytest.approx(1000)
        assert frames[0].cash == pytest.approx(3000)
        assert frames[-1].investments == pytest.approx(12000)

    def test_investment_contribution_needs_cash(self):
        """Test that an empty cash account funds no contribution and draws nothing."""
        config = make_config(
            base_income={"override": 0},
            investment={"override_amount": 500},
            starting_balances={"investments": 10000},
            growth_rates={"cash": 0, "investments": 0},
            horizon_age=31,
        )
        first = run_projection(config)[0]

        assert first.investment_contribution == 0
        assert first.investments_drawn == 0
        assert first.investments == pytest.approx(10000)
        assert first.shortfall == 0

    def test_investment_contribution_capped_at_cash(self):
        """Test a partial contribution when cash covers only part of it."""
        config = make_config(
            base_income={"override": 0},
            investment={"override_amount": 500},
            starting_balances={"cash": 300},
            growth_rates={"cash": 0, "investments": 0},
            horizon_age=31,
        )
        frames = run_projection(config)

        assert frames[0].investment_contribution == pytest.approx(300)
        assert frames[0].cash == 0
        assert frames[0].investments == pytest.approx(300)
        assert frames[1].investment_contribution == 0

    def test_zero_investment_override(self):
        """Test that an explicit zero amount disables the percentage rule."""
        config = make_config(
            base_income={"override": 3000},
            investment={"override_amount": 0, "percent": 50},
            horizon_age=31,
        )
        assert run_projection(config)[0].investment_contribution == 0


class TestReferenceScenarios:
    """Test end-to-end reference scenarios."""

    def test_cash_accumulates_without_leakage(self, baseline_config):
        """Test 50,000 + 3,000 * 420 after 420 months with no growth."""
        frames = run_projection(baseline_config)

        assert len(frames) == 420
        assert frames[-1].cash == pytest.approx(1310000)

    def test_education_window_for_seven_year_old(self):
        """Test 800/month for the first 120 steps, then nothing until tertiary."""
        config = make_config(
            dependents=[{"date_of_birth": date(2018, 1, 1), "gender": "female"}],
            horizon_age=45,
        )
        frames = run_projection(config)

        assert all(f.education_expense == 800 for f in frames[:120])
        # tertiary starts at 19 for this dependent, i.e. step 144
        assert all(f.education_expense == 0 for f in frames[120:144])
        assert frames[144].education_expense == pytest.approx(8750 / 12)

    def test_education_starts_exactly_at_start_age(self):
        """Test no cost the step before the dependent turns 7."""
        config = make_config(
            dependents=[{"date_of_birth": date(2018, 3, 1)}], horizon_age=31
        )
        frames = run_projection(config)

        assert frames[1].education_expense == 0
        assert frames[2].education_expense == 800


class TestInvestmentReturns:
    """Test per-year investment return overrides."""

    def test_returns_replace_configured_rate(self):
        config = make_config(
            base_income={"override": 0},
            starting_balances={"investments": 1200},
            growth_rates={"investments": 0.0},
            horizon_age=32,
        )
        frames = ProjectionEngine().run(config, investment_returns=[0.12, 0.0])

        assert frames[0].investments == pytest.approx(1212)
        assert frames[11].investments == pytest.approx(1200 * 1.01**12)
        assert frames[23].investments == pytest.approx(1200 * 1.01**12)
