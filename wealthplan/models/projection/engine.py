"""
Monthly projection engine.

``ProjectionEngine.run`` is a pure function of its ProjectionConfig: every
call builds a fresh ledger and phase machine, steps month by month from the
current age to the horizon age and returns one immutable frame per step.

Each step runs in a fixed order:

1. Position the step in age and calendar time.
2. Apply one month of growth to every account.
3. Update the phase and fire any consolidation/annuity event now due.
4. While working, credit the scheme contribution to sub-accounts A/B/C.
5. Credit base, annuity, retirement and additional income to cash.
6. Fund the requested outflow from cash, then investments; record the rest
   as shortfall.
7. Record the frame.
"""

import logging
from typing import List, Optional, Sequence

from ..account_ledger import AccountLedger, create_ledger
from ..expense_schedule import ExpenseSchedule
from ..income_schedule import IncomeSchedule
from ..phase_machine import PhaseStateMachine
from ..scenario import ProjectionConfig
from ..time_grid import MONTHS_PER_YEAR, StepPoint
from .frame import ProjectionFrame

logger = logging.getLogger(__name__)

# Float residue below this is not reported as shortfall
FUNDING_TOLERANCE = 1e-9


class ProjectionRun:
    """Run-scoped state of one projection: ledger, phase and schedules."""

    def __init__(
        self,
        config: ProjectionConfig,
        investment_returns: Optional[Sequence[float]] = None,
    ):
        self.config = config
        self.clock = config.clock()
        self.investment_returns = (
            [float(r) for r in investment_returns] if investment_returns is not None else []
        )

        self.ledger: AccountLedger = create_ledger(
            config.starting_balances.model_dump(), config.growth_rates.model_dump()
        )
        self.phase = PhaseStateMachine(
            policy=config.scheme_policy,
            retirement_age=config.person.retirement_age,
            start_age=self.clock.current_age,
        )
        self.income = IncomeSchedule.build(
            config.base_income,
            config.additional_incomes,
            self.clock,
            default_monthly_amount=config.savings_capacity(),
        )
        self.expenses = ExpenseSchedule.build(
            dependents=config.dependents,
            education=config.education,
            retirement_baseline=config.retirement_expense_baseline(),
            retirement_inflation_rate=config.retirement_expense.inflation_rate,
            investment=config.investment,
            withdrawals=config.withdrawals,
            clock=self.clock,
        )
        self.gross_wage = config.gross_wage()
        self.first_shortfall_step: Optional[int] = None

    def _growth_overrides(self, step: int):
        year_index = step // MONTHS_PER_YEAR
        if year_index < len(self.investment_returns):
            return {"investments": self.investment_returns[year_index]}
        return None

    def _credit_contribution(self, point: StepPoint) -> float:
        if self.phase.is_retired or self.income.is_career_paused(point.step):
            return 0.0
        if self.gross_wage <= 0:
            return 0.0

        breakdown = self.config.contribution_rules.compute_contribution(
            self.gross_wage, point.age_exact
        )
        self.ledger.credit("scheme_a", breakdown.to_a)
        self.ledger.credit("scheme_b", breakdown.to_b)
        self.ledger.credit("scheme_c", breakdown.to_c)
        return breakdown.to_a + breakdown.to_b + breakdown.to_c

    def _draw(self, amount: float):
        """Fund ``amount`` from cash, then investments."""
        from_cash = self.ledger.debit("cash", amount)
        from_investments = self.ledger.debit("investments", amount - from_cash)
        return from_cash, from_investments

    def advance(self, point: StepPoint) -> ProjectionFrame:
        """Run one monthly step and return its frame."""
        step = point.step

        interest = self.ledger.apply_growth(self._growth_overrides(step))

        events = self.phase.observe(point.age_exact, self.ledger)
        consolidation_transfer = sum(
            event.amount for event in events if event.kind == "consolidation"
        )
        annuity_activated = any(event.kind == "annuity_activation" for event in events)
        for event in events:
            logger.debug(
                f"Step {step} (age {point.age_exact:.2f}): {event.kind} {event.amount:.2f}"
            )
        is_retired = self.phase.is_retired

        scheme_contribution = self._credit_contribution(point)
        overflow = self.phase.sweep_scheme_c_overflow(point.age_exact, self.ledger)
        if overflow is not None:
            logger.debug(f"Step {step}: scheme_c overflow {overflow.amount:.2f}")

        # Income
        resolved_base = self.income.resolve_base_income(point.age_exact, step, is_retired)
        base_income = 0.0 if is_retired else resolved_base
        retirement_income = resolved_base if is_retired else 0.0
        annuity_income = self.income.resolve_scheme_annuity_income(self.phase)
        additional_income = self.income.resolve_additional_income(step)
        total_income = base_income + retirement_income + annuity_income + additional_income

        income_deficit = 0.0
        if total_income >= 0:
            self.ledger.credit("cash", total_income)
        else:
            income_deficit = -total_income

        # Outflow cascade; the investment contribution is funded last, from cash only
        outflow = self.expenses.resolve(
            step, point.calendar_year, point.calendar_month, is_retired, base_income
        )
        required = outflow.total - outflow.investment_contribution + income_deficit
        required_cash, investments_drawn = self._draw(required)
        investment_contribution = self.ledger.debit(
            "cash", outflow.investment_contribution
        )
        self.ledger.credit("investments", investment_contribution)

        total_outflow = required + investment_contribution
        cash_drawn = required_cash + investment_contribution
        shortfall = required - required_cash - investments_drawn
        if shortfall < FUNDING_TOLERANCE:
            shortfall = 0.0

        if shortfall > 0 and self.first_shortfall_step is None:
            self.first_shortfall_step = step
            logger.info(
                f"First shortfall of {shortfall:.2f} at age {point.age_exact:.2f} "
                f"({point.calendar_year}-{point.calendar_month:02d})"
            )

        balances = self.ledger.snapshot()
        return ProjectionFrame(
            step=step,
            age=point.age,
            age_exact=point.age_exact,
            calendar_year=point.calendar_year,
            calendar_month=point.calendar_month,
            is_retired=is_retired,
            base_income=base_income,
            scheme_annuity_income=annuity_income,
            retirement_income=retirement_income,
            additional_income=additional_income,
            total_income=total_income,
            education_expense=outflow.education,
            retirement_expense=outflow.retirement_living,
            investment_contribution=investment_contribution,
            withdrawals=outflow.withdrawals,
            total_outflow=total_outflow,
            cash_drawn=cash_drawn,
            investments_drawn=investments_drawn,
            shortfall=shortfall,
            scheme_contribution=scheme_contribution,
            consolidation_transfer=consolidation_transfer,
            annuity_activated=annuity_activated,
            interest_earned=sum(interest.values()),
            net_flow=total_income - (total_outflow - income_deficit),
            total_net_worth=self.ledger.total_net_worth(),
            total_liquid=self.ledger.total_liquid(),
            **balances,
        )


class ProjectionEngine:
    """Deterministic month-by-month wealth projection."""

    def run(
        self,
        config: ProjectionConfig,
        investment_returns: Optional[Sequence[float]] = None,
    ) -> List[ProjectionFrame]:
        """
        Project a configuration from the current age to the horizon age.

        Args:
            config: Complete projection input
            investment_returns: Optional annual returns of the investments
                account, one per projection year, replacing its configured
                growth rate (used for Monte Carlo paths)

        Returns:
            One frame per simulated month, in step order
        """
        run = ProjectionRun(config, investment_returns)
        clock = run.clock
        logger.info(
            f"Starting projection: age {clock.current_age:.2f} to "
            f"{clock.horizon_age:.2f} ({clock.total_steps} steps)"
        )

        frames = [run.advance(point) for point in clock.steps()]

        final = frames[-1]
        logger.info(
            f"Projection complete: final net worth {final.total_net_worth:.2f}, "
            f"first shortfall step {run.first_shortfall_step}"
        )
        return frames


def run_projection(
    config: ProjectionConfig, investment_returns: Optional[Sequence[float]] = None
) -> List[ProjectionFrame]:
    """Convenience wrapper around ``ProjectionEngine().run``."""
    return ProjectionEngine().run(config, investment_returns)
