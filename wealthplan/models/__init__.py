"""Data models and engine for wealth projections."""

from .account_ledger import AccountLedger, create_ledger
from .cashflow_items import ExpenseItem, IncomeItem
from .contribution_rules import ContributionBreakdown, ContributionRuleTable
from .expense_schedule import (
    Dependent,
    EducationSettings,
    ExpenseSchedule,
    InvestmentContributionSettings,
    RetirementExpenseSettings,
)
from .income_schedule import BaseIncomeSettings, CareerEvent, IncomeSchedule, IncomeTier
from .monte_carlo import MonteCarloConfig, MonteCarloResult, MonteCarloSimulator
from .phase_machine import PhaseStateMachine, SchemePolicy
from .projection import ProjectionEngine, ProjectionFrame, run_projection, summarize
from .scenario import GrowthRates, PersonProfile, ProjectionConfig, StartingBalances

__all__ = [
    "AccountLedger",
    "BaseIncomeSettings",
    "CareerEvent",
    "ContributionBreakdown",
    "ContributionRuleTable",
    "Dependent",
    "EducationSettings",
    "ExpenseItem",
    "ExpenseSchedule",
    "GrowthRates",
    "IncomeItem",
    "IncomeSchedule",
    "IncomeTier",
    "InvestmentContributionSettings",
    "MonteCarloConfig",
    "MonteCarloResult",
    "MonteCarloSimulator",
    "PersonProfile",
    "PhaseStateMachine",
    "ProjectionConfig",
    "ProjectionEngine",
    "ProjectionFrame",
    "RetirementExpenseSettings",
    "SchemePolicy",
    "StartingBalances",
    "create_ledger",
    "run_projection",
    "summarize",
]
