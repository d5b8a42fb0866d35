"""
Ordered fallback resolvers for derived inputs.

Several inputs follow the same precedence: a user override when one is set,
otherwise a value computed from other inputs, otherwise zero. Each field gets
its own small resolver so the precedence can be tested in isolation.
"""

from typing import Callable, Optional

DEFAULT_LIFE_EXPECTANCY = {"male": 81.0, "female": 85.0}


def is_set(value: Optional[float]) -> bool:
    return value is not None


def is_positive(value: Optional[float]) -> bool:
    return value is not None and value > 0


def resolve_first(
    *candidates: Optional[float],
    default: float = 0.0,
    accept: Callable[[Optional[float]], bool] = is_set,
) -> float:
    """Return the first candidate accepted by ``accept``, else ``default``."""
    for candidate in candidates:
        if accept(candidate):
            return float(candidate)  # type: ignore[arg-type]
    return default


def resolve_take_home(
    take_home_override: Optional[float], computed_take_home: Optional[float]
) -> float:
    """Take-home pay: a positive override wins over the computed value."""
    return resolve_first(
        take_home_override, computed_take_home, accept=is_positive
    )


def resolve_savings_capacity(
    base_income_override: Optional[float], take_home: float, monthly_expenses: float
) -> float:
    """Simple-mode base income: the override (even zero) or take-home less expenses."""
    return resolve_first(base_income_override, take_home - monthly_expenses)


def resolve_retirement_expense_baseline(
    override: Optional[float], monthly_expenses: float, fraction_of_expenses: float
) -> float:
    """Retirement living expense in today's dollars."""
    computed = monthly_expenses * fraction_of_expenses
    return resolve_first(override, computed, accept=is_positive)


def resolve_investment_amount(
    override_amount: Optional[float], base_income: float, percent: float
) -> float:
    """Monthly investment contribution while working."""
    return resolve_first(
        override_amount, base_income * percent / 100, accept=is_set
    )


def resolve_life_expectancy(override: Optional[float], gender: str) -> float:
    """Life expectancy: override, else the gender default."""
    return resolve_first(
        override, DEFAULT_LIFE_EXPECTANCY.get(gender), accept=is_positive
    )
