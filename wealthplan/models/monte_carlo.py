"""
Monte Carlo projection.

Runs the deterministic projection engine over many paths, each with its own
sequence of annual investment returns drawn from a normal distribution around
the configured investments growth rate, and reports percentile bands of
year-end net worth together with the share of paths that never hit a
shortfall.
"""

import logging
import math
from typing import Any, Dict, List, Optional

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .projection.engine import ProjectionEngine
from .scenario import ProjectionConfig
from .time_grid import MONTHS_PER_YEAR

logger = logging.getLogger(__name__)

DEFAULT_PERCENTILES = (10, 50, 90)


class MonteCarloConfig(BaseModel):
    """Configuration for a Monte Carlo projection."""

    num_paths: int = Field(
        default=500, ge=1, le=100000, description="Number of simulation paths"
    )
    volatility: float = Field(
        default=0.12, ge=0, le=2, description="Annual volatility of investment returns"
    )
    seed: Optional[int] = Field(
        default=None, ge=0, description="Random seed for reproducibility"
    )
    percentiles: List[float] = Field(
        default_factory=lambda: list(DEFAULT_PERCENTILES),
        description="Percentiles of year-end net worth to report",
    )

    @field_validator("percentiles")
    @classmethod
    def validate_percentiles(cls, v: List[float]) -> List[float]:
        if not v:
            raise ValueError("At least one percentile is required")
        for p in v:
            if not 0 <= p <= 100:
                raise ValueError(f"Percentile must be between 0 and 100, got {p}")
        return sorted(v)


class MonteCarloResult(BaseModel):
    """Year-end net worth of every path with percentile helpers."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    ages: List[int] = Field(..., description="Whole age at each year end")
    net_worth: NDArray[np.float64] = Field(
        ..., description="Year-end net worth (years × paths)"
    )
    shortfall_paths: NDArray[np.bool_] = Field(
        ..., description="Whether each path ever hit a shortfall"
    )
    percentiles: List[float] = Field(default_factory=lambda: list(DEFAULT_PERCENTILES))

    @field_validator("net_worth")
    @classmethod
    def validate_net_worth_shape(cls, v: NDArray) -> NDArray:
        if v.ndim != 2:
            raise ValueError(
                f"net_worth must be 2-dimensional (years × paths), got {v.ndim}D"
            )
        return v

    @property
    def years(self) -> int:
        return int(self.net_worth.shape[0])

    @property
    def paths(self) -> int:
        return int(self.net_worth.shape[1])

    @property
    def success_rate(self) -> float:
        """Fraction of paths that never recorded a shortfall."""
        return float(np.mean(~self.shortfall_paths))

    def percentile_series(self) -> Dict[str, List[float]]:
        """Net worth percentile per year, keyed ``p10``, ``p50``, ..."""
        bands = np.percentile(self.net_worth, self.percentiles, axis=1)
        return {
            f"p{p:g}": [float(value) for value in band]
            for p, band in zip(self.percentiles, bands)
        }

    def final_percentiles(self) -> Dict[str, float]:
        return {key: series[-1] for key, series in self.percentile_series().items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "paths": self.paths,
            "ages": self.ages,
            "success_rate": self.success_rate,
            "percentiles": self.percentile_series(),
            "final": self.final_percentiles(),
        }


class MonteCarloSimulator:
    """Runs a projection over randomly perturbed investment returns."""

    def __init__(
        self,
        config: Optional[MonteCarloConfig] = None,
        engine: Optional[ProjectionEngine] = None,
    ):
        """Initialize the simulator.

        Args:
            config: Path count, volatility, seed and percentiles
            engine: Projection engine to run per path
        """
        self.config = config or MonteCarloConfig()
        self.engine = engine or ProjectionEngine()

    def generate_returns(self, mean: float, years: int) -> NDArray[np.float64]:
        """Annual investment returns (paths × years)."""
        rng = np.random.default_rng(self.config.seed)
        return rng.normal(
            loc=mean,
            scale=self.config.volatility,
            size=(self.config.num_paths, years),
        )

    def run(self, projection: ProjectionConfig) -> MonteCarloResult:
        """
        Run every path of the projection.

        Args:
            projection: The deterministic projection input

        Returns:
            Year-end net worth per path and shortfall flags
        """
        clock = projection.clock()
        years = math.ceil(clock.total_steps / MONTHS_PER_YEAR)
        returns = self.generate_returns(projection.growth_rates.investments, years)

        logger.info(
            f"Running Monte Carlo: {self.config.num_paths} paths over {years} years"
        )

        year_end_steps = [
            min(year * MONTHS_PER_YEAR + MONTHS_PER_YEAR - 1, clock.total_steps - 1)
            for year in range(years)
        ]
        net_worth = np.zeros((years, self.config.num_paths))
        shortfall_paths = np.zeros(self.config.num_paths, dtype=bool)
        ages: List[int] = []

        for path in range(self.config.num_paths):
            frames = self.engine.run(projection, investment_returns=returns[path])
            net_worth[:, path] = [frames[step].total_net_worth for step in year_end_steps]
            shortfall_paths[path] = any(frame.shortfall > 0 for frame in frames)
            if not ages:
                ages = [frames[step].age for step in year_end_steps]

        result = MonteCarloResult(
            ages=ages,
            net_worth=net_worth,
            shortfall_paths=shortfall_paths,
            percentiles=self.config.percentiles,
        )
        logger.info(f"Monte Carlo complete: success rate {result.success_rate:.1%}")
        return result
