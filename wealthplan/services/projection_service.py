"""
Projection service coordinating HTTP requests and the projection engine.

This service turns a raw request payload into a validated ProjectionConfig,
runs the deterministic or Monte Carlo projection, and shapes the frames into
the JSON structure consumed by the table, chart and summary-card views.
"""

import logging
from typing import Any, Dict, Optional

from wealthplan.models.monte_carlo import MonteCarloConfig, MonteCarloSimulator
from wealthplan.models.projection import (
    ProjectionEngine,
    aggregate_yearly,
    chart_series,
    summarize,
)
from wealthplan.models.scenario import ProjectionConfig

logger = logging.getLogger(__name__)

GRANULARITIES = ("monthly", "yearly")
CHART_FIELDS = ("total_net_worth", "total_liquid", "cash", "investments")


class ProjectionService:
    """Service for running projections from request payloads."""

    def __init__(
        self,
        default_horizon_age: float = 100.0,
        max_paths: int = 5000,
        engine: Optional[ProjectionEngine] = None,
    ) -> None:
        """Initialize the projection service.

        Args:
            default_horizon_age: Horizon used when the payload has none
            max_paths: Upper bound on Monte Carlo paths per request
            engine: Projection engine instance
        """
        self.default_horizon_age = default_horizon_age
        self.max_paths = max_paths
        self.engine = engine or ProjectionEngine()

    def build_config(self, payload: Dict[str, Any]) -> ProjectionConfig:
        """Validate a payload into a ProjectionConfig.

        Raises:
            pydantic.ValidationError: If the payload cannot be sanitised
        """
        data = dict(payload)
        data.setdefault("horizon_age", self.default_horizon_age)
        return ProjectionConfig.model_validate(data)

    def run_projection(
        self, payload: Dict[str, Any], granularity: str = "yearly"
    ) -> Dict[str, Any]:
        """Run a deterministic projection.

        Args:
            payload: Projection input as decoded JSON
            granularity: "monthly" for every frame, "yearly" for one per age

        Returns:
            Dictionary with frames, chart series and summary

        Raises:
            ValueError: If the granularity is unknown
        """
        if granularity not in GRANULARITIES:
            raise ValueError(f"granularity must be one of {GRANULARITIES}")

        config = self.build_config(payload)
        frames = self.engine.run(config)
        rows = frames if granularity == "monthly" else aggregate_yearly(frames)
        summary = summarize(frames, config.person.expected_lifespan)

        logger.info(
            f"Projection served: {len(frames)} steps, granularity {granularity}"
        )
        return {
            "granularity": granularity,
            "frames": [frame.to_row() for frame in rows],
            "charts": {
                name: chart_series(frames, name, yearly=True) for name in CHART_FIELDS
            },
            "summary": summary.model_dump(),
        }

    def run_monte_carlo(
        self,
        payload: Dict[str, Any],
        num_paths: int,
        volatility: float = 0.12,
        seed: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Run a Monte Carlo projection.

        Args:
            payload: Projection input as decoded JSON
            num_paths: Number of paths requested
            volatility: Annual volatility of investment returns
            seed: Random seed for reproducibility

        Returns:
            Dictionary with percentile series and success rate

        Raises:
            ValueError: If ``num_paths`` exceeds the configured maximum
        """
        if num_paths > self.max_paths:
            raise ValueError(f"num_paths cannot exceed {self.max_paths}")

        config = self.build_config(payload)
        simulator = MonteCarloSimulator(
            MonteCarloConfig(num_paths=num_paths, volatility=volatility, seed=seed),
            engine=self.engine,
        )
        return simulator.run(config).to_dict()
