"""
Projection engine package.

Key Components:
- frame: immutable per-step ProjectionFrame
- engine: ProjectionEngine driving the monthly step loop
- summary: yearly aggregation, chart series and summary-card reductions
"""

from .engine import ProjectionEngine, run_projection
from .frame import ProjectionFrame
from .summary import ProjectionSummary, aggregate_yearly, chart_series, summarize

__all__ = [
    "ProjectionEngine",
    "ProjectionFrame",
    "ProjectionSummary",
    "aggregate_yearly",
    "chart_series",
    "run_projection",
    "summarize",
]
