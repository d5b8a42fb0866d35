"""
Projection blueprint.

This module provides API endpoints for running deterministic and Monte Carlo
wealth projections from a JSON configuration.
"""

from typing import Any

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from wealthplan.services.projection_service import ProjectionService

projections_bp = Blueprint("projections", __name__, url_prefix="/api")


def _service() -> ProjectionService:
    return ProjectionService(
        default_horizon_age=current_app.config["DEFAULT_HORIZON_AGE"],
        max_paths=current_app.config["MONTE_CARLO_MAX_PATHS"],
    )


def _validation_response(error: ValidationError) -> Any:
    errors = [
        {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
        for err in error.errors()
    ]
    return jsonify({"error": "Invalid projection input", "details": errors}), 400


@projections_bp.route("/projections", methods=["POST"])
def run_projection() -> Any:
    """Run a deterministic projection.

    Query parameters:
        granularity: "monthly" or "yearly" (default)

    Returns:
        JSON response with frames, chart series and summary
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    granularity = request.args.get("granularity", "yearly")
    try:
        result = _service().run_projection(data, granularity=granularity)
    except ValidationError as e:
        return _validation_response(e)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error running projection: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result), 200


@projections_bp.route("/projections/monte-carlo", methods=["POST"])
def run_monte_carlo() -> Any:
    """Run a Monte Carlo projection.

    The body holds the projection input plus optional ``num_paths``,
    ``volatility`` and ``seed``.

    Returns:
        JSON response with p10/p50/p90 net worth series and success rate
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    payload = dict(data)
    num_paths = payload.pop("num_paths", current_app.config["MONTE_CARLO_DEFAULT_PATHS"])
    volatility = payload.pop("volatility", 0.12)
    seed = payload.pop("seed", None)

    if not isinstance(num_paths, int) or isinstance(num_paths, bool) or num_paths <= 0:
        return jsonify({"error": "num_paths must be a positive integer"}), 400

    try:
        result = _service().run_monte_carlo(
            payload, num_paths=num_paths, volatility=volatility, seed=seed
        )
    except ValidationError as e:
        return _validation_response(e)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error running Monte Carlo projection: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify(result), 200
