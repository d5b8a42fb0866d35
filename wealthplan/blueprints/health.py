"""Health check blueprint."""

from flask import Blueprint, Response, current_app, jsonify

health_bp = Blueprint("health", __name__)


@health_bp.route("/healthz")
def health_check() -> Response:
    """Health check endpoint.

    Returns:
        JSON response with status and the running environment
    """
    return jsonify(
        {
            "status": "ok",
            "service": "wealthplan",
            "env": current_app.config.get("ENV", "development"),
        }
    )
