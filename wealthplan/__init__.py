"""Wealth Projection Flask Application Factory."""

from typing import Optional

from flask import Flask

from wealthplan.config import get_global_settings


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_name: Configuration name (development, testing, production);
            defaults to APP_ENV

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = get_global_settings()
    env = config_name or settings.app_env
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["ENV"] = env
    app.config["DEBUG"] = env == "development"
    app.config["TESTING"] = env == "testing"
    app.config["DEFAULT_HORIZON_AGE"] = settings.default_horizon_age
    app.config["MONTE_CARLO_DEFAULT_PATHS"] = settings.monte_carlo_default_paths
    app.config["MONTE_CARLO_MAX_PATHS"] = settings.monte_carlo_max_paths
    app.logger.setLevel(settings.log_level)

    # Register blueprints
    from wealthplan.blueprints.health import health_bp
    from wealthplan.blueprints.projections import projections_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(projections_bp)

    return app
