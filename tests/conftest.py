"""
Pytest configuration and shared fixtures for the wealth projection tests.
"""

import os
from datetime import date
from unittest.mock import patch

import pytest

from wealthplan.config import reset_global_settings
from wealthplan.models.scenario import ProjectionConfig


@pytest.fixture(autouse=True)
def app_environment():
    """Provide a valid SECRET_KEY and a fresh global settings instance."""
    env = {"SECRET_KEY": "test-secret-key-123", "APP_ENV": "testing"}
    with patch.dict(os.environ, env, clear=True):
        reset_global_settings()
        yield
    reset_global_settings()


@pytest.fixture
def reference_date():
    return date(2025, 1, 1)


@pytest.fixture
def baseline_config(reference_date):
    """Age 30, retiring at 65, 50k cash, 3,000/month base income, nothing else."""
    return ProjectionConfig.model_validate(
        {
            "person": {
                "reference_date": reference_date,
                "current_age": 30,
                "retirement_age": 65,
            },
            "starting_balances": {"cash": 50000},
            "growth_rates": {
                "cash": 0.0,
                "investments": 0.0,
                "scheme_a": 0.0,
                "scheme_b": 0.0,
                "scheme_c": 0.0,
                "scheme_annuity": 0.0,
            },
            "base_income": {"mode": "simple", "override": 3000},
            "horizon_age": 65,
        }
    )


@pytest.fixture
def app():
    """Flask application configured for testing."""
    from wealthplan import create_app

    return create_app("testing")


@pytest.fixture
def client(app):
    return app.test_client()
