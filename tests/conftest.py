"""
Shared fixtures: fake AWS credentials and fresh global state per test.
"""
import os
import sys

import pytest

# Add parent directory to path to import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import config  # noqa: E402
import logger_config  # noqa: E402


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Mocked AWS credentials so moto never touches a real account."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    monkeypatch.delenv('AWS_PROFILE', raising=False)
    monkeypatch.delenv('AWS_REGION', raising=False)


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset the config singleton and any log level override."""
    config._config = None
    logger_config._level_override = None
    yield
    config._config = None
    logger_config._level_override = None
