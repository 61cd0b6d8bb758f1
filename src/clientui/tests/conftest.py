"""
Core pytest configuration for the clientui test suite.

Only the session-wide logging setup lives here. Domain fixtures are kept in
`tests/test_fixtures/` and imported at the bottom of this file so every test module
can use them without importing:

- tests/test_fixtures/facet_fixtures.py   sample beans, FakeFacetProvider
- tests/test_fixtures/gateway_fixtures.py MockTransport-backed gateway, app, TestClient
"""

from __future__ import annotations

import logging

# -------------------------------
# Early logging tuning
# -------------------------------
# Silence chatty third-party loggers before importing anything that may configure them.
NOISY_LOGGERS = (
    "asyncio",
    "httpx",
    "httpcore",
    "urllib3",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from pytest import FixtureRequest

from clientui.config.settings import Settings
from clientui.core.logging.builder import setup_logging


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Settings used by every test: text logs on the console, a fake gateway host."""
    return Settings(
        ENV="testing",
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="text",
        LOG_TO_STDOUT=True,
        GATEWAY_URL="http://gateway.test",
        GATEWAY_TIMEOUT_SECONDS=1.0,
        SESSION_SECRET="test-session-secret",
    )


# The `autouse=True` part means this fixture is used by every test without being requested.
@pytest.fixture(scope="session", autouse=True)
def configure_logging(request: FixtureRequest, test_settings: Settings):
    """
    Install the application logging configuration once for the whole session.

    dictConfig replaces the root handlers, which drops pytest's capture handler; it is
    re-attached so `caplog.records` keeps working.
    """
    setup_logging(test_settings)

    caplog_plugin = request.config.pluginmanager.getplugin("logging-plugin")
    handler = getattr(caplog_plugin, "caplog_handler", None)
    if handler is not None:
        logging.getLogger().addHandler(handler)

    yield


# Domain fixtures
from .test_fixtures.facet_fixtures import (  # noqa: E402,F401
    patient,
    notes,
    risk,
    facets,
)
from .test_fixtures.gateway_fixtures import (  # noqa: E402,F401
    gateway_backend,
    gateway,
    app,
    client,
)
