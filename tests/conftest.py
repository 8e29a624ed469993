"""
Shared pytest fixtures.

The chat transport and display clients are replaced by the doubles in
``doubles.py``; every test gets its own temporary data directory and a
hand-driven clock. No Twitch credentials or network access are needed.
"""

import pytest

from dartqueue.api.app import build_runtime
from dartqueue.core.config import BotSettings
from dartqueue.shared.models import AppConfig
from dartqueue.shared.repositories import Repositories

from doubles import FakeClock, FakeTransportFactory

CHANNEL = "dartsnight"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def repos(data_dir):
    return Repositories.for_directory(data_dir)


@pytest.fixture
def settings(data_dir):
    return BotSettings(
        _env_file=None,
        client_id="client-id",
        client_secret="client-secret",
        bot_id="1000",
        bot_token="bot-token",
        data_dir=data_dir,
    )


@pytest.fixture
def transports():
    return FakeTransportFactory()


@pytest.fixture
def configured(data_dir):
    """Data directory with setup completed for the test channel."""
    Repositories.for_directory(data_dir).config.save(
        AppConfig(channel=CHANNEL, setup_completed=True)
    )
    return data_dir


@pytest.fixture
def runtime(settings, transports, clock):
    """Runtime over a fresh data directory (setup not completed)."""
    return build_runtime(settings, transport_factory=transports, clock=clock)


@pytest.fixture
def ready_runtime(configured, settings, transports, clock):
    """Runtime whose configuration allows the chat session to connect."""
    return build_runtime(settings, transport_factory=transports, clock=clock)
