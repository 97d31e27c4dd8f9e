"""
Fixtures for transport tests.
"""

import pytest

from pokerroom.server.app import create_app
from pokerroom.server.config import ServerConfig


@pytest.fixture
def config():
    """No pause between showdown and table reset."""
    return ServerConfig(next_hand_delay=0)


@pytest.fixture
def app(config, manager):
    return create_app(config, manager)


class DummyWebSocket:
    """Records what the hub sends so async paths run without a real connection."""

    def __init__(self):
        self.sent = []
        self.accepted = False

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        self.sent.append(message)

    def events(self, event_type=None):
        if event_type is None:
            return [m["type"] for m in self.sent]
        return [m["data"] for m in self.sent if m["type"] == event_type]


@pytest.fixture
def dummy_socket():
    return DummyWebSocket
