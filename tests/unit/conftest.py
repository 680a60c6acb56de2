import pytest

from nexus.application.use_cases.chat_session import ChannelSession
from nexus.application.use_cases.relay_message import MessageRelay
from nexus.domain.entities.user import UserRole
from nexus.domain.services.presence_registry import PresenceRegistry
from nexus.infrastructure.auth.token_service import TokenService
from nexus.infrastructure.database.repositories.message_repository import MessageRepository
from nexus.infrastructure.database.repositories.user_repository import UserRepository


class FakeChannel:
    """In-memory stand-in for a chat socket; records every frame sent to it."""

    def __init__(self, name="channel", open_=True, fail=False):
        self.name = name
        self.frames = []
        self.open = open_
        self.fail = fail

    @property
    def is_open(self):
        return self.open

    async def send_frame(self, frame):
        if self.fail:
            raise RuntimeError(f"{self.name} is gone")
        self.frames.append(frame)

    def kinds(self):
        return [f["type"] for f in self.frames]


@pytest.fixture()
def make_channel():
    return FakeChannel


@pytest.fixture()
def users():
    repo = UserRepository(None)
    repo.create("Ada", "Lovelace", "ada@example.com", "x", UserRole.ENTREPRENEUR)
    repo.create("Grace", "Hopper", "grace@example.com", "x", UserRole.INVESTOR)
    return repo


@pytest.fixture()
def messages():
    return MessageRepository(None)


@pytest.fixture()
def presence():
    return PresenceRegistry()


@pytest.fixture()
def tokens():
    return TokenService(secret="unit-secret", algorithm="HS256", ttl_minutes=60)


@pytest.fixture()
def relay(messages, users, presence):
    return MessageRelay(messages=messages, users=users, presence=presence)


@pytest.fixture()
def make_session(presence, tokens, relay):
    def _make(channel):
        return ChannelSession(channel, presence, tokens, relay)

    return _make


@pytest.fixture()
def token_for(users, tokens):
    def _token(user_id):
        return tokens.issue(users.get(user_id))

    return _token
