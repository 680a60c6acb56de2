"""Online presence: which live channel currently speaks for a user.

The registry is owned by the application that hosts the channels and is
handed to every chat session; there is no module-level instance. It is only
ever touched from the event loop, so each call is atomic with respect to the
others.
"""
from __future__ import annotations

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class Channel(Protocol):
    """A live, JSON-framed duplex connection to one client."""

    @property
    def is_open(self) -> bool: ...

    async def send_frame(self, frame: dict[str, Any]) -> None: ...


class PresenceRegistry:
    def __init__(self) -> None:
        self._channels: dict[int, Channel] = {}

    def register(self, user_id: int, channel: Channel) -> None:
        """Bind ``user_id`` to ``channel``, replacing any earlier binding."""
        previous = self._channels.get(user_id)
        self._channels[user_id] = channel
        if previous is not None and previous is not channel:
            logger.info("User %s re-registered; previous channel replaced", user_id)

    def lookup(self, user_id: int) -> Channel | None:
        return self._channels.get(user_id)

    def unregister(self, user_id: int, channel: Channel) -> bool:
        """Drop the binding only if it still points at ``channel``.

        A late close from an older connection must not evict the session that
        replaced it. Returns True if a binding was removed.
        """
        if self._channels.get(user_id) is not channel:
            return False
        del self._channels[user_id]
        return True

    def is_online(self, user_id: int) -> bool:
        channel = self._channels.get(user_id)
        return channel is not None and channel.is_open

    def __len__(self) -> int:
        return len(self._channels)
