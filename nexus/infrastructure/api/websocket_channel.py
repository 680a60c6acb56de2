from __future__ import annotations

from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketState


class WebSocketChannel:
    """Adapts a Starlette WebSocket to the chat ``Channel`` protocol.

    One instance per accepted socket; the presence registry compares
    instances by identity.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state is WebSocketState.CONNECTED
            and self.websocket.application_state is WebSocketState.CONNECTED
        )

    async def send_frame(self, frame: dict[str, Any]) -> None:
        await self.websocket.send_json(frame)

    def __repr__(self) -> str:
        client = self.websocket.client
        return f"WebSocketChannel({client.host}:{client.port})" if client else "WebSocketChannel()"
