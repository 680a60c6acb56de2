from __future__ import annotations

import itertools
import os
from datetime import UTC, datetime

from supabase import Client

from nexus.domain.entities.message import MessageEntity
from nexus.infrastructure.database.postgres_client import get_postgres_client


class MessageRepository:
    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None
        # in-memory fallback
        self._mem: dict[int, MessageEntity] = {}
        self._ids = itertools.count(1)

    def _row_to_entity(self, row: dict) -> MessageEntity:
        timestamp = row["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return MessageEntity(
            id=row["id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            content=row["content"],
            timestamp=timestamp,
        )

    def create(self, sender_id: int, receiver_id: int, content: str) -> MessageEntity:
        now = datetime.now(UTC)

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = """
                INSERT INTO messages (sender_id, receiver_id, content, timestamp)
                VALUES (%s, %s, %s, %s)
                RETURNING *
            """
            try:
                row = self.pg_client.insert_returning(
                    query, (sender_id, receiver_id, content, now)
                )
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL insert message failed: {exc}") from exc
            return self._row_to_entity(row)

        # In-memory mode
        if self.client is None:
            entity = MessageEntity(
                id=next(self._ids),
                sender_id=sender_id,
                receiver_id=receiver_id,
                content=content,
                timestamp=now,
            )
            self._mem[entity.id] = entity
            return entity

        # Supabase mode
        try:  # pragma: no cover - network
            data = {
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "content": content,
                "timestamp": now.isoformat(),
            }
            res = self.client.table("messages").insert(data).execute()
            return self._row_to_entity(res.data[0])
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB insert message failed: {exc}") from exc

    def list_between(self, user_a: int, user_b: int) -> list[MessageEntity]:
        """Conversation between two users in either direction, oldest first."""
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = """
                SELECT * FROM messages
                WHERE (sender_id = %s AND receiver_id = %s)
                   OR (sender_id = %s AND receiver_id = %s)
                ORDER BY timestamp ASC, id ASC
            """
            rows = self.pg_client.fetch_all(query, (user_a, user_b, user_b, user_a))
            return [self._row_to_entity(row) for row in rows]

        # In-memory mode
        if self.client is None:
            pair = {(user_a, user_b), (user_b, user_a)}
            matches = [
                m for m in self._mem.values() if (m.sender_id, m.receiver_id) in pair
            ]
            return sorted(matches, key=lambda m: (m.timestamp, m.id))

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("messages")
                .select("*")
                .or_(
                    f"and(sender_id.eq.{user_a},receiver_id.eq.{user_b}),"
                    f"and(sender_id.eq.{user_b},receiver_id.eq.{user_a})"
                )
                .order("timestamp")
                .execute()
            )
            return [self._row_to_entity(row) for row in res.data or []]
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB list messages failed: {exc}") from exc
