from __future__ import annotations

import itertools
import os
import threading
from dataclasses import replace
from datetime import UTC, datetime

from psycopg2 import errors as pg_errors
from supabase import Client

from nexus.domain.entities.collaboration_request import (
    CollaborationRequestEntity,
    RequestStatus,
)
from nexus.domain.errors import ConflictError
from nexus.infrastructure.database.postgres_client import get_postgres_client

_DUPLICATE_PENDING = "A pending request to this user already exists"


class CollaborationRequestRepository:
    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None
        # in-memory fallback
        self._mem: dict[int, CollaborationRequestEntity] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _row_to_entity(self, row: dict) -> CollaborationRequestEntity:
        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return CollaborationRequestEntity(
            id=row["id"],
            sender_id=row["sender_id"],
            receiver_id=row["receiver_id"],
            status=RequestStatus(row["status"]),
            created_at=created_at,
            message=row.get("message"),
        )

    def create(
        self, sender_id: int, receiver_id: int, message: str | None = None
    ) -> CollaborationRequestEntity:
        """Insert a pending request.

        Raises:
            ConflictError: If ``sender_id`` already has a pending request to
                ``receiver_id``
        """
        now = datetime.now(UTC)

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = """
                INSERT INTO collaboration_requests (sender_id, receiver_id, message, status, created_at)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING *
            """
            try:
                row = self.pg_client.insert_returning(
                    query, (sender_id, receiver_id, message, RequestStatus.PENDING.value, now)
                )
            except pg_errors.UniqueViolation as exc:
                raise ConflictError(_DUPLICATE_PENDING) from exc
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL insert request failed: {exc}") from exc
            return self._row_to_entity(row)

        # In-memory mode
        if self.client is None:
            with self._lock:
                if any(
                    r.sender_id == sender_id
                    and r.receiver_id == receiver_id
                    and r.status is RequestStatus.PENDING
                    for r in self._mem.values()
                ):
                    raise ConflictError(_DUPLICATE_PENDING)
                entity = CollaborationRequestEntity(
                    id=next(self._ids),
                    sender_id=sender_id,
                    receiver_id=receiver_id,
                    status=RequestStatus.PENDING,
                    created_at=now,
                    message=message,
                )
                self._mem[entity.id] = entity
            return entity

        # Supabase mode
        try:  # pragma: no cover - network
            data = {
                "sender_id": sender_id,
                "receiver_id": receiver_id,
                "message": message,
                "status": RequestStatus.PENDING.value,
                "created_at": now.isoformat(),
            }
            res = self.client.table("collaboration_requests").insert(data).execute()
            return self._row_to_entity(res.data[0])
        except Exception as exc:  # pragma: no cover - network
            # unique_violation from the one-pending-per-pair index
            if getattr(exc, "code", None) == "23505":
                raise ConflictError(_DUPLICATE_PENDING) from exc
            raise RuntimeError(f"DB insert request failed: {exc}") from exc

    def get(self, request_id: int) -> CollaborationRequestEntity | None:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one(
                "SELECT * FROM collaboration_requests WHERE id = %s", (request_id,)
            )
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.client is None:
            return self._mem.get(request_id)

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("collaboration_requests")
                .select("*")
                .eq("id", request_id)
                .limit(1)
                .execute()
            )
            return self._row_to_entity(res.data[0]) if res.data else None
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB get request failed: {exc}") from exc

    def list_for_user(self, user_id: int) -> list[CollaborationRequestEntity]:
        """Requests the user sent or received, newest first."""
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = """
                SELECT * FROM collaboration_requests
                WHERE sender_id = %s OR receiver_id = %s
                ORDER BY created_at DESC
            """
            rows = self.pg_client.fetch_all(query, (user_id, user_id))
            return [self._row_to_entity(row) for row in rows]

        # In-memory mode
        if self.client is None:
            matches = [
                r for r in self._mem.values() if user_id in (r.sender_id, r.receiver_id)
            ]
            return sorted(matches, key=lambda r: (r.created_at, r.id), reverse=True)

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("collaboration_requests")
                .select("*")
                .or_(f"sender_id.eq.{user_id},receiver_id.eq.{user_id}")
                .order("created_at", desc=True)
                .execute()
            )
            return [self._row_to_entity(row) for row in res.data or []]
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB list requests failed: {exc}") from exc

    def update_status(
        self, request_id: int, status: RequestStatus
    ) -> CollaborationRequestEntity | None:
        """Move a pending request to ``status``.

        Returns None when no pending request has that id, either because the
        id is unknown or because the request was already answered.
        """
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = """
                UPDATE collaboration_requests SET status = %s
                WHERE id = %s AND status = 'pending'
                RETURNING *
            """
            try:
                row = self.pg_client.fetch_one(query, (status.value, request_id))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL update request failed: {exc}") from exc
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.client is None:
            with self._lock:
                current = self._mem.get(request_id)
                if current is None or current.is_terminal:
                    return None
                updated = replace(current, status=status)
                self._mem[request_id] = updated
            return updated

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("collaboration_requests")
                .update({"status": status.value})
                .eq("id", request_id)
                .eq("status", RequestStatus.PENDING.value)
                .execute()
            )
            return self._row_to_entity(res.data[0]) if res.data else None
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB update request failed: {exc}") from exc
