from __future__ import annotations

import itertools
import os
import threading
from dataclasses import replace
from datetime import UTC, datetime

from psycopg2 import errors as pg_errors
from supabase import Client

from nexus.domain.entities.user import UserEntity, UserRole
from nexus.domain.errors import ConflictError
from nexus.infrastructure.database.postgres_client import get_postgres_client

# Fields a profile update may change on the user record itself.
MUTABLE_USER_FIELDS = ("bio", "location", "avatar")


class UserRepository:
    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None
        # in-memory fallback
        self._mem: dict[int, UserEntity] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _row_to_entity(self, row: dict) -> UserEntity:
        created_at = row["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return UserEntity(
            id=row["id"],
            first_name=row["first_name"],
            last_name=row["last_name"],
            email=row["email"],
            password_hash=row["password_hash"],
            role=UserRole(row["role"]),
            created_at=created_at,
            bio=row.get("bio"),
            location=row.get("location"),
            avatar=row.get("avatar"),
        )

    def create(
        self,
        first_name: str,
        last_name: str,
        email: str,
        password_hash: str,
        role: UserRole,
        bio: str | None = None,
        location: str | None = None,
        avatar: str | None = None,
    ) -> UserEntity:
        now = datetime.now(UTC)

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            query = """
                INSERT INTO users (
                    first_name, last_name, email, password_hash, role,
                    bio, location, avatar, created_at
                ) VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                RETURNING *
            """
            try:
                row = self.pg_client.insert_returning(
                    query,
                    (first_name, last_name, email, password_hash, role.value,
                     bio, location, avatar, now),
                )
            except pg_errors.UniqueViolation as exc:
                raise ConflictError("User already exists") from exc
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL insert user failed: {exc}") from exc
            return self._row_to_entity(row)

        # In-memory mode
        if self.client is None:
            with self._lock:
                if any(u.email == email for u in self._mem.values()):
                    raise ConflictError("User already exists")
                entity = UserEntity(
                    id=next(self._ids),
                    first_name=first_name,
                    last_name=last_name,
                    email=email,
                    password_hash=password_hash,
                    role=role,
                    created_at=now,
                    bio=bio,
                    location=location,
                    avatar=avatar,
                )
                self._mem[entity.id] = entity
            return entity

        # Supabase mode
        try:  # pragma: no cover - network
            data = {
                "first_name": first_name,
                "last_name": last_name,
                "email": email,
                "password_hash": password_hash,
                "role": role.value,
                "bio": bio,
                "location": location,
                "avatar": avatar,
                "created_at": now.isoformat(),
            }
            res = self.client.table("users").insert(data).execute()
            return self._row_to_entity(res.data[0])
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB insert user failed: {exc}") from exc

    def get(self, user_id: int) -> UserEntity | None:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one("SELECT * FROM users WHERE id = %s", (user_id,))
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.client is None:
            return self._mem.get(user_id)

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("users").select("*").eq("id", user_id).limit(1).execute()
            return self._row_to_entity(res.data[0]) if res.data else None
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB get user failed: {exc}") from exc

    def get_by_email(self, email: str) -> UserEntity | None:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one("SELECT * FROM users WHERE email = %s", (email,))
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.client is None:
            return next((u for u in self._mem.values() if u.email == email), None)

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("users").select("*").eq("email", email).limit(1).execute()
            return self._row_to_entity(res.data[0]) if res.data else None
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB get user by email failed: {exc}") from exc

    def list_by_role(self, role: UserRole) -> list[UserEntity]:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            rows = self.pg_client.fetch_all(
                "SELECT * FROM users WHERE role = %s ORDER BY id", (role.value,)
            )
            return [self._row_to_entity(row) for row in rows]

        # In-memory mode
        if self.client is None:
            return [u for u in self._mem.values() if u.role is role]

        # Supabase mode
        try:  # pragma: no cover - network
            res = (
                self.client.table("users")
                .select("*")
                .eq("role", role.value)
                .order("id")
                .execute()
            )
            return [self._row_to_entity(row) for row in res.data or []]
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB list users failed: {exc}") from exc

    def update(self, user_id: int, fields: dict) -> UserEntity | None:
        """Patch bio/location/avatar; other keys are ignored."""
        changes = {k: v for k, v in fields.items() if k in MUTABLE_USER_FIELDS}
        if not changes:
            return self.get(user_id)

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            assignments = ", ".join(f"{column} = %s" for column in changes)
            query = f"UPDATE users SET {assignments} WHERE id = %s RETURNING *"
            try:
                row = self.pg_client.fetch_one(query, (*changes.values(), user_id))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL update user failed: {exc}") from exc
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.client is None:
            with self._lock:
                current = self._mem.get(user_id)
                if current is None:
                    return None
                updated = replace(current, **changes)
                self._mem[user_id] = updated
            return updated

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("users").update(changes).eq("id", user_id).execute()
            return self._row_to_entity(res.data[0]) if res.data else None
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB update user failed: {exc}") from exc
