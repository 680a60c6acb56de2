from __future__ import annotations

import itertools
import json
import os
import threading
from dataclasses import asdict, replace

from supabase import Client

from nexus.domain.entities.profile import PROFILE_FIELDS, PortfolioCompany, ProfileEntity
from nexus.infrastructure.database.postgres_client import get_postgres_client

_JSON_FIELDS = ("skills", "portfolio_companies", "investment_interests")


class ProfileRepository:
    def __init__(self, client: Client | None) -> None:
        self.client = client
        self.use_local_db = os.getenv("USE_LOCAL_DB", "0") == "1"
        self.pg_client = get_postgres_client() if self.use_local_db else None
        # in-memory fallback, keyed by user id
        self._mem: dict[int, ProfileEntity] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def _row_to_entity(self, row: dict) -> ProfileEntity:
        data = {field: row.get(field) for field in PROFILE_FIELDS}
        # JSONB may come back as text depending on the driver settings
        for field in _JSON_FIELDS:
            if isinstance(data[field], str):
                data[field] = json.loads(data[field])
        return self._build(row["id"], row["user_id"], data)

    @staticmethod
    def _build(profile_id: int, user_id: int, data: dict) -> ProfileEntity:
        companies = data.get("portfolio_companies")
        if companies is not None:
            data = {
                **data,
                "portfolio_companies": [
                    c if isinstance(c, PortfolioCompany) else PortfolioCompany(**c)
                    for c in companies
                ],
            }
        return ProfileEntity(id=profile_id, user_id=user_id, **data)

    @staticmethod
    def _to_columns(fields: dict) -> dict:
        """Keep known profile fields and make nested values JSON friendly."""
        columns = {k: v for k, v in fields.items() if k in PROFILE_FIELDS}
        if columns.get("portfolio_companies") is not None:
            columns["portfolio_companies"] = [
                asdict(c) if isinstance(c, PortfolioCompany) else dict(c)
                for c in columns["portfolio_companies"]
            ]
        return columns

    def get_by_user(self, user_id: int) -> ProfileEntity | None:
        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            row = self.pg_client.fetch_one("SELECT * FROM profiles WHERE user_id = %s", (user_id,))
            return self._row_to_entity(row) if row else None

        # In-memory mode
        if self.client is None:
            return self._mem.get(user_id)

        # Supabase mode
        try:  # pragma: no cover - network
            res = self.client.table("profiles").select("*").eq("user_id", user_id).limit(1).execute()
            return self._row_to_entity(res.data[0]) if res.data else None
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB get profile failed: {exc}") from exc

    def upsert(self, user_id: int, fields: dict) -> ProfileEntity:
        """Create the user's profile, or shallow-merge ``fields`` into it.

        Create-or-merge is a single step in every backend, so concurrent first
        writes for one user both land on the same profile.
        """
        columns = self._to_columns(fields)

        # PostgreSQL mode
        if self.use_local_db and self.pg_client:
            names = ["user_id", *columns]
            values = [user_id, *(
                json.dumps(v) if k in _JSON_FIELDS and v is not None else v
                for k, v in columns.items()
            )]
            # DO NOTHING would return no row; touch user_id to get RETURNING
            assignments = ", ".join(
                f"{column} = EXCLUDED.{column}" for column in columns or ["user_id"]
            )
            query = (
                f"INSERT INTO profiles ({', '.join(names)}) "
                f"VALUES ({', '.join(['%s'] * len(names))}) "
                f"ON CONFLICT (user_id) DO UPDATE SET {assignments} RETURNING *"
            )
            try:
                row = self.pg_client.insert_returning(query, tuple(values))
            except Exception as exc:
                raise RuntimeError(f"PostgreSQL upsert profile failed: {exc}") from exc
            return self._row_to_entity(row)

        # In-memory mode
        if self.client is None:
            with self._lock:
                current = self._mem.get(user_id)
                if current is None:
                    entity = self._build(next(self._ids), user_id, columns)
                else:
                    merged = self._build(current.id, user_id, columns)
                    entity = replace(current, **{k: getattr(merged, k) for k in columns})
                self._mem[user_id] = entity
            return entity

        # Supabase mode
        try:  # pragma: no cover - network
            data = {"user_id": user_id, **columns}
            self.client.table("profiles").upsert(data, on_conflict="user_id").execute()
            res = self.client.table("profiles").select("*").eq("user_id", user_id).single().execute()
            return self._row_to_entity(res.data)
        except Exception as exc:  # pragma: no cover - network
            raise RuntimeError(f"DB upsert profile failed: {exc}") from exc
