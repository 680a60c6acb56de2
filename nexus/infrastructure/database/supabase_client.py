from __future__ import annotations

import os

from supabase import Client, create_client

_CLIENT_SINGLETON: Client | None = None


def supabase_enabled() -> bool:
    """Supabase tables back the repositories unless disabled or unconfigured."""
    if os.getenv("SUPABASE_DISABLED", "0") == "1":
        return False
    return bool(os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_ANON_KEY"))


def get_supabase_client() -> Client | None:
    global _CLIENT_SINGLETON
    if not supabase_enabled():
        return None
    if _CLIENT_SINGLETON is None:
        _CLIENT_SINGLETON = create_client(
            os.environ["SUPABASE_URL"], os.environ["SUPABASE_ANON_KEY"]
        )
    return _CLIENT_SINGLETON
