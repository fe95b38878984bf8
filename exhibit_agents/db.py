"""Supabase client and CRUD helpers for agents and their capabilities."""

from datetime import UTC, datetime

from supabase import Client, create_client

from .config import get_settings

_client: Client | None = None

AGENT_WITH_VENUE = "*, venues(display_name)"


def get_client() -> Client:
    global _client
    if _client is None:
        settings = get_settings()
        _client = create_client(settings.supabase_url, settings.supabase_service_role_key)
    return _client


# ---------------------------------------------------------------------------
# agents
# ---------------------------------------------------------------------------

def get_agent(agent_id: str, *, with_venue: bool = False) -> dict | None:
    columns = AGENT_WITH_VENUE if with_venue else "*"
    rows = get_client().table("agents").select(columns).eq("id", agent_id).execute().data
    return rows[0] if rows else None


def get_agent_by_slug(slug: str) -> dict | None:
    rows = (
        get_client()
        .table("agents")
        .select("*, venues(id, display_name, kind, background_image_url), organizations(id, name)")
        .eq("slug", slug)
        .execute()
        .data
    )
    return rows[0] if rows else None


def insert_agent(row: dict) -> dict:
    return get_client().table("agents").insert(row).execute().data[0]


def update_agent(agent_id: str, updates: dict) -> dict:
    updates["updated_at"] = datetime.now(UTC).isoformat()
    return get_client().table("agents").update(updates).eq("id", agent_id).execute().data[0]


def delete_agent(agent_id: str) -> None:
    get_client().table("agents").delete().eq("id", agent_id).execute()


# ---------------------------------------------------------------------------
# agent_capabilities
# ---------------------------------------------------------------------------

def get_capabilities(agent_id: str) -> dict | None:
    rows = get_client().table("agent_capabilities").select("*").eq("agent_id", agent_id).execute().data
    return rows[0] if rows else None


def upsert_capabilities(agent_id: str, capabilities: dict) -> dict:
    row = {"agent_id": agent_id, **capabilities}
    return get_client().table("agent_capabilities").upsert(row).execute().data[0]
