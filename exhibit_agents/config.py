"""Configuration and environment variables."""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from exhibit_agents/)
load_dotenv(Path(__file__).parent.parent / ".env")

# --- Vendor endpoints ---
ELEVENLABS_API_BASE = "https://api.elevenlabs.io/v1"
VAPI_API_BASE = "https://api.vapi.ai"
GEMINI_OPENAI_BASE = "https://generativelanguage.googleapis.com/v1beta/openai/"

# --- Defaults ---
DEFAULT_GEMINI_MODEL = "gemini-3-flash-preview"
DEFAULT_VAPI_SERVER_SECRET = "default-secret"


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of everything the vendor integrations need."""

    elevenlabs_api_key: str = ""
    vapi_api_key: str = ""
    app_url: str = ""
    tool_secret: str | None = None
    vapi_server_secret: str = DEFAULT_VAPI_SERVER_SECRET
    gemini_api_key: str = ""
    gemini_model: str = DEFAULT_GEMINI_MODEL
    supabase_url: str = "http://127.0.0.1:54421"
    supabase_service_role_key: str = ""


def load_settings() -> Settings:
    return Settings(
        elevenlabs_api_key=os.getenv("ELEVENLABS_API_KEY", ""),
        vapi_api_key=os.getenv("NEXT_PRIVATE_VAPI_API_KEY") or os.getenv("VAPI_API_KEY", ""),
        app_url=os.getenv("NEXT_PUBLIC_APP_URL", "").rstrip("/"),
        tool_secret=os.getenv("TOOL_SECRET") or None,
        vapi_server_secret=os.getenv("VAPI_SERVER_SECRET") or DEFAULT_VAPI_SERVER_SECRET,
        gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", ""),
        gemini_model=os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        supabase_url=os.getenv("NEXT_PUBLIC_SUPABASE_URL", "http://127.0.0.1:54421"),
        supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY", ""),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """FastAPI dependency; override with app.dependency_overrides in tests."""
    return load_settings()
