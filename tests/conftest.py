import json

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from exhibit_agents.config import Settings, get_settings
from exhibit_agents.main import app

TEST_SETTINGS = Settings(
    elevenlabs_api_key="el-test-key",
    vapi_api_key="vapi-test-key",
    app_url="https://exhibits.example.com",
    tool_secret="tool-secret",
    vapi_server_secret="hook-secret",
    gemini_api_key="gemini-test-key",
    gemini_model="gemini-3-flash-preview",
)

SAMPLE_AGENT_ROW = {
    "id": "agent-1",
    "name": "Rex",
    "slug": "rex-the-trex",
    "tier": 1,
    "bio": "",
    "persona": "You are a friendly dinosaur.",
    "do_nots": "",
    "important_facts": ["Lived 65M years ago"],
    "end_script": "Roar goodbye!",
    "voice": None,
    "voice_platform": "elevenlabs",
    "status": "draft",
    "first_published_at": None,
    "elevenlabs_agent_id": None,
    "vapi_assistant_id": None,
    "organization_id": "org-1",
    "venue_id": "venue-1",
    "venues": {"display_name": "Natural History Museum"},
    "created_at": "2026-01-10T09:00:00+00:00",
}


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it answered."""

    def __init__(self, responder):
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return responder(request)

        super().__init__(handler)

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.content]


def respond(status_code: int = 200, payload=None):
    return lambda request: httpx.Response(status_code, json=payload if payload is not None else {})


@pytest.fixture
def settings():
    return TEST_SETTINGS


@pytest.fixture
def agent_row():
    return json.loads(json.dumps(SAMPLE_AGENT_ROW))


@pytest.fixture
def client():
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    transport = ASGITransport(app=app)
    yield AsyncClient(transport=transport, base_url="http://test")
    app.dependency_overrides.clear()
