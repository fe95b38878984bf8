"""Tests for save / sync / publish / recreate / delete orchestration."""

from datetime import UTC, datetime
from unittest.mock import patch

import httpx
import pytest

from exhibit_agents.config import Settings
from exhibit_agents.errors import ConfigurationError, NotFoundError, ValidationError, VendorSyncError
from exhibit_agents.models.schemas import Capabilities
from exhibit_agents.workflow import agents as workflow

from conftest import TEST_SETTINGS, RecordingTransport, respond


@pytest.fixture
def store(agent_row):
    """Patch every db helper the workflow touches."""
    with (
        patch("exhibit_agents.db.get_agent", return_value=agent_row) as get_agent,
        patch("exhibit_agents.db.update_agent", side_effect=lambda agent_id, updates: {**agent_row, **updates}) as update_agent,
        patch("exhibit_agents.db.insert_agent", side_effect=lambda row: {"id": "agent-new", **row}) as insert_agent,
        patch("exhibit_agents.db.delete_agent") as delete_agent,
        patch("exhibit_agents.db.get_capabilities", return_value=None) as get_capabilities,
        patch("exhibit_agents.db.upsert_capabilities") as upsert_capabilities,
    ):
        yield {
            "get_agent": get_agent,
            "update_agent": update_agent,
            "insert_agent": insert_agent,
            "delete_agent": delete_agent,
            "get_capabilities": get_capabilities,
            "upsert_capabilities": upsert_capabilities,
        }


def http_client(transport):
    return httpx.AsyncClient(transport=transport)


class TestLoadAgent:
    def test_requires_id(self, store):
        with pytest.raises(ValidationError):
            workflow.load_agent(None)

    def test_not_found(self, store):
        store["get_agent"].return_value = None
        with pytest.raises(NotFoundError):
            workflow.load_agent("missing")

    def test_venue_flattened(self, store):
        agent = workflow.load_agent("agent-1")
        assert agent.venue == "Natural History Museum"
        store["get_agent"].assert_called_once_with("agent-1", with_venue=True)

    def test_tier3_without_capabilities_row(self, store, agent_row):
        agent_row["tier"] = 3
        caps = workflow.load_capabilities(workflow.load_agent("agent-1"))
        assert caps == Capabilities()


class TestExplicitSync:
    @pytest.mark.asyncio
    async def test_elevenlabs_create_persists_id(self, store):
        transport = RecordingTransport(respond(200, {"agent_id": "el-new"}))
        agent = await workflow.sync_elevenlabs("agent-1", TEST_SETTINGS, http_client(transport))

        assert agent.elevenlabs_agent_id == "el-new"
        store["update_agent"].assert_called_once_with("agent-1", {"elevenlabs_agent_id": "el-new"})
        body = transport.bodies()[0]
        assert "You are located at Natural History Museum." in body["conversation_config"]["agent"]["prompt"]["prompt"]

    @pytest.mark.asyncio
    async def test_update_does_not_rewrite_id(self, store, agent_row):
        agent_row["elevenlabs_agent_id"] = "el-1"
        transport = RecordingTransport(respond(200, {}))
        agent = await workflow.sync_elevenlabs("agent-1", TEST_SETTINGS, http_client(transport))

        assert agent.elevenlabs_agent_id == "el-1"
        store["update_agent"].assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_leaves_store_untouched(self, store, agent_row):
        agent_row["vapi_assistant_id"] = "abc"
        transport = RecordingTransport(respond(500, {"error": "down"}))
        with pytest.raises(VendorSyncError):
            await workflow.sync_vapi("agent-1", TEST_SETTINGS, http_client(transport))
        store["update_agent"].assert_not_called()

    @pytest.mark.asyncio
    async def test_vapi_uses_stored_capabilities(self, store, agent_row):
        agent_row["tier"] = 3
        store["get_capabilities"].return_value = {"agent_id": "agent-1", "can_post_social": True}
        transport = RecordingTransport(respond(201, {"id": "asst-1"}))
        agent = await workflow.sync_vapi("agent-1", TEST_SETTINGS, http_client(transport))

        assert agent.vapi_assistant_id == "asst-1"
        tools = transport.bodies()[0]["model"]["tools"]
        assert [t["function"]["name"] for t in tools] == ["end_call", "post_to_social"]

    @pytest.mark.asyncio
    async def test_recreate_always_new_id(self, store, agent_row):
        agent_row["elevenlabs_agent_id"] = "el-old"
        transport = RecordingTransport(respond(200, {"agent_id": "el-fresh"}))
        agent = await workflow.recreate_elevenlabs("agent-1", TEST_SETTINGS, http_client(transport))

        assert agent.elevenlabs_agent_id == "el-fresh"
        store["update_agent"].assert_called_once_with("agent-1", {"elevenlabs_agent_id": "el-fresh"})

    @pytest.mark.asyncio
    async def test_recreate_without_key(self, store, agent_row):
        agent_row["elevenlabs_agent_id"] = "el-old"
        transport = RecordingTransport(respond(200, {"agent_id": "never"}))
        with pytest.raises(ConfigurationError):
            await workflow.recreate_elevenlabs("agent-1", Settings(), http_client(transport))
        assert transport.requests == []


class TestPublish:
    @pytest.mark.asyncio
    async def test_first_publish_sets_timestamp(self, store):
        now = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        transport = RecordingTransport(respond(200, {"agent_id": "el-new"}))
        agent, first = await workflow.publish_agent("agent-1", TEST_SETTINGS, http_client(transport), now=now)

        assert first is True
        assert agent.status == "published"
        assert agent.first_published_at == now
        store["update_agent"].assert_called_once_with(
            "agent-1",
            {
                "status": "published",
                "elevenlabs_agent_id": "el-new",
                "first_published_at": now.isoformat(),
            },
        )

    @pytest.mark.asyncio
    async def test_republish_keeps_timestamp(self, store, agent_row):
        agent_row["first_published_at"] = "2025-12-24T10:00:00+00:00"
        agent_row["elevenlabs_agent_id"] = "el-1"
        transport = RecordingTransport(respond(200, {}))
        agent, first = await workflow.publish_agent("agent-1", TEST_SETTINGS, http_client(transport))

        assert first is False
        assert agent.first_published_at == datetime(2025, 12, 24, 10, 0, tzinfo=UTC)
        store["update_agent"].assert_called_once_with("agent-1", {"status": "published"})

    @pytest.mark.asyncio
    async def test_vapi_platform(self, store, agent_row):
        agent_row["voice_platform"] = "vapi"
        transport = RecordingTransport(respond(201, {"id": "asst-9"}))
        agent, _ = await workflow.publish_agent("agent-1", TEST_SETTINGS, http_client(transport))

        assert agent.vapi_assistant_id == "asst-9"
        assert transport.requests[0].url.host == "api.vapi.ai"

    @pytest.mark.asyncio
    async def test_vendor_failure_is_fatal(self, store):
        transport = RecordingTransport(respond(401, {"detail": "bad key"}))
        with pytest.raises(VendorSyncError):
            await workflow.publish_agent("agent-1", TEST_SETTINGS, http_client(transport))
        store["update_agent"].assert_not_called()

    def test_unpublish_keeps_first_published(self, store, agent_row):
        agent_row["status"] = "published"
        agent_row["first_published_at"] = "2025-12-24T10:00:00+00:00"
        agent = workflow.unpublish_agent("agent-1")

        assert agent.status == "draft"
        assert agent.first_published_at is not None
        store["update_agent"].assert_called_once_with("agent-1", {"status": "draft"})


class TestSave:
    @pytest.mark.asyncio
    async def test_create_tier3_with_capabilities(self, store):
        transport = RecordingTransport(respond(201, {"id": "asst-1"}))
        caps = Capabilities(can_send_email=True)
        agent = await workflow.save_agent(
            None, {"name": "Ada", "slug": "ada", "tier": 3}, caps, TEST_SETTINGS, http_client(transport)
        )

        store["insert_agent"].assert_called_once_with({"name": "Ada", "slug": "ada", "tier": 3})
        store["upsert_capabilities"].assert_called_once_with("agent-new", caps.model_dump())
        assert agent.vapi_assistant_id == "asst-1"
        tools = transport.bodies()[0]["model"]["tools"]
        assert [t["function"]["name"] for t in tools] == ["end_call", "send_promotional_email"]

    @pytest.mark.asyncio
    async def test_vapi_failure_is_not_fatal(self, store):
        transport = RecordingTransport(respond(500, {"error": "down"}))
        agent = await workflow.save_agent("agent-1", {"bio": "New bio"}, None, TEST_SETTINGS, http_client(transport))

        assert agent.bio == "New bio"
        assert agent.vapi_assistant_id is None
        store["update_agent"].assert_called_once_with("agent-1", {"bio": "New bio"})

    @pytest.mark.asyncio
    async def test_tier3_without_capability_data_uses_stored(self, store, agent_row):
        agent_row["tier"] = 3
        store["get_capabilities"].return_value = {"can_take_orders": True}
        transport = RecordingTransport(respond(201, {"id": "asst-1"}))
        await workflow.save_agent("agent-1", {"bio": "x"}, None, TEST_SETTINGS, http_client(transport))

        store["upsert_capabilities"].assert_not_called()
        tools = transport.bodies()[0]["model"]["tools"]
        assert [t["function"]["name"] for t in tools] == ["end_call", "place_order"]

    @pytest.mark.asyncio
    async def test_missing_tool_config_is_not_fatal(self, store, agent_row):
        agent_row["tier"] = 3
        transport = RecordingTransport(respond(201, {"id": "never"}))
        caps = Capabilities(can_send_email=True)
        agent = await workflow.save_agent("agent-1", {"bio": "x"}, caps, Settings(vapi_api_key="k"), http_client(transport))

        assert agent.bio == "x"
        assert agent.vapi_assistant_id is None
        assert transport.requests == []
        store["upsert_capabilities"].assert_called_once_with("agent-1", caps.model_dump())

    @pytest.mark.asyncio
    async def test_skips_vapi_without_key(self, store):
        transport = RecordingTransport(respond(201, {"id": "never"}))
        await workflow.save_agent("agent-1", {"bio": "x"}, None, Settings(), http_client(transport))
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_slug_is_write_once(self, store):
        with pytest.raises(ValidationError):
            await workflow.save_agent("agent-1", {"slug": "new-slug"}, None, TEST_SETTINGS)
        store["update_agent"].assert_not_called()

    @pytest.mark.asyncio
    async def test_protected_fields_ignored(self, store):
        data = {"name": "Rex", "elevenlabs_agent_id": "forged", "first_published_at": "2020-01-01", "status": "published"}
        await workflow.save_agent("agent-1", data, None, Settings())
        store["update_agent"].assert_called_once_with("agent-1", {"name": "Rex"})

    @pytest.mark.asyncio
    async def test_update_missing_agent(self, store):
        store["get_agent"].return_value = None
        with pytest.raises(NotFoundError):
            await workflow.save_agent("nope", {"name": "x"}, None, Settings())


class TestDelete:
    @pytest.mark.asyncio
    async def test_removes_vendor_resources_best_effort(self, store, agent_row):
        agent_row["elevenlabs_agent_id"] = "el-1"
        agent_row["vapi_assistant_id"] = "asst-1"
        transport = RecordingTransport(respond(500, {"error": "down"}))
        await workflow.delete_agent("agent-1", TEST_SETTINGS, http_client(transport))

        assert [(r.method, r.url.host) for r in transport.requests] == [
            ("DELETE", "api.elevenlabs.io"),
            ("DELETE", "api.vapi.ai"),
        ]
        store["delete_agent"].assert_called_once_with("agent-1")

    @pytest.mark.asyncio
    async def test_store_failure_leaves_vendor_resources(self, store, agent_row):
        agent_row["vapi_assistant_id"] = "asst-1"
        store["delete_agent"].side_effect = RuntimeError("db down")
        transport = RecordingTransport(respond(200, {}))
        with pytest.raises(RuntimeError):
            await workflow.delete_agent("agent-1", TEST_SETTINGS, http_client(transport))
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_without_keys_only_local(self, store, agent_row):
        agent_row["elevenlabs_agent_id"] = "el-1"
        transport = RecordingTransport(respond(200, {}))
        await workflow.delete_agent("agent-1", Settings(), http_client(transport))

        assert transport.requests == []
        store["delete_agent"].assert_called_once_with("agent-1")


def test_preview_prompt(store):
    assert workflow.preview_prompt("agent-1", "vapi").startswith("You are a friendly dinosaur.")
    assert workflow.preview_prompt("agent-1", "elevenlabs").startswith("# Identity")
