#!/usr/bin/env python3
"""
Pushes one stored exhibit agent to its voice vendor (or just prints the payload).

Usage:
    python scripts/sync_agent.py <agent_id>                     # sync to the agent's platform
    python scripts/sync_agent.py <agent_id> --vendor vapi       # force a vendor
    python scripts/sync_agent.py <agent_id> --dry-run           # print the payload, no network
    python scripts/sync_agent.py <agent_id> --recreate          # ElevenLabs delete-then-create

Reads ELEVENLABS_API_KEY / VAPI_API_KEY and the Supabase credentials from .env.
"""

import argparse
import asyncio
import json
import logging
import sys

from exhibit_agents.config import load_settings
from exhibit_agents.errors import ExhibitAgentError
from exhibit_agents.tools.elevenlabs_agents import build_elevenlabs_payload
from exhibit_agents.tools.vapi_assistants import build_vapi_assistant
from exhibit_agents.workflow import agents as workflow

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def die(msg: str) -> None:
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


def dry_run(agent_id: str, vendor: str | None) -> None:
    settings = load_settings()
    agent = workflow.load_agent(agent_id)
    vendor = vendor or agent.voice_platform
    if vendor == "vapi":
        payload = build_vapi_assistant(agent, workflow.load_capabilities(agent), settings).to_request()
    else:
        payload = build_elevenlabs_payload(agent).to_request()
    print(json.dumps(payload, indent=2))


async def run(agent_id: str, vendor: str | None, recreate: bool) -> None:
    settings = load_settings()
    if recreate:
        agent = await workflow.recreate_elevenlabs(agent_id, settings)
        resource_id = agent.elevenlabs_agent_id
    else:
        vendor = vendor or workflow.load_agent(agent_id).voice_platform
        if vendor == "vapi":
            agent = await workflow.sync_vapi(agent_id, settings)
            resource_id = agent.vapi_assistant_id
        else:
            agent = await workflow.sync_elevenlabs(agent_id, settings)
            resource_id = agent.elevenlabs_agent_id

    print(f"\n{'─' * 60}")
    print(f"Synced: {agent.name}")
    print(f"    Vendor ID: {resource_id}")
    print(f"{'─' * 60}\n")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("agent_id")
    parser.add_argument("--vendor", choices=["elevenlabs", "vapi"])
    parser.add_argument("--dry-run", action="store_true")
    parser.add_argument("--recreate", action="store_true")
    args = parser.parse_args()

    if args.recreate and args.vendor == "vapi":
        die("--recreate is only supported for ElevenLabs")

    try:
        if args.dry_run:
            dry_run(args.agent_id, args.vendor)
        else:
            asyncio.run(run(args.agent_id, args.vendor, args.recreate))
    except ExhibitAgentError as e:
        die(e.message)


if __name__ == "__main__":
    main()
