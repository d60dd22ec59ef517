"""Minimal live sanity checks for the Mina archive MCP tools."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from mina_archive_mcp.archive_api import get_default_client  # noqa: E402
from mina_archive_mcp.tools import get_network_state, query_actions, query_events  # noqa: E402

# Override via env to point at a zkApp with known events/actions.
SAMPLE_ADDRESS = os.getenv("MINA_SAMPLE_ADDRESS", "B62qkYa1o6Mj6uTTjDQXGesgV6McZpWaC5vvF1Rf8U5kQ9gv9gK9fVe")
RUN_ACTIONS = os.getenv("RUN_ACTIONS_SANITY", "false").lower() in {"1", "true", "yes"}


async def main() -> None:
    try:
        state = await get_network_state()
        print("Network state:", state)
        canonical = state["networkState"]["maxBlockHeight"]["canonicalMaxBlockHeight"]

        events = await query_events(SAMPLE_ADDRESS, status="CANONICAL", from_height=max(canonical - 100, 0))
        print(f"Events in last 100 blocks: {len(events['events'])}")

        if RUN_ACTIONS:
            actions = await query_actions(SAMPLE_ADDRESS, status="CANONICAL")
            print(f"Actions: {len(actions['actions'])}")
    finally:
        await get_default_client().aclose()


if __name__ == "__main__":
    asyncio.run(main())
