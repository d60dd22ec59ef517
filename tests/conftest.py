import os
import sys

import pytest

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from mina_archive_mcp.metrics import default_metrics  # noqa: E402

VALID_ADDRESS = "B62qkYa1o6Mj6uTTjDQXGesgV6McZpWaC5vvF1Rf8U5kQ9gv9gK9fVe"

BLOCK_INFO = {
    "height": 352410,
    "stateHash": "3NKPCL8v8tAmk8TVeR1gDR5gEjcn6ZHK8ZyAN2m8ekmXaQNGjV5q",
    "parentHash": "3NLfsVJWhfRuQXvLqTeRKFAqjwoyMQXmxwZjNQnEkYwMmFCrPHxy",
    "ledgerHash": "jx4dYwS5V7cJwMUDyGvMVpqCXw5kqhXqkMHVDYcRwyJ6NhN9Wqn",
    "chainStatus": "canonical",
    "timestamp": "1718714400000",
    "globalSlotSinceHardfork": 562003,
    "globalSlotSinceGenesis": 562003,
    "distanceFromMaxBlockHeight": 12,
}

TRANSACTION_INFO = {
    "status": "applied",
    "hash": "5JuJ1eRNWdE8jSJmCDoKnAK5gvo9Bgt5m4yrqMG1DUzBd8ZXMLvF",
    "memo": "E4YM2vTHhWEg66xpj52JErHUBU4pZ1yageL4TVDDpTTSsv8mK6YaH",
    "authorizationKind": "Proof",
    "sequenceNumber": 4,
    "zkappAccountUpdateIds": [7, 3, 9],
}


def event_payload():
    return {
        "blockInfo": dict(BLOCK_INFO),
        "eventData": [
            {
                "accountUpdateId": "41",
                "data": ["2", "1", "19"],
                "transactionInfo": dict(TRANSACTION_INFO),
            },
            {
                "accountUpdateId": "40",
                "data": ["10"],
                "transactionInfo": None,
            },
        ],
    }


def action_payload():
    return {
        "blockInfo": dict(BLOCK_INFO),
        "transactionInfo": dict(TRANSACTION_INFO),
        "actionData": [
            {"accountUpdateId": "12", "data": ["5", "0", "3"]},
        ],
        "actionState": {
            "actionStateOne": "25079927036070901246064867767436987657692091363973573142121686150614948079097",
            "actionStateTwo": "1",
            "actionStateThree": None,
            "actionStateFour": None,
            "actionStateFive": None,
        },
    }


NETWORK_STATE = {
    "networkState": {
        "maxBlockHeight": {"canonicalMaxBlockHeight": 352398, "pendingMaxBlockHeight": 352410}
    }
}


class MockResponse:
    def __init__(self, status_code: int, json_body=None):
        self.status_code = status_code
        self._json = json_body

    def json(self):
        if self._json is None:
            raise ValueError("no json")
        return self._json


class MockAsyncClient:
    """Stands in for httpx.AsyncClient; records every POST."""

    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    async def post(self, url, json=None, headers=None):
        self.calls.append({"url": url, "json": json, "headers": headers})
        if not self.responses:
            raise RuntimeError("No mock responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self):
        return None


@pytest.fixture(autouse=True)
def fresh_rate_limiter(monkeypatch):
    from mina_archive_mcp import server
    from mina_archive_mcp.rate_limiter import PerKeyRateLimiter

    monkeypatch.setattr(server, "rate_limiter", PerKeyRateLimiter(rate_per_sec=5, burst=5))


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()
