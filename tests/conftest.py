"""Shared fixtures."""

from __future__ import annotations

import pytest

from guardian.analytics.decoders import Endpoint

FIVE_MINUTES = 300_000
BASE_TIME = 1_700_000_000_000


def _payloads(points: int = 4) -> dict[Endpoint, list[dict]]:
    times = [BASE_TIME + i * FIVE_MINUTES for i in range(points)]
    return {
        Endpoint.OPEN_INTEREST: [
            {"timestamp": t, "sumOpenInterest": str(1000 + 10 * i), "sumOpenInterestValue": str(5e7 + i)}
            for i, t in enumerate(times)
        ],
        Endpoint.TOP_ACCOUNTS_RATIO: [
            {"timestamp": t, "longAccount": "0.6", "shortAccount": "0.4"} for t in times
        ],
        Endpoint.TOP_POSITIONS_RATIO: [
            {"timestamp": t, "longAccount": "0.55", "shortAccount": "0.45"} for t in times
        ],
        Endpoint.GLOBAL_ACCOUNTS_RATIO: [
            {"timestamp": t, "longAccount": "0.5", "shortAccount": "0.5"} for t in times
        ],
        Endpoint.TAKER_VOLUME: [
            {"timestamp": t, "buyVol": str(100 + i), "sellVol": str(90 + i)} for i, t in enumerate(times)
        ],
        Endpoint.BASIS: [
            {"time": t, "markPrice": str(25000 + i), "indexPrice": "24990"} for i, t in enumerate(times)
        ],
    }


@pytest.fixture
def payloads():
    return _payloads()


@pytest.fixture
def live_fetch(payloads):
    """Fetcher returning canned upstream payloads."""

    def fetch(endpoint: Endpoint):
        return payloads[endpoint]

    return fetch
