"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from vicaddr.address_models import GeocodeCandidate
from vicaddr.geocode_client import GeocodeClient


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy for Windows compatibility."""
    import asyncio
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    return asyncio.get_event_loop_policy()


class StubGeocoder(GeocodeClient):
    """Deterministic geocoder returning a fixed candidate list."""

    def __init__(self, candidates=None, error: Exception | None = None):
        self.candidates = list(candidates or [])
        self.error = error
        self.calls: list[str] = []

    async def lookup(self, address: str) -> list[GeocodeCandidate]:
        self.calls.append(address)
        if self.error is not None:
            raise self.error
        return list(self.candidates)


def make_candidate(display_name: str, state: str | None = None, **address) -> GeocodeCandidate:
    """Build a candidate the way Nominatim would describe it."""
    if state is not None:
        address["state"] = state
    return GeocodeCandidate(display_name=display_name, address=address, lat=-37.81, lon=144.96)


@pytest.fixture
def vic_candidate():
    """A Melbourne CBD result with full structured fields."""
    return make_candidate(
        "123, Main Street, Melbourne, City of Melbourne, Victoria, 3000, Australia",
        state="Victoria",
        house_number="123",
        road="Main Street",
        suburb="Melbourne",
        postcode="3000",
    )


@pytest.fixture
def nsw_candidate():
    """A Sydney result that must never survive the Victoria filter."""
    return make_candidate(
        "123, Main Street, Sydney, New South Wales, 2000, Australia",
        state="New South Wales",
        house_number="123",
        road="Main Street",
        suburb="Sydney",
        postcode="2000",
    )
