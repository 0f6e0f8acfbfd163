"""
Test configuration for the image archive service.

Fixtures:
- client: FastAPI TestClient for the full application
- fake_fetcher: in-memory stand-in for RemoteFetcher with per-URL delays

Network access is mocked with respx (the respx_mock fixture comes from the
respx pytest plugin); no test reaches a real host.
"""

import asyncio
import sys
from pathlib import Path
from typing import Dict, List, Optional, Union

import pytest
from fastapi.testclient import TestClient

# Add the backend directory to the Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from image_archive.fetcher import FetchFailure, FetchOutcome, FetchSuccess
from main import create_app

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32


# ============================================
# Fakes
# ============================================

class FakeFetcher:
    """
    Returns canned outcomes per URL.

    A delay per URL lets tests reorder completion, and an Exception value
    is raised instead of returned.
    """

    def __init__(
        self,
        outcomes: Dict[str, Union[FetchOutcome, Exception]],
        delays: Optional[Dict[str, float]] = None,
    ):
        self.outcomes = outcomes
        self.delays = delays or {}
        self.calls: List[str] = []

    async def fetch(self, url: str) -> FetchOutcome:
        self.calls.append(url)
        await asyncio.sleep(self.delays.get(url, 0))
        outcome = self.outcomes.get(url, FetchFailure(reason="HTTP 404", status_code=404))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def png(data: bytes = PNG_BYTES) -> FetchSuccess:
    return FetchSuccess(data=data, content_type="image/png")


def jpeg(data: bytes = JPEG_BYTES) -> FetchSuccess:
    return FetchSuccess(data=data, content_type="image/jpeg")


# ============================================
# Fixtures
# ============================================

@pytest.fixture
def client():
    """TestClient for a freshly created app."""
    with TestClient(create_app()) as c:
        yield c


@pytest.fixture
def fake_fetcher():
    """Factory for FakeFetcher instances."""
    return FakeFetcher
