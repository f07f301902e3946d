"""Shared pytest fixtures for E2E tests against a running escrow server."""

from __future__ import annotations

import os

import httpx
import pytest


@pytest.fixture(scope="session")
def escrow_base_url() -> str:
    """
    Base URL of the escrow API used by E2E tests (without the /api/v1 prefix).

    Start a server with `veilpay-server` and a Redis instance first; the whole
    E2E suite is skipped when the health endpoint does not answer.
    """
    base_url = os.getenv("ESCROW_BASE_URL", "http://localhost:8000").rstrip("/")
    try:
        with httpx.Client(timeout=2.0) as client:
            response = client.get(f"{base_url}/health")
    except httpx.RequestError as e:
        pytest.skip(f"Escrow server not available at {base_url}: {e}")
    if response.status_code != 200:
        pytest.skip(f"Escrow server at {base_url} is not healthy")
    return base_url
