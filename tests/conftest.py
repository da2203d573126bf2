"""Shared fixtures for dispatcher and console tests."""

import os

os.environ.setdefault("TRACING_ENABLED", "false")

import pytest

from tests.helpers import CLIENT_ID, CLIENT_SECRET, FakeUpstream


@pytest.fixture
def upstream() -> FakeUpstream:
    """Upstream that grants a token and answers every API call with 200."""

    return FakeUpstream()


@pytest.fixture
def base_payload() -> dict:
    """Credential fields every dispatch request carries."""

    return {
        "clientId": CLIENT_ID,
        "clientSecret": CLIENT_SECRET,
        "environment": "sandbox",
    }
