"""Shared fixtures for integration tests.

Modules here are skipped unless RUN_MERIDIAN_NETWORK_TESTS=1.
"""

import os

import pytest


@pytest.fixture
def access_token():
    """Bearer token for the live API, e.g. from `az account get-access-token`."""
    token = os.environ.get("MERIDIAN_GRAPH_TOKEN")
    if not token:
        pytest.skip("MERIDIAN_GRAPH_TOKEN not set")
    return token
