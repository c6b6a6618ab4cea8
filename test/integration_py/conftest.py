"""Shared fixtures for ADT integration tests against a live SAP system."""

import os
import socket
import time
from urllib.parse import urlsplit

import pytest

from abap_adt_mcp.config import load_config
from abap_adt_mcp.gateway import AdtGateway


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def sap_config():
    """Load SAP connection config from environment variables."""
    if not (os.getenv("SAP_PASSWORD") or os.getenv("SAP_JWT_TOKEN")):
        pytest.skip("SAP_PASSWORD not set, skipping integration tests")
    return load_config()


# ---------------------------------------------------------------------------
# Gateway (session-scoped)
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def gateway(sap_config):
    """Create one AdtGateway for the entire test session.

    Waits for the SAP system to be reachable via TCP.
    """
    parts = urlsplit(sap_config.base_url)
    port = parts.port or (443 if parts.scheme == "https" else 80)

    # Wait for SAP system to be reachable (up to 5 minutes).
    deadline = time.time() + 300
    while time.time() < deadline:
        try:
            with socket.create_connection((parts.hostname, port), timeout=5):
                break
        except OSError:
            time.sleep(10)
    else:
        pytest.fail("SAP system not reachable after 5 minutes")

    with AdtGateway(sap_config) as gw:
        yield gw
