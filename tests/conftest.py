"""Shared fixtures for unit tests."""

import pytest

from abap_adt_mcp.config import AdtConfig
from adt_stub import FakeGateway


@pytest.fixture
def adt_config():
    """Basic-auth settings pointing at an address nothing listens on."""
    return AdtConfig(
        url="http://127.0.0.1:9/sap/bc/adt",
        client="001",
        username="DEVELOPER",
        password="secret",
    )


@pytest.fixture
def sap_env():
    """Minimal valid SAP_* environment for load_config()."""
    return {
        "SAP_URL": "https://sap.example.com:44300",
        "SAP_CLIENT": "001",
        "SAP_USERNAME": "DEVELOPER",
        "SAP_PASSWORD": "secret",
    }


@pytest.fixture
def fake_gateway():
    """A gateway that answers 404 to everything unless routes are added."""
    return FakeGateway()
