"""Health check tests: verify basic connectivity and authentication."""

import socket
from dataclasses import replace
from urllib.parse import urlsplit

import pytest

from abap_adt_mcp.errors import TransportError
from abap_adt_mcp.gateway import DISCOVERY_PATH, AdtGateway


@pytest.mark.smoke
class TestHealth:

    def test_tcp_connect(self, sap_config):
        """TCP connection to the SAP port succeeds."""
        parts = urlsplit(sap_config.base_url)
        port = parts.port or (443 if parts.scheme == "https" else 80)
        with socket.create_connection((parts.hostname, port), timeout=10):
            pass

    def test_discovery(self, gateway):
        """The discovery document is served."""
        raw = gateway.send(DISCOVERY_PATH, headers={"Accept": "application/atomsvc+xml"})
        assert raw.status_code == 200
        assert "workspace" in raw.body

    def test_csrf_token(self, gateway):
        """A CSRF token can be fetched for modifying requests."""
        assert gateway.fetch_csrf()

    def test_bad_credentials_fail(self, sap_config):
        """Bad credentials are reported as an HTTP error."""
        bad = replace(sap_config, username="BADUSER", password="BADPASS")
        with AdtGateway(bad) as gw:
            with pytest.raises(TransportError) as excinfo:
                gw.send(DISCOVERY_PATH)
        assert excinfo.value.status == 401
