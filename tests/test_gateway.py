"""Gateway tests against a local ADT stub server."""

import base64
import threading
import time

import pytest

from abap_adt_mcp.config import AdtConfig
from abap_adt_mcp.errors import ConfigurationError, TransportError
from abap_adt_mcp.gateway import AdtGateway, build_auth_headers
from adt_stub import StubAdtServer


def _config(url):
    return AdtConfig(url=url, client="001", username="DEVELOPER", password="secret")


def _csrf(_):
    return 200, {"x-csrf-token": "stub-token", "Set-Cookie": "SAP_SESSIONID=abc; path=/"}, "<discovery/>"


def test_missing_config_fails_construction():
    with pytest.raises(ConfigurationError):
        AdtGateway(None)


def test_basic_auth_headers(adt_config):
    headers = build_auth_headers(adt_config)
    assert headers["sap-client"] == "001"
    expected = base64.b64encode(b"DEVELOPER:secret").decode("ascii")
    assert headers["Authorization"] == f"Basic {expected}"


def test_bearer_auth_headers():
    config = AdtConfig(url="https://sap.example.com", auth_type="jwt", jwt_token="tok")
    assert build_auth_headers(config) == {"Authorization": "Bearer tok"}


def test_url_for(adt_config):
    gateway = AdtGateway(adt_config)
    assert gateway.url_for("/sap/bc/adt/discovery") == "http://127.0.0.1:9/sap/bc/adt/discovery"
    assert gateway.url_for("sap/bc/adt/x?a=1") == "http://127.0.0.1:9/sap/bc/adt/x?a=1"
    assert gateway.url_for("https://other/sap") == "https://other/sap"


def test_get_returns_raw_response():
    def table(_):
        return 200, {"Content-Type": "text/plain"}, "define table sbook {}"

    callbacks = {("GET", "/sap/bc/adt/ddic/tables/sbook/source/main"): table}
    with StubAdtServer(callbacks) as server:
        with AdtGateway(_config(server.url)) as gateway:
            raw = gateway.send("/sap/bc/adt/ddic/tables/sbook/source/main")

    assert raw.status_code == 200
    assert raw.body == "define table sbook {}"
    assert raw.headers["Content-Type"] == "text/plain"
    request = server.received[0]
    assert request.headers["sap-client"] == "001"
    assert request.headers["Authorization"].startswith("Basic ")


def test_caller_headers_override_accept():
    def ok(_):
        return 200, {}, "<ok/>"

    with StubAdtServer({("GET", "*"): ok}) as server:
        with AdtGateway(_config(server.url)) as gateway:
            gateway.send("/sap/bc/adt/x", headers={"Accept": "application/xml"})

    assert server.received[0].headers["Accept"] == "application/xml"


def test_non_2xx_raises_transport_error():
    with StubAdtServer({}) as server:
        with AdtGateway(_config(server.url)) as gateway:
            with pytest.raises(TransportError) as excinfo:
                gateway.send("/sap/bc/adt/ddic/tables/nothere/source/main")

    assert excinfo.value.status == 404
    assert excinfo.value.body == "not found"


def test_server_error_carries_body():
    def boom(_):
        return 500, {"Content-Type": "text/plain"}, "Internal Server Error: dump ST22"

    with StubAdtServer({("GET", "*"): boom}) as server:
        with AdtGateway(_config(server.url)) as gateway:
            with pytest.raises(TransportError) as excinfo:
                gateway.send("/sap/bc/adt/anything")

    assert excinfo.value.status == 500
    assert "ST22" in excinfo.value.body


def test_connection_refused_raises_transport_error(adt_config):
    with AdtGateway(adt_config) as gateway:
        with pytest.raises(TransportError) as excinfo:
            gateway.send("/sap/bc/adt/discovery", timeout=2)
    assert excinfo.value.status is None


def test_timeout_raises_transport_error():
    def slow(_):
        time.sleep(1.0)
        return 200, {}, "<late/>"

    with StubAdtServer({("GET", "*"): slow}) as server:
        with AdtGateway(_config(server.url)) as gateway:
            with pytest.raises(TransportError, match="timed out"):
                gateway.send("/sap/bc/adt/slow", timeout=0.2)


def test_post_fetches_csrf_token_first():
    def usage(request):
        return 200, {"Content-Type": "application/xml"}, f"<echo>{request.body}</echo>"

    callbacks = {
        ("GET", "/sap/bc/adt/discovery"): _csrf,
        ("POST", "/sap/bc/adt/repository/informationsystem/usageReferences"): usage,
    }
    with StubAdtServer(callbacks) as server:
        with AdtGateway(_config(server.url)) as gateway:
            raw = gateway.send(
                "/sap/bc/adt/repository/informationsystem/usageReferences?uri=x",
                method="POST",
                data="<request/>",
            )
            assert gateway.csrf_token == "stub-token"

    assert raw.body == "<echo><request/></echo>"
    discovery, post = server.received
    assert discovery.method == "GET"
    assert discovery.headers["x-csrf-token"] == "fetch"
    assert post.headers["x-csrf-token"] == "stub-token"
    assert "SAP_SESSIONID=abc" in post.headers.get("Cookie", "")


def test_post_refetches_csrf_on_403():
    tokens = iter(["stale-token", "fresh-token"])
    seen = []

    def csrf(_):
        return 200, {"x-csrf-token": next(tokens)}, "<discovery/>"

    def usage(request):
        seen.append(request.headers["x-csrf-token"])
        if request.headers["x-csrf-token"] == "stale-token":
            return 403, {"x-csrf-token": "Required"}, "CSRF token validation failed"
        return 200, {}, "<ok/>"

    callbacks = {("GET", "/sap/bc/adt/discovery"): csrf, ("POST", "*"): usage}
    with StubAdtServer(callbacks) as server:
        with AdtGateway(_config(server.url)) as gateway:
            raw = gateway.send("/sap/bc/adt/repository/nodestructure", method="POST")

    assert raw.body == "<ok/>"
    assert seen == ["stale-token", "fresh-token"]


def test_csrf_token_missing_raises():
    def no_token(_):
        return 200, {}, "<discovery/>"

    callbacks = {("GET", "/sap/bc/adt/discovery"): no_token}
    with StubAdtServer(callbacks) as server:
        with AdtGateway(_config(server.url)) as gateway:
            with pytest.raises(TransportError, match="CSRF token"):
                gateway.send("/sap/bc/adt/repository/nodestructure", method="POST")

    assert [r.method for r in server.received] == ["GET"]


def test_csrf_token_on_405_is_accepted():
    def not_allowed(_):
        return 405, {"x-csrf-token": "token-405"}, "Method not allowed"

    def ok(_):
        return 200, {}, "<ok/>"

    callbacks = {("GET", "/sap/bc/adt/discovery"): not_allowed, ("POST", "*"): ok}
    with StubAdtServer(callbacks) as server:
        with AdtGateway(_config(server.url)) as gateway:
            gateway.send("/sap/bc/adt/repository/nodestructure", method="POST")

    assert server.received[-1].headers["x-csrf-token"] == "token-405"


def test_concurrent_posts_share_one_csrf_fetch():
    fetches = []

    def csrf(_):
        fetches.append(1)
        time.sleep(0.2)
        return 200, {"x-csrf-token": "stub-token"}, "<discovery/>"

    def ok(_):
        return 200, {}, "<ok/>"

    callbacks = {("GET", "/sap/bc/adt/discovery"): csrf, ("POST", "*"): ok}
    with StubAdtServer(callbacks) as server:
        with AdtGateway(_config(server.url)) as gateway:
            threads = [
                threading.Thread(
                    target=gateway.send,
                    args=("/sap/bc/adt/repository/nodestructure",),
                    kwargs={"method": "POST"},
                )
                for _ in range(4)
            ]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=10)

    assert len(fetches) == 1
    posts = [r for r in server.received if r.method == "POST"]
    assert len(posts) == 4
    assert all(r.headers["x-csrf-token"] == "stub-token" for r in posts)
