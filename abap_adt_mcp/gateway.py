"""HTTP gateway for the SAP ADT REST API.

Wraps requests.Session with:
- Basic or Bearer auth + sap-client header on every request
- CSRF token fetch for POST/PUT and a single re-fetch on 403, shared
  safely between threads
- Conversion of network errors, timeouts and non-2xx statuses to TransportError
"""

import base64
import threading
from urllib.parse import urljoin

import requests
import urllib3
from loguru import logger

from .config import AUTH_BASIC, AdtConfig
from .errors import ConfigurationError, TransportError
from .results import RawResponse

DISCOVERY_PATH = "/sap/bc/adt/discovery"
DEFAULT_ACCEPT = "application/xml, application/json, text/plain, */*"
CSRF_METHODS = ("POST", "PUT", "DELETE")
DEFAULT_TIMEOUT = 30


def build_auth_headers(config):
    """Return the auth headers for one ADT request."""
    headers = {}
    if config.client:
        headers["sap-client"] = config.client
    if config.auth_type == AUTH_BASIC:
        headers["Authorization"] = _basic_auth(config.username, config.password)
    else:
        headers["Authorization"] = f"Bearer {config.jwt_token}"
    return headers


def _basic_auth(username, password):
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def _mask_headers(headers):
    """Replace credential header values with *** for safe logging."""
    masked = dict(headers)
    for key in ("Authorization", "x-csrf-token", "Cookie"):
        if key in masked:
            masked[key] = "***"
    return masked


class AdtGateway:
    """Sends requests to one ADT system."""

    def __init__(self, config, session=None):
        if not isinstance(config, AdtConfig):
            raise ConfigurationError("ADT connection settings are missing")
        self.config = config
        self.base_url = config.base_url
        self.session = session or requests.Session()
        self.session.verify = config.verify_tls
        if not config.verify_tls:
            # Suppress InsecureRequestWarning for self-signed certs.
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        self.csrf_token = None
        self._csrf_lock = threading.Lock()

    def url_for(self, path):
        """Join a path to the base URL; absolute URLs pass through."""
        if path.startswith(("http://", "https://")):
            return path
        return urljoin(self.base_url + "/", path.lstrip("/"))

    def fetch_csrf(self, timeout=DEFAULT_TIMEOUT):
        """Fetch a CSRF token from the discovery endpoint."""
        headers = build_auth_headers(self.config)
        headers.update({"x-csrf-token": "fetch", "Accept": "application/xml"})
        url = self.url_for(DISCOVERY_PATH)
        logger.debug("Fetching CSRF token from {}", url)
        try:
            resp = self.session.get(url, headers=headers, timeout=timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Failed to fetch CSRF token: {exc}") from exc
        # SAP may answer 405 and still hand out a token.
        token = resp.headers.get("x-csrf-token")
        if not token or token.lower() == "required":
            raise TransportError(
                "CSRF token is required for POST/PUT requests but could not be fetched",
                status=resp.status_code,
                body=resp.text,
            )
        self.csrf_token = token
        return token

    def send(self, url, method="GET", headers=None, timeout=DEFAULT_TIMEOUT, data=None):
        """Execute one request and return its RawResponse.

        Raises TransportError on network failure, timeout or non-2xx status.
        """
        method = method.upper()
        full_url = self.url_for(url)
        request_headers = build_auth_headers(self.config)
        request_headers["Accept"] = DEFAULT_ACCEPT
        if headers:
            request_headers.update(headers)

        needs_csrf = method in CSRF_METHODS
        if needs_csrf:
            request_headers["x-csrf-token"] = self._current_csrf(timeout)

        logger.debug("{} {} headers={}", method, full_url, _mask_headers(request_headers))
        resp = self._request(method, full_url, request_headers, timeout, data)
        if resp.status_code == 403 and needs_csrf:
            logger.debug("403 on {} {}, re-fetching CSRF token", method, full_url)
            request_headers["x-csrf-token"] = self._refresh_csrf(request_headers["x-csrf-token"], timeout)
            resp = self._request(method, full_url, request_headers, timeout, data)

        if not 200 <= resp.status_code < 300:
            raise TransportError(
                f"{method} {full_url} returned HTTP {resp.status_code}",
                status=resp.status_code,
                body=resp.text,
            )
        return RawResponse(
            status_code=resp.status_code,
            headers=dict(resp.headers),
            body=resp.text,
        )

    def _current_csrf(self, timeout):
        with self._csrf_lock:
            if not self.csrf_token:
                self.fetch_csrf(timeout)
            return self.csrf_token

    def _refresh_csrf(self, stale, timeout):
        """Re-fetch unless another thread already replaced ``stale``."""
        with self._csrf_lock:
            if self.csrf_token == stale:
                self.fetch_csrf(timeout)
            return self.csrf_token

    def _request(self, method, url, headers, timeout, data):
        try:
            return self.session.request(
                method, url, headers=headers, data=data, timeout=timeout,
            )
        except requests.Timeout as exc:
            raise TransportError(f"{method} {url} timed out after {timeout}s") from exc
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    def close(self):
        """Close the underlying requests session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
