"""Connection settings for the ADT endpoint.

Settings come from ``SAP_*`` environment variables, optionally seeded from a
``.env`` file. The result is a frozen :class:`AdtConfig` that is passed
explicitly to the gateway; nothing here keeps process-wide state.
"""

import os
import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from dotenv import dotenv_values

from .errors import ConfigurationError
from .where_used.classify import DEFAULT_MARKERS

AUTH_BASIC = "basic"
AUTH_JWT = "jwt"

MARKER_ENV_PREFIX = "ADT_WHERE_USED_MARKERS_"
MARKER_SEPARATOR = ";;"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _clean(value):
    """Strip an inline ``# comment`` and surrounding whitespace."""
    if value is None:
        return None
    value = value.split("#", 1)[0].strip()
    return value or None


@dataclass(frozen=True)
class AdtConfig:
    url: str
    client: str | None = None
    auth_type: str = AUTH_BASIC
    username: str | None = None
    password: str | None = field(default=None, repr=False)
    jwt_token: str | None = field(default=None, repr=False)
    verify_tls: bool = False
    marker_patterns: dict = field(default_factory=dict)

    @property
    def base_url(self):
        """Scheme and host of the configured URL, without any path."""
        parts = urlsplit(self.url)
        return f"{parts.scheme}://{parts.netloc}"


def load_config(env=None, env_file=None):
    """Build an :class:`AdtConfig` from environment variables.

    ``env`` defaults to ``os.environ``. Values from ``env_file`` fill in
    anything the environment does not set. Raises :class:`ConfigurationError`
    when a required setting is missing.
    """
    values = {}
    if env_file is not None:
        if not os.path.isfile(env_file):
            raise ConfigurationError(f".env file not found at: {env_file}")
        values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    values.update(os.environ if env is None else env)

    url = _clean(values.get("SAP_URL"))
    if not url or not re.match(r"^https?://", url):
        raise ConfigurationError(
            f"Missing or invalid SAP_URL. Got: '{url}'.\n"
            "Required variables:\n"
            "- SAP_URL (must be a valid URL, e.g. https://<host>)\n"
            "- SAP_AUTH_TYPE (optional, defaults to 'basic')"
        )
    if not urlsplit(url).netloc:
        raise ConfigurationError(f"Invalid URL in configuration: {url}")

    auth_type = (_clean(values.get("SAP_AUTH_TYPE")) or AUTH_BASIC).lower()
    if auth_type == "xsuaa":
        auth_type = AUTH_JWT
    if auth_type not in (AUTH_BASIC, AUTH_JWT):
        raise ConfigurationError(f"Unsupported SAP_AUTH_TYPE: {auth_type}")

    client = _clean(values.get("SAP_CLIENT"))
    username = password = jwt_token = None

    if auth_type == AUTH_BASIC:
        if not client:
            raise ConfigurationError(
                "Missing required environment variable: SAP_CLIENT. "
                "This is required for basic authentication."
            )
        username = _clean(values.get("SAP_USERNAME"))
        password = _clean(values.get("SAP_PASSWORD"))
        if not username or not password:
            raise ConfigurationError(
                "Basic authentication requires username and password. "
                "Missing variables:\n- SAP_USERNAME\n- SAP_PASSWORD"
            )
    else:
        jwt_token = _clean(values.get("SAP_JWT_TOKEN"))
        if not jwt_token:
            raise ConfigurationError(
                "JWT authentication requires a token. Missing variable:\n- SAP_JWT_TOKEN"
            )

    verify = (_clean(values.get("SAP_VERIFY_TLS")) or "false").lower() in _TRUE_VALUES

    return AdtConfig(
        url=url,
        client=client,
        auth_type=auth_type,
        username=username,
        password=password,
        jwt_token=jwt_token,
        verify_tls=verify,
        marker_patterns=_marker_patterns(values),
    )


def _marker_patterns(values):
    """Collect extra where-used marker regexes keyed by response kind.

    Every pattern is compiled here so a bad one stops startup.
    """
    patterns = {}
    for kind in ("XML", "JSON", "PLAIN"):
        raw = values.get(MARKER_ENV_PREFIX + kind)
        if not raw:
            continue
        extra = tuple(p.strip() for p in raw.split(MARKER_SEPARATOR) if p.strip())
        if extra:
            patterns[kind] = extra
    DEFAULT_MARKERS.extended(patterns)
    return patterns
