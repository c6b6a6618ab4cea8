"""Read-only ABAP repository tools over MCP, backed by the SAP ADT REST API."""

__version__ = "0.3.0"

from .config import AdtConfig, load_config  # noqa: E402
from .errors import (  # noqa: E402
    AdtError,
    AdtToolError,
    ConfigurationError,
    TransportError,
    UnknownToolError,
)
from .gateway import AdtGateway, build_auth_headers  # noqa: E402
from .results import ContentItem, RawResponse, ResolutionResult, normalize, normalize_error  # noqa: E402
from .tools import TOOLS, dispatch  # noqa: E402

__all__ = [
    "AdtConfig",
    "AdtError",
    "AdtGateway",
    "AdtToolError",
    "ConfigurationError",
    "ContentItem",
    "RawResponse",
    "ResolutionResult",
    "TOOLS",
    "TransportError",
    "UnknownToolError",
    "__version__",
    "build_auth_headers",
    "dispatch",
    "load_config",
    "normalize",
    "normalize_error",
]
