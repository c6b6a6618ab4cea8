"""Response normalization."""

from abap_adt_mcp.errors import ConfigurationError, TransportError
from abap_adt_mcp.results import (
    MAX_ERROR_BODY,
    ContentItem,
    RawResponse,
    ResolutionResult,
    normalize,
    normalize_error,
)


def test_normalize_keeps_body_verbatim():
    body = '<?xml version="1.0"?><adtcore:objectReferences/>'
    result = normalize(RawResponse(status_code=200, headers={}, body=body))
    assert result == ResolutionResult(is_error=False, content=(ContentItem(text=body),), status_code=200)


def test_normalize_json_body_is_text():
    result = normalize(RawResponse(status_code=200, body='{"results": []}'))
    assert result.to_dict() == {
        "isError": False,
        "content": [{"type": "text", "text": '{"results": []}'}],
    }


def test_normalize_error_with_status_and_body():
    result = normalize_error(TransportError("GET x returned HTTP 404", status=404, body="Resource not found"))
    assert result.is_error is True
    assert result.status_code == 404
    assert result.text == "Error: HTTP 404: Resource not found"


def test_normalize_error_with_status_no_body():
    result = normalize_error(TransportError("GET x returned HTTP 401", status=401))
    assert result.text == "Error: HTTP 401: GET x returned HTTP 401"


def test_normalize_error_truncates_long_body():
    result = normalize_error(TransportError("boom", status=500, body="x" * (MAX_ERROR_BODY + 50)))
    assert result.text.endswith("...")
    assert len(result.text) < MAX_ERROR_BODY + 50


def test_normalize_error_without_status():
    result = normalize_error(TransportError("GET x timed out after 30s"))
    assert result.is_error is True
    assert result.status_code is None
    assert result.text == "Error: GET x timed out after 30s"


def test_normalize_error_plain_exception():
    result = normalize_error(ConfigurationError("ADT connection settings are missing"))
    assert result.to_dict() == {
        "isError": True,
        "content": [{"type": "text", "text": "Error: ADT connection settings are missing"}],
    }
