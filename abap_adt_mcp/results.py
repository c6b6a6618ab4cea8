"""Tool result shapes and the response-to-result adapter.

Every handler returns a :class:`ResolutionResult`: an error flag plus an
ordered list of text items. Structured bodies (XML, JSON) are passed through
verbatim as text.
"""

from dataclasses import dataclass, field

from .errors import TransportError

MAX_ERROR_BODY = 2000


@dataclass(frozen=True)
class RawResponse:
    status_code: int
    headers: dict = field(default_factory=dict, compare=False)
    body: str = ""


@dataclass(frozen=True)
class ContentItem:
    text: str
    type: str = "text"

    def to_dict(self):
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ResolutionResult:
    is_error: bool
    content: tuple = ()
    status_code: int | None = None

    @property
    def text(self):
        """All text items joined by blank lines."""
        return "\n\n".join(item.text for item in self.content)

    def to_dict(self):
        return {
            "isError": self.is_error,
            "content": [item.to_dict() for item in self.content],
        }


def text_result(text, is_error=False, status_code=None):
    return ResolutionResult(
        is_error=is_error,
        content=(ContentItem(text=text),),
        status_code=status_code,
    )


def normalize(raw: RawResponse) -> ResolutionResult:
    """Wrap a successful response body as a single text item."""
    return text_result(raw.body, status_code=raw.status_code)


def normalize_error(error: BaseException) -> ResolutionResult:
    """Turn an exception into an error result a caller can diagnose."""
    if isinstance(error, TransportError) and error.status is not None:
        body = error.body or ""
        if len(body) > MAX_ERROR_BODY:
            body = body[:MAX_ERROR_BODY] + "..."
        text = f"Error: HTTP {error.status}: {body}" if body else f"Error: HTTP {error.status}: {error.message}"
        return text_result(text, is_error=True, status_code=error.status)
    return text_result(f"Error: {error}", is_error=True)
