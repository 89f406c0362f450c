import io
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx


@dataclass
class HttpRequest:
    """In-flight state of one invocation.

    A fresh instance is created for every call and is owned by that call only.
    `data` is the resolved parameter map: it feeds path variable substitution
    and is sent as query or form fields. `body` is either a file-like value
    (with `file_form_key` set) or a structured payload.
    """

    url: str
    method: str = "GET"
    timeout: Optional[float] = None
    headers: Dict[str, str] = field(default_factory=dict)
    cookies: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    data: Optional[Dict[str, Any]] = None
    file_form_key: Optional[str] = None


class HttpResponse:
    """Response received for one request attempt."""

    def __init__(
        self,
        status_code: int,
        status_message: Optional[str] = None,
        content: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
        encoding: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.status_message = status_message
        self.headers = dict(headers or {})
        self.encoding = encoding or "utf-8"
        self._content = content
        self._stream_consumed = False

    @classmethod
    def from_httpx(cls, response: httpx.Response) -> "HttpResponse":
        return cls(
            status_code=response.status_code,
            status_message=response.reason_phrase,
            content=response.content,
            headers=dict(response.headers),
            encoding=response.encoding,
        )

    @property
    def body(self) -> str:
        return self._content.decode(self.encoding, errors="replace")

    @property
    def body_as_bytes(self) -> bytes:
        return self._content

    @property
    def body_stream(self) -> io.BufferedReader:
        """A buffered binary stream over the body. Can only be taken once."""
        if self._stream_consumed:
            raise ValueError("the response body stream has already been consumed")
        self._stream_consumed = True
        return io.BufferedReader(io.BytesIO(self._content))

    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def __repr__(self) -> str:
        return (
            f"HttpResponse(status_code={self.status_code!r}, "
            f"status_message={self.status_message!r}, "
            f"content_length={len(self._content)})"
        )
