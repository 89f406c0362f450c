import os
from contextlib import ExitStack
from logging import getLogger
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import httpx

from ._utils import JsonCodec, is_file
from .models.request import HttpRequest, HttpResponse

QUERY_METHODS = frozenset({"GET", "HEAD", "DELETE", "OPTIONS", "TRACE"})


@runtime_checkable
class Requestor(Protocol):
    """Transport that performs exactly one http exchange per call."""

    def send_request(self, request: HttpRequest) -> HttpResponse: ...


@runtime_checkable
class RequestPreprocessor(Protocol):
    """Hook run once per invocation, after binding and before sending.

    It may add to ``request.data`` (for example values for remaining path
    placeholders), or change headers, cookies and body.
    """

    def process(self, request: HttpRequest) -> None: ...


class HttpxRequestor:
    """Default Requestor, backed by a synchronous httpx client.

    - a file body is uploaded as multipart under ``file_form_key``, with the
      remaining ``data`` entries as form fields;
    - any other body is sent as JSON;
    - otherwise ``data`` goes to the query string for GET-like methods and to
      an urlencoded form for the rest.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        codec: Optional[JsonCodec] = None,
        **client_kwargs: Any,
    ) -> None:
        self._logger = getLogger(__name__)
        self._owns_client = client is None
        self._client = client or httpx.Client(**client_kwargs)
        self._codec = codec or JsonCodec()

    def send_request(self, request: HttpRequest) -> HttpResponse:
        method = request.method.upper()
        fields = {
            k: self._form_value(v)
            for k, v in (request.data or {}).items()
            if v is not None
        }
        headers = dict(request.headers)
        if request.cookies:
            headers["Cookie"] = "; ".join(f"{k}={v}" for k, v in request.cookies.items())
        kwargs: Dict[str, Any] = {"headers": headers}
        if request.timeout is not None:
            kwargs["timeout"] = request.timeout

        with ExitStack() as stack:
            if request.body is not None and is_file(request.body):
                kwargs["files"] = {
                    request.file_form_key or "file": self._file_part(request.body, stack)
                }
                if fields:
                    kwargs["data"] = fields
            elif request.body is not None:
                kwargs["content"] = self._codec.encode(request.body)
                headers.setdefault("Content-Type", "application/json")
                if fields:
                    kwargs["params"] = fields
            elif method in QUERY_METHODS:
                if fields:
                    kwargs["params"] = fields
            elif fields:
                kwargs["data"] = fields

            self._logger.debug(f"Request: {method} {request.url}")
            response = self._client.request(method, request.url, **kwargs)
            return HttpResponse.from_httpx(response)

    def _form_value(self, value: Any) -> Any:
        if isinstance(value, bytes):
            return value
        if isinstance(value, (list, tuple)):
            return [self._form_value(v) for v in value if v is not None]
        return self._codec.to_text(value)

    @staticmethod
    def _file_part(body: Any, stack: ExitStack) -> Any:
        if isinstance(body, os.PathLike):
            path = Path(body)
            return (path.name, stack.enter_context(open(path, "rb")))
        name = getattr(body, "name", None)
        return (Path(name).name if isinstance(name, str) else "file", body)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxRequestor":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
