import io
import typing
from enum import Enum
from typing import Any, Optional, Tuple, Type

import httpx
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .request import HttpResponse


class BindingKind(str, Enum):
    PLAIN = "plain"
    BODY = "body"
    HEADER_MAP = "header_map"
    COOKIE_MAP = "cookie_map"
    NONE = "none"


class ParamBinding(BaseModel):
    """Declared role of one positional parameter of a remote operation."""

    model_config = ConfigDict(frozen=True)

    kind: BindingKind = BindingKind.NONE
    key: str = ""


class StatusRange(BaseModel):
    """An inclusive range of http status codes."""

    model_config = ConfigDict(frozen=True)

    start: int
    end: int

    @model_validator(mode="after")
    def _check_bounds(self) -> "StatusRange":
        if self.start > self.end:
            raise ValueError(
                f"status range start {self.start} is greater than end {self.end}"
            )
        return self

    def contains(self, status_code: int) -> bool:
        return self.start <= status_code <= self.end


INFORMATIONAL = StatusRange(start=100, end=199)
SUCCESS = StatusRange(start=200, end=299)
REDIRECTION = StatusRange(start=300, end=399)
CLIENT_ERROR = StatusRange(start=400, end=499)
SERVER_ERROR = StatusRange(start=500, end=599)
TOO_MANY_REQUESTS = StatusRange(start=429, end=429)


class RetryPolicy(BaseModel):
    """Declarative retry rules for a remote operation.

    Attributes:
        times: Total attempts including the first one. Values <= 0 mean a
            single attempt without any retry judgment.
        fixed_backoff_period: Seconds to pause before every attempt after the first.
        retry_for_status: Status ranges whose responses are retried.
        retry_for: Exception types whose instances (or subclasses) are retried.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    times: int = 3
    fixed_backoff_period: float = Field(default=0.0, ge=0.0)
    retry_for_status: Tuple[StatusRange, ...] = (SERVER_ERROR,)
    retry_for: Tuple[Type[BaseException], ...] = (OSError, httpx.TransportError)

    def is_retryable_status(self, status_code: int) -> bool:
        return any(status.contains(status_code) for status in self.retry_for_status)

    def is_retryable_exception(self, exception: BaseException) -> bool:
        return isinstance(exception, self.retry_for)


class ResultShape(str, Enum):
    NONE = "none"
    TEXT = "text"
    BYTES = "bytes"
    STREAM = "stream"
    RESPONSE = "response"
    STRUCTURED = "structured"

    @classmethod
    def from_annotation(cls, annotation: Any) -> "ResultShape":
        """Resolve the shape a return annotation asks the response to be decoded into."""
        if annotation is None or annotation is type(None) or annotation is typing.NoReturn:
            return cls.NONE
        if annotation is str:
            return cls.TEXT
        if annotation in (bytes, bytearray):
            return cls.BYTES
        if typing.get_origin(annotation) is None and isinstance(annotation, type):
            if issubclass(annotation, HttpResponse):
                return cls.RESPONSE
            if issubclass(annotation, (io.BufferedIOBase, typing.BinaryIO)):
                return cls.STREAM
        if annotation == typing.IO[bytes]:
            return cls.STREAM
        return cls.STRUCTURED


class ApiDescriptor(BaseModel):
    """Interface level metadata shared by every operation of a declared api."""

    model_config = ConfigDict(frozen=True)

    prefix: str = ""
    retry_policy: Optional[RetryPolicy] = None


class MethodDescriptor(BaseModel):
    """Everything needed to turn one call of a remote operation into a request."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    url: str
    method: str = "GET"
    timeout: float = 30.0
    retry_policy: Optional[RetryPolicy] = None
    result_shape: ResultShape = ResultShape.STRUCTURED
    result_type: Any = None
    bindings: Tuple[ParamBinding, ...] = ()
    api: Optional[ApiDescriptor] = None

    @property
    def effective_retry_policy(self) -> Optional[RetryPolicy]:
        if self.retry_policy is not None:
            return self.retry_policy
        if self.api is not None:
            return self.api.retry_policy
        return None

    @property
    def prefix(self) -> str:
        return self.api.prefix if self.api is not None else ""

    def binding_for(self, index: int) -> ParamBinding:
        if index < len(self.bindings):
            return self.bindings[index]
        return ParamBinding()
