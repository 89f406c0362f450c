from .descriptors import (
    CLIENT_ERROR,
    INFORMATIONAL,
    REDIRECTION,
    SERVER_ERROR,
    SUCCESS,
    TOO_MANY_REQUESTS,
    ApiDescriptor,
    BindingKind,
    MethodDescriptor,
    ParamBinding,
    ResultShape,
    RetryPolicy,
    StatusRange,
)
from .errors import (
    BindingTypeViolationError,
    ConfigVariableMissingError,
    HttpInvokerError,
    InvocationContractViolationError,
    PathVariableMissingError,
    UnsuccessfulStatusError,
)
from .request import HttpRequest, HttpResponse

__all__ = [
    "ApiDescriptor",
    "BindingKind",
    "BindingTypeViolationError",
    "CLIENT_ERROR",
    "ConfigVariableMissingError",
    "HttpInvokerError",
    "HttpRequest",
    "HttpResponse",
    "INFORMATIONAL",
    "InvocationContractViolationError",
    "MethodDescriptor",
    "ParamBinding",
    "PathVariableMissingError",
    "REDIRECTION",
    "ResultShape",
    "RetryPolicy",
    "SERVER_ERROR",
    "SUCCESS",
    "StatusRange",
    "TOO_MANY_REQUESTS",
    "UnsuccessfulStatusError",
]
