"""Declarative http clients.

Describe remote operations with ``@http_req`` on a plain class, get a client
from ``HttpApiProxyFactory.new_proxy`` and call it like any other object.
"""

from ._config import Config
from ._invoker import HttpApiInvoker
from ._proxy import (
    Cookies,
    Headers,
    HttpApiProxyFactory,
    Param,
    build_method_descriptor,
    http_api,
    http_req,
    retry_policy,
)
from ._requestor import HttpxRequestor, RequestPreprocessor, Requestor
from ._utils import JsonCodec, RetryExecutor
from .models import (
    CLIENT_ERROR,
    SERVER_ERROR,
    ApiDescriptor,
    BindingKind,
    BindingTypeViolationError,
    ConfigVariableMissingError,
    HttpInvokerError,
    HttpRequest,
    HttpResponse,
    InvocationContractViolationError,
    MethodDescriptor,
    ParamBinding,
    PathVariableMissingError,
    ResultShape,
    RetryPolicy,
    StatusRange,
    UnsuccessfulStatusError,
)
from .property_resolver import (
    DotenvPropertyResolver,
    EnvironmentPropertyResolver,
    MappingPropertyResolver,
    MultiSourcePropertyResolver,
    PropertyResolver,
)

__all__ = [
    "ApiDescriptor",
    "BindingKind",
    "BindingTypeViolationError",
    "CLIENT_ERROR",
    "Config",
    "ConfigVariableMissingError",
    "Cookies",
    "DotenvPropertyResolver",
    "EnvironmentPropertyResolver",
    "Headers",
    "HttpApiInvoker",
    "HttpApiProxyFactory",
    "HttpInvokerError",
    "HttpRequest",
    "HttpResponse",
    "HttpxRequestor",
    "InvocationContractViolationError",
    "JsonCodec",
    "MappingPropertyResolver",
    "MethodDescriptor",
    "MultiSourcePropertyResolver",
    "Param",
    "ParamBinding",
    "PathVariableMissingError",
    "PropertyResolver",
    "RequestPreprocessor",
    "Requestor",
    "ResultShape",
    "RetryExecutor",
    "RetryPolicy",
    "SERVER_ERROR",
    "StatusRange",
    "UnsuccessfulStatusError",
    "build_method_descriptor",
    "http_api",
    "http_req",
    "retry_policy",
]
