import functools
import inspect
import threading
import typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Type, TypeVar

import httpx

from ._config import Config
from ._invoker import HttpApiInvoker
from ._requestor import RequestPreprocessor, Requestor
from ._utils._binder import check_text_mapping_annotation
from .models.descriptors import (
    SERVER_ERROR,
    ApiDescriptor,
    BindingKind,
    MethodDescriptor,
    ParamBinding,
    ResultShape,
    RetryPolicy,
    StatusRange,
)
from .models.errors import InvocationContractViolationError
from .property_resolver import PropertyResolver

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

HTTP_API_ATTR = "_httpinvoker_api_prefix"
HTTP_REQ_ATTR = "_httpinvoker_req"
RETRY_POLICY_ATTR = "_httpinvoker_retry_policy"


@dataclass(frozen=True)
class HttpReq:
    url: str
    method: str = "GET"
    timeout: float = 30.0


@dataclass(frozen=True)
class Param:
    """Binds a parameter to a key of the request's parameter map.

    With ``is_body`` the argument's fields are spread into the map instead,
    falling back to ``key`` for values that cannot be flattened. File
    arguments become the uploaded file under ``key`` in both cases.
    """

    key: str = ""
    is_body: bool = False

    @property
    def binding(self) -> ParamBinding:
        kind = BindingKind.BODY if self.is_body else BindingKind.PLAIN
        return ParamBinding(kind=kind, key=self.key)


@dataclass(frozen=True)
class _MapBinding:
    kind: BindingKind

    @property
    def binding(self) -> ParamBinding:
        return ParamBinding(kind=self.kind)


Headers = _MapBinding(BindingKind.HEADER_MAP)
Cookies = _MapBinding(BindingKind.COOKIE_MAP)


def http_api(prefix: str = "") -> Callable[[Type[T]], Type[T]]:
    """Declare an interface whose operations share a url prefix.

    The prefix is only applied to urls that do not carry a protocol.
    """

    def decorator(cls: Type[T]) -> Type[T]:
        setattr(cls, HTTP_API_ATTR, prefix)
        return cls

    return decorator


def http_req(
    url: str, method: str = "GET", timeout: float = 30.0
) -> Callable[[F], F]:
    """Declare a method as a remote operation.

    Args:
        url: Url template. ``${key}`` is filled from configuration and
            ``{key}`` from the call's parameters.
        method: Http verb.
        timeout: Seconds handed to the transport.
    """

    def decorator(func: F) -> F:
        setattr(func, HTTP_REQ_ATTR, HttpReq(url, method.upper(), timeout))
        return func

    return decorator


def retry_policy(
    times: int = 3,
    fixed_backoff_period: float = 0.0,
    retry_for_status: Iterable[StatusRange] = (SERVER_ERROR,),
    retry_for: Iterable[Type[BaseException]] = (OSError, httpx.TransportError),
) -> Callable[[T], T]:
    """Attach a RetryPolicy to an interface or to a single operation.

    A policy on the operation wins over one on the interface.
    """
    policy = RetryPolicy(
        times=times,
        fixed_backoff_period=fixed_backoff_period,
        retry_for_status=tuple(retry_for_status),
        retry_for=tuple(retry_for),
    )

    def decorator(target: T) -> T:
        setattr(target, RETRY_POLICY_ATTR, policy)
        return target

    return decorator


def _binding_for(annotation: Any) -> ParamBinding:
    if typing.get_origin(annotation) is not typing.Annotated:
        return ParamBinding()
    base, *metadata = typing.get_args(annotation)
    for marker in metadata:
        if isinstance(marker, _MapBinding):
            check_text_mapping_annotation(base)
            return marker.binding
        if isinstance(marker, Param):
            return marker.binding
    return ParamBinding()


def build_method_descriptor(
    func: Callable[..., Any], api: Optional[ApiDescriptor] = None
) -> MethodDescriptor:
    """Build the descriptor of a function declared with ``@http_req``."""
    req: Optional[HttpReq] = getattr(func, HTTP_REQ_ATTR, None)
    if req is None:
        raise InvocationContractViolationError(
            f"{func.__qualname__} is not declared with @http_req"
        )

    hints = typing.get_type_hints(func, include_extras=True)
    parameters = [
        p for p in inspect.signature(func).parameters.values() if p.name != "self"
    ]
    bindings = tuple(_binding_for(hints.get(p.name)) for p in parameters)

    if "return" in hints:
        result_type = hints["return"]
        if typing.get_origin(result_type) is typing.Annotated:
            result_type = typing.get_args(result_type)[0]
    else:
        result_type = Any

    return MethodDescriptor(
        name=func.__qualname__,
        url=req.url,
        method=req.method,
        timeout=req.timeout,
        retry_policy=getattr(func, RETRY_POLICY_ATTR, None),
        result_shape=ResultShape.from_annotation(result_type),
        result_type=result_type,
        bindings=bindings,
        api=api,
    )


def _remote_method(
    invoker: HttpApiInvoker, func: Callable[..., Any], descriptor: MethodDescriptor
) -> Callable[..., Any]:
    signature = inspect.signature(func)

    @functools.wraps(func)
    def method(self, *args, **kwargs):
        bound = signature.bind(self, *args, **kwargs)
        bound.apply_defaults()
        call_args = list(bound.arguments.values())[1:]
        return invoker.invoke(descriptor, call_args)

    return method


def _undeclared_method(func: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(func)
    def method(self, *args, **kwargs):
        raise InvocationContractViolationError(
            f"{func.__qualname__} is not declared with @http_req, "
            "this proxy only implements remote operations"
        )

    return method


class HttpApiProxyFactory:
    """Creates client instances for interfaces declared with ``@http_req``.

    Examples:
        ```python
        @http_api(prefix="${api.url}")
        class UserApi:
            @http_req("/users/{id}")
            def get_user(self, user_id: Annotated[int, Param("id")]) -> User: ...

        users = HttpApiProxyFactory().new_proxy(UserApi)
        users.get_user(1)
        ```
    """

    def __init__(
        self,
        requestor: Optional[Requestor] = None,
        property_resolver: Optional[PropertyResolver] = None,
        request_preprocessor: Optional[RequestPreprocessor] = None,
        *,
        config: Optional[Config] = None,
        invoker: Optional[HttpApiInvoker] = None,
    ) -> None:
        self._invoker = invoker or HttpApiInvoker(
            requestor,
            property_resolver,
            request_preprocessor,
            config=config,
        )
        self._proxies: Dict[type, Any] = {}
        self._lock = threading.Lock()

    @property
    def invoker(self) -> HttpApiInvoker:
        return self._invoker

    def new_proxy(self, cls: Type[T]) -> T:
        with self._lock:
            proxy = self._proxies.get(cls)
            if proxy is None:
                proxy = self._create_proxy(cls)
                self._proxies[cls] = proxy
            return proxy

    def _create_proxy(self, cls: Type[T]) -> T:
        api = ApiDescriptor(
            prefix=getattr(cls, HTTP_API_ATTR, ""),
            retry_policy=getattr(cls, RETRY_POLICY_ATTR, None),
        )
        namespace: Dict[str, Any] = {"__init__": lambda self: None}
        for name, func in inspect.getmembers(cls, inspect.isfunction):
            if name.startswith("_"):
                continue
            if hasattr(func, HTTP_REQ_ATTR):
                descriptor = build_method_descriptor(func, api)
                namespace[name] = _remote_method(self._invoker, func, descriptor)
            else:
                namespace[name] = _undeclared_method(func)
        proxy_cls = type(f"{cls.__name__}Proxy", (cls,), namespace)
        return proxy_cls()
