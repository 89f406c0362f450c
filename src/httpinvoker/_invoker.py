import time
from logging import getLogger
from typing import Any, Optional, Sequence

from ._config import Config
from ._requestor import HttpxRequestor, RequestPreprocessor, Requestor
from ._utils import (
    JsonCodec,
    ParameterBinder,
    ResponseDecoder,
    RetryExecutor,
    fill_config_variables,
    fill_path_variables,
    has_protocol,
)
from .models.descriptors import MethodDescriptor
from .models.errors import InvocationContractViolationError
from .models.request import HttpRequest
from .property_resolver import EnvironmentPropertyResolver, PropertyResolver


class HttpApiInvoker:
    """Turns calls of declared remote operations into http requests.

    One invocation resolves the url template, binds the arguments, lets the
    optional preprocessor adjust the request, sends it under the operation's
    retry policy and decodes the response into the declared result shape.

    The invoker keeps no per-call state, so one instance can serve any number
    of concurrent callers.
    """

    def __init__(
        self,
        requestor: Optional[Requestor] = None,
        property_resolver: Optional[PropertyResolver] = None,
        request_preprocessor: Optional[RequestPreprocessor] = None,
        *,
        config: Optional[Config] = None,
        codec: Optional[JsonCodec] = None,
        retry_executor: Optional[RetryExecutor] = None,
    ) -> None:
        self._logger = getLogger(__name__)
        self._codec = codec or JsonCodec()
        self._requestor = requestor or HttpxRequestor(codec=self._codec)
        if property_resolver is None:
            property_resolver = (
                config.property_resolver()
                if config is not None
                else EnvironmentPropertyResolver()
            )
        self._property_resolver = property_resolver
        self._request_preprocessor = request_preprocessor
        self._binder = ParameterBinder(self._codec)
        self._retry_executor = retry_executor or RetryExecutor()
        self._decoder = ResponseDecoder(self._codec)

    @property
    def requestor(self) -> Requestor:
        return self._requestor

    @property
    def property_resolver(self) -> PropertyResolver:
        return self._property_resolver

    def invoke(
        self,
        descriptor: Optional[MethodDescriptor],
        args: Sequence[Any] = (),
    ) -> Any:
        """Execute one call of a declared remote operation.

        Args:
            descriptor: Metadata of the operation being called.
            args: The call's arguments, in declaration order.

        Returns:
            The response decoded into ``descriptor.result_shape``, or None when
            the operation declares no result.

        Raises:
            InvocationContractViolationError: If ``descriptor`` is None.
            ConfigVariableMissingError: If a ``${...}`` placeholder has no value.
            PathVariableMissingError: If a ``{...}`` placeholder is still
                unresolved after preprocessing.
            BindingTypeViolationError: If a header or cookie argument is not
                a text to text mapping.
            UnsuccessfulStatusError: If the final response is not 2xx.
        """
        if descriptor is None:
            raise InvocationContractViolationError()

        url = fill_config_variables(descriptor.url, self._property_resolver)
        if descriptor.prefix and not has_protocol(url):
            url = fill_config_variables(
                descriptor.prefix + url, self._property_resolver
            )

        request = HttpRequest(
            url=url, method=descriptor.method, timeout=descriptor.timeout
        )
        if args:
            params = self._binder.bind(args, descriptor, request)
            request.url = fill_path_variables(
                request.url, params, strict=False, codec=self._codec
            )
            request.data = params

        if self._request_preprocessor is not None:
            self._request_preprocessor.process(request)

        # values the preprocessor added are the last chance for path variables
        request.url = fill_path_variables(
            request.url, request.data, strict=True, codec=self._codec
        )

        start = time.monotonic()
        response = self._retry_executor.execute(
            lambda: self._requestor.send_request(request),
            descriptor.effective_retry_policy,
        )
        self._logger.debug(
            f"send request to url: {request.url}, time consume: {(time.monotonic() - start) * 1000:.0f} ms"
        )
        return self._decoder.decode(request.url, response, descriptor)
