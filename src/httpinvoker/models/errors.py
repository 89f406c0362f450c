from typing import Optional


class HttpInvokerError(Exception):
    """Base class for errors raised while invoking a declared http api."""


class ConfigVariableMissingError(HttpInvokerError, ValueError):
    def __init__(self, url: str, key: str, message: Optional[str] = None):
        self.url = url
        self.key = key
        self.message = (
            message
            or f"the url [{url}] needs a config variable: [{key}], but wasn't provided."
        )
        super().__init__(self.message)


class PathVariableMissingError(HttpInvokerError, ValueError):
    def __init__(self, url: str, key: str):
        self.url = url
        self.key = key
        self.message = (
            f"the url [{url}] needs a variable: [{key}], but wasn't provided."
        )
        super().__init__(self.message)


class BindingTypeViolationError(HttpInvokerError, TypeError):
    def __init__(
        self,
        message="Headers and Cookies should only be bound to parameters of Mapping[str, str] type.",
    ):
        self.message = message
        super().__init__(self.message)


class UnsuccessfulStatusError(HttpInvokerError, OSError):
    """Raised when a response arrives with a status code outside [200, 300).

    Retryable statuses are only surfaced through this error once the retry
    policy has been exhausted.
    """

    def __init__(self, url: str, status_code: int, status_message: Optional[str]):
        self.url = url
        self.status_code = status_code
        self.status_message = status_message
        self.message = (
            f"{url}, statusCode: {status_code}, statusMsg: {status_message}"
        )
        super().__init__(self.message)


class InvocationContractViolationError(HttpInvokerError, RuntimeError):
    def __init__(
        self,
        message="this proxy only implements methods declared with @http_req",
    ):
        self.message = message
        super().__init__(self.message)
