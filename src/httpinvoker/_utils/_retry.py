import time
from logging import getLogger
from typing import Callable, Optional

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from ..models.descriptors import RetryPolicy
from ..models.request import HttpResponse

logger = getLogger(__name__)


def pause(seconds: float) -> None:
    """Block the calling thread for the backoff period."""
    if seconds > 0:
        # resumes on its own after a signal handler returns (PEP 475)
        time.sleep(seconds)


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    if outcome is None:
        return
    if outcome.failed:
        logger.warning(
            f"send request error, tryTime: {retry_state.attempt_number}, error: {outcome.exception()}"
        )
    else:
        logger.debug(
            f"retryable status {outcome.result().status_code}, tryTime: {retry_state.attempt_number}"
        )


def _last_outcome(retry_state: RetryCallState) -> HttpResponse:
    # the final attempt's error is re-raised, its response is handed back as-is
    return retry_state.outcome.result()  # type: ignore[union-attr]


class RetryExecutor:
    """Runs a send operation under a RetryPolicy.

    Responses whose status falls into ``retry_for_status`` and errors matching
    ``retry_for`` are retried until ``times`` attempts were made. Any other
    error is raised immediately. When every attempt ends with a retryable
    status, the last response is returned and status validation is left to
    the caller.
    """

    def __init__(self, sleep: Callable[[float], None] = pause):
        self._sleep = sleep

    def execute(
        self,
        send: Callable[[], HttpResponse],
        policy: Optional[RetryPolicy],
    ) -> HttpResponse:
        if policy is None or policy.times <= 0:
            return send()

        retrying = Retrying(
            stop=stop_after_attempt(policy.times),
            wait=wait_fixed(policy.fixed_backoff_period),
            retry=(
                retry_if_result(
                    lambda response: policy.is_retryable_status(response.status_code)
                )
                | retry_if_exception(policy.is_retryable_exception)
            ),
            sleep=self._sleep,
            before_sleep=_log_retry,
            retry_error_callback=_last_outcome,
            reraise=True,
        )
        return retrying(send)
