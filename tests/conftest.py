import pytest

from httpinvoker import MappingPropertyResolver, RetryExecutor


@pytest.fixture
def base_url() -> str:
    return "https://api.test"


@pytest.fixture
def properties(base_url: str) -> dict[str, str]:
    return {"api.url": base_url, "api.version": "v1"}


@pytest.fixture
def property_resolver(properties: dict[str, str]) -> MappingPropertyResolver:
    return MappingPropertyResolver(properties)


@pytest.fixture
def no_sleep_executor() -> RetryExecutor:
    """Retry executor whose backoff pauses return immediately."""
    return RetryExecutor(sleep=lambda seconds: None)
