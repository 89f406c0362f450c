import io
import json
from typing import Annotated, Any, BinaryIO, Dict, List, Mapping, Optional
from urllib.parse import parse_qs

import pytest
from pydantic import BaseModel
from pytest_httpx import HTTPXMock

from httpinvoker import (
    BindingKind,
    BindingTypeViolationError,
    Cookies,
    Headers,
    HttpApiInvoker,
    HttpApiProxyFactory,
    HttpResponse,
    HttpxRequestor,
    InvocationContractViolationError,
    Param,
    ResultShape,
    UnsuccessfulStatusError,
    build_method_descriptor,
    http_api,
    http_req,
    retry_policy,
)


class User(BaseModel):
    id: int
    name: str


class UserQuery(BaseModel):
    name: str
    page: int = 1


@http_api(prefix="${api.url}")
@retry_policy(times=2)
class UserApi:
    @http_req("/users/{id}")
    def get_user(self, user_id: Annotated[int, Param("id")]) -> User: ...

    @http_req("/users")
    def find_users(
        self,
        name: Annotated[str, Param("name")],
        page: Annotated[Optional[int], Param("page")] = None,
    ) -> List[User]: ...

    @http_req("/users", method="post")
    def create_user(
        self,
        query: Annotated[UserQuery, Param(is_body=True)],
        headers: Annotated[Dict[str, str], Headers],
        cookies: Annotated[Mapping[str, str], Cookies],
    ) -> None: ...

    @http_req("/users/batch", method="PUT")
    def replace_all(self, users: List[Dict[str, Any]]) -> str: ...

    @http_req("/users/{id}/avatar", method="POST")
    def upload_avatar(
        self,
        user_id: Annotated[int, Param("id")],
        avatar: Annotated[BinaryIO, Param("avatar")],
    ) -> HttpResponse: ...

    @http_req("/users/{id}/avatar")
    def download_avatar(self, user_id: Annotated[int, Param("id")]) -> bytes: ...

    @http_req("/users/{id}/export")
    def export(self, user_id: Annotated[int, Param("id")]) -> BinaryIO: ...

    @http_req("https://other.test/health")
    @retry_policy(times=1)
    def health(self) -> str: ...

    def not_remote(self) -> None: ...


@pytest.fixture
def factory(property_resolver) -> HttpApiProxyFactory:
    return HttpApiProxyFactory(HttpxRequestor(), property_resolver)


@pytest.fixture
def users(factory: HttpApiProxyFactory) -> UserApi:
    return factory.new_proxy(UserApi)


class TestHttpApiProxyFactory:
    class TestCalls:
        def test_path_variable_and_structured_result(
            self, httpx_mock: HTTPXMock, users: UserApi, base_url: str
        ):
            httpx_mock.add_response(
                url=f"{base_url}/users/1", json={"id": 1, "name": "alice"}
            )

            user = users.get_user(1)

            assert user == User(id=1, name="alice")
            sent = httpx_mock.get_request()
            assert sent is not None
            assert sent.method == "GET"

        def test_keyword_arguments_and_query(
            self, httpx_mock: HTTPXMock, users: UserApi, base_url: str
        ):
            httpx_mock.add_response(
                url=f"{base_url}/users?name=alice&page=2",
                json=[{"id": 1, "name": "alice"}],
            )

            found = users.find_users(page=2, name="alice")

            assert found == [User(id=1, name="alice")]

        def test_default_none_arguments_are_skipped(
            self, httpx_mock: HTTPXMock, users: UserApi, base_url: str
        ):
            httpx_mock.add_response(url=f"{base_url}/users?name=alice", json=[])

            assert users.find_users("alice") == []

        def test_body_headers_and_cookies(
            self, httpx_mock: HTTPXMock, users: UserApi, base_url: str
        ):
            httpx_mock.add_response(url=f"{base_url}/users", method="POST")

            result = users.create_user(
                UserQuery(name="alice", page=3),
                {"X-Trace": "abc"},
                {"session": "s1"},
            )

            assert result is None
            sent = httpx_mock.get_request()
            assert sent is not None
            assert sent.method == "POST"
            assert parse_qs(sent.content.decode()) == {"name": ["alice"], "page": ["3"]}
            assert sent.headers["X-Trace"] == "abc"
            assert sent.headers["Cookie"] == "session=s1"

        def test_collection_body_is_sent_as_json(
            self, httpx_mock: HTTPXMock, users: UserApi, base_url: str
        ):
            httpx_mock.add_response(
                url=f"{base_url}/users/batch", method="PUT", text="replaced"
            )

            result = users.replace_all([{"id": 1}, {"id": 2}])

            assert result == "replaced"
            sent = httpx_mock.get_request()
            assert sent is not None
            assert json.loads(sent.content) == [{"id": 1}, {"id": 2}]
            assert sent.headers["Content-Type"] == "application/json"

        def test_file_upload(self, httpx_mock: HTTPXMock, users: UserApi, base_url: str):
            httpx_mock.add_response(url=f"{base_url}/users/1/avatar", method="POST")

            response = users.upload_avatar(1, io.BytesIO(b"image-bytes"))

            assert isinstance(response, HttpResponse)
            assert response.status_code == 200
            sent = httpx_mock.get_request()
            assert sent is not None
            content = sent.read()
            assert sent.headers["Content-Type"].startswith("multipart/form-data")
            assert b'name="avatar"' in content
            assert b"image-bytes" in content

        def test_bytes_result(self, httpx_mock: HTTPXMock, users: UserApi, base_url: str):
            httpx_mock.add_response(
                url=f"{base_url}/users/1/avatar", content=b"\x89PNG\r\n"
            )

            assert users.download_avatar(1) == b"\x89PNG\r\n"

        def test_stream_result(self, httpx_mock: HTTPXMock, users: UserApi, base_url: str):
            httpx_mock.add_response(url=f"{base_url}/users/1/export", content=b"a,b\n")

            assert users.export(1).read() == b"a,b\n"

        def test_absolute_url_skips_prefix(self, httpx_mock: HTTPXMock, users: UserApi):
            httpx_mock.add_response(url="https://other.test/health", text="UP")

            assert users.health() == "UP"

    class TestFailures:
        def test_interface_retry_policy(
            self, httpx_mock: HTTPXMock, users: UserApi, base_url: str
        ):
            httpx_mock.add_response(url=f"{base_url}/users/1", status_code=503)
            httpx_mock.add_response(
                url=f"{base_url}/users/1", json={"id": 1, "name": "alice"}
            )

            assert users.get_user(1) == User(id=1, name="alice")
            assert len(httpx_mock.get_requests()) == 2

        def test_unsuccessful_status(
            self, httpx_mock: HTTPXMock, users: UserApi, base_url: str
        ):
            httpx_mock.add_response(url=f"{base_url}/users/9", status_code=404)

            with pytest.raises(UnsuccessfulStatusError) as exc_info:
                users.get_user(9)

            assert exc_info.value.status_code == 404
            assert exc_info.value.status_message == "Not Found"
            assert exc_info.value.url == f"{base_url}/users/9"

        def test_undeclared_method_is_rejected(self, users: UserApi):
            with pytest.raises(InvocationContractViolationError):
                users.not_remote()

    class TestCreation:
        def test_proxies_are_cached(self, factory: HttpApiProxyFactory):
            assert factory.new_proxy(UserApi) is factory.new_proxy(UserApi)

        def test_proxy_is_an_instance_of_the_interface(self, users: UserApi):
            assert isinstance(users, UserApi)

        def test_header_binding_requires_text_mapping(
            self, factory: HttpApiProxyFactory
        ):
            class BrokenApi:
                @http_req("https://api.test/x")
                def call(self, headers: Annotated[Dict[str, int], Headers]) -> None: ...

            with pytest.raises(BindingTypeViolationError):
                factory.new_proxy(BrokenApi)

        def test_default_factory_builds_its_invoker(self):
            factory = HttpApiProxyFactory()

            assert isinstance(factory.invoker, HttpApiInvoker)
            assert isinstance(factory.invoker.requestor, HttpxRequestor)


class TestBuildMethodDescriptor:
    def test_descriptor_table(self):
        descriptor = build_method_descriptor(UserApi.create_user)

        assert descriptor.url == "/users"
        assert descriptor.method == "POST"
        assert descriptor.result_shape is ResultShape.NONE
        assert [b.kind for b in descriptor.bindings] == [
            BindingKind.BODY,
            BindingKind.HEADER_MAP,
            BindingKind.COOKIE_MAP,
        ]

    def test_method_retry_policy(self):
        descriptor = build_method_descriptor(UserApi.health)

        assert descriptor.retry_policy is not None
        assert descriptor.retry_policy.times == 1

    def test_unannotated_parameters_and_result(self):
        class LooseApi:
            @http_req("/things", timeout=1.5)
            def things(self, query):
                ...

        descriptor = build_method_descriptor(LooseApi.things)

        assert descriptor.timeout == 1.5
        assert descriptor.bindings[0].kind is BindingKind.NONE
        assert descriptor.result_shape is ResultShape.STRUCTURED
        assert descriptor.result_type is Any

    def test_undeclared_function_is_rejected(self):
        with pytest.raises(InvocationContractViolationError):
            build_method_descriptor(UserApi.not_remote)
