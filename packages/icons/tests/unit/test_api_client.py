"""Unit tests for the icon API HTTP client.

Responses are served by ``httpx.MockTransport`` so no network is used.
"""

import httpx
import pytest

from icon_resolver.config.providers import ProviderConfig
from icon_resolver.integration.api_client import IconApiClient
from icon_resolver.redundancy.scheduler import HostRotationScheduler
from icon_resolver.redundancy.types import AttemptStatus

HOST = "https://api.test"


def make_client(handler) -> IconApiClient:
    return IconApiClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestBuildQueries:
    def test_single_query(self):
        config = ProviderConfig(resources=(HOST,))
        queries = IconApiClient().build_queries(config, "mdi", ["home", "account"])

        assert len(queries) == 1
        assert queries[0].names == ("home", "account")
        assert queries[0].path == "/mdi.json?icons=home,account"

    def test_custom_path(self):
        config = ProviderConfig(resources=(HOST,), path="/v3/")
        [query] = IconApiClient().build_queries(config, "mdi", ["home"])
        assert query.path == "/v3/mdi.json?icons=home"

    def test_splits_to_fit_max_url(self):
        config = ProviderConfig(resources=(HOST, "https://longer-host.test"), max_url=80)
        names = [f"icon-{i:03d}" for i in range(30)]

        queries = IconApiClient().build_queries(config, "mdi", names)

        assert len(queries) > 1
        assert [name for query in queries for name in query.names] == names
        for query in queries:
            for host in config.resources:
                assert len(host + query.path) <= config.max_url

    def test_oversized_name_gets_own_query(self):
        config = ProviderConfig(resources=(HOST,), max_url=40)
        long_name = "a" * 50
        queries = IconApiClient().build_queries(config, "mdi", ["home", long_name, "star"])
        assert [query.names for query in queries] == [("home",), (long_name,), ("star",)]

    def test_no_names_no_queries(self):
        config = ProviderConfig(resources=(HOST,))
        assert IconApiClient().build_queries(config, "mdi", []) == []


class TestFetch:
    @pytest.mark.asyncio
    async def test_success(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json={"prefix": "mdi", "icons": {}})

        client = make_client(handler)
        result = await client.fetch(HOST + "/", "/mdi.json?icons=home")

        assert result.status is AttemptStatus.SUCCESS
        assert result.data == {"prefix": "mdi", "icons": {}}
        assert seen == [HOST + "/mdi.json?icons=home"]

    @pytest.mark.asyncio
    async def test_404_is_hard_failure(self):
        client = make_client(lambda request: httpx.Response(404))
        result = await client.fetch(HOST, "/mdi.json?icons=home")
        assert result.status is AttemptStatus.HARD_FAILURE

    @pytest.mark.asyncio
    async def test_non_object_body_is_hard_failure(self):
        client = make_client(lambda request: httpx.Response(200, json=404))
        result = await client.fetch(HOST, "/nope.json?icons=home")
        assert result.status is AttemptStatus.HARD_FAILURE

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [429, 500, 502, 503])
    async def test_server_errors_are_soft(self, status):
        client = make_client(lambda request: httpx.Response(status))
        result = await client.fetch(HOST, "/mdi.json?icons=home")
        assert result.status is AttemptStatus.SOFT_FAILURE
        assert str(status) in result.error

    @pytest.mark.asyncio
    async def test_invalid_json_is_soft(self):
        client = make_client(lambda request: httpx.Response(200, text="<html>"))
        result = await client.fetch(HOST, "/mdi.json?icons=home")
        assert result.status is AttemptStatus.SOFT_FAILURE

    @pytest.mark.asyncio
    async def test_transport_error_is_soft(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = make_client(handler)
        result = await client.fetch(HOST, "/mdi.json?icons=home")
        assert result.status is AttemptStatus.SOFT_FAILURE
        assert "ConnectError" in result.error

    @pytest.mark.asyncio
    async def test_redirect_loop_is_soft(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(302, headers={"Location": str(request.url)})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
        result = await IconApiClient(http).fetch(HOST, "/mdi.json?icons=home")

        assert result.status is AttemptStatus.SOFT_FAILURE
        assert "TooManyRedirects" in result.error

    @pytest.mark.asyncio
    async def test_redirect_loop_rotates_to_next_host(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "a.test":
                return httpx.Response(302, headers={"Location": str(request.url)})
            return httpx.Response(200, json={"prefix": "mdi", "icons": {"home": {"body": "<g/>"}}})

        http = httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)
        client = IconApiClient(http)
        config = ProviderConfig(resources=("https://a.test", "https://b.test"), rotate=50, limit=1)
        [icon_query] = client.build_queries(config, "mdi", ["home"])

        result = await HostRotationScheduler().resolve(config, client.query(icon_query))

        assert result.ok
        assert result.host == "https://b.test"

    @pytest.mark.asyncio
    async def test_query_binds_path(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.host)
            return httpx.Response(200, json={"prefix": "mdi", "icons": {}})

        client = make_client(handler)
        config = ProviderConfig(resources=(HOST,))
        [icon_query] = client.build_queries(config, "mdi", ["home"])

        result = await client.query(icon_query)("https://other.test")

        assert result.status is AttemptStatus.SUCCESS
        assert seen == ["other.test"]


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        client = IconApiClient(http)
        await client.aclose()
        assert not http.is_closed
        await http.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_created_and_closed(self):
        client = IconApiClient(timeout_seconds=1.0)
        http = client._get_client()
        assert http.headers["User-Agent"] == "icon-resolver/1.0"
        await client.aclose()
        assert http.is_closed
