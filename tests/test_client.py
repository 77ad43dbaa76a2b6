"""
Unit tests for ResilientFetcher.
"""

import asyncio

import httpx
import pytest

from catalog.schemas import LegacyProduct, ProductsResponse
from catalog.services.client import ResilientFetcher, strip_trailing_commas
from catalog.services.errors import FailureReason

BASE_URL = "http://catalog.test"


def make_fetcher(handler, timeout: float = 30.0) -> ResilientFetcher:
    return ResilientFetcher(
        base_url=BASE_URL,
        default_timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


class TestStripTrailingCommas:
    """Test cases for trailing comma tolerance."""

    def test_removes_commas_before_closers(self):
        assert strip_trailing_commas('{"a": [1, 2,], "b": 3,}') == '{"a": [1, 2], "b": 3}'

    def test_keeps_whitespace_after_removed_comma(self):
        assert strip_trailing_commas('[1,\n]') == "[1\n]"

    def test_leaves_strings_alone(self):
        text = '{"name": "a,]", "quote": "x\\",}"}'
        assert strip_trailing_commas(text) == text


class TestResilientFetcher:
    """Test cases for ResilientFetcher."""

    @pytest.mark.asyncio
    async def test_success_with_case_insensitive_fields(self):
        body = """{
            "Success": true,
            "DATA": [
                {"ID": 1, "Name": "Laptop", "SKU": "ELEC-LAP-001", "Price": 1200.5,
                 "Stock": 25, "CategoryID": 1, "CreatedAt": "2024-01-01T00:00:00Z",
                 "extraField": "ignored",},
            ],
            "Message": "ok",
            "Timestamp": "2024-01-01T00:00:00Z",
            "Count": 1,
        }"""

        def handler(request):
            assert request.url.path == "/api/products"
            return httpx.Response(200, text=body)

        async with make_fetcher(handler) as fetcher:
            outcome = await fetcher.fetch("/api/products", ProductsResponse)

        assert outcome.ok
        assert outcome.value.count == 1
        product = outcome.value.data[0]
        assert product.name == "Laptop"
        assert product.category_id == 1
        assert product.description is None

    @pytest.mark.asyncio
    async def test_empty_list_is_success(self):
        async with make_fetcher(lambda request: httpx.Response(200, text="[]")) as fetcher:
            outcome = await fetcher.fetch("/api/productlist", list[LegacyProduct])

        assert outcome.ok
        assert outcome.value == []

    @pytest.mark.asyncio
    async def test_server_error_does_not_read_body(self):
        async with make_fetcher(
            lambda request: httpx.Response(503, text="not json at all")
        ) as fetcher:
            outcome = await fetcher.fetch("/api/products", ProductsResponse)

        assert not outcome.ok
        assert outcome.failure.reason is FailureReason.SERVER_ERROR
        assert outcome.failure.status == 503
        assert outcome.failure.message == "Server returned 503"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["", "   \n\t "])
    async def test_empty_body_is_decode_failure(self, body):
        async with make_fetcher(lambda request: httpx.Response(200, text=body)) as fetcher:
            outcome = await fetcher.fetch("/api/products", ProductsResponse)

        assert outcome.failure.reason is FailureReason.DECODE
        assert outcome.failure.message == "Server returned empty response"

    @pytest.mark.asyncio
    async def test_null_body_is_decode_failure(self):
        async with make_fetcher(lambda request: httpx.Response(200, text="null")) as fetcher:
            outcome = await fetcher.fetch("/api/productlist", list[LegacyProduct])

        assert outcome.failure.reason is FailureReason.DECODE
        assert outcome.failure.message == "Failed to deserialize response"

    @pytest.mark.asyncio
    async def test_malformed_json_is_decode_failure(self):
        async with make_fetcher(
            lambda request: httpx.Response(200, text="{not json")
        ) as fetcher:
            outcome = await fetcher.fetch("/api/products", ProductsResponse)

        assert outcome.failure.reason is FailureReason.DECODE
        assert outcome.failure.message.startswith("JSON error:")

    @pytest.mark.asyncio
    async def test_shape_mismatch_is_decode_failure(self):
        async with make_fetcher(
            lambda request: httpx.Response(200, json=[{"id": "not-a-number"}])
        ) as fetcher:
            outcome = await fetcher.fetch("/api/productlist", list[LegacyProduct])

        assert outcome.failure.reason is FailureReason.DECODE

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_failure(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        async with make_fetcher(handler) as fetcher:
            outcome = await fetcher.fetch("/api/products", ProductsResponse)

        assert outcome.failure.reason is FailureReason.TRANSPORT
        assert "Connection refused" in outcome.failure.message

    @pytest.mark.asyncio
    async def test_transport_timeout_uses_configured_timeout_in_message(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_fetcher(handler, timeout=30) as fetcher:
            outcome = await fetcher.fetch("/api/products", ProductsResponse)

        assert outcome.failure.reason is FailureReason.TIMEOUT
        assert outcome.failure.message == "Request timed out after 30 seconds"

    @pytest.mark.asyncio
    async def test_deadline_abandons_slow_request(self):
        completed = []

        async def handler(request):
            await asyncio.sleep(1)
            completed.append(True)
            return httpx.Response(200, text="[]")

        async with make_fetcher(handler) as fetcher:
            outcome = await fetcher.fetch(
                "/api/productlist", list[LegacyProduct], timeout=0.05
            )
            await asyncio.sleep(0.05)

        assert outcome.failure.reason is FailureReason.TIMEOUT
        assert outcome.failure.message == "Request timed out after 0.05 seconds"
        assert completed == []

    @pytest.mark.asyncio
    async def test_cancel_event_ends_request_early(self):
        async def handler(request):
            await asyncio.sleep(1)
            return httpx.Response(200, text="[]")

        cancel_event = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, cancel_event.set)

        async with make_fetcher(handler) as fetcher:
            outcome = await fetcher.fetch(
                "/api/productlist", list[LegacyProduct], cancel_event=cancel_event
            )

        assert outcome.failure.reason is FailureReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_unexpected_error_is_unknown_failure(self):
        def handler(request):
            raise RuntimeError("kaboom")

        async with make_fetcher(handler) as fetcher:
            outcome = await fetcher.fetch("/api/products", ProductsResponse)

        assert outcome.failure.reason is FailureReason.UNKNOWN
        assert outcome.failure.message == "Unexpected error: kaboom"

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self):
        client = httpx.AsyncClient(
            base_url=BASE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="[]")),
        )
        fetcher = ResilientFetcher(http_client=client)

        outcome = await fetcher.fetch("/api/productlist", list[LegacyProduct])
        await fetcher.close()

        assert outcome.ok
        assert client.is_closed is False
        await client.aclose()
