"""Tests for the requests-backed CMS transport."""

from unittest.mock import Mock

import pytest
import requests

from sources.cms import CMSClient, encode_query, envelope_data, page_count
from sources.errors import SchemaError, TransportError


def _response(status=200, body=None, invalid_json=False):
    resp = Mock(spec=requests.Response)
    resp.status_code = status
    resp.ok = status < 400
    if invalid_json:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class TestEncodeQuery:

    def test_flat_keys_pass_through(self):
        assert encode_query({"pagination[page]": 2, "sort": "name:asc"}) == [
            ("pagination[page]", 2),
            ("sort", "name:asc"),
        ]

    def test_lists_and_nested_mappings(self):
        query = {"populate": ["logo", "content.image"], "filters": {"slug": {"$eq": "agrico"}}}
        assert encode_query(query) == [
            ("populate[0]", "logo"),
            ("populate[1]", "content.image"),
            ("filters[slug][$eq]", "agrico"),
        ]

    def test_booleans_and_none(self):
        assert encode_query({"a": True, "b": None}) == [("a", "true")]


class TestCMSClient:

    @pytest.mark.asyncio
    async def test_get_returns_json(self):
        session = Mock()
        session.get.return_value = _response(body={"data": []})
        client = CMSClient("http://cms.test/api/", timeout=5, session=session)

        body = await client.get("/articles", {"populate": "*"})

        assert body == {"data": []}
        args, kwargs = session.get.call_args
        assert args[0] == "http://cms.test/api/articles"
        assert kwargs["params"] == [("populate", "*")]
        assert kwargs["timeout"] == 5

    @pytest.mark.asyncio
    async def test_server_message_is_surfaced(self):
        session = Mock()
        session.get.return_value = _response(403, {"error": {"status": 403, "message": "Forbidden"}})
        client = CMSClient("http://cms.test/api", session=session)

        with pytest.raises(TransportError) as excinfo:
            await client.get("/crops", {})

        assert excinfo.value.message == "Forbidden"
        assert excinfo.value.status == 403

    @pytest.mark.asyncio
    async def test_status_without_body(self):
        session = Mock()
        session.get.return_value = _response(502, invalid_json=True)
        client = CMSClient("http://cms.test/api", session=session)

        with pytest.raises(TransportError, match="HTTP 502"):
            await client.get("/crops", {})

    @pytest.mark.asyncio
    async def test_network_failure(self):
        session = Mock()
        session.get.side_effect = requests.ConnectionError("connection refused")
        client = CMSClient("http://cms.test/api", session=session)

        with pytest.raises(TransportError, match="connection refused"):
            await client.get("/crops", {})

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        session = Mock()
        session.get.return_value = _response(200, invalid_json=True)
        client = CMSClient("http://cms.test/api", session=session)

        with pytest.raises(TransportError, match="Invalid JSON"):
            await client.get("/crops", {})


class TestEnvelope:

    def test_data_required(self):
        with pytest.raises(SchemaError):
            envelope_data({"meta": {}})
        with pytest.raises(SchemaError):
            envelope_data(["not", "an", "envelope"])
        with pytest.raises(SchemaError):
            envelope_data({"data": "text"})

    def test_null_data_is_empty(self):
        assert envelope_data({"data": None}) == []

    @pytest.mark.parametrize("payload,expected", [
        ({"meta": {"pagination": {"pageCount": 4}}}, 4),
        ({"meta": {"pagination": {"pageCount": 0}}}, 1),
        ({"meta": {"pagination": {"pageCount": "3"}}}, 3),
        ({"meta": None}, 1),
        ({}, 1),
        ({"meta": {"pagination": {"pageCount": "many"}}}, 1),
    ])
    def test_page_count(self, payload, expected):
        assert page_count(payload) == expected
