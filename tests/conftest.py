"""Shared fixtures: in-memory transports and CMS payload builders."""

import asyncio

import pytest

from sources.errors import TransportError

ORIGIN = "http://cms.test"


class FakeTransport:
    """Replies from a queue of payloads or exceptions, recording every call."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def queue(self, *replies):
        self.replies.extend(replies)

    async def get(self, path, query):
        self.calls.append((path, dict(query)))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class ControlledTransport:
    """Every call blocks until the test resolves its future, in any order."""

    def __init__(self):
        self.pending = []
        self.calls = []

    async def get(self, path, query):
        future = asyncio.get_running_loop().create_future()
        self.calls.append((path, dict(query)))
        self.pending.append(future)
        return await future


def flat_article(i, **overrides):
    record = {
        "id": i,
        "title": f"Article {i}",
        "slug": f"article-{i}",
        "publishedBy": "Jane Grower",
        "publishedDate": "2024-03-0%dT10:00:00.000Z" % (i % 9 + 1),
        "mainImage": {
            "url": f"/uploads/a{i}.jpg",
            "formats": {"small": {"url": f"/uploads/small_a{i}.jpg"}},
        },
    }
    record.update(overrides)
    return record


def nested_article(i, **overrides):
    flat = flat_article(i, **overrides)
    image = flat.pop("mainImage")
    record_id = flat.pop("id")
    attributes = dict(flat)
    attributes["mainImage"] = {"data": {"id": 100 + i, "attributes": image}}
    return {"id": record_id, "attributes": attributes}


def envelope(records, page_count=1):
    return {"data": records, "meta": {"pagination": {"pageCount": page_count}}}


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def controlled():
    return ControlledTransport()


@pytest.fixture
def fail():
    return TransportError("Service unavailable", status=503)
