"""Tests for the command line entry point."""

import pytest

import main
from conftest import FakeTransport, envelope, flat_article


class ClosingTransport(FakeTransport):
    closed = False

    def close(self):
        self.closed = True


@pytest.fixture
def cms(monkeypatch):
    transport = ClosingTransport()
    monkeypatch.setattr(main, "CMSClient", lambda: transport)
    return transport


class TestMain:

    def test_usage(self, capsys):
        assert main.main([]) == 1
        assert main.main(["list", "vegetables"]) == 1
        assert "Usage" in capsys.readouterr().out

    def test_list_pages(self, cms, capsys):
        cms.queue(
            envelope([flat_article(1), flat_article(2)], page_count=3),
            envelope([flat_article(3)], page_count=3),
        )

        assert main.main(["list", "articles", "2"]) == 0

        out = capsys.readouterr().out
        assert "article-1" in out and "article-3" in out
        assert len(cms.calls) == 2
        assert cms.closed

    def test_show_not_found(self, cms, capsys):
        cms.queue(envelope([]))
        assert main.main(["show", "crops", "nope"]) == 1
        assert "not found" in capsys.readouterr().out

    def test_show_prints_document(self, cms, capsys):
        cms.queue(envelope([flat_article(1, content=[
            {"__component": "heading.heading", "heading": "Setup"},
            {"__component": "list.list", "items": ["Trays"], "format": "ordered"},
        ])]))

        assert main.main(["show", "articles", "article-1"]) == 0

        out = capsys.readouterr().out
        assert "## Setup" in out
        assert "1. Trays" in out
        assert "publishedBy: Jane Grower" in out
