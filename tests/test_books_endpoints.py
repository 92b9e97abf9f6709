import json

import pytest

from app import app as flask_app
import views.books as books_view
import crawlers.pressbooks_catalogue_crawler as catalogue_crawler
from services.catalogue_cache import books_cache
from services.pressbooks_parser import ChapterContent, CatalogueEntry, TocChapter, TocPart
from utils.errors import UpstreamError


@pytest.fixture
def client():
    flask_app.config["TESTING"] = True
    return flask_app.test_client()


def test_books_returns_entries_and_passes_all_flag(monkeypatch, client):
    calls = []

    def fake_fetch_book_list(include_all=False):
        calls.append(include_all)
        return [CatalogueEntry(id=1, title="Human Biology", link="https://humanbiology.pressbooks.tru.ca")]

    monkeypatch.setattr(books_view, "fetch_book_list", fake_fetch_book_list)

    filtered = client.get("/api/books")
    unfiltered = client.get("/api/books?all=1")
    other = client.get("/api/books?all=true")

    assert filtered.status_code == 200
    assert filtered.get_json() == [
        {
            "id": 1,
            "title": "Human Biology",
            "link": "https://humanbiology.pressbooks.tru.ca",
            "author": "",
            "license": "",
            "subject": "",
            "inCatalog": False,
            "wordCount": 0,
            "lastUpdated": "",
        }
    ]
    assert unfiltered.status_code == 200
    assert other.status_code == 200
    assert calls == [False, True, False]


def test_books_upstream_failure_is_502(monkeypatch, client):
    def failing_fetch_book_list(include_all=False):
        raise UpstreamError("Pressbooks returned HTTP 500 on page 3", upstream_status=500, page=3)

    monkeypatch.setattr(books_view, "fetch_book_list", failing_fetch_book_list)

    response = client.get("/api/books")

    assert response.status_code == 502
    assert response.get_json() == {
        "error": "Could not fetch book list: Pressbooks returned HTTP 500 on page 3",
        "code": "UPSTREAM_ERROR",
    }


def test_books_unexpected_error_does_not_leak_details(monkeypatch, client):
    def broken_fetch_book_list(include_all=False):
        raise RuntimeError("secret-details")

    monkeypatch.setattr(books_view, "fetch_book_list", broken_fetch_book_list)

    response = client.get("/api/books")

    assert response.status_code == 500
    assert "secret-details" not in response.get_data(as_text=True)


def test_toc_requires_book_url(client):
    response = client.get("/api/toc")

    assert response.status_code == 400
    assert response.get_json()["error"] == "bookUrl query parameter is required."


@pytest.mark.parametrize("book_url", ["https://evil.com", "https://pressbooks.tru.ca.evil.com"])
def test_toc_rejects_untrusted_hosts(client, book_url):
    response = client.get("/api/toc", query_string={"bookUrl": book_url})

    assert response.status_code == 400
    assert response.get_json()["code"] == "INVALID_INPUT"


def test_toc_returns_parts(monkeypatch, client):
    async def fake_get_toc(book_url):
        assert book_url == "https://bio.pressbooks.tru.ca"
        chapter = TocChapter(id=10, title="Cells", slug="cells", link="https://bio/cells", word_count=100)
        return [TocPart(id=1, title="Main Body", chapters=(chapter,))]

    monkeypatch.setattr(books_view, "get_toc", fake_get_toc)

    response = client.get("/api/toc", query_string={"bookUrl": "https://bio.pressbooks.tru.ca"})

    assert response.status_code == 200
    assert response.get_json() == [
        {
            "id": 1,
            "title": "Main Body",
            "chapters": [{"id": 10, "title": "Cells", "slug": "cells", "link": "https://bio/cells", "wordCount": 100}],
        }
    ]


def test_toc_upstream_failure_is_502(monkeypatch, client):
    async def failing_get_toc(book_url):
        raise UpstreamError("HTTP 404", upstream_status=404)

    monkeypatch.setattr(books_view, "get_toc", failing_get_toc)

    response = client.get("/api/toc", query_string={"bookUrl": "https://bio.pressbooks.tru.ca"})

    assert response.status_code == 502
    assert response.get_json()["error"] == "Could not fetch table of contents: HTTP 404"


def test_chapter_requires_both_params(client):
    response = client.get("/api/chapter", query_string={"bookUrl": "https://bio.pressbooks.tru.ca"})

    assert response.status_code == 400


def test_chapter_rejects_untrusted_host(client):
    response = client.get("/api/chapter", query_string={"bookUrl": "https://evil.com", "chapterId": "5"})

    assert response.status_code == 400


def test_chapter_returns_content(monkeypatch, client):
    async def fake_get_chapter(book_url, chapter_id):
        assert chapter_id == "5"
        return ChapterContent(id=5, title="Ch. 1", link="https://bio/ch1", word_count=3, text="Hello & welcome")

    monkeypatch.setattr(books_view, "get_chapter", fake_get_chapter)

    response = client.get(
        "/api/chapter",
        query_string={"bookUrl": "https://bio.pressbooks.tru.ca", "chapterId": "5"},
    )

    assert response.status_code == 200
    assert response.get_json() == {
        "id": 5,
        "title": "Ch. 1",
        "link": "https://bio/ch1",
        "wordCount": 3,
        "text": "Hello & welcome",
    }


def test_chapter_upstream_failure_is_502(monkeypatch, client):
    async def failing_get_chapter(book_url, chapter_id):
        raise UpstreamError("Cannot connect to host")

    monkeypatch.setattr(books_view, "get_chapter", failing_get_chapter)

    response = client.get(
        "/api/chapter",
        query_string={"bookUrl": "https://bio.pressbooks.tru.ca", "chapterId": "5"},
    )

    assert response.status_code == 502
    assert response.get_json()["error"] == "Could not fetch chapter: Cannot connect to host"


class _MaintenanceResponse:
    status = 200
    headers = {}

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def json(self, content_type="application/json"):
        return json.loads("<html>maintenance</html>")


class _MaintenanceSession:
    def get(self, url, headers=None):
        return _MaintenanceResponse()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def test_books_non_json_upstream_body_is_502(monkeypatch, client):
    monkeypatch.setattr(catalogue_crawler, "create_session", lambda **kwargs: _MaintenanceSession())
    books_cache.clear()

    response = client.get("/api/books")

    assert response.status_code == 502
    assert response.get_json() == {
        "error": "Could not fetch book list: Invalid JSON from Pressbooks on page 1",
        "code": "UPSTREAM_ERROR",
    }
