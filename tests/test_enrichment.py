from datetime import datetime, timezone

import pytest
import respx
from httpx import Response

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.enrichment import (
    Enricher,
    markdown_link,
    tags_summary,
    truncate,
    word_count,
)
from bookstack_mcp.models import Tag

BASE = "https://docs.example.com"
API = f"{BASE}/api"
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def client():
    return BookStackClient(base_url=BASE, token_id="tid", token_secret="tsecret")


@pytest.fixture
def enricher(client):
    return Enricher.for_client(client, now=lambda: NOW)


def test_truncate_adds_ellipsis_only_when_cut():
    assert truncate("short", 10, "none") == "short"
    assert truncate(None, 10, "none") == "none"
    assert truncate("", 10, "none") == "none"

    cut = truncate("x" * 250, 200, "none")
    assert len(cut) == 203
    assert cut.endswith("...")


def test_truncate_boundary_at_limit():
    assert truncate("x" * 200, 200, "none") == "x" * 200

    cut = truncate("x" * 201, 200, "none")
    assert len(cut) == 203
    assert cut == "x" * 200 + "..."


def test_word_count_splits_on_whitespace():
    assert word_count("one  two\nthree\tfour") == 4
    assert word_count(None) == 0


def test_helpers():
    assert markdown_link("Guide", "https://x/y") == "[Guide](https://x/y)"
    assert tags_summary([]) == "No tags"
    assert (
        tags_summary([Tag(name="team", value="ops"), Tag(name="draft")])
        == "Tagged with: team=ops, draft"
    )


def test_book_enrichment(enricher):
    book = enricher.book(
        {
            "id": 1,
            "name": "Guide",
            "slug": "guide",
            "description": "d" * 150,
            "created_at": "2024-06-15T10:30:00Z",
            "updated_at": "2024-06-12T12:00:00Z",
            "contents": [
                {"type": "chapter", "id": 2, "pages": [{"id": 10}, {"id": 11}]},
                {"type": "page", "id": 12},
            ],
        }
    )

    assert book["url"] == f"{BASE}/books/guide"
    assert book["direct_link"] == f"[Guide]({BASE}/books/guide)"
    assert book["created_friendly"] == "1 hours ago"
    assert book["last_updated_friendly"] == "3 days ago"
    assert book["summary"] == "d" * 100 + "..."
    assert book["chapter_count"] == 1
    assert book["page_count"] == 3
    # raw fields survive
    assert book["description"] == "d" * 150


def test_book_without_slug_uses_id(enricher):
    book = enricher.book({"id": 9, "name": "Untitled"})
    assert book["url"] == f"{BASE}/books/9"
    assert book["summary"] == "No description available"
    assert book["created_friendly"] == "Unknown date"
    assert "chapter_count" not in book


@pytest.mark.asyncio
@respx.mock
async def test_page_url_resolves_book_slug(client, enricher):
    respx.get(f"{API}/books/1").mock(
        return_value=Response(200, json={"id": 1, "slug": "guide"})
    )

    async with client:
        page = await enricher.page(
            {
                "id": 5,
                "name": "Intro",
                "slug": "intro",
                "book_id": 1,
                "text": "Hello there world",
            }
        )

    assert page["url"] == "https://docs.example.com/books/guide/page/intro"
    assert page["direct_link"] == "[Intro](https://docs.example.com/books/guide/page/intro)"
    assert page["word_count"] == 3
    assert page["content_preview"] == "Hello there world"
    assert page["location"] == "Book ID 1"


@pytest.mark.asyncio
@respx.mock
async def test_book_slug_on_record_skips_lookup(client, enricher):
    # no routes: any lookup would fail the test
    async with client:
        page = await enricher.page(
            {"id": 5, "name": "Intro", "slug": "intro", "book_id": 1, "book_slug": "guide"}
        )

    assert page["url"] == f"{BASE}/books/guide/page/intro"


@pytest.mark.asyncio
@respx.mock
async def test_page_list_keeps_order_and_degrades_per_item(client, enricher):
    respx.get(f"{API}/books/1").mock(
        return_value=Response(200, json={"id": 1, "slug": "guide"})
    )
    respx.get(f"{API}/books/2").mock(return_value=Response(404))

    async with client:
        pages = await enricher.pages(
            [
                {"id": 10, "name": "A", "slug": "a", "book_id": 1},
                {"id": 11, "name": "B", "slug": "b", "book_id": 2, "chapter_id": 4},
                {"id": 12, "name": "C", "slug": "c", "book_id": 1},
            ]
        )

    assert [p["id"] for p in pages] == [10, 11, 12]
    assert pages[0]["url"] == f"{BASE}/books/guide/page/a"
    assert pages[1]["url"] == f"{BASE}/books/2/page/b"
    assert pages[1]["location"] == "Book ID 2, Chapter ID 4"
    assert pages[1]["content_preview"] == "No content preview available"
    assert pages[2]["url"] == f"{BASE}/books/guide/page/c"


@pytest.mark.asyncio
@respx.mock
async def test_chapter_enrichment(client, enricher):
    respx.get(f"{API}/books/1").mock(
        return_value=Response(200, json={"id": 1, "slug": "guide"})
    )

    async with client:
        chapter = await enricher.chapter(
            {
                "id": 3,
                "name": "Setup",
                "slug": "setup",
                "book_id": 1,
                "pages": [{"id": 1}, {"id": 2}],
            }
        )

    assert chapter["url"] == f"{BASE}/books/guide/chapter/setup"
    assert chapter["location"] == "In Book ID 1"
    assert chapter["page_count"] == 2


def test_shelf_enrichment(enricher):
    shelf = enricher.shelf(
        {
            "id": 4,
            "name": "Engineering",
            "slug": "engineering",
            "books": [{"id": 1, "name": "Guide", "slug": "guide"}],
            "tags": [{"name": "team", "value": "eng"}],
        }
    )

    assert shelf["url"] == f"{BASE}/shelves/engineering"
    assert shelf["book_count"] == 1
    assert shelf["books"][0]["url"] == f"{BASE}/books/guide"
    assert shelf["tags_summary"] == "Tagged with: team=eng"
    assert "1 book," in shelf["content_info"]


@pytest.mark.asyncio
@respx.mock
async def test_attachment_page_url(client, enricher):
    respx.get(f"{API}/pages/5").mock(
        return_value=Response(200, json={"id": 5, "slug": "intro", "book_id": 1})
    )
    respx.get(f"{API}/books/1").mock(
        return_value=Response(200, json={"id": 1, "slug": "guide"})
    )

    async with client:
        attachment = await enricher.attachment(
            {"id": 8, "name": "diagram.png", "uploaded_to": 5}, with_download=True
        )

    assert attachment["page_url"] == f"{BASE}/books/guide/page/intro"
    assert attachment["download_url"] == f"{BASE}/attachments/8"
    assert attachment["direct_link"] == f"[diagram.png]({BASE}/attachments/8)"


@pytest.mark.asyncio
@respx.mock
async def test_attachment_unknown_page_uses_link_url(client, enricher):
    respx.get(f"{API}/pages/5").mock(return_value=Response(404))

    async with client:
        attachment = await enricher.attachment(
            {"id": 8, "name": "diagram.png", "uploaded_to": 5}
        )

    assert attachment["page_url"] == f"{BASE}/link/5"
    assert "download_url" not in attachment


@pytest.mark.asyncio
@respx.mock
async def test_search_results(client, enricher):
    respx.get(f"{API}/books/1").mock(
        return_value=Response(200, json={"id": 1, "slug": "guide"})
    )

    async with client:
        result = await enricher.search_results(
            [
                {
                    "id": 5,
                    "name": "Intro",
                    "slug": "intro",
                    "type": "page",
                    "book_id": 1,
                    "preview_html": {"content": "install the thing"},
                },
                {"id": 1, "name": "Guide", "slug": "guide", "type": "book"},
                {"id": 2, "name": "Eng", "slug": "eng", "type": "bookshelf"},
            ],
            "install guide",
        )

    assert result["search_url"] == f"{BASE}/search?term=install%20guide"
    assert result["summary"] == 'Found 3 results for "install guide"'
    page, book, shelf = result["results"]
    assert page["url"] == f"{BASE}/books/guide/page/intro"
    assert page["content_type"] == "Page"
    assert page["content_preview"] == "install the thing"
    assert page["location_info"] == "In book ID 1"
    assert book["url"] == f"{BASE}/books/guide"
    assert book["content_preview"] == "No preview available"
    assert shelf["url"] == f"{BASE}/shelves/eng"
