import pytest
import respx
from httpx import Response

from bookstack_mcp.client import BookStackClient
from bookstack_mcp.tools.search import get_recent_changes, search_content, search_pages

BASE = "https://docs.example.com"
API = f"{BASE}/api"


@pytest.fixture
def client():
    return BookStackClient(base_url=BASE, token_id="tid", token_secret="tsecret")


@pytest.mark.asyncio
@respx.mock
async def test_search_content_with_type_filter(client):
    route = respx.get(f"{API}/search").mock(
        return_value=Response(
            200,
            json={
                "data": [{"id": 1, "name": "Guide", "slug": "guide", "type": "book"}],
                "total": 1,
            },
        )
    )

    async with client:
        result = await search_content(client, "install", type="book", count=900)

    params = route.calls[0].request.url.params
    assert params["query"] == "{type:book} install"
    assert params["count"] == "500"
    assert result["search_query"] == "install"
    assert result["results"][0]["url"] == f"{BASE}/books/guide"


@pytest.mark.asyncio
@respx.mock
async def test_search_pages_scopes_to_book(client):
    route = respx.get(f"{API}/search").mock(
        return_value=Response(200, json={"data": [], "total": 0})
    )

    async with client:
        result = await search_pages(client, "backup", book_id=4)

    assert route.calls[0].request.url.params["query"] == "{book_id:4} {type:page} backup"
    assert result["results"] == []
    assert result["summary"] == 'Found 0 results for "backup"'


@pytest.mark.asyncio
@respx.mock
async def test_recent_changes_fetches_context_and_degrades(client):
    search = respx.get(f"{API}/search").mock(
        return_value=Response(
            200,
            json={
                "data": [
                    {
                        "id": 5,
                        "name": "Intro",
                        "slug": "intro",
                        "type": "page",
                        "book_id": 1,
                        "preview_html": {"content": "snippet text"},
                        "updated_at": "2024-06-01T00:00:00Z",
                    },
                    {"id": 2, "name": "Ops", "slug": "ops", "type": "book"},
                ]
            },
        )
    )
    respx.get(f"{API}/pages/5").mock(return_value=Response(500))
    respx.get(f"{API}/books/1").mock(
        return_value=Response(200, json={"id": 1, "slug": "guide"})
    )
    respx.get(f"{API}/books/2").mock(
        return_value=Response(
            200,
            json={
                "id": 2,
                "slug": "ops",
                "description": "Runbooks",
                "contents": [{"type": "page"}, {"type": "page"}],
            },
        )
    )

    async with client:
        result = await get_recent_changes(client, type="all", limit=500, days=7)

    params = search.calls[0].request.url.params
    assert params["query"].startswith("{updated_at:>=")
    assert params["count"] == "100"
    assert params["sort"] == "updated_at"

    assert result["total_found"] == 2
    assert result["summary"] == "Found 2 items updated in the last 7 days"
    page, book = result["results"]
    assert page["contextual_info"] == "Page content"
    assert page["content_preview"] == "snippet text"
    assert page["url"] == f"{BASE}/books/guide/page/intro"
    assert page["change_summary"] == 'Page "Intro" was updated'
    assert book["contextual_info"] == "Book with 2 pages"
    assert book["content_preview"] == "Runbooks"
    assert book["last_updated"] == "Unknown date"


@pytest.mark.asyncio
@respx.mock
async def test_recent_changes_type_prefix(client):
    route = respx.get(f"{API}/search").mock(
        return_value=Response(200, json={"data": []})
    )

    async with client:
        result = await get_recent_changes(client, type="chapter")

    query = route.calls[0].request.url.params["query"]
    assert query.startswith("{type:chapter} {updated_at:>=")
    assert route.calls[0].request.url.params["count"] == "20"
    assert result["summary"].endswith("(chapters only)")
    assert result["search_query"] == "Recent changes in the last 30 days (chapter)"
