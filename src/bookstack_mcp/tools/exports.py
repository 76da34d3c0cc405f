from __future__ import annotations

from typing import Any, Dict, Literal, Union

from bookstack_mcp.client import BookStackClient, EmptyExportError
from bookstack_mcp.models import Book, Chapter, Page

ExportFormat = Literal["html", "pdf", "markdown", "plaintext", "zip"]

BINARY_CONTENT_TYPES = {"pdf": "application/pdf", "zip": "application/zip"}

WEB_EXPORT_NOTE = (
    "This is a direct link to BookStack's web export. "
    "You may need to be logged in to BookStack to access it."
)


def _descriptor(
    format: str, slug: str, download_url: str, **names: Any
) -> Dict[str, Any]:
    return {
        "format": format,
        "filename": f"{slug}.{format}",
        "download_url": download_url,
        "content_type": BINARY_CONTENT_TYPES[format],
        "export_success": True,
        **names,
        "direct_download": True,
        "note": WEB_EXPORT_NOTE,
    }


async def _export_text(
    client: BookStackClient, kind: str, entity_id: int, format: str
) -> str:
    text = await client.get(
        f"/{kind}s/{entity_id}/export/{format}", return_text=True, tool="exports"
    )
    if not text:
        raise EmptyExportError(
            f"Empty {format} content returned from BookStack API for {kind} {entity_id}"
        )
    return text


async def _book(client: BookStackClient, book_id: int) -> Book:
    return Book.model_validate(await client.get(f"/books/{book_id}", tool="exports"))


async def export_page(
    client: BookStackClient, page_id: int, format: ExportFormat
) -> Union[str, Dict[str, Any]]:
    """
    Export a page. html/markdown/plaintext return the text itself;
    pdf/zip return a direct BookStack download link instead of the file.
    """
    if format not in BINARY_CONTENT_TYPES:
        return await _export_text(client, "page", page_id, format)

    page = Page.model_validate(await client.get(f"/pages/{page_id}", tool="exports"))
    book = await _book(client, page.book_id)
    book_slug = book.slug or str(book.id)
    page_slug = page.slug or str(page.id)
    return _descriptor(
        format,
        page_slug,
        f"{client.base_url}/books/{book_slug}/page/{page_slug}/export/{format}",
        page_id=page_id,
        page_name=page.name,
        book_name=book.name,
    )


async def export_book(
    client: BookStackClient, book_id: int, format: ExportFormat
) -> Union[str, Dict[str, Any]]:
    """Export a whole book; pdf/zip give a download link."""
    if format not in BINARY_CONTENT_TYPES:
        return await _export_text(client, "book", book_id, format)

    book = await _book(client, book_id)
    book_slug = book.slug or str(book.id)
    return _descriptor(
        format,
        book_slug,
        f"{client.base_url}/books/{book_slug}/export/{format}",
        book_id=book_id,
        book_name=book.name,
    )


async def export_chapter(
    client: BookStackClient, chapter_id: int, format: ExportFormat
) -> Union[str, Dict[str, Any]]:
    """Export a chapter with all of its pages; pdf/zip give a download link."""
    if format not in BINARY_CONTENT_TYPES:
        return await _export_text(client, "chapter", chapter_id, format)

    chapter = Chapter.model_validate(
        await client.get(f"/chapters/{chapter_id}", tool="exports")
    )
    book = await _book(client, chapter.book_id)
    book_slug = book.slug or str(book.id)
    chapter_slug = chapter.slug or str(chapter.id)
    return _descriptor(
        format,
        chapter_slug,
        f"{client.base_url}/books/{book_slug}/chapter/{chapter_slug}/export/{format}",
        chapter_id=chapter_id,
        chapter_name=chapter.name,
        book_name=book.name,
    )
