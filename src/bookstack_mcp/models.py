from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

R = TypeVar("R", bound=BaseModel)


class Tag(BaseModel):
    name: str
    value: str = ""

    model_config = ConfigDict(extra="ignore")


class BaseRecord(BaseModel):
    """
    Common shape of BookStack entities.
    Unknown fields are kept (extra="allow") so callers see everything the API sent.
    """

    id: int
    name: str = ""
    slug: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)


# --- Content hierarchy ---


class Book(BaseRecord):
    description: Optional[str] = None
    contents: Optional[List[Dict[str, Any]]] = None
    tags: List[Tag] = Field(default_factory=list)


class Chapter(BaseRecord):
    book_id: int = 0
    book_slug: Optional[str] = None
    description: Optional[str] = None
    tags: List[Tag] = Field(default_factory=list)


class Page(BaseRecord):
    book_id: int = 0
    book_slug: Optional[str] = None
    chapter_id: Optional[int] = None
    text: Optional[str] = None


class Shelf(BaseRecord):
    description: Optional[str] = None
    books: List[Book] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)


class Attachment(BaseRecord):
    uploaded_to: int = 0
    extension: Optional[str] = None
    external: bool = False


class Comment(BaseModel):
    id: int
    commentable_id: Optional[int] = None
    commentable_type: Optional[str] = None
    html: Optional[str] = None
    parent_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class PreviewContent(BaseModel):
    name: Optional[str] = None
    content: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class SearchResult(BaseRecord):
    type: str = ""
    book_id: Optional[int] = None
    chapter_id: Optional[int] = None
    preview_content: Optional[PreviewContent] = None
    preview_html: Optional[PreviewContent] = None

    @property
    def snippet(self) -> str:
        for preview in (self.preview_content, self.preview_html):
            if preview and preview.content:
                return preview.content
        return ""


# --- Derived fields ---


class Derived(BaseModel):
    """Fixed set of human-facing fields added on top of a raw record."""

    url: Optional[str] = None
    direct_link: Optional[str] = None
    download_url: Optional[str] = None
    page_url: Optional[str] = None
    created_friendly: Optional[str] = None
    last_updated_friendly: Optional[str] = None
    summary: Optional[str] = None
    content_preview: Optional[str] = None
    content_info: Optional[str] = None
    content_type: Optional[str] = None
    word_count: Optional[int] = None
    book_count: Optional[int] = None
    chapter_count: Optional[int] = None
    page_count: Optional[int] = None
    location: Optional[str] = None
    location_info: Optional[str] = None
    tags_summary: Optional[str] = None
    books: Optional[List[Dict[str, Any]]] = None


@dataclass(frozen=True)
class Enriched(Generic[R]):
    """A raw record plus its derived fields; derived keys win on collision."""

    record: R
    derived: Derived

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.record.model_dump(mode="json"),
            **self.derived.model_dump(exclude_none=True),
        }


# --- Input Models (Tool Payloads) ---


def _require_http_url(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ValueError("Only http and https URLs are allowed")
    return value


class _Input(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def body(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class BookInput(_Input):
    name: str
    description: Optional[str] = None
    tags: Optional[List[Tag]] = None


class BookUpdateInput(_Input):
    name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[Tag]] = None


class ChapterInput(_Input):
    book_id: int
    name: str
    description: Optional[str] = None
    tags: Optional[List[Tag]] = None


class ChapterUpdateInput(_Input):
    book_id: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[Tag]] = None


class PageInput(_Input):
    name: str
    book_id: Optional[int] = None
    chapter_id: Optional[int] = None
    html: Optional[str] = None
    markdown: Optional[str] = None
    tags: Optional[List[Tag]] = None


class PageUpdateInput(_Input):
    name: Optional[str] = None
    html: Optional[str] = None
    markdown: Optional[str] = None
    book_id: Optional[int] = None
    chapter_id: Optional[int] = None
    tags: Optional[List[Tag]] = None


class ShelfInput(_Input):
    name: str
    description: Optional[str] = None
    books: Optional[List[int]] = None
    tags: Optional[List[Tag]] = None


class ShelfUpdateInput(_Input):
    name: Optional[str] = None
    description: Optional[str] = None
    books: Optional[List[int]] = None
    tags: Optional[List[Tag]] = None


class AttachmentLinkInput(_Input):
    uploaded_to: int
    name: str
    link: str

    @field_validator("link")
    @classmethod
    def check_link(cls, value: str) -> str:
        return _require_http_url(value)


class AttachmentUpdateInput(_Input):
    name: Optional[str] = None
    link: Optional[str] = None
    uploaded_to: Optional[int] = None

    @field_validator("link")
    @classmethod
    def check_link(cls, value: Optional[str]) -> Optional[str]:
        return _require_http_url(value) if value is not None else None


class CommentInput(_Input):
    page_id: int
    html: str
    reply_to: Optional[int] = None
    content_ref: Optional[str] = None


class CommentUpdateInput(_Input):
    html: Optional[str] = None
    archived: Optional[bool] = None
