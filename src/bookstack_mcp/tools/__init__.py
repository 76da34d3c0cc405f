"""
Tool namespace for BookStack MCP.

Every public coroutine here takes the client as its first argument and is
discovered and registered by bookstack_mcp.registry.
"""

from .attachments import (
    create_attachment,
    delete_attachment,
    get_attachment,
    get_attachments,
    update_attachment,
    upload_attachment,
)
from .books import create_book, delete_book, get_book, get_books, update_book
from .chapters import (
    create_chapter,
    delete_chapter,
    get_chapter,
    get_chapters,
    update_chapter,
)
from .comments import (
    create_comment,
    delete_comment,
    get_comment,
    get_comments,
    update_comment,
)
from .exports import export_book, export_chapter, export_page
from .pages import create_page, delete_page, get_page, get_pages, update_page
from .search import get_recent_changes, search_content, search_pages
from .shelves import create_shelf, delete_shelf, get_shelf, get_shelves, update_shelf
from .system import (
    get_audit_log,
    get_capabilities,
    get_image,
    get_images,
    get_recycle_bin,
    get_system_info,
)
from .users import get_user, get_users

__all__ = [
    "get_capabilities",
    "get_system_info",
    "get_audit_log",
    "get_recycle_bin",
    "get_images",
    "get_image",
    "search_content",
    "search_pages",
    "get_recent_changes",
    "get_books",
    "get_book",
    "create_book",
    "update_book",
    "delete_book",
    "get_chapters",
    "get_chapter",
    "create_chapter",
    "update_chapter",
    "delete_chapter",
    "get_pages",
    "get_page",
    "create_page",
    "update_page",
    "delete_page",
    "get_shelves",
    "get_shelf",
    "create_shelf",
    "update_shelf",
    "delete_shelf",
    "get_attachments",
    "get_attachment",
    "create_attachment",
    "upload_attachment",
    "update_attachment",
    "delete_attachment",
    "get_comments",
    "get_comment",
    "create_comment",
    "update_comment",
    "delete_comment",
    "export_page",
    "export_book",
    "export_chapter",
    "get_users",
    "get_user",
]
