"""
Pagination classes for chat API.

Message history uses cursor pagination: cursors stay stable while new
messages are appended, and no offset has to be counted.
"""

from rest_framework.pagination import CursorPagination


class MessageCursorPagination(CursorPagination):
    """
    Cursor pagination for message lists.

    Orders messages oldest-first for natural chat reading.
    Uses (created_at, id) so messages sharing a timestamp keep a stable order.

    Default: 50 messages per page
    Maximum: 100 messages per page

    Query parameters:
        cursor: Encoded cursor for position
        page_size: Number of messages (optional override)
    """

    page_size = 50
    max_page_size = 100
    page_size_query_param = "page_size"
    ordering = ("created_at", "id")
    cursor_query_param = "cursor"
