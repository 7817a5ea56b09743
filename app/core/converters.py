"""
URL path converters.

Registers "dbid": a positive integer of at most 18 digits, which always
fits a BigAutoField. Longer numbers do not match the route (404) instead
of reaching the database, where some backends raise OverflowError.

Usage:
    import core.converters  # noqa: F401  (registers the converter)

    path("conversations/<dbid:conversation_pk>/messages/", ...)
"""

from django.urls import register_converter

# Shared with router lookup_value_regex so path and router ids agree
DATABASE_ID_REGEX = "[0-9]{1,18}"


class DatabaseIdConverter:
    regex = DATABASE_ID_REGEX

    def to_python(self, value: str) -> int:
        return int(value)

    def to_url(self, value) -> str:
        return str(value)


register_converter(DatabaseIdConverter, "dbid")
