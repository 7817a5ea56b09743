"""
Chat application configuration.

This app provides the chat core with:
- Direct (1:1) conversations resolved from the user pair
- One group chat per event, provisioned on RSVP approval
- An append-only message ledger with per-participant read tracking
- A WebSocket gateway with heartbeat and liveness timeouts
"""

from django.apps import AppConfig


class ChatConfig(AppConfig):
    """Configuration for the chat application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "chat"
    verbose_name = "Chat"
