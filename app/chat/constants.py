"""
Constants and configuration for chat module features.

This module centralizes configuration values for:
- Message content limits
- Realtime gateway timings (handshake, heartbeat, liveness)
- Connection directory storage

Gateway timings can be overridden at runtime via settings.CHAT_GATEWAY,
e.g. CHAT_GATEWAY = {"PING_INTERVAL_SECONDS": 15}.

Import example:
    from chat.constants import GATEWAY_CONFIG, MESSAGE_CONFIG
"""

from typing import Final


# =============================================================================
# Message Configuration
# =============================================================================


class MESSAGE_CONFIG:
    """Configuration for message operations."""

    MAX_CONTENT_LENGTH: Final[int] = 10000  # Characters
    GROUP_CHAT_TITLE_SUFFIX: Final[str] = " — Group Chat"


# =============================================================================
# Gateway Configuration
# =============================================================================


class GATEWAY_CONFIG:
    """Timings for the WebSocket gateway (seconds)."""

    # Close the socket if no connect frame arrives in this window
    HANDSHAKE_TIMEOUT_SECONDS: Final[float] = 10

    # Server-initiated {"type": "ping"} frames
    PING_INTERVAL_SECONDS: Final[float] = 30

    # Terminate after this long without any inbound frame
    CONNECTION_TIMEOUT_SECONDS: Final[float] = 35

    # Close codes (application range 4000-4999)
    HANDSHAKE_TIMEOUT_CLOSE_CODE: Final[int] = 4401
    LIVENESS_TIMEOUT_CLOSE_CODE: Final[int] = 4408


# =============================================================================
# Connection Directory Configuration
# =============================================================================


class DIRECTORY_CONFIG:
    """Configuration for connection directory backends."""

    DEFAULT_BACKEND: Final[str] = "chat.directory.LocalConnectionDirectory"

    # Redis key prefix for per-user connection hashes
    KEY_PREFIX: Final[str] = "chat:connections"

    # Redis hash TTL; refreshed on every touch
    ENTRY_TTL_SECONDS: Final[int] = 70
