"""
WebSocket frame types for the chat gateway.

Inbound frames are parsed once, by parse_frame(), into one of a closed set
of dataclasses. The consumer dispatches on the frame class and never
inspects raw payload keys.

Inbound (client -> server):
    {"type": "connect", "userId": 7}                       ConnectFrame
    {"type": "ping"}                                       PingFrame
    {"type": "pong"}                                       PongFrame
    {"senderId": 7, "conversationId": 3, "content": "hi"}  ConversationMessageFrame
    {"senderId": 7, "receiverId": 9, "content": "hi"}      DirectMessageFrame (legacy)

Outbound (server -> client) builders:
    connected_frame(), pong_frame(), ping_frame(),
    confirmation_frame(), error_frame()

Message frames may carry "type": "message" or omit "type". When both
conversationId and receiverId are present, conversationId wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from core.models import MAX_DATABASE_ID

INVALID_MESSAGE_FORMAT = (
    "Invalid message format. Required fields: "
    "senderId + (receiverId OR conversationId) + content"
)


class FrameError(ValueError):
    """Raised for payloads that do not match any frame shape."""


@dataclass(frozen=True)
class ConnectFrame:
    user_id: int


@dataclass(frozen=True)
class PingFrame:
    pass


@dataclass(frozen=True)
class PongFrame:
    pass


@dataclass(frozen=True)
class ConversationMessageFrame:
    sender_id: int
    conversation_id: int
    content: str


@dataclass(frozen=True)
class DirectMessageFrame:
    """Legacy peer-addressed message, resolved to a direct conversation."""

    sender_id: int
    receiver_id: int
    content: str


MessageFrame = Union[ConversationMessageFrame, DirectMessageFrame]
InboundFrame = Union[ConnectFrame, PingFrame, PongFrame, ConversationMessageFrame, DirectMessageFrame]


def _as_id(value: Any) -> int | None:
    """
    Accept ints and digit strings; reject bools, floats and everything else.

    Raises:
        FrameError: If the id is larger than any database primary key
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int) or value <= 0:
        return None
    if value > MAX_DATABASE_ID:
        raise FrameError("ID out of range")
    return value


def _parse_message(payload: dict) -> MessageFrame:
    sender_id = _as_id(payload.get("senderId"))
    content = payload.get("content")
    if sender_id is None or not isinstance(content, str) or not content:
        raise FrameError(INVALID_MESSAGE_FORMAT)

    conversation_id = _as_id(payload.get("conversationId"))
    if conversation_id is not None:
        return ConversationMessageFrame(sender_id, conversation_id, content)

    receiver_id = _as_id(payload.get("receiverId"))
    if receiver_id is not None:
        return DirectMessageFrame(sender_id, receiver_id, content)

    raise FrameError(INVALID_MESSAGE_FORMAT)


def parse_frame(payload: Any) -> InboundFrame:
    """
    Parse a decoded JSON payload into a frame.

    Raises:
        FrameError: If the payload matches no frame shape
    """
    if not isinstance(payload, dict):
        raise FrameError("Frame must be a JSON object")

    frame_type = payload.get("type")

    if frame_type == "connect":
        user_id = _as_id(payload.get("userId"))
        if user_id is None:
            raise FrameError("No user ID provided")
        return ConnectFrame(user_id)
    if frame_type == "ping":
        return PingFrame()
    if frame_type == "pong":
        return PongFrame()
    if frame_type in (None, "message"):
        return _parse_message(payload)

    raise FrameError(f"Unknown frame type: {frame_type}")


# =============================================================================
# Outbound frames
# =============================================================================


def connected_frame(user_id: int) -> dict:
    return {"type": "connected", "message": f"Connected as user {user_id}"}


def ping_frame() -> dict:
    return {"type": "ping"}


def pong_frame() -> dict:
    return {"type": "pong"}


def confirmation_frame(message: dict) -> dict:
    return {"type": "confirmation", "message": message}


def error_frame(message: str, error_code: str | None = None) -> dict:
    frame = {"type": "error", "message": message}
    if error_code:
        frame["error_code"] = error_code
    return frame
