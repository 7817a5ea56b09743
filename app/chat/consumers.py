"""
WebSocket gateway for the chat application.

A thin session layer over the message ledger: it identifies the socket,
keeps it alive, and turns frames into service calls.

Consumers:
    ChatGatewayConsumer: One instance per socket at ws/chat/

Session lifecycle:
    1. The socket is accepted and must send {"type": "connect", "userId": N}
       within HANDSHAKE_TIMEOUT_SECONDS, or it receives an error frame and
       is closed.
    2. On connect the session is registered in the connection directory
       and {"type": "connected", ...} is sent back.
    3. The server sends {"type": "ping"} every PING_INTERVAL_SECONDS. Any
       inbound frame counts as activity; after CONNECTION_TIMEOUT_SECONDS
       without one the session is unregistered and the socket closed.
    4. Closing the socket cancels the timers and unregisters the session.

Frames (see chat.frames):
    connect, ping -> pong, pong, message by conversationId, message by
    receiverId (legacy, resolved to the direct conversation).

Delivery:
    Only the sender gets {"type": "confirmation", "message": {...}}.
    Other participants are not pushed the message and pick it up by
    listing the conversation's messages.

Errors:
    Every failure is answered with {"type": "error", "message": ...} and
    the socket stays open.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncJsonWebsocketConsumer
from django.conf import settings
from django.db import DatabaseError

from chat.constants import GATEWAY_CONFIG
from chat.directory import get_connection_directory
from chat.errors import ChatErrorCode
from chat.frames import (
    ConnectFrame,
    DirectMessageFrame,
    FrameError,
    PingFrame,
    PongFrame,
    confirmation_frame,
    connected_frame,
    error_frame,
    parse_frame,
    ping_frame,
    pong_frame,
)
from chat.serializers import MessageSerializer
from chat.services import DirectConversationService, MessageService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewayTimings:
    handshake_timeout: float
    ping_interval: float
    connection_timeout: float


def gateway_timings() -> GatewayTimings:
    """Timings from settings.CHAT_GATEWAY, falling back to GATEWAY_CONFIG."""
    overrides = getattr(settings, "CHAT_GATEWAY", {}) or {}
    return GatewayTimings(
        handshake_timeout=overrides.get(
            "HANDSHAKE_TIMEOUT_SECONDS", GATEWAY_CONFIG.HANDSHAKE_TIMEOUT_SECONDS
        ),
        ping_interval=overrides.get(
            "PING_INTERVAL_SECONDS", GATEWAY_CONFIG.PING_INTERVAL_SECONDS
        ),
        connection_timeout=overrides.get(
            "CONNECTION_TIMEOUT_SECONDS", GATEWAY_CONFIG.CONNECTION_TIMEOUT_SECONDS
        ),
    )


class ChatGatewayConsumer(AsyncJsonWebsocketConsumer):
    """
    WebSocket consumer for the chat gateway.

    Attributes:
        user_id: Identified user (None until a valid connect frame)
        directory: ConnectionDirectory this session registers in
        timings: Handshake/heartbeat/liveness windows for this session
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id: int | None = None
        self.directory = None
        self.timings: GatewayTimings | None = None
        self._last_activity = 0.0
        self._handshake_task: asyncio.Task | None = None
        self._heartbeat_task: asyncio.Task | None = None
        self._liveness_task: asyncio.Task | None = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self):
        """Accept the socket and start waiting for the connect frame."""
        self.timings = gateway_timings()
        self.directory = get_connection_directory()
        await self.accept()
        self._handshake_task = asyncio.create_task(self._handshake_watchdog())

    async def disconnect(self, close_code):
        """Stop timers and drop this session from the directory."""
        self._cancel_tasks()
        if self.user_id is not None:
            await self.directory.unregister(self.user_id, self.channel_name)
            logger.info(f"User {self.user_id} disconnected (code={close_code})")

    async def receive(self, text_data=None, bytes_data=None, **kwargs):
        """Decode JSON without letting malformed input end the session."""
        if text_data is None:
            await self.send_json(
                error_frame("Binary frames are not supported", ChatErrorCode.INVALID_FRAME)
            )
            return
        try:
            content = await self.decode_json(text_data)
        except ValueError:
            await self.send_json(error_frame("Invalid JSON", ChatErrorCode.INVALID_FRAME))
            return
        await self.receive_json(content, **kwargs)

    async def receive_json(self, content, **kwargs):
        """Parse a frame and dispatch it."""
        self._last_activity = time.monotonic()

        try:
            frame = parse_frame(content)
        except FrameError as e:
            logger.warning(f"Rejected frame on {self.channel_name}: {e}")
            await self.send_json(error_frame(str(e), ChatErrorCode.INVALID_FRAME))
            return

        if self.user_id is None:
            if isinstance(frame, ConnectFrame):
                await self._handle_connect(frame)
            else:
                await self.send_json(
                    error_frame("Send a connect frame first", ChatErrorCode.INVALID_FRAME)
                )
            return

        await self.directory.touch(self.user_id, self.channel_name)

        if isinstance(frame, ConnectFrame):
            await self.send_json(
                error_frame(
                    f"Already connected as user {self.user_id}",
                    ChatErrorCode.INVALID_FRAME,
                )
            )
        elif isinstance(frame, PingFrame):
            await self.send_json(pong_frame())
        elif isinstance(frame, PongFrame):
            pass
        else:
            await self._handle_message(frame)

    # -------------------------------------------------------------------------
    # Frame handlers
    # -------------------------------------------------------------------------

    async def _handle_connect(self, frame: ConnectFrame):
        scope_user = self.scope.get("user")
        if (
            scope_user is not None
            and scope_user.is_authenticated
            and scope_user.id != frame.user_id
        ):
            logger.warning(
                f"Connect as user {frame.user_id} rejected; token belongs to {scope_user.id}"
            )
            await self.send_json(
                error_frame(
                    "userId does not match the authenticated user",
                    ChatErrorCode.SENDER_MISMATCH,
                )
            )
            return

        self.user_id = frame.user_id
        if self._handshake_task is not None:
            self._handshake_task.cancel()

        await self.directory.register(self.user_id, self.channel_name)
        self._last_activity = time.monotonic()
        self._heartbeat_task = asyncio.create_task(self._heartbeat())
        self._liveness_task = asyncio.create_task(self._liveness_watchdog())

        await self.send_json(connected_frame(self.user_id))
        logger.info(f"User {self.user_id} connected on {self.channel_name}")

    async def _handle_message(self, frame):
        if frame.sender_id != self.user_id:
            await self.send_json(
                error_frame(
                    "You can only send messages as yourself",
                    ChatErrorCode.SENDER_MISMATCH,
                )
            )
            return

        try:
            result = await self._post_message(frame)
        except DatabaseError:
            logger.exception(f"Failed to store message from user {self.user_id}")
            await self.send_json(error_frame("Failed to send message"))
            return

        if not result.success:
            await self.send_json(error_frame(result.error, result.error_code))
            return

        await self.send_json(confirmation_frame(result.data))

    @database_sync_to_async
    def _post_message(self, frame):
        """Resolve the target conversation and append the message."""
        receiver_id = None
        if isinstance(frame, DirectMessageFrame):
            resolved = DirectConversationService.resolve(frame.sender_id, frame.receiver_id)
            if not resolved.success:
                return resolved
            conversation_id = resolved.data.id
            receiver_id = frame.receiver_id
        else:
            conversation_id = frame.conversation_id

        result = MessageService.post_message(
            sender_id=frame.sender_id,
            conversation_id=conversation_id,
            content=frame.content,
            receiver_id=receiver_id,
        )
        return result.map(lambda message: dict(MessageSerializer(message).data))

    # -------------------------------------------------------------------------
    # Timers
    # -------------------------------------------------------------------------

    async def _handshake_watchdog(self):
        await asyncio.sleep(self.timings.handshake_timeout)
        if self.user_id is None:
            logger.warning(
                f"No connect frame on {self.channel_name} within "
                f"{self.timings.handshake_timeout}s; closing"
            )
            await self.send_json(error_frame("No user ID provided"))
            await self.close(code=GATEWAY_CONFIG.HANDSHAKE_TIMEOUT_CLOSE_CODE)

    async def _heartbeat(self):
        while True:
            await asyncio.sleep(self.timings.ping_interval)
            await self.send_json(ping_frame())

    async def _liveness_watchdog(self):
        timeout = self.timings.connection_timeout
        while True:
            remaining = self._last_activity + timeout - time.monotonic()
            if remaining <= 0:
                break
            await asyncio.sleep(remaining)

        logger.warning(f"User {self.user_id} inactive for {timeout}s; terminating")
        await self.directory.unregister(self.user_id, self.channel_name)
        self._cancel_tasks()
        await self.close(code=GATEWAY_CONFIG.LIVENESS_TIMEOUT_CLOSE_CODE)

    def _cancel_tasks(self):
        current = asyncio.current_task()
        for task in (self._handshake_task, self._heartbeat_task, self._liveness_task):
            if task is not None and task is not current and not task.done():
                task.cancel()
