"""
Tests for JWTAuthMiddleware.

The middleware is wrapped around a tiny ASGI app that records the scope
user, so only token handling is exercised.
"""

import pytest
from channels.db import database_sync_to_async
from channels.testing import WebsocketCommunicator
from django.contrib.auth.models import AnonymousUser
from rest_framework_simplejwt.tokens import AccessToken

from chat.middleware import JWTAuthMiddleware

pytestmark = pytest.mark.django_db(transaction=True)


class ScopeRecorder:
    """ASGI app that accepts the socket and remembers the scope user."""

    def __init__(self):
        self.user = None

    async def __call__(self, scope, receive, send):
        self.user = scope["user"]
        await receive()
        await send({"type": "websocket.accept"})
        await receive()


async def resolve_user(path, subprotocols=None):
    recorder = ScopeRecorder()
    communicator = WebsocketCommunicator(
        JWTAuthMiddleware(recorder), path, subprotocols=subprotocols
    )
    await communicator.connect()
    await communicator.disconnect()
    return recorder.user


class TestJWTAuthMiddleware:
    """
    Tests for token extraction and validation.

    Verifies:
    - Query string and subprotocol tokens
    - Invalid, missing and inactive cases fall back to AnonymousUser
    """

    async def test_query_string_token(self, alice):
        token = AccessToken.for_user(alice)

        user = await resolve_user(f"/ws/chat/?token={token}")

        assert user.id == alice.id

    async def test_subprotocol_token(self, alice):
        token = AccessToken.for_user(alice)

        user = await resolve_user("/ws/chat/", subprotocols=["jwt", str(token)])

        assert user.id == alice.id

    async def test_missing_token_is_anonymous(self, db):
        user = await resolve_user("/ws/chat/")

        assert isinstance(user, AnonymousUser)

    async def test_invalid_token_is_anonymous(self, db):
        user = await resolve_user("/ws/chat/?token=not-a-jwt")

        assert isinstance(user, AnonymousUser)

    async def test_inactive_user_is_anonymous(self, alice):
        """
        Tokens of deactivated accounts do not authenticate the socket.

        Why it matters: Access tokens outlive account deactivation.
        """
        token = AccessToken.for_user(alice)
        alice.is_active = False
        await database_sync_to_async(alice.save)()

        user = await resolve_user(f"/ws/chat/?token={token}")

        assert isinstance(user, AnonymousUser)
