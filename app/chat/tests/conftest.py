"""
Test configuration and fixtures for chat tests.

This module provides:
- User fixtures (alice, bob, carol, outsider)
- Conversation fixtures (direct, event group chat)
- API client helpers for authenticated requests

Usage:
    def test_example(direct_conversation, alice_client):
        response = alice_client.get(f"/api/v1/chat/conversations/{direct_conversation.id}/")
        assert response.status_code == 200
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from authentication.tests.factories import UserFactory
from chat.services import DirectConversationService, GroupChatService
from events.tests.factories import EventFactory


# =============================================================================
# User Fixtures
# =============================================================================


@pytest.fixture
def alice(db):
    return UserFactory(full_name="Alice Archer", username="alice")


@pytest.fixture
def bob(db):
    return UserFactory(full_name="Bob Baker", username="bob")


@pytest.fixture
def carol(db):
    return UserFactory(full_name="Carol Cook", username="carol")


@pytest.fixture
def outsider(db):
    """A user who is not a participant in any fixture conversation."""
    return UserFactory(full_name="Olive Outsider", username="outsider")


# =============================================================================
# Conversation Fixtures
# =============================================================================


@pytest.fixture
def direct_conversation(alice, bob):
    """Direct conversation between alice and bob, created through the resolver."""
    return DirectConversationService.resolve(alice.id, bob.id).data


@pytest.fixture
def event(alice):
    """Event hosted by alice."""
    return EventFactory(title="Beach Party", creator=alice)


@pytest.fixture
def event_chat(event, alice, bob):
    """Event group chat with host alice and attendee bob."""
    conversation = GroupChatService.ensure_event_group_chat(event.id, alice.id).data
    GroupChatService.add_participant(conversation.id, bob.id)
    conversation.refresh_from_db()
    return conversation


# =============================================================================
# API Client Fixtures
# =============================================================================


@pytest.fixture
def authenticated_client_factory(db):
    """
    Factory to create authenticated clients for any user.

    Usage:
        def test_example(authenticated_client_factory, some_user):
            client = authenticated_client_factory(some_user)
            response = client.get("/api/v1/chat/conversations/")
    """

    def _make_client(user):
        client = APIClient()
        token = AccessToken.for_user(user)
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _make_client


@pytest.fixture
def alice_client(authenticated_client_factory, alice):
    return authenticated_client_factory(alice)


@pytest.fixture
def bob_client(authenticated_client_factory, bob):
    return authenticated_client_factory(bob)


@pytest.fixture
def outsider_client(authenticated_client_factory, outsider):
    return authenticated_client_factory(outsider)
