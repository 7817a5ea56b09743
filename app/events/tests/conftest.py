"""
Test configuration and fixtures for event RSVP tests.
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from authentication.tests.factories import UserFactory
from events.tests.factories import EventFactory, EventRsvpFactory


@pytest.fixture
def host(db):
    return UserFactory(full_name="Hana Host", username="host")


@pytest.fixture
def guest(db):
    return UserFactory(full_name="Gus Guest", username="guest")


@pytest.fixture
def beach_party(host):
    """Event 'Beach Party' hosted by host."""
    return EventFactory(title="Beach Party", creator=host)


@pytest.fixture
def pending_rsvp(beach_party, guest):
    return EventRsvpFactory(event=beach_party, user=guest)


@pytest.fixture
def client_for(db):
    """Build an APIClient authenticated as the given user."""

    def _make_client(user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")
        return client

    return _make_client
