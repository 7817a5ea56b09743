"""
Tests for event RSVP endpoints.
"""

from unittest import mock

from rest_framework import status

from events.models import RsvpStatus


def rsvp_url(event_id):
    return f"/api/v1/events/{event_id}/rsvps/"


def approve_url(event_id, user_id):
    return f"/api/v1/events/{event_id}/rsvps/{user_id}/approve/"


def reject_url(event_id, user_id):
    return f"/api/v1/events/{event_id}/rsvps/{user_id}/reject/"


class TestRsvpEndpoints:
    """
    Tests for /api/v1/events/{event_id}/rsvps/.

    Verifies:
    - Guests can request to attend
    - Only the host can approve or reject
    - Error codes are rendered by the exception handler
    """

    def test_guest_requests_to_attend(self, beach_party, guest, client_for):
        response = client_for(guest).post(rsvp_url(beach_party.id))

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == RsvpStatus.PENDING

    def test_request_for_unknown_event_returns_404(self, guest, client_for):
        response = client_for(guest).post(rsvp_url(999_999))

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["error_code"] == "EVENT_NOT_FOUND"

    def test_host_approves(self, beach_party, host, guest, pending_rsvp, client_for):
        with mock.patch("chat.tasks.provision_event_group_chat.delay"):
            response = client_for(host).post(approve_url(beach_party.id, guest.id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == RsvpStatus.APPROVED

    def test_guest_cannot_approve(self, beach_party, guest, pending_rsvp, client_for):
        """
        Approving is reserved to the host.

        Why it matters: Approval grants access to the event's group chat.
        """
        response = client_for(guest).post(approve_url(beach_party.id, guest.id))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["error_code"] == "NOT_EVENT_HOST"

    def test_host_rejects(self, beach_party, host, guest, pending_rsvp, client_for):
        response = client_for(host).post(reject_url(beach_party.id, guest.id))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["status"] == RsvpStatus.REJECTED

    def test_requires_authentication(self, beach_party, api_client):
        response = api_client.post(rsvp_url(beach_party.id))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
