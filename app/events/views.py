"""
RSVP endpoints.

URL Structure:
    /api/v1/events/{event_id}/rsvps/                       POST (request to attend)
    /api/v1/events/{event_id}/rsvps/{user_id}/approve/     POST (host only)
    /api/v1/events/{event_id}/rsvps/{user_id}/reject/      POST (host only)
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from events.serializers import EventRsvpSerializer
from events.services import EVENTS_ERROR_CLASSES, RsvpService


class RsvpRequestView(APIView):
    """Ask to attend an event."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="request_event_rsvp",
        summary="Request to attend an event",
        request=None,
        responses={201: EventRsvpSerializer},
        tags=["Events - RSVPs"],
    )
    def post(self, request, event_id: int):
        rsvp = RsvpService.request(event_id=event_id, user=request.user).unwrap(
            EVENTS_ERROR_CLASSES
        )
        return Response(EventRsvpSerializer(rsvp).data, status=status.HTTP_201_CREATED)


class RsvpApproveView(APIView):
    """Host approves an attendee; the attendee joins the event group chat."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="approve_event_rsvp",
        summary="Approve an attendee",
        request=None,
        responses={200: EventRsvpSerializer},
        tags=["Events - RSVPs"],
    )
    def post(self, request, event_id: int, user_id: int):
        rsvp = RsvpService.approve(
            event_id=event_id,
            attendee_id=user_id,
            approver=request.user,
        ).unwrap(EVENTS_ERROR_CLASSES)
        return Response(EventRsvpSerializer(rsvp).data)


class RsvpRejectView(APIView):
    """Host rejects an attendee."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="reject_event_rsvp",
        summary="Reject an attendee",
        request=None,
        responses={200: EventRsvpSerializer},
        tags=["Events - RSVPs"],
    )
    def post(self, request, event_id: int, user_id: int):
        rsvp = RsvpService.reject(
            event_id=event_id,
            attendee_id=user_id,
            approver=request.user,
        ).unwrap(EVENTS_ERROR_CLASSES)
        return Response(EventRsvpSerializer(rsvp).data)
