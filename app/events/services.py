"""
RSVP service.

Approving an attendee is the only way a user joins an event's group chat.
The chat work is handed to a Celery task once the approval commits, so a
slow or failing chat write never rolls back the approval itself.

Usage:
    from events.services import RsvpService

    RsvpService.request(event_id=event.id, user=guest)
    RsvpService.approve(event_id=event.id, attendee_id=guest.id, approver=host)
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import NotFoundError, PermissionDeniedError
from core.services import BaseService, ServiceResult
from events.models import Event, EventRsvp, RsvpStatus

logger = logging.getLogger(__name__)


EVENTS_ERROR_CLASSES = {
    "EVENT_NOT_FOUND": NotFoundError,
    "RSVP_NOT_FOUND": NotFoundError,
    "NOT_EVENT_HOST": PermissionDeniedError,
}


class RsvpService(BaseService):
    """Attendance requests and host decisions."""

    @classmethod
    def request(cls, event_id: int, user) -> ServiceResult[EventRsvp]:
        """Create (or return) the user's pending RSVP for an event."""
        if not Event.objects.filter(id=event_id).exists():
            return ServiceResult.failure(
                f"Event {event_id} not found",
                error_code="EVENT_NOT_FOUND",
            )

        rsvp, created = EventRsvp.objects.get_or_create(event_id=event_id, user=user)
        if created:
            cls.get_logger().info(f"User {user.id} requested to attend event {event_id}")
        return ServiceResult.success(rsvp)

    @classmethod
    def approve(cls, event_id: int, attendee_id: int, approver) -> ServiceResult[EventRsvp]:
        """
        Approve an attendee and schedule their group chat membership.

        Only the event's creator may approve. Re-approving an already
        approved RSVP schedules provisioning again, which is harmless since
        both chat steps are idempotent.

        Returns:
            ServiceResult with the RSVP, or failure with
            EVENT_NOT_FOUND, NOT_EVENT_HOST, RSVP_NOT_FOUND
        """
        from chat.tasks import provision_event_group_chat

        event = Event.objects.filter(id=event_id).first()
        if event is None:
            return ServiceResult.failure(
                f"Event {event_id} not found",
                error_code="EVENT_NOT_FOUND",
            )

        if event.creator_id != approver.id:
            return ServiceResult.failure(
                "Only the event host can approve attendees",
                error_code="NOT_EVENT_HOST",
            )

        with cls.atomic():
            rsvp = (
                EventRsvp.objects.select_for_update()
                .filter(event=event, user_id=attendee_id)
                .first()
            )
            if rsvp is None:
                return ServiceResult.failure(
                    f"No RSVP from user {attendee_id} for event {event_id}",
                    error_code="RSVP_NOT_FOUND",
                )

            if rsvp.status != RsvpStatus.APPROVED:
                rsvp.status = RsvpStatus.APPROVED
                rsvp.responded_at = timezone.now()
                rsvp.save(update_fields=["status", "responded_at", "updated_at"])

            host_id = event.creator_id
            transaction.on_commit(
                lambda: provision_event_group_chat.delay(event_id, host_id, attendee_id)
            )

        cls.get_logger().info(
            f"Host {approver.id} approved user {attendee_id} for event {event_id}"
        )
        return ServiceResult.success(rsvp)

    @classmethod
    def reject(cls, event_id: int, attendee_id: int, approver) -> ServiceResult[EventRsvp]:
        """
        Reject an attendee.

        A previously approved attendee keeps their group chat membership;
        no removal semantics are defined for revoked approvals.
        """
        event = Event.objects.filter(id=event_id).first()
        if event is None:
            return ServiceResult.failure(
                f"Event {event_id} not found",
                error_code="EVENT_NOT_FOUND",
            )
        if event.creator_id != approver.id:
            return ServiceResult.failure(
                "Only the event host can reject attendees",
                error_code="NOT_EVENT_HOST",
            )

        updated = EventRsvp.objects.filter(event=event, user_id=attendee_id).update(
            status=RsvpStatus.REJECTED,
            responded_at=timezone.now(),
            updated_at=timezone.now(),
        )
        if not updated:
            return ServiceResult.failure(
                f"No RSVP from user {attendee_id} for event {event_id}",
                error_code="RSVP_NOT_FOUND",
            )

        logger.info(f"Host {approver.id} rejected user {attendee_id} for event {event_id}")
        return ServiceResult.success(EventRsvp.objects.get(event=event, user_id=attendee_id))
