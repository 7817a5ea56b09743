"""
Event and RSVP models.

Only what the chat core needs from the events side lives here: an event's
title and host, and the RSVP whose approval adds an attendee to the event's
group chat.
"""

from django.conf import settings
from django.db import models

from core.models import BaseModel


class RsvpStatus(models.TextChoices):
    """Lifecycle of an attendance request."""

    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"


class Event(BaseModel):
    """
    An event hosted by a user.

    Fields:
        title: Used to synthesize the group chat title
        creator: The host; becomes the group chat's first participant
        starts_at: Optional start time
    """

    title = models.CharField(
        max_length=200,
        help_text="Event title",
    )
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="hosted_events",
        help_text="Host of the event",
    )
    starts_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the event starts",
    )

    class Meta:
        db_table = "events_event"
        ordering = ["-created_at"]

    def __str__(self):
        return self.title


class EventRsvp(BaseModel):
    """
    A user's request to attend an event.

    Approval by the event host is what triggers group chat membership.
    """

    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name="rsvps",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="event_rsvps",
    )
    status = models.CharField(
        max_length=20,
        choices=RsvpStatus.choices,
        default=RsvpStatus.PENDING,
        db_index=True,
    )
    responded_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the host approved or rejected the request",
    )

    class Meta:
        db_table = "events_rsvp"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["event", "user"],
                name="unique_event_rsvp",
            ),
        ]

    def __str__(self):
        return f"RSVP {self.user_id} -> {self.event_id} ({self.status})"
