"""
Factory Boy factories for event models.

Usage:
    from events.tests.factories import EventFactory, EventRsvpFactory

    event = EventFactory(title="Beach Party", creator=host)
    rsvp = EventRsvpFactory(event=event, user=guest)
"""

import factory

from authentication.tests.factories import UserFactory
from events.models import Event, EventRsvp, RsvpStatus


class EventFactory(factory.django.DjangoModelFactory):
    """Factory for Event model."""

    class Meta:
        model = Event

    title = factory.Faker("catch_phrase")
    creator = factory.SubFactory(UserFactory)
    starts_at = None


class EventRsvpFactory(factory.django.DjangoModelFactory):
    """
    Factory for EventRsvp model.

    Creates pending requests by default.

    Examples:
        rsvp = EventRsvpFactory(event=event, user=guest)
        approved = EventRsvpFactory(status=RsvpStatus.APPROVED)
    """

    class Meta:
        model = EventRsvp

    event = factory.SubFactory(EventFactory)
    user = factory.SubFactory(UserFactory)
    status = RsvpStatus.PENDING
    responded_at = None
