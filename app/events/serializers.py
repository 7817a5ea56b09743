"""
Serializers for event RSVPs.
"""

from rest_framework import serializers

from events.models import EventRsvp


class EventRsvpSerializer(serializers.ModelSerializer):
    """RSVP state returned by the request/approve/reject endpoints."""

    class Meta:
        model = EventRsvp
        fields = ["id", "event", "user", "status", "responded_at", "created_at"]
        read_only_fields = fields
