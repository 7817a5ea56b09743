"""
URL configuration for event RSVPs.

All URLs are prefixed with /api/v1/events/ in the main URL configuration.
"""

from django.urls import path

import core.converters  # noqa: F401  (registers "dbid")
from events.views import RsvpApproveView, RsvpRejectView, RsvpRequestView

app_name = "events"

urlpatterns = [
    path("<dbid:event_id>/rsvps/", RsvpRequestView.as_view(), name="rsvp-request"),
    path(
        "<dbid:event_id>/rsvps/<dbid:user_id>/approve/",
        RsvpApproveView.as_view(),
        name="rsvp-approve",
    ),
    path(
        "<dbid:event_id>/rsvps/<dbid:user_id>/reject/",
        RsvpRejectView.as_view(),
        name="rsvp-reject",
    ),
]
