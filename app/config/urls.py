"""
URL configuration for the chat service.

URL Structure:
    /admin/                        - Django admin interface
    /health/                       - Health check endpoint (for load balancers, Docker)
    /api/schema/                   - OpenAPI schema (YAML)
    /api/docs/                     - ReDoc API documentation
    /api/v1/chat/                  - Chat endpoints
        conversations/             - Inbox
        conversations/{id}/        - Conversation detail
        conversations/{id}/read/   - Mark conversation as read
        conversations/{id}/messages/ - Message list/send
        direct/                    - Get or create direct conversation
        messages/                  - Send message to user (legacy)
        messages/with/{user_id}/   - Messages with user (legacy)
        messages/{id}/read/        - Mark message read (legacy)
        messages/read-all/         - Mark all messages read (legacy)
    /api/v1/events/                - Event RSVP endpoints
        {event_id}/rsvps/                        - Request to attend
        {event_id}/rsvps/{user_id}/approve/      - Approve (host only)
        {event_id}/rsvps/{user_id}/reject/       - Reject (host only)

WebSocket routes are defined in chat/routing.py and mounted in config/asgi.py.

For more information, see:
https://docs.djangoproject.com/en/5.2/topics/http/urls/
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView

from core.views import health_check

# =============================================================================
# API v1 Routes
# =============================================================================
# All routes here are prefixed with /api/v1/ automatically
api_v1_patterns = [
    path("chat/", include("chat.urls")),
    path("events/", include("events.urls")),
]

urlpatterns = [
    # Documentation
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    # Admin
    path("admin/", admin.site.urls),
    # Health check (Docker, Kubernetes, load balancers)
    path("health/", health_check, name="health_check"),
    # API v1
    path("api/v1/", include(api_v1_patterns)),
]

# =============================================================================
# Admin Site Customization
# =============================================================================
admin.site.site_header = "Chat Admin"
admin.site.site_title = "Chat Admin Portal"
admin.site.index_title = "Conversations and Events"
