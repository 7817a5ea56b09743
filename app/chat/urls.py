"""
URL configuration for chat API.

URL Structure:
    Conversations:
        /conversations/                          GET
        /conversations/{id}/                     GET
        /conversations/{id}/read/                POST
        /direct/                                 POST

    Messages:
        /conversations/{id}/messages/            GET, POST

    Legacy (peer-addressed):
        /messages/                               POST
        /messages/with/{user_id}/                GET
        /messages/{id}/read/                     POST
        /messages/read-all/                      POST

WebSocket:
    ws/chat/ (see routing.py)

All URLs are prefixed with /api/v1/chat/ in the main URL configuration.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

import core.converters  # noqa: F401  (registers "dbid")
from chat.views import (
    ConversationMessageViewSet,
    ConversationViewSet,
    DirectConversationView,
    LegacyMessageCreateView,
    MessageReadAllView,
    MessageReadView,
    MessagesWithUserView,
)

router = DefaultRouter()
router.register(r"conversations", ConversationViewSet, basename="conversation")

app_name = "chat"

urlpatterns = [
    path("", include(router.urls)),
    path(
        "conversations/<dbid:conversation_pk>/messages/",
        ConversationMessageViewSet.as_view({"get": "list", "post": "create"}),
        name="conversation-message-list",
    ),
    path("direct/", DirectConversationView.as_view(), name="direct-conversation"),
    # Legacy peer-addressed messaging
    path("messages/", LegacyMessageCreateView.as_view(), name="message-create"),
    path("messages/read-all/", MessageReadAllView.as_view(), name="message-read-all"),
    path(
        "messages/with/<dbid:user_id>/",
        MessagesWithUserView.as_view(),
        name="messages-with-user",
    ),
    path(
        "messages/<dbid:message_id>/read/",
        MessageReadView.as_view(),
        name="message-read",
    ),
]
