"""
Views for chat API.

This module provides REST API endpoints for the chat system:
- ConversationViewSet: Inbox, conversation detail, mark read
- ConversationMessageViewSet: Message history and posting (nested under conversation)
- DirectConversationView: Resolve the 1:1 conversation with another user
- Legacy peer-addressed endpoints (send by receiver_id, history with a
  user, receiver read flags)

URL Structure:
    /api/v1/chat/conversations/                   GET
    /api/v1/chat/conversations/{id}/              GET
    /api/v1/chat/conversations/{id}/read/         POST
    /api/v1/chat/conversations/{id}/messages/     GET, POST
    /api/v1/chat/direct/                          POST
    /api/v1/chat/messages/                        POST
    /api/v1/chat/messages/with/{user_id}/         GET
    /api/v1/chat/messages/{id}/read/              POST
    /api/v1/chat/messages/read-all/               POST

Design Decisions:
    - All rules live in chat.services; views only translate HTTP
    - Service failures are raised with ServiceResult.unwrap(CHAT_ERROR_CLASSES)
      and rendered by core.exception_handler
    - Outsiders get 403 (not an empty list) for a conversation's messages
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
    inline_serializer,
)
from rest_framework import serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from chat.errors import CHAT_ERROR_CLASSES
from chat.pagination import MessageCursorPagination
from chat.serializers import (
    ConversationDetailSerializer,
    ConversationSummarySerializer,
    DirectConversationRequestSerializer,
    LegacyMessageCreateSerializer,
    MessageCreateSerializer,
    MessageSerializer,
)
from chat.services import (
    ConversationService,
    DirectConversationService,
    MessageService,
)
from core.converters import DATABASE_ID_REGEX


@extend_schema_view(
    list=extend_schema(
        operation_id="list_conversations",
        summary="List conversations",
        description=(
            "Inbox for the current user: every conversation with at least one "
            "message, newest activity first, with latest message and unread count."
        ),
        tags=["Chat - Conversations"],
    ),
    retrieve=extend_schema(
        operation_id="get_conversation",
        summary="Get conversation",
        responses={
            200: ConversationDetailSerializer,
            403: OpenApiResponse(description="Not a participant in this conversation"),
            404: OpenApiResponse(description="Conversation not found"),
        },
        tags=["Chat - Conversations"],
    ),
)
class ConversationViewSet(viewsets.GenericViewSet):
    """
    ViewSet for conversation operations.

    list:
        Get the current user's inbox.

    retrieve:
        Get conversation details including all participants.

    read:
        Mark the conversation as read for the current user.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = ConversationSummarySerializer
    lookup_value_regex = DATABASE_ID_REGEX

    def list(self, request):
        conversations = ConversationService.list_for_user(request.user).unwrap(
            CHAT_ERROR_CLASSES
        )
        serializer = ConversationSummarySerializer(
            conversations, many=True, context={"request": request}
        )
        return Response(serializer.data)

    def retrieve(self, request, pk=None):
        conversation = ConversationService.get_for_participant(
            int(pk), request.user
        ).unwrap(CHAT_ERROR_CLASSES)
        serializer = ConversationDetailSerializer(
            conversation, context={"request": request}
        )
        return Response(serializer.data)

    @extend_schema(
        operation_id="mark_conversation_read",
        summary="Mark conversation as read",
        request=None,
        responses={
            200: inline_serializer(
                name="ConversationReadResponse",
                fields={
                    "success": serializers.BooleanField(),
                    "conversation_id": serializers.IntegerField(),
                    "user_id": serializers.IntegerField(),
                },
            ),
        },
        tags=["Chat - Conversations"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        """Mark conversation as read."""
        participant = MessageService.mark_conversation_read(
            int(pk), request.user
        ).unwrap(CHAT_ERROR_CLASSES)
        return Response(
            {
                "success": True,
                "conversation_id": participant.conversation_id,
                "user_id": participant.user_id,
            }
        )


@extend_schema_view(
    list=extend_schema(
        operation_id="list_messages",
        summary="List messages",
        description="Messages of a conversation, oldest first (cursor paginated).",
        tags=["Chat - Messages"],
    ),
    create=extend_schema(
        operation_id="send_message",
        summary="Send message",
        request=MessageCreateSerializer,
        responses={201: MessageSerializer},
        tags=["Chat - Messages"],
    ),
)
class ConversationMessageViewSet(viewsets.GenericViewSet):
    """
    ViewSet for messages within a conversation.

    list:
        Get messages, oldest first. Participants only.

    create:
        Post a message. Participants only.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MessageSerializer
    pagination_class = MessageCursorPagination

    def list(self, request, conversation_pk=None):
        messages = MessageService.list_messages(
            int(conversation_pk), request.user
        ).unwrap(CHAT_ERROR_CLASSES)

        page = self.paginate_queryset(messages)
        if page is not None:
            return self.get_paginated_response(MessageSerializer(page, many=True).data)
        return Response(MessageSerializer(messages, many=True).data)

    def create(self, request, conversation_pk=None):
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        message = MessageService.post_message(
            sender_id=request.user.id,
            conversation_id=int(conversation_pk),
            content=serializer.validated_data["content"],
        ).unwrap(CHAT_ERROR_CLASSES)

        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


class DirectConversationView(APIView):
    """Resolve (find or create) the direct conversation with another user."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="resolve_direct_conversation",
        summary="Get or create direct conversation",
        request=DirectConversationRequestSerializer,
        responses={
            200: ConversationDetailSerializer,
            400: OpenApiResponse(description="Cannot start a conversation with yourself"),
            404: OpenApiResponse(description="User not found"),
        },
        tags=["Chat - Conversations"],
    )
    def post(self, request):
        serializer = DirectConversationRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        conversation = DirectConversationService.resolve(
            request.user.id, serializer.validated_data["user_id"]
        ).unwrap(CHAT_ERROR_CLASSES)

        # Reload with participants prefetched for the detail payload
        conversation = ConversationService.get_for_participant(
            conversation.id, request.user
        ).unwrap(CHAT_ERROR_CLASSES)
        return Response(
            ConversationDetailSerializer(conversation, context={"request": request}).data
        )


# =============================================================================
# Legacy peer-addressed endpoints
# =============================================================================


class LegacyMessageCreateView(APIView):
    """Send a message to a user; the direct conversation is resolved first."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="send_direct_message",
        summary="Send message to user",
        request=LegacyMessageCreateSerializer,
        responses={201: MessageSerializer},
        tags=["Chat - Legacy"],
    )
    def post(self, request):
        serializer = LegacyMessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        receiver_id = serializer.validated_data["receiver_id"]

        conversation = DirectConversationService.resolve(
            request.user.id, receiver_id
        ).unwrap(CHAT_ERROR_CLASSES)

        message = MessageService.post_message(
            sender_id=request.user.id,
            conversation_id=conversation.id,
            content=serializer.validated_data["content"],
            receiver_id=receiver_id,
        ).unwrap(CHAT_ERROR_CLASSES)

        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


class MessagesWithUserView(GenericAPIView):
    """Message history of the direct conversation with a user."""

    permission_classes = [IsAuthenticated]
    serializer_class = MessageSerializer
    pagination_class = MessageCursorPagination

    @extend_schema(
        operation_id="list_messages_with_user",
        summary="List messages with user",
        tags=["Chat - Legacy"],
    )
    def get(self, request, user_id: int):
        conversation = DirectConversationService.resolve(
            request.user.id, user_id
        ).unwrap(CHAT_ERROR_CLASSES)

        messages = MessageService.list_messages(conversation.id, request.user).unwrap(
            CHAT_ERROR_CLASSES
        )

        page = self.paginate_queryset(messages)
        if page is not None:
            return self.get_paginated_response(MessageSerializer(page, many=True).data)
        return Response(MessageSerializer(messages, many=True).data)


class MessageReadView(APIView):
    """Set the read flag on a message addressed to the current user."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="mark_message_read",
        summary="Mark message as read",
        request=None,
        responses={
            200: MessageSerializer,
            403: OpenApiResponse(description="Only the receiver can mark a message read"),
            404: OpenApiResponse(description="Message not found"),
        },
        tags=["Chat - Legacy"],
    )
    def post(self, request, message_id: int):
        message = MessageService.mark_message_as_read(message_id, request.user).unwrap(
            CHAT_ERROR_CLASSES
        )
        return Response(MessageSerializer(message).data)


class MessageReadAllView(APIView):
    """Set the read flag on every message addressed to the current user."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="mark_all_messages_read",
        summary="Mark all messages as read",
        request=None,
        responses={
            200: inline_serializer(
                name="MessageReadAllResponse",
                fields={"updated": serializers.IntegerField()},
            ),
        },
        tags=["Chat - Legacy"],
    )
    def post(self, request):
        updated = MessageService.mark_all_messages_as_read(request.user).unwrap(
            CHAT_ERROR_CLASSES
        )
        return Response({"updated": updated})
