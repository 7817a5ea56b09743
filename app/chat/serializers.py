"""
Serializers for chat API.

This module provides serializers for the chat system:
- Message serializers (read, create, legacy create)
- Participant serializer
- Conversation serializers (inbox summary, detail)
- Direct conversation request

Serializer Hierarchy:
    ConversationSummarySerializer: Inbox entry with latest message and unread count
    ConversationDetailSerializer: Summary plus full participant list

    ParticipantSerializer: Participant with public user info

    MessageSerializer: Message with sender's public profile
    MessageCreateSerializer: Post into a conversation
    LegacyMessageCreateSerializer: Post to a peer by receiver_id

    DirectConversationRequestSerializer: Resolve a 1:1 conversation

Design Decisions:
    - Read and write serializers are separate
    - Conversation serializers need the request in context to pick the
      viewer's perspective (other participant, unread count)
    - Inbox annotations from ConversationService.list_for_user are used
      when present; detail views fall back to per-object queries
"""

from __future__ import annotations

from rest_framework import serializers

from authentication.serializers import PublicUserSerializer
from chat.constants import MESSAGE_CONFIG
from chat.models import Conversation, Message, Participant
from chat.services import MessageService
from core.models import MAX_DATABASE_ID


# =============================================================================
# Message Serializers
# =============================================================================


class MessageSerializer(serializers.ModelSerializer):
    """
    Message with the sender's public profile.

    Also used as the payload of WebSocket confirmation frames.
    """

    sender = PublicUserSerializer(read_only=True, allow_null=True)
    conversation_id = serializers.IntegerField(read_only=True, allow_null=True)
    receiver_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "conversation_id",
            "sender",
            "receiver_id",
            "content",
            "is_read",
            "created_at",
        ]
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    """Serializer for posting a message into a conversation."""

    content = serializers.CharField(
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
        help_text="Message content (max 10,000 characters)",
    )


class LegacyMessageCreateSerializer(MessageCreateSerializer):
    """
    Serializer for sending a message to a peer by user id.

    The direct conversation with the receiver is resolved (and created if
    needed) before the message is posted.
    """

    receiver_id = serializers.IntegerField(
        min_value=1,
        max_value=MAX_DATABASE_ID,
        help_text="User ID of the recipient",
    )


# =============================================================================
# Participant Serializers
# =============================================================================


class ParticipantSerializer(serializers.ModelSerializer):
    """Participant with public user info and read marker."""

    user = PublicUserSerializer(read_only=True)

    class Meta:
        model = Participant
        fields = ["id", "user", "joined_at", "last_read_at"]
        read_only_fields = fields


# =============================================================================
# Conversation Serializers
# =============================================================================


class ConversationSummarySerializer(serializers.ModelSerializer):
    """
    Inbox entry for one conversation, seen by the requesting user.

    Computed fields:
    - display_name: Title for group/event chats, other user's name for direct
    - other_participant: The other user of a direct conversation (null otherwise)
    - latest_message: Newest message in the conversation
    - unread_count: Messages from others newer than the viewer's last_read_at
    """

    display_name = serializers.SerializerMethodField(
        help_text="Display name for the conversation"
    )
    other_participant = serializers.SerializerMethodField(
        help_text="Other participant of a direct conversation"
    )
    latest_message = serializers.SerializerMethodField(
        help_text="Most recent message"
    )
    unread_count = serializers.SerializerMethodField(
        help_text="Number of unread messages"
    )

    class Meta:
        model = Conversation
        fields = [
            "id",
            "conversation_type",
            "title",
            "display_name",
            "event_id",
            "participant_count",
            "other_participant",
            "latest_message",
            "unread_count",
            "last_message_at",
            "created_at",
        ]
        read_only_fields = fields

    def _viewer(self):
        request = self.context.get("request")
        if request is None or not request.user.is_authenticated:
            return None
        return request.user

    def _other_user(self, obj: Conversation):
        viewer = self._viewer()
        if viewer is None or not obj.is_direct:
            return None
        for participant in obj.participants.all():
            if participant.user_id != viewer.id:
                return participant.user
        return None

    def get_display_name(self, obj: Conversation) -> str:
        if obj.title:
            return obj.title
        other = self._other_user(obj)
        if other is not None:
            return other.display_name
        return f"Group ({obj.participant_count} members)"

    def get_other_participant(self, obj: Conversation) -> dict | None:
        other = self._other_user(obj)
        if other is None:
            return None
        return PublicUserSerializer(other).data

    def get_latest_message(self, obj: Conversation) -> dict | None:
        if hasattr(obj, "latest_message"):
            message = obj.latest_message
        else:
            message = (
                obj.messages.select_related("sender").order_by("-created_at", "-id").first()
            )
        if message is None:
            return None
        return MessageSerializer(message).data

    def get_unread_count(self, obj: Conversation) -> int:
        if hasattr(obj, "unread_count"):
            return obj.unread_count
        viewer = self._viewer()
        if viewer is None:
            return 0
        result = MessageService.get_unread_count(obj.id, viewer)
        return result.data if result.success else 0


class ConversationDetailSerializer(ConversationSummarySerializer):
    """Conversation summary plus the full participant list."""

    participants = ParticipantSerializer(many=True, read_only=True)

    class Meta(ConversationSummarySerializer.Meta):
        fields = ConversationSummarySerializer.Meta.fields + ["participants"]
        read_only_fields = fields


class DirectConversationRequestSerializer(serializers.Serializer):
    """Request body for resolving the 1:1 conversation with another user."""

    user_id = serializers.IntegerField(
        min_value=1,
        max_value=MAX_DATABASE_ID,
        help_text="User ID of the other participant",
    )
