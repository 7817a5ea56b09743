"""
Chat system models.

This module defines the conversation store:
- Direct (1:1) conversations between exactly two users
- Event group chats, one per event, growing as attendees are approved
- Plain group conversations

Models:
    Conversation: Container for messages between participants
    DirectConversationPair: Canonical lookup key for direct conversations
    Participant: A (conversation, user) membership with read tracking
    Message: Append-only message within a conversation

Design Decisions:
    - Conversations are created together with their first participant(s)
      in one transaction; a memberless conversation never exists
    - One event conversation per event is enforced by a conditional
      unique constraint, not by lookup-then-create
    - Unread state is per participant (last_read_at) and computed at read
      time; Message.is_read only serves legacy receiver-addressed messages
    - Nothing here is ever deleted by the chat core
"""

from __future__ import annotations

from django.conf import settings
from django.db import models
from django.db.models import F, Q

from chat.constants import MESSAGE_CONFIG
from core.models import BaseModel


class ConversationType(models.TextChoices):
    """
    Type of conversation.

    DIRECT: Exactly two participants, resolved from the user pair
    GROUP: Free-form group
    EVENT: The single group chat bound to one event
    """

    DIRECT = "direct", "Direct Message"
    GROUP = "group", "Group"
    EVENT = "event", "Event Group Chat"


class Conversation(BaseModel):
    """
    A conversation between two or more users.

    Fields:
        conversation_type: direct, group or event
        title: Display title (null for direct conversations)
        event: Bound event (set if and only if type is event)
        created_by: User who created the conversation
        participant_count: Cached number of participants
        last_message_at: Timestamp of most recent message (for inbox ordering)

    Relationships:
        participants: All Participant records for this conversation
        messages: All Message records for this conversation
        direct_pair: DirectConversationPair if type is DIRECT
    """

    conversation_type = models.CharField(
        max_length=10,
        choices=ConversationType.choices,
        default=ConversationType.DIRECT,
        db_index=True,
        help_text="Type of conversation (direct, group or event)",
    )

    title = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        help_text="Title for group and event conversations (null for direct)",
    )

    event = models.ForeignKey(
        "events.Event",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="conversations",
        help_text="Event this group chat belongs to (event conversations only)",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_conversations",
        help_text="User who created this conversation",
    )

    participant_count = models.PositiveIntegerField(
        default=0,
        help_text="Current number of participants (cached for performance)",
    )

    last_message_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text="Timestamp of most recent message (for sorting conversation lists)",
    )

    class Meta:
        db_table = "chat_conversation"
        ordering = ["-last_message_at", "-created_at"]
        constraints = [
            # At most one event group chat per event
            models.UniqueConstraint(
                fields=["event"],
                condition=Q(conversation_type="event"),
                name="unique_event_conversation",
            ),
            models.CheckConstraint(
                condition=(
                    Q(conversation_type="event", event__isnull=False)
                    | (~Q(conversation_type="event") & Q(event__isnull=True))
                ),
                name="event_set_iff_event_conversation",
            ),
        ]

    def __str__(self) -> str:
        if self.conversation_type == ConversationType.DIRECT:
            return f"Direct({self.pk})"
        return self.title or f"{self.get_conversation_type_display()}({self.pk})"

    @property
    def is_direct(self) -> bool:
        return self.conversation_type == ConversationType.DIRECT

    def has_participant(self, user_id: int) -> bool:
        return self.participants.filter(user_id=user_id).exists()


class DirectConversationPair(models.Model):
    """
    Canonical lookup key for direct conversations.

    Stores the user pair in canonical order (lower user id first) so that
    resolving (A, B) and (B, A) hits the same unique row.

    Constraints:
        - UniqueConstraint(user_lower, user_higher): One conversation per pair
        - CheckConstraint(user_lower_id < user_higher_id): Canonical order
    """

    conversation = models.OneToOneField(
        Conversation,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="direct_pair",
        help_text="The direct conversation this pair represents",
    )

    user_lower = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with lower ID in this conversation pair",
    )

    user_higher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
        help_text="User with higher ID in this conversation pair",
    )

    class Meta:
        db_table = "chat_direct_conversation_pair"
        constraints = [
            models.UniqueConstraint(
                fields=["user_lower", "user_higher"],
                name="unique_direct_conversation_pair",
            ),
            models.CheckConstraint(
                condition=Q(user_lower_id__lt=F("user_higher_id")),
                name="user_lower_less_than_higher",
            ),
        ]

    def __str__(self) -> str:
        return f"DirectPair({self.user_lower_id}, {self.user_higher_id})"

    @staticmethod
    def canonical(user_a_id: int, user_b_id: int) -> tuple[int, int]:
        """Return the pair ordered lower id first."""
        return (user_a_id, user_b_id) if user_a_id < user_b_id else (user_b_id, user_a_id)


class Participant(BaseModel):
    """
    Membership of a user in a conversation.

    Identity is (conversation, user). Adding a user that is already a
    participant is a no-op at the service layer and a constraint violation
    at the database layer.

    Fields:
        joined_at: When the user joined
        last_read_at: When the user last marked the conversation read
            (null = never read; every message from others is unread)
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name="participants",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="chat_participations",
    )

    joined_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user joined the conversation",
    )

    last_read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the user last read the conversation",
    )

    class Meta:
        db_table = "chat_participant"
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(
                fields=["conversation", "user"],
                name="unique_conversation_participant",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "conversation"], name="chat_part_user_conv_idx"),
        ]

    def __str__(self) -> str:
        return f"Participant(user={self.user_id}, conversation={self.conversation_id})"


class Message(BaseModel):
    """
    A message in a conversation.

    Messages are append-only. Order within a conversation is
    (created_at, id), which is also the listing order.

    Fields:
        sender: Author (null if the account was removed)
        conversation: Owning conversation (null only for rows predating
            conversations)
        receiver: Legacy peer address, set only for messages sent by peer id
        content: Non-empty text
        is_read: Legacy per-message flag for receiver-addressed messages
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="messages",
    )

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sent_messages",
    )

    receiver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="received_messages",
        help_text="Legacy direct addressee",
    )

    content = models.TextField(
        max_length=MESSAGE_CONFIG.MAX_CONTENT_LENGTH,
        help_text="Message text",
    )

    is_read = models.BooleanField(
        default=False,
        help_text="Legacy read flag for receiver-addressed messages",
    )

    class Meta:
        db_table = "chat_message"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["conversation", "created_at", "id"],
                name="chat_msg_conv_created_idx",
            ),
            models.Index(
                fields=["receiver", "is_read"],
                name="chat_msg_receiver_read_idx",
                condition=Q(receiver__isnull=False),
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(content=""),
                name="message_content_not_empty",
            ),
        ]

    def __str__(self) -> str:
        return f"Message({self.pk}) in {self.conversation_id}"
