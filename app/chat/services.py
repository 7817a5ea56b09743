"""
Chat services.

This module contains all business logic for the chat core:
- ConversationService: Inbox summaries and participant-scoped lookups
- DirectConversationService: Symmetric find-or-create of 1:1 conversations
- GroupChatService: One group chat per event, idempotent membership
- MessageService: Append-only ledger, participant-gated access, read state

Design Decisions:
    - Every write that creates a conversation also creates its participants
      inside one transaction
    - Uniqueness (direct pair, event chat, membership) is enforced by
      database constraints; creation paths insert first and fetch the
      existing row on IntegrityError
    - Unread counts compare message timestamps with the participant's
      last_read_at at read time
    - Expected failures are returned as ServiceResult with a ChatErrorCode

Usage:
    from chat.services import DirectConversationService, MessageService

    conversation = DirectConversationService.resolve(alice.id, bob.id).data
    result = MessageService.post_message(
        sender_id=alice.id,
        conversation_id=conversation.id,
        content="Hello!",
    )
"""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from typing import TYPE_CHECKING

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.db.models import (
    Count,
    DateTimeField,
    F,
    IntegerField,
    OuterRef,
    Prefetch,
    Subquery,
    Value,
)
from django.db.models.functions import Coalesce
from django.utils import timezone

from chat.constants import MESSAGE_CONFIG
from chat.errors import ChatErrorCode
from chat.models import (
    Conversation,
    ConversationType,
    DirectConversationPair,
    Message,
    Participant,
)
from core.services import BaseService, ServiceResult

if TYPE_CHECKING:
    from django.db.models import QuerySet


User = get_user_model()

# Read marker for participants who never marked a conversation read
NEVER_READ = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


def _not_participant() -> ServiceResult:
    return ServiceResult.failure(
        "You are not a participant in this conversation",
        error_code=ChatErrorCode.NOT_PARTICIPANT,
    )


def _conversation_not_found(conversation_id) -> ServiceResult:
    return ServiceResult.failure(
        f"Conversation {conversation_id} not found",
        error_code=ChatErrorCode.CONVERSATION_NOT_FOUND,
    )


class ConversationService(BaseService):
    """Read-side queries over conversations."""

    @classmethod
    def list_for_user(cls, user) -> ServiceResult[list[Conversation]]:
        """
        Build the inbox for a user.

        Returns one conversation per membership, skipping conversations
        without messages, ordered by latest message (newest first). Each
        conversation is annotated with:
            latest_message_at: Timestamp of its newest message
            unread_count: Messages from others newer than the user's last_read_at
            latest_message: The newest Message (sender loaded)
        and has its participants (with users) prefetched so direct
        summaries can resolve the other participant without more queries.
        """
        latest = Message.objects.filter(conversation=OuterRef("pk")).order_by(
            "-created_at", "-id"
        )
        last_read = Participant.objects.filter(
            conversation=OuterRef("pk"), user=user
        ).values("last_read_at")[:1]
        unread = (
            Message.objects.filter(
                conversation=OuterRef("pk"),
                created_at__gt=OuterRef("read_marker"),
            )
            .exclude(sender=user)
            .order_by()
            .values("conversation")
            .annotate(total=Count("id"))
            .values("total")
        )

        conversations = list(
            Conversation.objects.filter(participants__user=user)
            .annotate(
                latest_message_id=Subquery(latest.values("id")[:1]),
                latest_message_at=Subquery(latest.values("created_at")[:1]),
            )
            .filter(latest_message_id__isnull=False)
            .annotate(
                read_marker=Coalesce(
                    Subquery(last_read),
                    Value(NEVER_READ, output_field=DateTimeField()),
                ),
            )
            .annotate(
                unread_count=Coalesce(
                    Subquery(unread, output_field=IntegerField()),
                    Value(0),
                ),
            )
            .prefetch_related(
                Prefetch(
                    "participants",
                    queryset=Participant.objects.select_related("user"),
                )
            )
            .order_by("-latest_message_at", "-id")
        )

        latest_messages = Message.objects.select_related("sender").in_bulk(
            [c.latest_message_id for c in conversations]
        )
        for conversation in conversations:
            conversation.latest_message = latest_messages.get(conversation.latest_message_id)

        return ServiceResult.success(conversations)

    @classmethod
    def get_for_participant(cls, conversation_id: int, user) -> ServiceResult[Conversation]:
        """
        Fetch a conversation the user participates in.

        Returns:
            ServiceResult with the conversation, or failure with
            CONVERSATION_NOT_FOUND / NOT_PARTICIPANT
        """
        conversation = (
            Conversation.objects.filter(id=conversation_id)
            .prefetch_related(
                Prefetch(
                    "participants",
                    queryset=Participant.objects.select_related("user"),
                )
            )
            .first()
        )
        if conversation is None:
            return _conversation_not_found(conversation_id)

        if not any(p.user_id == user.id for p in conversation.participants.all()):
            return _not_participant()

        return ServiceResult.success(conversation)


class DirectConversationService(BaseService):
    """Deterministic, symmetric find-or-create for 1:1 conversations."""

    @classmethod
    def find(cls, user_a_id: int, user_b_id: int) -> Conversation | None:
        """Return the existing direct conversation for the pair, if any."""
        lower, higher = DirectConversationPair.canonical(user_a_id, user_b_id)
        pair = (
            DirectConversationPair.objects.select_related("conversation")
            .filter(user_lower_id=lower, user_higher_id=higher)
            .first()
        )
        return pair.conversation if pair else None

    @classmethod
    def resolve(cls, user_a_id: int, user_b_id: int) -> ServiceResult[Conversation]:
        """
        Find or create the direct conversation between two users.

        resolve(A, B) and resolve(B, A) always return the same conversation.
        Creation writes the conversation, its pair key and both participants
        in one transaction. A concurrent resolver losing the race on the
        pair's unique constraint returns the winner's conversation.

        Returns:
            ServiceResult with the conversation, or failure with
            SAME_USER / USER_NOT_FOUND
        """
        if user_a_id == user_b_id:
            return ServiceResult.failure(
                "Cannot start a direct conversation with yourself",
                error_code=ChatErrorCode.SAME_USER,
            )

        existing = cls.find(user_a_id, user_b_id)
        if existing is not None:
            return ServiceResult.success(existing)

        found = set(User.objects.filter(id__in=[user_a_id, user_b_id]).values_list("id", flat=True))
        missing = [uid for uid in (user_a_id, user_b_id) if uid not in found]
        if missing:
            return ServiceResult.failure(
                f"User {missing[0]} not found",
                error_code=ChatErrorCode.USER_NOT_FOUND,
            )

        lower, higher = DirectConversationPair.canonical(user_a_id, user_b_id)
        try:
            with cls.atomic():
                conversation = Conversation.objects.create(
                    conversation_type=ConversationType.DIRECT,
                    title=None,
                    created_by_id=user_a_id,
                    participant_count=2,
                )
                DirectConversationPair.objects.create(
                    conversation=conversation,
                    user_lower_id=lower,
                    user_higher_id=higher,
                )
                Participant.objects.bulk_create(
                    [
                        Participant(conversation=conversation, user_id=lower),
                        Participant(conversation=conversation, user_id=higher),
                    ]
                )
        except IntegrityError:
            existing = cls.find(user_a_id, user_b_id)
            if existing is None:
                cls.get_logger().error(
                    f"Direct conversation for ({lower}, {higher}) conflicted but was not found"
                )
                return ServiceResult.failure(
                    "Direct conversation could not be created",
                    error_code=ChatErrorCode.DIRECT_CONVERSATION_CONFLICT,
                )
            cls.get_logger().info(
                f"Direct conversation race for ({lower}, {higher}) resolved to {existing.id}"
            )
            return ServiceResult.success(existing)

        cls.get_logger().info(
            f"Created direct conversation {conversation.id} between {lower} and {higher}"
        )
        return ServiceResult.success(conversation)


class GroupChatService(BaseService):
    """
    Group chat provisioning for events.

    State of an event's chat: Absent -> Created (first approval, host is
    the only participant) -> Populated(n) (each approval adds one member).
    Members are never removed here.
    """

    @classmethod
    def ensure_event_group_chat(cls, event_id: int, initiator_id: int) -> ServiceResult[Conversation]:
        """
        Return the event's group chat, creating it on first use.

        An existing chat is returned unchanged with no membership side
        effects. Otherwise the conversation (titled "<Event Title> — Group
        Chat") and the initiator's participant row are inserted together;
        if another request created the chat first, the unique constraint
        rejects this insert and the existing chat is returned instead.

        Args:
            event_id: Event to provision a chat for
            initiator_id: First participant (normally the event host)

        Returns:
            ServiceResult with the conversation, or failure with
            EVENT_NOT_FOUND / USER_NOT_FOUND / EVENT_CHAT_CONFLICT
        """
        from events.models import Event

        event = Event.objects.filter(id=event_id).only("id", "title").first()
        if event is None:
            return ServiceResult.failure(
                f"Event {event_id} not found",
                error_code=ChatErrorCode.EVENT_NOT_FOUND,
            )

        existing = cls._find_event_chat(event_id)
        if existing is not None:
            return ServiceResult.success(existing)

        if not User.objects.filter(id=initiator_id).exists():
            return ServiceResult.failure(
                f"User {initiator_id} not found",
                error_code=ChatErrorCode.USER_NOT_FOUND,
            )

        try:
            with cls.atomic():
                conversation = Conversation.objects.create(
                    conversation_type=ConversationType.EVENT,
                    event=event,
                    title=f"{event.title}{MESSAGE_CONFIG.GROUP_CHAT_TITLE_SUFFIX}",
                    created_by_id=initiator_id,
                    participant_count=1,
                )
                Participant.objects.create(conversation=conversation, user_id=initiator_id)
        except IntegrityError:
            existing = cls._find_event_chat(event_id)
            if existing is None:
                cls.get_logger().error(
                    f"Event chat for event {event_id} conflicted but was not found"
                )
                return ServiceResult.failure(
                    f"Group chat for event {event_id} could not be created",
                    error_code=ChatErrorCode.EVENT_CHAT_CONFLICT,
                )
            cls.get_logger().info(
                f"Event chat race for event {event_id} resolved to {existing.id}"
            )
            return ServiceResult.success(existing)

        cls.get_logger().info(
            f"Created group chat {conversation.id} for event {event_id} "
            f"with initiator {initiator_id}"
        )
        return ServiceResult.success(conversation)

    @classmethod
    def add_participant(cls, conversation_id: int, user_id: int) -> ServiceResult[Participant]:
        """
        Add a user to a conversation.

        Idempotent: adding an existing participant returns the existing row.
        No system message is posted.

        Returns:
            ServiceResult with the participant, or failure with
            CONVERSATION_NOT_FOUND / USER_NOT_FOUND / DIRECT_CONVERSATION_FULL
        """
        conversation = Conversation.objects.filter(id=conversation_id).first()
        if conversation is None:
            return _conversation_not_found(conversation_id)

        if not User.objects.filter(id=user_id).exists():
            return ServiceResult.failure(
                f"User {user_id} not found",
                error_code=ChatErrorCode.USER_NOT_FOUND,
            )

        if conversation.is_direct and not conversation.has_participant(user_id):
            return ServiceResult.failure(
                "Direct conversations have exactly two participants",
                error_code=ChatErrorCode.DIRECT_CONVERSATION_FULL,
            )

        with cls.atomic():
            participant, created = Participant.objects.get_or_create(
                conversation=conversation,
                user_id=user_id,
            )
            if created:
                Conversation.objects.filter(pk=conversation.pk).update(
                    participant_count=F("participant_count") + 1
                )

        if created:
            cls.get_logger().info(f"Added user {user_id} to conversation {conversation_id}")
        return ServiceResult.success(participant)

    @classmethod
    def _find_event_chat(cls, event_id: int) -> Conversation | None:
        return Conversation.objects.filter(
            conversation_type=ConversationType.EVENT,
            event_id=event_id,
        ).first()


class MessageService(BaseService):
    """Append-only message ledger with participant-gated access."""

    @classmethod
    def post_message(
        cls,
        sender_id: int,
        conversation_id: int,
        content: str,
        receiver_id: int | None = None,
    ) -> ServiceResult[Message]:
        """
        Append a message to a conversation.

        Args:
            sender_id: Author; must be a participant
            conversation_id: Target conversation
            content: Non-empty text
            receiver_id: Legacy peer address for messages sent by peer id

        Returns:
            ServiceResult with the message (sender loaded), or failure with
            EMPTY_CONTENT / CONTENT_TOO_LONG / CONVERSATION_NOT_FOUND /
            NOT_PARTICIPANT. No row is written on failure.
        """
        if not content or not content.strip():
            return ServiceResult.failure(
                "Message content cannot be empty",
                error_code=ChatErrorCode.EMPTY_CONTENT,
            )
        if len(content) > MESSAGE_CONFIG.MAX_CONTENT_LENGTH:
            return ServiceResult.failure(
                f"Message content exceeds {MESSAGE_CONFIG.MAX_CONTENT_LENGTH} characters",
                error_code=ChatErrorCode.CONTENT_TOO_LONG,
            )

        conversation = Conversation.objects.filter(id=conversation_id).first()
        if conversation is None:
            return _conversation_not_found(conversation_id)

        if not conversation.has_participant(sender_id):
            cls.get_logger().warning(
                f"User {sender_id} tried to post to conversation {conversation_id} "
                f"without being a participant"
            )
            return _not_participant()

        with cls.atomic():
            message = Message.objects.create(
                conversation=conversation,
                sender_id=sender_id,
                receiver_id=receiver_id,
                content=content,
            )
            Conversation.objects.filter(pk=conversation.pk).update(
                last_message_at=message.created_at,
                updated_at=timezone.now(),
            )

        cls.get_logger().debug(
            f"Message {message.id} posted to conversation {conversation_id} by {sender_id}"
        )
        return ServiceResult.success(
            Message.objects.select_related("sender").get(pk=message.pk)
        )

    @classmethod
    def list_messages(cls, conversation_id: int, user) -> ServiceResult[QuerySet[Message]]:
        """
        List a conversation's messages oldest first.

        Returns:
            ServiceResult with an unevaluated queryset ordered by
            (created_at, id), or failure with CONVERSATION_NOT_FOUND /
            NOT_PARTICIPANT (never an empty list for outsiders)
        """
        conversation = Conversation.objects.filter(id=conversation_id).first()
        if conversation is None:
            return _conversation_not_found(conversation_id)

        if not conversation.has_participant(user.id):
            return _not_participant()

        return ServiceResult.success(
            Message.objects.filter(conversation=conversation)
            .select_related("sender")
            .order_by("created_at", "id")
        )

    @classmethod
    def mark_conversation_read(cls, conversation_id: int, user) -> ServiceResult[Participant]:
        """
        Mark everything in a conversation as read for one participant.

        Sets the participant's last_read_at to now and flags legacy
        messages addressed to the user in this conversation as read.
        """
        if not Conversation.objects.filter(id=conversation_id).exists():
            return _conversation_not_found(conversation_id)

        participant = Participant.objects.filter(
            conversation_id=conversation_id, user=user
        ).first()
        if participant is None:
            return _not_participant()

        now = timezone.now()
        with cls.atomic():
            participant.last_read_at = now
            participant.save(update_fields=["last_read_at", "updated_at"])
            Message.objects.filter(
                conversation_id=conversation_id,
                receiver=user,
                is_read=False,
            ).update(is_read=True, updated_at=now)

        return ServiceResult.success(participant)

    @classmethod
    def get_unread_count(cls, conversation_id: int, user) -> ServiceResult[int]:
        """Count messages from others newer than the user's last_read_at."""
        participant = Participant.objects.filter(
            conversation_id=conversation_id, user=user
        ).first()
        if participant is None:
            if not Conversation.objects.filter(id=conversation_id).exists():
                return _conversation_not_found(conversation_id)
            return _not_participant()

        return ServiceResult.success(
            Message.objects.filter(
                conversation_id=conversation_id,
                created_at__gt=participant.last_read_at or NEVER_READ,
            )
            .exclude(sender=user)
            .count()
        )

    # -------------------------------------------------------------------------
    # Legacy receiver-addressed read tracking
    # -------------------------------------------------------------------------

    @classmethod
    def mark_message_as_read(cls, message_id: int, user) -> ServiceResult[Message]:
        """
        Set the legacy is_read flag on one message.

        Only the message's receiver may do this.
        """
        message = Message.objects.filter(id=message_id).select_related("sender").first()
        if message is None:
            return ServiceResult.failure(
                f"Message {message_id} not found",
                error_code=ChatErrorCode.MESSAGE_NOT_FOUND,
            )

        if message.receiver_id != user.id:
            return ServiceResult.failure(
                "Only the receiver can mark this message as read",
                error_code=ChatErrorCode.NOT_MESSAGE_RECEIVER,
            )

        if not message.is_read:
            message.is_read = True
            message.save(update_fields=["is_read", "updated_at"])

        return ServiceResult.success(message)

    @classmethod
    def mark_all_messages_as_read(cls, user) -> ServiceResult[int]:
        """Set the legacy is_read flag on every message addressed to the user."""
        updated = Message.objects.filter(receiver=user, is_read=False).update(
            is_read=True,
            updated_at=timezone.now(),
        )
        cls.get_logger().info(f"Marked {updated} legacy messages read for user {user.id}")
        return ServiceResult.success(updated)
