"""
Tests for chat service layer business logic.

This module tests all chat services:
- ConversationService: Inbox summaries and participant-scoped lookups
- DirectConversationService: Symmetric find-or-create of 1:1 conversations
- GroupChatService: Event chat provisioning and idempotent membership
- MessageService: Posting, listing and read state

Test Organization:
    - Each service method has its own test class
    - Each test validates ONE specific behavior
    - Tests use descriptive names following: test_<scenario>_<expected_outcome>

Testing Philosophy:
    Tests focus on observable behavior:
    - ServiceResult success/failure states
    - Error codes for specific failure modes
    - Database state changes (or their absence on failure)
"""

from unittest import mock

from authentication.tests.factories import UserFactory
from chat.constants import MESSAGE_CONFIG
from chat.errors import ChatErrorCode
from chat.models import (
    Conversation,
    ConversationType,
    DirectConversationPair,
    Message,
    Participant,
)
from chat.services import (
    ConversationService,
    DirectConversationService,
    GroupChatService,
    MessageService,
)
from chat.tests.factories import (
    ConversationFactory,
    DirectConversationFactory,
    MessageFactory,
    ParticipantFactory,
)
from events.tests.factories import EventFactory


# =============================================================================
# TestDirectConversationServiceResolve
# =============================================================================


class TestDirectConversationServiceResolve:
    """
    Tests for DirectConversationService.resolve().

    Verifies:
    - Creating the conversation with both participants
    - Symmetry and uniqueness per unordered pair
    - Rejection of self and unknown users
    - Recovery when a concurrent resolver wins the race
    """

    def test_creates_conversation_with_both_participants(self, alice, bob):
        """
        First resolve creates a direct conversation with exactly two participants.

        Why it matters: A direct conversation must never exist without its
        two members; they are written in the same transaction.
        """
        result = DirectConversationService.resolve(alice.id, bob.id)

        assert result.success is True
        conversation = result.data
        assert conversation.conversation_type == ConversationType.DIRECT
        assert conversation.title is None
        assert conversation.participant_count == 2
        assert set(conversation.participants.values_list("user_id", flat=True)) == {
            alice.id,
            bob.id,
        }
        assert DirectConversationPair.objects.filter(conversation=conversation).exists()

    def test_is_symmetric(self, alice, bob):
        """
        resolve(A, B) and resolve(B, A) return the same conversation.

        Why it matters: Either user may start the chat; both must land in
        the same conversation.
        """
        forward = DirectConversationService.resolve(alice.id, bob.id)
        backward = DirectConversationService.resolve(bob.id, alice.id)

        assert forward.data.id == backward.data.id

    def test_repeated_calls_create_one_conversation(self, alice, bob):
        """
        Resolving the same pair repeatedly never creates a second conversation.

        Why it matters: Duplicate direct conversations split a thread in two.
        """
        for _ in range(3):
            DirectConversationService.resolve(alice.id, bob.id)
            DirectConversationService.resolve(bob.id, alice.id)

        assert Conversation.objects.filter(conversation_type=ConversationType.DIRECT).count() == 1
        assert Participant.objects.count() == 2

    def test_fails_for_same_user(self, alice):
        """
        A user cannot open a direct conversation with themselves.

        Why it matters: A direct conversation has exactly two distinct members.
        """
        result = DirectConversationService.resolve(alice.id, alice.id)

        assert result.success is False
        assert result.error_code == ChatErrorCode.SAME_USER
        assert Conversation.objects.count() == 0

    def test_fails_for_unknown_user(self, alice):
        """
        Resolving with a user id that does not exist fails and writes nothing.

        Why it matters: Deferred foreign keys would otherwise let a
        conversation point at a missing user until commit.
        """
        result = DirectConversationService.resolve(alice.id, 999_999)

        assert result.success is False
        assert result.error_code == ChatErrorCode.USER_NOT_FOUND
        assert Conversation.objects.count() == 0

    def test_concurrent_creation_returns_existing_conversation(self, alice, bob):
        """
        If another request created the pair first, the loser returns the winner's conversation.

        Why it matters: Two users messaging each other at the same moment
        must end up in one conversation, not get an error.
        """
        winner = DirectConversationFactory(user1=alice, user2=bob)

        # The first lookup misses (as if the winner had not committed yet)
        with mock.patch.object(
            DirectConversationService, "find", side_effect=[None, winner]
        ):
            result = DirectConversationService.resolve(alice.id, bob.id)

        assert result.success is True
        assert result.data.id == winner.id
        assert Conversation.objects.filter(conversation_type=ConversationType.DIRECT).count() == 1


# =============================================================================
# TestGroupChatServiceEnsureEventGroupChat
# =============================================================================


class TestGroupChatServiceEnsureEventGroupChat:
    """
    Tests for GroupChatService.ensure_event_group_chat().

    Verifies:
    - Creation with the synthesized title and initiator as first participant
    - Idempotency (one row per event)
    - Failure modes
    """

    def test_creates_event_chat_with_initiator(self, alice):
        """
        First call creates the event conversation with the host as its only participant.

        Why it matters: The host must be in the chat before any attendee joins.
        """
        event = EventFactory(title="Beach Party", creator=alice)

        result = GroupChatService.ensure_event_group_chat(event.id, alice.id)

        assert result.success is True
        conversation = result.data
        assert conversation.conversation_type == ConversationType.EVENT
        assert conversation.event_id == event.id
        assert conversation.title == f"Beach Party{MESSAGE_CONFIG.GROUP_CHAT_TITLE_SUFFIX}"
        assert conversation.participant_count == 1
        assert list(conversation.participants.values_list("user_id", flat=True)) == [alice.id]

    def test_second_call_returns_same_conversation(self, alice):
        """
        Calling twice returns the same id and leaves one event conversation.

        Why it matters: Approvals arrive one by one and each calls ensure;
        they must all share the chat.
        """
        event = EventFactory(creator=alice)

        first = GroupChatService.ensure_event_group_chat(event.id, alice.id)
        second = GroupChatService.ensure_event_group_chat(event.id, alice.id)

        assert first.data.id == second.data.id
        assert Conversation.objects.filter(
            conversation_type=ConversationType.EVENT, event=event
        ).count() == 1

    def test_existing_chat_has_no_membership_side_effects(self, alice, bob):
        """
        Ensuring an existing chat with another initiator does not add them.

        Why it matters: Only approval adds members; ensure is a lookup once
        the chat exists.
        """
        event = EventFactory(creator=alice)
        GroupChatService.ensure_event_group_chat(event.id, alice.id)

        result = GroupChatService.ensure_event_group_chat(event.id, bob.id)

        assert result.success is True
        assert not result.data.has_participant(bob.id)
        assert result.data.participant_count == 1

    def test_fails_for_unknown_event(self, alice):
        result = GroupChatService.ensure_event_group_chat(999_999, alice.id)

        assert result.success is False
        assert result.error_code == ChatErrorCode.EVENT_NOT_FOUND

    def test_fails_for_unknown_initiator(self, db):
        event = EventFactory()

        result = GroupChatService.ensure_event_group_chat(event.id, 999_999)

        assert result.success is False
        assert result.error_code == ChatErrorCode.USER_NOT_FOUND
        assert Conversation.objects.count() == 0

    def test_concurrent_creation_returns_existing_chat(self, alice):
        """
        Losing the insert race on the event constraint returns the existing chat.

        Why it matters: Two approvals processed at once must not fail or
        create two chats; the unique constraint decides the winner.
        """
        event = EventFactory(creator=alice)
        winner = Conversation.objects.create(
            conversation_type=ConversationType.EVENT,
            event=event,
            title="Existing",
            participant_count=1,
        )
        ParticipantFactory(conversation=winner, user=alice)

        with mock.patch.object(
            GroupChatService, "_find_event_chat", side_effect=[None, winner]
        ):
            result = GroupChatService.ensure_event_group_chat(event.id, alice.id)

        assert result.success is True
        assert result.data.id == winner.id
        assert Conversation.objects.filter(event=event).count() == 1
        assert Participant.objects.filter(conversation=winner).count() == 1


# =============================================================================
# TestGroupChatServiceAddParticipant
# =============================================================================


class TestGroupChatServiceAddParticipant:
    """
    Tests for GroupChatService.add_participant().

    Verifies:
    - Idempotent membership
    - Cached participant_count stays accurate
    - Direct conversations stay at two members
    """

    def test_adding_repeatedly_leaves_one_row(self, event_chat, carol):
        """
        Adding the same user N times leaves exactly one participant row.

        Why it matters: Approval may be retried; a retry must not duplicate
        membership.
        """
        for _ in range(4):
            result = GroupChatService.add_participant(event_chat.id, carol.id)
            assert result.success is True

        assert Participant.objects.filter(conversation=event_chat, user=carol).count() == 1

    def test_participant_count_increments_once(self, event_chat, carol):
        GroupChatService.add_participant(event_chat.id, carol.id)
        GroupChatService.add_participant(event_chat.id, carol.id)

        event_chat.refresh_from_db()
        assert event_chat.participant_count == 3

    def test_returns_existing_participant(self, event_chat, bob):
        existing = Participant.objects.get(conversation=event_chat, user=bob)

        result = GroupChatService.add_participant(event_chat.id, bob.id)

        assert result.data.id == existing.id

    def test_fails_for_unknown_conversation(self, alice):
        result = GroupChatService.add_participant(999_999, alice.id)

        assert result.success is False
        assert result.error_code == ChatErrorCode.CONVERSATION_NOT_FOUND

    def test_fails_for_unknown_user(self, event_chat):
        result = GroupChatService.add_participant(event_chat.id, 999_999)

        assert result.success is False
        assert result.error_code == ChatErrorCode.USER_NOT_FOUND

    def test_third_user_cannot_join_direct_conversation(self, direct_conversation, carol):
        """
        Direct conversations reject a third participant.

        Why it matters: The direct pair key identifies exactly two users.
        """
        result = GroupChatService.add_participant(direct_conversation.id, carol.id)

        assert result.success is False
        assert result.error_code == ChatErrorCode.DIRECT_CONVERSATION_FULL
        assert direct_conversation.participants.count() == 2


# =============================================================================
# TestMessageServicePostMessage
# =============================================================================


class TestMessageServicePostMessage:
    """
    Tests for MessageService.post_message().

    Verifies:
    - Participants can post
    - Non-participants are refused and nothing is written
    - Content validation
    """

    def test_participant_posts_message(self, direct_conversation, alice):
        result = MessageService.post_message(
            sender_id=alice.id,
            conversation_id=direct_conversation.id,
            content="Hello Bob",
        )

        assert result.success is True
        message = result.data
        assert message.content == "Hello Bob"
        assert message.sender == alice
        assert message.conversation_id == direct_conversation.id
        assert message.receiver_id is None

    def test_updates_conversation_last_message_at(self, direct_conversation, alice):
        """
        Posting moves the conversation's last_message_at to the message time.

        Why it matters: Inbox ordering and admin views rely on it.
        """
        message = MessageService.post_message(
            sender_id=alice.id,
            conversation_id=direct_conversation.id,
            content="Hi",
        ).data

        direct_conversation.refresh_from_db()
        assert direct_conversation.last_message_at == message.created_at

    def test_records_legacy_receiver(self, direct_conversation, alice, bob):
        message = MessageService.post_message(
            sender_id=alice.id,
            conversation_id=direct_conversation.id,
            content="Hi",
            receiver_id=bob.id,
        ).data

        assert message.receiver_id == bob.id

    def test_non_participant_is_forbidden_and_nothing_persisted(
        self, direct_conversation, outsider
    ):
        """
        A non-participant gets NOT_PARTICIPANT and no message row is written.

        Why it matters: Conversations are private to their members.
        """
        result = MessageService.post_message(
            sender_id=outsider.id,
            conversation_id=direct_conversation.id,
            content="Let me in",
        )

        assert result.success is False
        assert result.error_code == ChatErrorCode.NOT_PARTICIPANT
        assert Message.objects.count() == 0

    def test_empty_content_fails(self, direct_conversation, alice):
        for content in ("", "   "):
            result = MessageService.post_message(
                sender_id=alice.id,
                conversation_id=direct_conversation.id,
                content=content,
            )
            assert result.error_code == ChatErrorCode.EMPTY_CONTENT

        assert Message.objects.count() == 0

    def test_content_too_long_fails(self, direct_conversation, alice):
        result = MessageService.post_message(
            sender_id=alice.id,
            conversation_id=direct_conversation.id,
            content="x" * (MESSAGE_CONFIG.MAX_CONTENT_LENGTH + 1),
        )

        assert result.success is False
        assert result.error_code == ChatErrorCode.CONTENT_TOO_LONG

    def test_unknown_conversation_fails(self, alice):
        result = MessageService.post_message(
            sender_id=alice.id,
            conversation_id=999_999,
            content="Hello?",
        )

        assert result.success is False
        assert result.error_code == ChatErrorCode.CONVERSATION_NOT_FOUND


# =============================================================================
# TestMessageServiceListMessages
# =============================================================================


class TestMessageServiceListMessages:
    """Tests for MessageService.list_messages()."""

    def test_returns_messages_in_insertion_order(self, event_chat, alice, bob):
        """
        Messages come back oldest first, matching the order they were posted.

        Why it matters: Clients render history top to bottom without sorting.
        """
        posted = []
        for index in range(5):
            sender = alice if index % 2 == 0 else bob
            posted.append(
                MessageService.post_message(
                    sender_id=sender.id,
                    conversation_id=event_chat.id,
                    content=f"message {index}",
                ).data.id
            )

        result = MessageService.list_messages(event_chat.id, bob)

        assert result.success is True
        messages = list(result.data)
        assert [m.id for m in messages] == posted
        timestamps = [m.created_at for m in messages]
        assert timestamps == sorted(timestamps)

    def test_non_participant_is_forbidden(self, direct_conversation, alice, outsider):
        """
        A non-participant gets NOT_PARTICIPANT, not an empty list.

        Why it matters: An empty list would hide the access error from
        clients and leak that the conversation exists but is quiet.
        """
        MessageService.post_message(
            sender_id=alice.id,
            conversation_id=direct_conversation.id,
            content="secret",
        )

        result = MessageService.list_messages(direct_conversation.id, outsider)

        assert result.success is False
        assert result.error_code == ChatErrorCode.NOT_PARTICIPANT

    def test_unknown_conversation_fails(self, alice):
        result = MessageService.list_messages(999_999, alice)

        assert result.error_code == ChatErrorCode.CONVERSATION_NOT_FOUND


# =============================================================================
# TestMessageServiceReadState
# =============================================================================


class TestMessageServiceReadState:
    """
    Tests for per-participant read tracking.

    Verifies:
    - Unread counts ignore the reader's own messages
    - Marking read resets the count; later messages count again
    - Works for group conversations (no single receiver)
    """

    def test_unread_count_counts_messages_from_others(self, event_chat, alice, bob):
        MessageService.post_message(sender_id=alice.id, conversation_id=event_chat.id, content="1")
        MessageService.post_message(sender_id=alice.id, conversation_id=event_chat.id, content="2")
        MessageService.post_message(sender_id=bob.id, conversation_id=event_chat.id, content="3")

        assert MessageService.get_unread_count(event_chat.id, bob).data == 2
        assert MessageService.get_unread_count(event_chat.id, alice).data == 1

    def test_mark_conversation_read_resets_unread_count(self, event_chat, alice, bob):
        """
        After marking read, only messages posted later are unread.

        Why it matters: Group chats have no single receiver, so read state
        must be per participant.
        """
        MessageService.post_message(sender_id=alice.id, conversation_id=event_chat.id, content="a")

        result = MessageService.mark_conversation_read(event_chat.id, bob)

        assert result.success is True
        assert result.data.last_read_at is not None
        assert MessageService.get_unread_count(event_chat.id, bob).data == 0

        MessageService.post_message(sender_id=alice.id, conversation_id=event_chat.id, content="b")
        assert MessageService.get_unread_count(event_chat.id, bob).data == 1

    def test_mark_conversation_read_flags_legacy_messages(self, direct_conversation, alice, bob):
        message = MessageService.post_message(
            sender_id=alice.id,
            conversation_id=direct_conversation.id,
            content="ping",
            receiver_id=bob.id,
        ).data

        MessageService.mark_conversation_read(direct_conversation.id, bob)

        message.refresh_from_db()
        assert message.is_read is True

    def test_mark_conversation_read_requires_participant(self, direct_conversation, outsider):
        result = MessageService.mark_conversation_read(direct_conversation.id, outsider)

        assert result.error_code == ChatErrorCode.NOT_PARTICIPANT

    def test_unread_count_requires_participant(self, direct_conversation, outsider):
        result = MessageService.get_unread_count(direct_conversation.id, outsider)

        assert result.error_code == ChatErrorCode.NOT_PARTICIPANT


# =============================================================================
# TestMessageServiceLegacyReadFlags
# =============================================================================


class TestMessageServiceLegacyReadFlags:
    """Tests for mark_message_as_read() and mark_all_messages_as_read()."""

    def test_receiver_marks_message_read(self, direct_conversation, alice, bob):
        message = MessageFactory(
            conversation=direct_conversation, sender=alice, receiver=bob
        )

        result = MessageService.mark_message_as_read(message.id, bob)

        assert result.success is True
        message.refresh_from_db()
        assert message.is_read is True

    def test_non_receiver_cannot_mark_read(self, direct_conversation, alice, bob):
        """
        Only the addressee may flip a message's read flag.

        Why it matters: The sender marking their own message read would
        hide it from the receiver's unread list.
        """
        message = MessageFactory(
            conversation=direct_conversation, sender=alice, receiver=bob
        )

        result = MessageService.mark_message_as_read(message.id, alice)

        assert result.error_code == ChatErrorCode.NOT_MESSAGE_RECEIVER
        message.refresh_from_db()
        assert message.is_read is False

    def test_unknown_message_fails(self, alice):
        result = MessageService.mark_message_as_read(999_999, alice)

        assert result.error_code == ChatErrorCode.MESSAGE_NOT_FOUND

    def test_mark_all_returns_number_updated(self, direct_conversation, alice, bob):
        MessageFactory.create_batch(3, conversation=direct_conversation, sender=alice, receiver=bob)
        MessageFactory(conversation=direct_conversation, sender=bob, receiver=alice)

        result = MessageService.mark_all_messages_as_read(bob)

        assert result.data == 3
        assert Message.objects.filter(receiver=bob, is_read=False).count() == 0
        assert Message.objects.filter(receiver=alice, is_read=False).count() == 1


# =============================================================================
# TestConversationServiceListForUser
# =============================================================================


class TestConversationServiceListForUser:
    """
    Tests for ConversationService.list_for_user().

    Verifies:
    - Only the user's conversations with at least one message
    - Newest activity first
    - Latest message and unread count annotations
    """

    def test_skips_conversations_without_messages(self, direct_conversation, alice):
        result = ConversationService.list_for_user(alice)

        assert result.success is True
        assert result.data == []

    def test_orders_by_latest_message(self, direct_conversation, event_chat, alice, bob):
        MessageService.post_message(
            sender_id=bob.id, conversation_id=event_chat.id, content="older"
        )
        MessageService.post_message(
            sender_id=bob.id, conversation_id=direct_conversation.id, content="newer"
        )

        conversations = ConversationService.list_for_user(alice).data

        assert [c.id for c in conversations] == [direct_conversation.id, event_chat.id]

        MessageService.post_message(
            sender_id=alice.id, conversation_id=event_chat.id, content="newest"
        )
        conversations = ConversationService.list_for_user(alice).data

        assert [c.id for c in conversations] == [event_chat.id, direct_conversation.id]

    def test_annotates_latest_message_and_unread_count(self, direct_conversation, alice, bob):
        MessageService.post_message(
            sender_id=bob.id, conversation_id=direct_conversation.id, content="one"
        )
        last = MessageService.post_message(
            sender_id=bob.id, conversation_id=direct_conversation.id, content="two"
        ).data

        [summary] = ConversationService.list_for_user(alice).data

        assert summary.latest_message.id == last.id
        assert summary.unread_count == 2

        [own_view] = ConversationService.list_for_user(bob).data
        assert own_view.unread_count == 0

    def test_excludes_other_users_conversations(self, direct_conversation, alice, outsider):
        MessageService.post_message(
            sender_id=alice.id, conversation_id=direct_conversation.id, content="hi"
        )

        assert ConversationService.list_for_user(outsider).data == []

    def test_get_for_participant(self, direct_conversation, alice, outsider):
        assert ConversationService.get_for_participant(
            direct_conversation.id, alice
        ).data.id == direct_conversation.id
        assert (
            ConversationService.get_for_participant(direct_conversation.id, outsider).error_code
            == ChatErrorCode.NOT_PARTICIPANT
        )
        assert (
            ConversationService.get_for_participant(999_999, alice).error_code
            == ChatErrorCode.CONVERSATION_NOT_FOUND
        )


# =============================================================================
# TestFirstDirectMessageScenario
# =============================================================================


class TestFirstDirectMessageScenario:
    """
    A sends the first message to B; B replies.

    Why it matters: This is the legacy send-by-peer path. The reply must
    reuse the conversation created by the first message.
    """

    def test_reply_reuses_conversation(self, db):
        user_a = UserFactory()
        user_b = UserFactory()

        first_conversation = DirectConversationService.resolve(user_a.id, user_b.id).data
        MessageService.post_message(
            sender_id=user_a.id,
            conversation_id=first_conversation.id,
            content="Hey B",
            receiver_id=user_b.id,
        )

        assert first_conversation.participants.count() == 2

        reply_conversation = DirectConversationService.resolve(user_b.id, user_a.id).data
        MessageService.post_message(
            sender_id=user_b.id,
            conversation_id=reply_conversation.id,
            content="Hey A",
            receiver_id=user_a.id,
        )

        assert reply_conversation.id == first_conversation.id
        assert Conversation.objects.count() == 1
        assert Message.objects.filter(conversation=first_conversation).count() == 2

    def test_group_conversation_factory_is_not_direct(self, db):
        assert ConversationFactory().conversation_type == ConversationType.GROUP
