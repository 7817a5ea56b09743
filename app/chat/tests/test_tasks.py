"""
Tests for chat Celery tasks.
"""

from chat.models import Conversation, ConversationType, Participant
from chat.tasks import provision_event_group_chat
from events.tests.factories import EventFactory


class TestProvisionEventGroupChat:
    """
    Tests for provision_event_group_chat.

    Verifies:
    - First approval creates the chat with host and attendee
    - Re-running for the same approval changes nothing
    - Expected failures return None instead of raising
    """

    def test_creates_chat_with_host_and_attendee(self, event, alice, bob):
        conversation_id = provision_event_group_chat(event.id, alice.id, bob.id)

        conversation = Conversation.objects.get(id=conversation_id)
        assert conversation.conversation_type == ConversationType.EVENT
        assert conversation.event_id == event.id
        assert set(conversation.participants.values_list("user_id", flat=True)) == {
            alice.id,
            bob.id,
        }
        assert conversation.participant_count == 2

    def test_rerun_is_idempotent(self, event, alice, bob):
        """
        Running the task twice for one approval leaves one chat and one membership.

        Why it matters: Celery retries and duplicate deliveries re-run tasks.
        """
        first = provision_event_group_chat(event.id, alice.id, bob.id)
        second = provision_event_group_chat.apply(args=(event.id, alice.id, bob.id)).get()

        assert first == second
        assert Conversation.objects.filter(event=event).count() == 1
        assert Participant.objects.filter(conversation_id=first, user=bob).count() == 1

    def test_unknown_event_returns_none(self, alice, bob):
        assert provision_event_group_chat(999_999, alice.id, bob.id) is None
        assert Conversation.objects.count() == 0

    def test_unknown_attendee_returns_none(self, alice):
        event = EventFactory(creator=alice)

        assert provision_event_group_chat(event.id, alice.id, 999_999) is None
