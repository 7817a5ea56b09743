"""
Celery tasks for chat app.

This module defines async tasks for:
- Event group chat provisioning after an RSVP is approved

Related files:
    - services.py: GroupChatService
    - events/services.py: RsvpService.approve schedules provisioning

Usage:
    from chat.tasks import provision_event_group_chat

    provision_event_group_chat.delay(event_id, host_id, attendee_id)
"""

import logging

from celery import shared_task

from chat.services import GroupChatService

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_kwargs={"max_retries": 3},
)
def provision_event_group_chat(self, event_id: int, host_id: int, attendee_id: int) -> int | None:
    """
    Ensure the event's group chat exists and add the approved attendee.

    The host becomes the first participant when the chat is created.
    Running this again for the same approval changes nothing.

    Expected failures (event or user gone) are logged and not retried;
    unexpected errors are retried with backoff.

    Args:
        event_id: Event whose RSVP was approved
        host_id: Event host (chat initiator)
        attendee_id: Newly approved attendee

    Returns:
        Conversation ID, or None if provisioning failed
    """
    ensured = GroupChatService.ensure_event_group_chat(event_id, host_id)
    if not ensured.success:
        logger.error(
            f"Could not provision group chat for event {event_id}: "
            f"{ensured.error} ({ensured.error_code})"
        )
        return None

    conversation = ensured.data
    added = GroupChatService.add_participant(conversation.id, attendee_id)
    if not added.success:
        logger.error(
            f"Could not add user {attendee_id} to group chat {conversation.id}: "
            f"{added.error} ({added.error_code})"
        )
        return None

    logger.info(
        f"Group chat {conversation.id} for event {event_id} includes attendee {attendee_id}"
    )
    return conversation.id
