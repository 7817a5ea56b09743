"""
Chat app for real-time messaging.

This app handles:
- Conversations (direct, group, event group chats)
- Message posting, history and read state
- WebSocket gateway (connect handshake, heartbeat, message frames)

Related apps:
    - authentication: User model for participants
    - events: RSVP approval provisions event group chats

WebSocket Support:
    Uses Django Channels for real-time communication.
    See consumers.py for the gateway consumer.
    See routing.py for WebSocket URL patterns.

Usage:
    from chat.services import DirectConversationService, MessageService

    conversation = DirectConversationService.resolve(alice.id, bob.id).data

    message = MessageService.post_message(
        sender_id=alice.id,
        conversation_id=conversation.id,
        content="Hello!",
    ).data
"""
