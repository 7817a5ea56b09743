"""
OpenAPI schema customizations for drf-spectacular.

Tag naming follows the pattern: [App Name] - [Group Name]
Examples:
- Chat - Conversations (inbox, detail, read state, direct resolution)
- Chat - Messages (history, posting)
- Chat - Legacy (peer-addressed messaging)
- Events - RSVPs (attendance requests and approvals)
"""

TAG_DESCRIPTIONS = {
    "Chat - Conversations": (
        "Inbox, conversation detail and read state. Direct conversations are "
        "resolved from the user pair; event group chats are created when an "
        "RSVP is approved."
    ),
    "Chat - Messages": (
        "Message history (oldest first, cursor paginated) and posting. "
        "Participants only. Realtime clients connect to ws/chat/ instead."
    ),
    "Chat - Legacy": (
        "Messaging addressed to a user id rather than a conversation. The "
        "direct conversation is resolved behind the scenes."
    ),
    "Events - RSVPs": (
        "Attendance requests. Approval by the host adds the attendee to the "
        "event's group chat."
    ),
}


def add_tag_descriptions(result, generator, request, public):
    """
    Postprocessing hook that describes the tags used by the API views.

    Tags are set with tags= in @extend_schema; only tags present in the
    generated schema are listed.
    """
    used_tags = set()
    for methods in result.get("paths", {}).values():
        for operation in methods.values():
            if isinstance(operation, dict):
                used_tags.update(operation.get("tags", []))

    result["tags"] = [
        {"name": name, "description": description}
        for name, description in TAG_DESCRIPTIONS.items()
        if name in used_tags
    ]
    return result
