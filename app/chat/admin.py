"""
Django admin configuration for chat models.

Provides admin interfaces for:
- Conversation management
- Participant viewing
- Message moderation
"""

from django.contrib import admin

from chat.models import Conversation, DirectConversationPair, Message, Participant


class ParticipantInline(admin.TabularInline):
    """Inline display of participants in conversation admin."""

    model = Participant
    extra = 0
    readonly_fields = ["joined_at", "last_read_at"]
    raw_id_fields = ["user"]


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    """Admin interface for Conversation model."""

    list_display = [
        "id",
        "conversation_type",
        "title",
        "event",
        "participant_count",
        "created_at",
        "last_message_at",
    ]
    list_filter = ["conversation_type", "created_at"]
    search_fields = ["title", "id"]
    readonly_fields = ["created_at", "updated_at", "participant_count", "last_message_at"]
    raw_id_fields = ["created_by", "event"]
    inlines = [ParticipantInline]
    ordering = ["-created_at"]


@admin.register(DirectConversationPair)
class DirectConversationPairAdmin(admin.ModelAdmin):
    """Admin interface for DirectConversationPair model."""

    list_display = ["conversation", "user_lower", "user_higher"]
    raw_id_fields = ["conversation", "user_lower", "user_higher"]


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ["id", "conversation", "user", "joined_at", "last_read_at"]
    list_filter = ["joined_at"]
    search_fields = ["user__email", "conversation__title"]
    readonly_fields = ["created_at", "updated_at", "joined_at"]
    raw_id_fields = ["conversation", "user"]
    ordering = ["-joined_at"]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    """Admin interface for Message model."""

    list_display = [
        "id",
        "conversation",
        "sender",
        "receiver",
        "content_preview",
        "is_read",
        "created_at",
    ]
    list_filter = ["is_read", "created_at"]
    search_fields = ["content", "sender__email"]
    readonly_fields = ["created_at", "updated_at"]
    raw_id_fields = ["conversation", "sender", "receiver"]
    ordering = ["-created_at"]

    @admin.display(description="Content Preview")
    def content_preview(self, obj: Message) -> str:
        """Return truncated content for list display."""
        max_length = 50
        if len(obj.content) > max_length:
            return obj.content[:max_length] + "..."
        return obj.content
