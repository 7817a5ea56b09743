"""
Django admin configuration for events.
"""

from django.contrib import admin

from events.models import Event, EventRsvp


class EventRsvpInline(admin.TabularInline):
    model = EventRsvp
    extra = 0
    raw_id_fields = ("user",)
    readonly_fields = ("responded_at", "created_at")


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "creator", "starts_at", "created_at")
    search_fields = ("title",)
    raw_id_fields = ("creator",)
    inlines = [EventRsvpInline]


@admin.register(EventRsvp)
class EventRsvpAdmin(admin.ModelAdmin):
    list_display = ("id", "event", "user", "status", "responded_at")
    list_filter = ("status",)
    raw_id_fields = ("event", "user")
