"""
Celery configuration for the chat service.

Background work here is event group chat provisioning: approving an RSVP
schedules chat.tasks.provision_event_group_chat once the approval commits.

This configuration uses Redis as both the message broker and result backend.
Tasks are auto-discovered from all installed Django apps.

Usage:
    from chat.tasks import provision_event_group_chat

    provision_event_group_chat.delay(event_id, host_id, attendee_id)

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Celery looks for a tasks.py module in each installed app
app.autodiscover_tasks()
