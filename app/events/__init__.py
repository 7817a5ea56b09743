"""
Events app (external collaborator of the chat core).

Holds the minimal event and RSVP records needed to drive group chat
provisioning: approving an attendee schedules the event's group chat to be
ensured and the attendee added to it.
"""
