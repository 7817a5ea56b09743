"""
Authentication application.

Provides the custom User model. The chat core reads users as an external
directory (id, display name, avatar) and never mutates them.

Usage:
    from authentication.models import User
    from authentication.serializers import PublicUserSerializer
"""
