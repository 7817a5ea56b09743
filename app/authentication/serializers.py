"""
Serializers for user data embedded in chat payloads.

Only the public profile is exposed: id, display name and avatar.
"""

from rest_framework import serializers

from authentication.models import User


class PublicUserSerializer(serializers.ModelSerializer):
    """
    Public profile of a user.

    Used for message senders and for the other participant of a
    direct conversation summary.
    """

    display_name = serializers.CharField(read_only=True)
    avatar_url = serializers.CharField(read_only=True, allow_null=True)

    class Meta:
        model = User
        fields = ["id", "username", "display_name", "avatar_url"]
        read_only_fields = fields
