"""
Authentication models.

The chat core treats users as an external, read-only directory. It only ever
reads a user's id, display name and avatar. Credentials are issued elsewhere
(simplejwt tokens are verified, never minted, by this service).

Related files:
    - managers.py: Custom user manager for email-based creation
    - serializers.py: Public profile representation embedded in chat payloads
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Primary identifier, unique, used for login
        username: Public handle shown in chats (optional)
        full_name: Display name (optional)
        profile_image: Avatar URL (optional)
        is_active: Whether the user account is active
        is_staff: Whether the user can access Django admin
        date_joined: When the user account was created

    Usage:
        user = User.objects.create_user(
            email="host@example.com",
            password="securepassword",
            full_name="Beach Host",
        )
        user.display_name  # "Beach Host"
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    username = models.CharField(
        max_length=30,
        unique=True,
        null=True,
        blank=True,
        help_text="Public handle",
    )
    full_name = models.CharField(
        max_length=150,
        blank=True,
        default="",
        help_text="Name shown to other users",
    )
    profile_image = models.URLField(
        max_length=500,
        blank=True,
        default="",
        help_text="Avatar URL",
    )

    # Account status flags
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        db_table = "auth_user_account"
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.email

    @property
    def display_name(self) -> str:
        """Full name, then username, then the local part of the email."""
        return self.full_name or self.username or self.email.split("@")[0]

    @property
    def avatar_url(self) -> str | None:
        return self.profile_image or None

    def get_full_name(self):
        return self.display_name

    def get_short_name(self):
        return self.username or self.email.split("@")[0]
