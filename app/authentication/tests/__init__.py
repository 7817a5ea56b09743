"""Tests for the User model's public profile."""
