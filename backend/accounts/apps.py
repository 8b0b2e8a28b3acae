# accounts/apps.py
"""Accounts app configuration."""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Users, roles and JWT authentication."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
    verbose_name = "Users & Roles"
