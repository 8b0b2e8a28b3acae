# accounts/__init__.py
"""
Accounts app - authentication and roles.

This app provides:
- User: email-login user with a role (admin / accountant / viewer)
- ActorContext: authorization context passed to every command
"""
