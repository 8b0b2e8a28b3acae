# accounts/urls.py
"""
URL configuration for the auth API.

Endpoints:
- /auth/register/ - create a user and return a token pair
- /auth/login/    - email + password -> token pair
- /auth/refresh/  - refresh an access token
- /auth/logout/   - blacklist a refresh token
- /auth/me/       - current user and granted permissions
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import LoginView, LogoutView, MeView, RegisterView

app_name = "accounts"

urlpatterns = [
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/me/", MeView.as_view(), name="me"),
]
