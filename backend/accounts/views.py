# accounts/views.py
"""
Auth endpoints: register, login, logout, me.

Token refresh is simplejwt's own TokenRefreshView (see urls.py).
"""

import logging

from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .serializers import (
    EmailTokenObtainPairSerializer,
    LogoutSerializer,
    ProfileSerializer,
    RegistrationSerializer,
)

logger = logging.getLogger(__name__)


class RegisterView(generics.CreateAPIView):
    """
    POST /api/auth/register/ {email, name, password}

    New users get the accountant role; the response carries a token pair
    so the client is logged in straight away.
    """
    serializer_class = RegistrationSerializer
    permission_classes = [permissions.AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "registration"

    def perform_create(self, serializer):
        user = serializer.save()
        logger.info("User registered", extra={"user_id": user.id, "role": user.role})


class LoginView(generics.GenericAPIView):
    """POST /api/auth/login/ {email, password} -> {user, access, refresh}"""
    serializer_class = EmailTokenObtainPairSerializer
    permission_classes = [permissions.AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "login"

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        logger.info("User logged in", extra={"user_id": serializer.validated_data["user"]["id"]})
        return Response(serializer.validated_data)


class LogoutView(APIView):
    """POST /api/auth/logout/ {refresh} -> blacklists the refresh token"""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            RefreshToken(serializer.validated_data["refresh"]).blacklist()
        except TokenError:
            return Response({"detail": "Invalid or expired refresh token."}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(APIView):
    """GET /api/auth/me/ -> current user and the permission codes of their role"""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(ProfileSerializer.from_user(request.user).data)
