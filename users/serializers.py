"""Serializers for the current user's profile and staff sign-in."""

from rest_framework import serializers
from rest_framework.exceptions import PermissionDenied
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User


class UserMeSerializer(serializers.ModelSerializer):
    """Serializer returning basic profile fields for the current user."""

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "is_staff"]


class SignOutSerializer(serializers.Serializer):
    """Request body for signing out (blacklisting the refresh token)."""

    refresh = serializers.CharField()


class AdminTokenObtainPairSerializer(serializers.Serializer):
    """Obtain JWTs with email and password.

    Only active staff users receive tokens; valid credentials of a
    non-staff account are refused with 403 rather than 400.
    """

    email = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        email = (attrs.get("email") or "").strip().lower()
        password = attrs.get("password") or ""

        if not email or not password:
            raise serializers.ValidationError({"detail": "email and password are required."})

        user = User.objects.filter(email=email).first()
        if not user or not user.check_password(password) or not user.is_active:
            raise serializers.ValidationError({"detail": "Invalid credentials."})
        if not user.is_staff:
            raise PermissionDenied("Staff access required.")

        self.user = user
        refresh = RefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}
