"""Users app API views.

Endpoints include:
- signin / refresh / verify: JWT issue and maintenance for staff users.
- signout: blacklists a refresh token.
- profile: returns the current authenticated user's profile.
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.exceptions import APIException, PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken, TokenError
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView, TokenVerifyView

from .logging import log_auth_event
from .serializers import AdminTokenObtainPairSerializer, SignOutSerializer, UserMeSerializer


@extend_schema(
    operation_id="users_current_user",
    summary="Get current user profile",
    description=(
        "Returns the current authenticated user's profile.\n\n"
        "Auth: Requires JWT (Authorization: Bearer <token>) or session auth.\n\n"
        "Errors: 401 if authentication credentials are missing or invalid."
    ),
    tags=["User Endpoints"],
    responses={
        200: OpenApiResponse(description="User profile", response=UserMeSerializer),
        401: OpenApiResponse(description="Unauthorized"),
    },
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def current_user(request):
    """Return the authenticated user's basic profile fields."""
    log_auth_event("profile", request, user=request.user)
    serializer = UserMeSerializer(request.user)
    return Response(serializer.data)


# Throttle scope for profile endpoint
current_user.throttle_scope = "profile"


class SignOutView(APIView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signout"
    permission_classes = [AllowAny]

    @extend_schema(tags=["User Endpoints"], request=SignOutSerializer)
    def post(self, request):
        refresh = request.data.get("refresh")
        if not refresh:
            return Response({"detail": "Refresh token is required."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            token = RefreshToken(refresh)
            token.blacklist()
        except TokenError:
            log_auth_event("signout", request, status="invalid_token")
            return Response({"detail": "Invalid token."}, status=status.HTTP_400_BAD_REQUEST)
        log_auth_event("signout", request, status="success")
        return Response({"detail": "Signed out."}, status=status.HTTP_205_RESET_CONTENT)


class SignInView(TokenObtainPairView):
    """Staff sign-in; non-staff accounts get 403."""

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"
    permission_classes = [AllowAny]
    serializer_class = AdminTokenObtainPairSerializer

    @extend_schema(
        tags=["User Endpoints"],
        responses={
            200: OpenApiResponse(description="access and refresh tokens"),
            400: OpenApiResponse(description="Invalid credentials"),
            403: OpenApiResponse(description="Account is not staff"),
        },
    )
    def post(self, request, *args, **kwargs):
        try:
            resp = super().post(request, *args, **kwargs)
        except PermissionDenied:
            log_auth_event("signin", request, status="forbidden")
            raise
        except APIException:
            log_auth_event("signin", request, status="failed")
            raise
        log_auth_event("signin", request, status="success")
        return resp


class RefreshView(TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"
    permission_classes = [AllowAny]

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("token_refresh", request, status=status_label)
        return resp


class VerifyView(TokenVerifyView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_verify"
    permission_classes = [AllowAny]

    @extend_schema(tags=["User Endpoints"])
    def post(self, request, *args, **kwargs):
        resp = super().post(request, *args, **kwargs)
        status_label = "success" if resp.status_code == 200 else "failed"
        log_auth_event("token_verify", request, status=status_label)
        return resp
