"""Login, refresh and logout endpoints issuing HttpOnly JWT cookies."""

import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

logger = logging.getLogger("callplan")


class SafeScopedRateThrottle(ScopedRateThrottle):
    """Scoped throttle with a strict fallback when the scope has no configured rate."""

    def get_rate(self):
        try:
            return super().get_rate()
        except ImproperlyConfigured:
            logger.warning("Throttle scope '%s' not configured, applying strict default 5/min.", self.scope)
            return "5/min"


def _cookie_options() -> dict:
    return {
        "httponly": True,
        "secure": settings.JWT_AUTH_COOKIE_SECURE,
        "samesite": settings.JWT_AUTH_COOKIE_SAMESITE,
        "path": settings.JWT_AUTH_COOKIE_PATH,
        "domain": settings.JWT_AUTH_COOKIE_DOMAIN,
    }


def _set_auth_cookies(response: Response, *, access: str, refresh: str | None) -> None:
    options = _cookie_options()
    lifetime = settings.SIMPLE_JWT["ACCESS_TOKEN_LIFETIME"]
    response.set_cookie(settings.JWT_AUTH_COOKIE, access, max_age=int(lifetime.total_seconds()), **options)
    if refresh:
        lifetime = settings.SIMPLE_JWT["REFRESH_TOKEN_LIFETIME"]
        response.set_cookie(
            settings.JWT_AUTH_REFRESH_COOKIE, refresh, max_age=int(lifetime.total_seconds()), **options
        )


def _token_payload(detail: str, access: str, refresh: str | None) -> dict:
    payload = {"detail": detail}
    if settings.JWT_RETURN_TOKENS_IN_BODY:
        payload.update({"access": access, "refresh": refresh})
    return payload


class CookieTokenObtainPairView(TokenObtainPairView):
    """Authenticate with email/password and set the auth cookies."""

    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_burst"
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        access = serializer.validated_data["access"]
        refresh = serializer.validated_data["refresh"]

        user = serializer.user
        payload = _token_payload("Connexion reussie.", access, refresh)
        payload["user"] = {
            "id": str(user.pk),
            "email": user.email,
            "full_name": user.get_full_name(),
            "role": user.role,
            "is_manager": user.has_manager_capability,
        }
        response = Response(payload, status=status.HTTP_200_OK)
        _set_auth_cookies(response, access=access, refresh=refresh)
        return response


class CookieTokenRefreshView(TokenRefreshView):
    """Refresh the access token from the body or the refresh cookie."""

    throttle_classes = [SafeScopedRateThrottle]
    throttle_scope = "auth_sustained"
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        data = request.data.copy()
        if not data.get("refresh"):
            cookie_token = request.COOKIES.get(settings.JWT_AUTH_REFRESH_COOKIE)
            if cookie_token:
                data["refresh"] = cookie_token

        serializer = self.get_serializer(data=data)
        serializer.is_valid(raise_exception=True)
        access = serializer.validated_data["access"]
        refresh = serializer.validated_data.get("refresh", data.get("refresh"))

        response = Response(_token_payload("Jeton renouvele.", access, refresh), status=status.HTTP_200_OK)
        _set_auth_cookies(response, access=access, refresh=refresh)
        return response


class LogoutAPIView(APIView):
    """Drop the auth cookies."""

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        response = Response(status=status.HTTP_204_NO_CONTENT)
        for name in (settings.JWT_AUTH_COOKIE, settings.JWT_AUTH_REFRESH_COOKIE):
            response.delete_cookie(name, path=settings.JWT_AUTH_COOKIE_PATH, domain=settings.JWT_AUTH_COOKIE_DOMAIN)
        return response
