"""Authentication backends for the planner API."""

from django.conf import settings
from django.middleware.csrf import CsrfViewMiddleware
from rest_framework import exceptions
from rest_framework.request import Request
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError


class CookieJWTAuthentication(JWTAuthentication):
    """JWT authentication from the ``Authorization`` header or an HttpOnly cookie.

    A bad header token fails loudly (401). A stale cookie token is treated as
    anonymous so the refresh endpoint keeps working; cookie-authenticated
    requests must also pass the CSRF check.
    """

    def authenticate(self, request: Request):
        header_result = self._from_header(request)
        if header_result is not None:
            return header_result
        return self._from_cookie(request)

    def _from_header(self, request: Request):
        header = self.get_header(request)
        if header is None:
            return None
        raw_token = self.get_raw_token(header)
        if raw_token is None:
            return None
        validated_token = self.get_validated_token(raw_token)
        return self.get_user(validated_token), validated_token

    def _from_cookie(self, request: Request):
        raw_token = request.COOKIES.get(settings.JWT_AUTH_COOKIE)
        if not raw_token:
            return None
        try:
            validated_token = self.get_validated_token(raw_token)
        except (InvalidToken, TokenError):
            return None
        self._check_csrf(request)
        return self.get_user(validated_token), validated_token

    @staticmethod
    def _check_csrf(request: Request) -> None:
        django_request = request._request
        check = CsrfViewMiddleware(lambda req: None)
        check.process_request(django_request)
        reason = check.process_view(django_request, None, (), {})
        if reason:
            raise exceptions.PermissionDenied(f"CSRF Failed: {reason}")
