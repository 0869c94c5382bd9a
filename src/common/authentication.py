import typing as t

import structlog
from django.conf import settings
from django.contrib.auth.models import AnonymousUser
from django.http import HttpRequest
from django.utils import translation
from ninja_jwt.authentication import JWTAuth

logger = structlog.get_logger(__name__)


class CookieJWTAuth(JWTAuth):
    """JWT authentication reading the token from the auth cookie or the Authorization header.

    The browser client relies on the httpOnly cookie set at login, API clients may send
    a regular `Authorization: Bearer <token>` header instead. The header wins when both
    are present.

    Once authenticated, the user's preferred language is activated for the request.
    """

    def __call__(self, request: HttpRequest) -> t.Any | None:
        """Overrides HttpBearer __call__ to look into the auth cookie as well."""
        token = self.get_token(request)
        if not token:
            return None
        return self.authenticate(request, token)

    def get_token(self, request: HttpRequest) -> str | None:
        """Extract the raw JWT from the request, if any."""
        auth_value = request.headers.get(self.header)
        if auth_value:
            parts = auth_value.split(" ")
            if parts[0].lower() == self.openapi_scheme:
                return " ".join(parts[1:])
            if settings.DEBUG:
                logger.warning("unexpected_auth_header", scheme=parts[0])
        return request.COOKIES.get(settings.JWT_AUTH_COOKIE) or None

    def authenticate(self, request: HttpRequest, token: str) -> t.Any:
        """Authenticate the request and activate the user's language preference."""
        user = super().authenticate(request, token)
        if user and getattr(user, "language", None):
            translation.activate(user.language)
            request.LANGUAGE_CODE = user.language
        return user


class OptionalAuth(CookieJWTAuth):
    """Optional JWT authentication.

    If a token is present the user is authenticated, otherwise request.user is set to
    AnonymousUser and the request continues. Used by public endpoints that show extra
    information to logged-in users.
    """

    def __call__(self, request: HttpRequest) -> t.Any | None:
        """Overrides CookieJWTAuth __call__ to provide optional auth."""
        token = self.get_token(request)
        if not token:
            request.user = AnonymousUser()
            return request.user
        return self.authenticate(request, token)
