"""Single-use JWTs for email verification and password reset links."""

import typing as t

import jwt
from django.conf import settings
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from ninja.errors import HttpError
from ninja_jwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from ninja_jwt.utils import datetime_from_epoch


def create_token(payload: dict[str, t.Any], secret: str | None = None, algorithm: str | None = None) -> str:
    """Helper function to create a JWT token.

    Args:
        payload (dict): The payload.
        secret (str): The secret key, defaults to the Django secret key.
        algorithm (str): The algorithm, defaults to JWT_ALGORITHM.

    Returns:
        str: The JWT token.
    """
    return jwt.encode(payload, secret or settings.SECRET_KEY, algorithm=algorithm or settings.JWT_ALGORITHM)


def check_blacklist(jti: str) -> None:
    """Checks if this token is present in the token blacklist. Raises `HttpError` if so."""
    if BlacklistedToken.objects.filter(token__jti=jti).exists():
        raise HttpError(400, str(_("This link has already been used.")))


@transaction.atomic
def blacklist(token: str) -> BlacklistedToken:
    """Ensures this token is included in the outstanding token list and adds it to the blacklist."""
    payload = jwt.decode(token, options={"verify_signature": False})
    token_db, _created = OutstandingToken.objects.get_or_create(
        jti=payload["jti"],
        defaults={
            "token": token,
            "expires_at": datetime_from_epoch(payload["exp"]),
        },
    )
    return BlacklistedToken.objects.get_or_create(token=token_db)[0]
