from datetime import timedelta

from decouple import config

from .base import DEBUG, SECRET_KEY

JWT_ALGORITHM = config("JWT_ALGORITHM", default="HS256")
JWT_AUDIENCE = config("JWT_AUDIENCE", default="eventhub")

NINJA_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=config("ACCESS_TOKEN_LIFETIME_HOURS", default=24, cast=int)),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=config("REFRESH_TOKEN_LIFETIME_DAYS", default=15, cast=int)),
    "ALGORITHM": JWT_ALGORITHM,
    "SIGNING_KEY": SECRET_KEY,
    "AUDIENCE": JWT_AUDIENCE,
}
VERIFY_TOKEN_LIFETIME = timedelta(hours=config("VERIFY_TOKEN_LIFETIME_HOURS", default=24, cast=int))
PASSWORD_RESET_TOKEN_LIFETIME = timedelta(minutes=config("PASSWORD_RESET_TOKEN_LIFETIME_MINUTES", default=60, cast=int))

# The access token is also delivered as an httpOnly cookie.
JWT_AUTH_COOKIE = config("JWT_AUTH_COOKIE", default="jwt")
JWT_AUTH_COOKIE_SECURE = config("JWT_AUTH_COOKIE_SECURE", default=not DEBUG, cast=bool)
JWT_AUTH_COOKIE_SAMESITE = config("JWT_AUTH_COOKIE_SAMESITE", default="Lax")

NINJA_EXTRA = {
    "THROTTLE_RATES": {
        "user": "1000/day",
        "anon": "250/day",
    },
    "NUM_PROXIES": None,
}
