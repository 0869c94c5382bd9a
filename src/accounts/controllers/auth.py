"""Controllers for sign-up, login and the single-use email links."""

import structlog
from django.conf import settings
from django.contrib.auth.models import update_last_login
from django.http import HttpResponse
from django.utils.translation import gettext_lazy as _
from ninja.errors import HttpError
from ninja_extra import ControllerBase, api_controller, route, status
from ninja_jwt.tokens import RefreshToken

from accounts import schema
from accounts.models import EventHubUser
from accounts.service import account as account_service
from common.authentication import CookieJWTAuth
from common.schema import ResponseMessage
from common.throttling import AuthThrottle, UserRegistrationThrottle

logger = structlog.get_logger(__name__)


def set_auth_cookie(response: HttpResponse, token: str) -> None:
    """Attach the access token as an httpOnly cookie."""
    response.set_cookie(
        settings.JWT_AUTH_COOKIE,
        token,
        max_age=int(settings.NINJA_JWT["ACCESS_TOKEN_LIFETIME"].total_seconds()),
        httponly=True,
        secure=settings.JWT_AUTH_COOKIE_SECURE,
        samesite=settings.JWT_AUTH_COOKIE_SAMESITE,
    )


@api_controller("/auth", tags=["Auth"], throttle=AuthThrottle())
class AuthController(ControllerBase):
    @route.post(
        "/signup",
        response={201: schema.EventHubUserSchema},
        url_name="signup",
        throttle=UserRegistrationThrottle(),
    )
    def signup(self, payload: schema.SignupSchema) -> tuple[int, EventHubUser]:
        """Create a new account and send the verification email.

        New accounts are UNVERIFIED participants until the emailed link is followed.
        """
        user, _token = account_service.register_user(payload)
        return status.HTTP_201_CREATED, user

    @route.post("/login", response=schema.LoginResponseSchema, url_name="login")
    def login(self, payload: schema.LoginSchema) -> schema.LoginResponseSchema:
        """Authenticate with email and password.

        The access token is returned in the body and set as an httpOnly `jwt` cookie.
        Suspended or deactivated accounts cannot log in.
        """
        user = EventHubUser.objects.filter(email__iexact=payload.email).first()
        if user is None or not user.check_password(payload.password):
            logger.info("login_failed")
            raise HttpError(401, str(_("Invalid email or password.")))
        if not user.is_active:
            logger.info("login_blocked", user_id=str(user.id), status=user.status)
            raise HttpError(403, str(_("This account is {status}.")).format(status=user.get_status_display().lower()))
        access = str(RefreshToken.for_user(user).access_token)
        update_last_login(None, user)  # type: ignore[arg-type]
        set_auth_cookie(self.context.response, access)  # type: ignore[union-attr, arg-type]
        logger.info("login_succeeded", user_id=str(user.id))
        return schema.LoginResponseSchema(user=schema.EventHubUserSchema.from_orm(user), access=access)

    @route.post("/logout", response=ResponseMessage, url_name="logout")
    def logout(self) -> ResponseMessage:
        """Clear the auth cookie."""
        self.context.response.delete_cookie(settings.JWT_AUTH_COOKIE)  # type: ignore[union-attr]
        return ResponseMessage(message=str(_("Logged out.")))

    @route.get("/check", response=schema.EventHubUserSchema, url_name="check_auth", auth=CookieJWTAuth())
    def check(self) -> EventHubUser:
        """Return the authenticated user, or 401."""
        return self.context.request.user  # type: ignore[union-attr, return-value]

    @route.post("/verify-email", response=schema.EventHubUserSchema, url_name="verify_email")
    def verify_email(self, payload: schema.VerifyEmailSchema) -> EventHubUser:
        """Verify the email address with the token from the verification email.

        The token is single-use. Unverified accounts become ACTIVE.
        """
        return account_service.verify_email(payload.token)

    @route.post(
        "/resend-verification",
        response=ResponseMessage,
        url_name="resend_verification",
        throttle=UserRegistrationThrottle(),
    )
    def resend_verification(self, payload: schema.ResendVerificationSchema) -> ResponseMessage:
        """Send a new verification link if the address belongs to an unverified account."""
        account_service.resend_verification_email(payload.email)
        return ResponseMessage(message=str(_("If your email is registered, you will receive a new link.")))

    @route.post("/password-reset/request", response=ResponseMessage, url_name="password_reset_request")
    def request_password_reset(self, payload: schema.PasswordResetRequestSchema) -> ResponseMessage:
        """Email a password reset link. Always answers the same way."""
        account_service.request_password_reset(payload.email)
        return ResponseMessage(message=str(_("If your email is registered, you will receive a reset link.")))

    @route.post("/password-reset/confirm", response=ResponseMessage, url_name="password_reset_confirm")
    def reset_password(self, payload: schema.PasswordResetSchema) -> ResponseMessage:
        """Set a new password using the token from the reset email."""
        account_service.reset_password(payload.token, payload.password1)
        return ResponseMessage(message=str(_("Your password has been reset.")))
