from ninja_extra import api_controller, route

from accounts import schema
from accounts.models import EventHubUser
from accounts.service import account as account_service
from common.authentication import CookieJWTAuth
from common.controllers import UserAwareController
from common.throttling import WriteThrottle


@api_controller("/account", tags=["Account"], auth=CookieJWTAuth())
class AccountController(UserAwareController):
    @route.get("/me", response=schema.EventHubUserSchema, url_name="me")
    def me(self) -> EventHubUser:
        """Retrieve the authenticated user's account and profiles."""
        return self.user()

    @route.put("/me", response=schema.EventHubUserSchema, url_name="update_profile", throttle=WriteThrottle())
    def update_profile(self, payload: schema.ProfileUpdateSchema) -> EventHubUser:
        """Update names, avatar, language and the participant or organizer profile.

        Only provided fields are changed.
        """
        return account_service.update_profile(self.user(), payload)
