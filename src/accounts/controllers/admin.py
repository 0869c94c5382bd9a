"""Administrator endpoints for managing user accounts."""

from uuid import UUID

from django.db.models import QuerySet
from django.shortcuts import get_object_or_404
from django.utils.translation import gettext_lazy as _
from ninja import Query
from ninja_extra import api_controller, route, status
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from accounts import schema
from accounts.models import EventHubUser
from accounts.permissions import IsAdmin
from accounts.service import admin_service
from common.authentication import CookieJWTAuth
from common.controllers import UserAwareController
from common.schema import ResponseMessage
from common.throttling import WriteThrottle


@api_controller("/admin", tags=["Admin"], auth=CookieJWTAuth(), permissions=[IsAdmin])
class AdminUserController(UserAwareController):
    def get_user_or_404(self, user_id: UUID) -> EventHubUser:
        return get_object_or_404(EventHubUser, pk=user_id)

    @route.get("/users", response=PaginatedResponseSchema[schema.EventHubUserSchema], url_name="admin_list_users")
    @paginate(PageNumberPaginationExtra, page_size=20)
    def list_users(
        self,
        params: schema.AdminUserFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[EventHubUser]:
        """List users with search, role and status filters and a sort order."""
        return admin_service.list_users(params)

    @route.post(
        "/users",
        response={201: schema.EventHubUserSchema},
        url_name="admin_create_user",
        throttle=WriteThrottle(),
    )
    def create_user(self, payload: schema.AdminUserCreateSchema) -> tuple[int, EventHubUser]:
        """Create an already verified account."""
        return status.HTTP_201_CREATED, admin_service.create_user(payload, actor=self.user())

    @route.get("/users/{uuid:user_id}", response=schema.EventHubUserSchema, url_name="admin_get_user")
    def get_user(self, user_id: UUID) -> EventHubUser:
        return self.get_user_or_404(user_id)

    @route.put("/users/{uuid:user_id}", response=schema.EventHubUserSchema, url_name="admin_update_user")
    def update_user(self, user_id: UUID, payload: schema.AdminUserUpdateSchema) -> EventHubUser:
        """Update account fields, roles and the organizer profile."""
        return admin_service.update_user(self.get_user_or_404(user_id), payload, actor=self.user())

    @route.delete("/users/{uuid:user_id}", response={204: None}, url_name="admin_delete_user")
    def delete_user(self, user_id: UUID) -> tuple[int, None]:
        admin_service.delete_user(self.get_user_or_404(user_id), actor=self.user())
        return 204, None

    @route.put("/users/{uuid:user_id}/status", response=schema.EventHubUserSchema, url_name="admin_change_user_status")
    def change_status(self, user_id: UUID, payload: schema.AdminUserStatusSchema) -> EventHubUser:
        """Activate, deactivate or suspend an account. The user is notified."""
        return admin_service.change_status(
            self.get_user_or_404(user_id), payload.status, actor=self.user(), reason=payload.reason
        )

    @route.post("/users/{uuid:user_id}/reset-password", response=ResponseMessage, url_name="admin_reset_password")
    def reset_password(self, user_id: UUID) -> ResponseMessage:
        """Email the user a temporary password."""
        admin_service.reset_password(self.get_user_or_404(user_id), actor=self.user())
        return ResponseMessage(message=str(_("A temporary password has been sent.")))

    @route.get("/stats", response=schema.AdminUserStatsSchema, url_name="admin_user_stats")
    def stats(self) -> schema.AdminUserStatsSchema:
        """User counts by status and role."""
        return admin_service.user_stats()
