"""Role based permissions for controllers."""

from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _
from ninja_extra import ControllerBase
from ninja_extra.permissions import BasePermission

from accounts.models import EventHubUser


class HasRole(BasePermission):
    """Grant access to authenticated users holding `role`."""

    role: str = ""
    message = _("You do not have the required role for this action.")

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        user = request.user
        if not user.is_authenticated:
            return False
        return isinstance(user, EventHubUser) and user.has_role(self.role)


class IsOrganizer(HasRole):
    role = EventHubUser.Role.ORGANIZER
    message = _("Only organizers can perform this action.")


class IsAdmin(BasePermission):
    """Administrators: ADMIN role or Django superusers."""

    message = _("Only administrators can perform this action.")

    def has_permission(self, request: HttpRequest, controller: ControllerBase) -> bool:
        user = request.user
        return user.is_authenticated and isinstance(user, EventHubUser) and user.is_admin
