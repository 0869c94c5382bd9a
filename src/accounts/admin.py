"""Admin interface for accounts app."""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from unfold.admin import ModelAdmin

from accounts.models import EventHubUser


@admin.register(EventHubUser)
class EventHubUserAdmin(UserAdmin, ModelAdmin):  # type: ignore[misc]
    list_display = ["username", "email", "status", "roles", "email_verified", "date_joined"]
    list_filter = ["status", "email_verified", "is_staff", "is_superuser"]
    search_fields = ["username", "email", "first_name", "last_name"]
    ordering = ["-date_joined"]
    fieldsets = (
        *UserAdmin.fieldsets,  # type: ignore[misc]
        (
            "EventHub",
            {"fields": ("roles", "status", "email_verified", "avatar_url", "language")},
        ),
        ("Profiles", {"fields": ("participant_profile", "organizer_profile")}),
    )
