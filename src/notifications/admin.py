from django.contrib import admin
from unfold.admin import ModelAdmin

from notifications.models import Notification


@admin.register(Notification)
class NotificationAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["notification_type", "user", "event", "created_at", "read_at"]
    list_filter = ["notification_type", "read_at"]
    search_fields = ["message", "user__email"]
    raw_id_fields = ["user", "event"]
    readonly_fields = ["created_at", "updated_at"]
