from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html
from unfold.admin import ModelAdmin, TabularInline

from events import models


class TicketTypeInline(TabularInline):  # type: ignore[misc]
    model = models.TicketType
    extra = 0
    fields = ["name", "price", "currency", "available_quantity"]


@admin.register(models.Event)
class EventAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = [
        "title",
        "organizer_link",
        "category",
        "status",
        "visibility",
        "start",
        "city",
        "current_attendees",
        "capacity",
        "is_free",
    ]
    list_filter = ["status", "category", "visibility", "is_free", "requires_approval", "start"]
    search_fields = ["title", "description", "city", "organizer__email"]
    raw_id_fields = ["organizer"]
    readonly_fields = ["current_attendees", "created_at", "updated_at"]
    list_select_related = ["organizer"]
    date_hierarchy = "start"
    inlines = [TicketTypeInline]

    def organizer_link(self, obj: models.Event) -> str:
        url = reverse("admin:accounts_eventhubuser_change", args=[obj.organizer_id])
        return format_html('<a href="{}">{}</a>', url, obj.organizer.email)

    organizer_link.short_description = "Organizer"  # type: ignore[attr-defined]


@admin.register(models.Registration)
class RegistrationAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = [
        "attendee",
        "event",
        "ticket_type",
        "quantity",
        "status",
        "payment_status",
        "payment_method",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "payment_method"]
    search_fields = ["attendee__email", "event__title", "check_in_code"]
    raw_id_fields = ["attendee", "event", "ticket_type"]
    readonly_fields = ["check_in_code", "checked_in_at", "paid_at", "created_at", "updated_at"]
