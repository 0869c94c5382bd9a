import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Event",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("title", models.CharField(db_index=True, max_length=100)),
                ("description", models.TextField(max_length=5000)),
                ("short_description", models.CharField(blank=True, default="", max_length=200)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("CONCERT", "Concert"),
                            ("FESTIVAL", "Festival"),
                            ("WORKSHOP", "Workshop"),
                            ("CONFERENCE", "Conference"),
                            ("PARTY", "Party"),
                            ("EXHIBITION", "Exhibition"),
                            ("SPORT_EVENT", "Sport event"),
                            ("CHARITY", "Charity"),
                            ("OTHER", "Other"),
                        ],
                        db_index=True,
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("DRAFT", "Draft"), ("PUBLISHED", "Published"), ("CANCELLED", "Cancelled")],
                        db_index=True,
                        default="DRAFT",
                        max_length=10,
                    ),
                ),
                (
                    "visibility",
                    models.CharField(
                        choices=[("PUBLIC", "Public"), ("PRIVATE", "Private"), ("UNLISTED", "Unlisted")],
                        default="PUBLIC",
                        max_length=10,
                    ),
                ),
                ("start", models.DateTimeField(db_index=True)),
                ("end", models.DateTimeField()),
                ("doors_open", models.DateTimeField(blank=True, null=True)),
                ("location_name", models.CharField(max_length=255)),
                ("address", models.CharField(max_length=255)),
                ("city", models.CharField(db_index=True, max_length=100)),
                ("country", models.CharField(default="Romania", max_length=100)),
                (
                    "latitude",
                    models.FloatField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(-90),
                            django.core.validators.MaxValueValidator(90),
                        ],
                    ),
                ),
                (
                    "longitude",
                    models.FloatField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(-180),
                            django.core.validators.MaxValueValidator(180),
                        ],
                    ),
                ),
                ("is_free", models.BooleanField(default=False)),
                (
                    "capacity",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Leave empty for unlimited.",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("current_attendees", models.PositiveIntegerField(default=0, editable=False)),
                (
                    "requires_approval",
                    models.BooleanField(
                        default=True,
                        help_text=(
                            "New registrations wait for the organizer's confirmation. "
                            "If off, they are confirmed right away."
                        ),
                    ),
                ),
                ("cover_image_url", models.URLField(blank=True, default="")),
                ("tags", models.JSONField(blank=True, default=list)),
                (
                    "organizer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="organized_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["start"],
                "indexes": [
                    models.Index(fields=["status", "visibility", "start"], name="idx_status_visibility_start"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            ("capacity__isnull", True),
                            ("current_attendees__lte", models.F("capacity")),
                            _connector="OR",
                        ),
                        name="event_attendees_within_capacity",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TicketType",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("name", models.CharField(max_length=100)),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        choices=[("RON", "RON"), ("EUR", "EUR"), ("USD", "USD")], default="RON", max_length=3
                    ),
                ),
                (
                    "available_quantity",
                    models.PositiveIntegerField(
                        blank=True, help_text="Tickets left for sale. Leave empty if not tracked.", null=True
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="ticket_types", to="events.event"
                    ),
                ),
            ],
            options={
                "ordering": ["price", "name"],
                "constraints": [
                    models.UniqueConstraint(fields=("event", "name"), name="unique_ticket_type_name_per_event"),
                    models.CheckConstraint(condition=models.Q(("price__gte", 0)), name="ticket_type_price_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Registration",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                (
                    "quantity",
                    models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)]),
                ),
                ("total_price", models.DecimalField(decimal_places=2, max_digits=12)),
                (
                    "currency",
                    models.CharField(choices=[("RON", "RON"), ("EUR", "EUR"), ("USD", "USD")], max_length=3),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("CONFIRMED", "Confirmed"), ("CANCELLED", "Cancelled")],
                        db_index=True,
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[("UNPAID", "Unpaid"), ("PAID", "Paid")],
                        db_index=True,
                        default="UNPAID",
                        max_length=10,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        blank=True, choices=[("CARD", "Card"), ("FREE", "Free")], max_length=10, null=True
                    ),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("check_in_code", models.CharField(blank=True, db_index=True, default="", max_length=12)),
                ("checked_in_at", models.DateTimeField(blank=True, null=True)),
                ("additional_notes", models.TextField(blank=True, default="", max_length=500)),
                (
                    "attendee",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE, related_name="registrations", to="events.event"
                    ),
                ),
                (
                    "ticket_type",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="registrations",
                        to="events.tickettype",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("status", "CANCELLED"), _negated=True),
                        fields=("event", "attendee"),
                        name="unique_active_registration_per_attendee",
                    ),
                ],
            },
        ),
    ]
