from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("accounts", "0001_initial"),
        ("events", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="eventhubuser",
            name="saved_events",
            field=models.ManyToManyField(blank=True, related_name="saved_by", to="events.event"),
        ),
    ]
