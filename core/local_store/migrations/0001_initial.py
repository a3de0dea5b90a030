from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LocalRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "table",
                    models.CharField(
                        choices=[
                            ("rooms", "Rooms"),
                            ("guests", "Guests"),
                            ("bookings", "Bookings"),
                            ("transactions", "Transactions"),
                            ("groups", "Groups"),
                        ],
                        help_text="Logical table this record belongs to.",
                        max_length=32,
                    ),
                ),
                ("record_id", models.CharField(help_text="Entity id, unique within its table.", max_length=255)),
                ("data", models.JSONField(help_text="Entity dict form (snake_case keys, minor-unit amounts).")),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "hs_local_records",
                "ordering": ["id"],
                "indexes": [models.Index(fields=["table"], name="idx_local_table")],
                "constraints": [
                    models.UniqueConstraint(fields=("table", "record_id"), name="uq_local_table_record"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SettingsRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("singleton", models.BooleanField(default=True, editable=False)),
                ("data", models.JSONField(help_text="HotelSettings dict form.")),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "hs_local_settings",
                "constraints": [
                    models.UniqueConstraint(fields=("singleton",), name="uq_settings_singleton"),
                ],
            },
        ),
    ]
