from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BootstrapMarker",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "saga",
                    models.CharField(
                        default="bootstrap",
                        help_text="Replacement saga this marker brackets.",
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "reason",
                    models.CharField(
                        help_text="What started the replacement (bootstrap/resync/recovery).",
                        max_length=32,
                    ),
                ),
                (
                    "tables",
                    models.JSONField(
                        default=dict,
                        help_text="Record counts per table fetched from the replica.",
                    ),
                ),
                (
                    "started_at",
                    models.DateTimeField(auto_now=True, help_text="When this marker was last written."),
                ),
            ],
            options={
                "db_table": "hs_bootstrap_marker",
            },
        ),
    ]
