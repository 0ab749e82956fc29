from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PendingSecret",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "token",
                    models.CharField(
                        help_text="Request token issued by the provider.",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "secret",
                    models.CharField(
                        help_text="Secret issued alongside the request token.",
                        max_length=255,
                    ),
                ),
                (
                    "created",
                    models.DateTimeField(
                        db_index=True, default=django.utils.timezone.now
                    ),
                ),
            ],
            options={
                "verbose_name": "pending secret",
                "verbose_name_plural": "pending secrets",
            },
        ),
    ]
