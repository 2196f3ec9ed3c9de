import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AnalyticsEvent',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID',
                )),
                ('event_type', models.CharField(
                    choices=[
                        ('file_upload', 'File upload'),
                        ('file_download', 'File download'),
                        ('file_share', 'File share'),
                        ('folder_create', 'Folder create'),
                        ('storage_usage', 'Storage usage'),
                    ],
                    max_length=32,
                )),
                ('event_data', models.JSONField(blank=True, default=dict)),
                ('timestamp', models.DateTimeField(
                    db_index=True,
                    default=django.utils.timezone.now,
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='analytics_events',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Analytics Event',
                'verbose_name_plural': 'Analytics Events',
                'ordering': ['-timestamp', '-id'],
                'indexes': [
                    models.Index(
                        fields=['user', '-timestamp'],
                        name='analytics_user_recent_idx',
                    ),
                ],
            },
        ),
    ]
