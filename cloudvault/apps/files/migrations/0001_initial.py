import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import cloudvault.apps.files.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='StorageAccount',
            fields=[
                ('user', models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    primary_key=True,
                    related_name='storage_account',
                    serialize=False,
                    to=settings.AUTH_USER_MODEL,
                )),
                ('storage_limit', models.BigIntegerField(
                    default=cloudvault.apps.files.models.default_storage_limit,
                    help_text='Storage limit in bytes',
                )),
                ('storage_used', models.BigIntegerField(
                    default=0,
                    help_text='Currently used storage in bytes',
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Storage Account',
                'verbose_name_plural': 'Storage Accounts',
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(storage_limit__gte=0),
                        name='storage_limit_non_negative',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(storage_used__gte=0),
                        name='storage_used_non_negative',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='Folder',
            fields=[
                ('id', models.UUIDField(
                    default=uuid.uuid4,
                    editable=False,
                    primary_key=True,
                    serialize=False,
                )),
                ('name', models.CharField(max_length=255)),
                ('allowed_file_types', models.JSONField(
                    default=cloudvault.apps.files.models.default_allowed_file_types,
                    help_text='File-type classes accepted on upload, or ["all"]',
                )),
                ('confidentiality', models.CharField(
                    choices=[
                        ('public', 'Public'),
                        ('internal', 'Internal'),
                        ('confidential', 'Confidential'),
                        ('restricted', 'Restricted'),
                    ],
                    default='internal',
                    max_length=16,
                )),
                ('importance', models.CharField(
                    choices=[
                        ('low', 'Low'),
                        ('medium', 'Medium'),
                        ('high', 'High'),
                        ('critical', 'Critical'),
                    ],
                    default='medium',
                    max_length=16,
                )),
                ('allow_sharing', models.BooleanField(default=True)),
                ('placeholder_key', models.CharField(
                    blank=True,
                    default='',
                    help_text='Zero-content marker making the folder visible in blob listings',
                    max_length=1024,
                )),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('parent', models.ForeignKey(
                    blank=True,
                    db_constraint=False,
                    help_text='Null for root-level folders',
                    null=True,
                    on_delete=django.db.models.deletion.DO_NOTHING,
                    related_name='children',
                    to='files.folder',
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='folders',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Folder',
                'verbose_name_plural': 'Folders',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(
                        fields=['user', 'parent', '-created_at'],
                        name='folders_user_parent_idx',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='File',
            fields=[
                ('id', models.UUIDField(
                    default=uuid.uuid4,
                    editable=False,
                    primary_key=True,
                    serialize=False,
                )),
                ('name', models.CharField(max_length=255)),
                ('storage_key', models.CharField(
                    help_text='Blob key: user-files/{user_id}/{sanitized_name}_{id}',
                    max_length=1024,
                    unique=True,
                )),
                ('size_bytes', models.BigIntegerField(
                    help_text='File size in bytes',
                )),
                ('mime_type', models.CharField(
                    help_text='MIME type detected from magic numbers or extension',
                    max_length=255,
                )),
                ('checksum_sha256', models.CharField(
                    db_index=True,
                    help_text='SHA256 hash for integrity verification',
                    max_length=64,
                )),
                ('tags', models.JSONField(blank=True, default=list)),
                ('confidentiality', models.CharField(
                    choices=[
                        ('public', 'Public'),
                        ('internal', 'Internal'),
                        ('confidential', 'Confidential'),
                        ('restricted', 'Restricted'),
                    ],
                    default='internal',
                    max_length=16,
                )),
                ('importance', models.CharField(
                    choices=[
                        ('low', 'Low'),
                        ('medium', 'Medium'),
                        ('high', 'High'),
                        ('critical', 'Critical'),
                    ],
                    default='medium',
                    max_length=16,
                )),
                ('allow_sharing', models.BooleanField(default=True)),
                ('download_count', models.PositiveIntegerField(
                    default=0,
                    help_text='Byte downloads by the owner and through share links',
                )),
                ('last_accessed', models.DateTimeField(blank=True, null=True)),
                ('width', models.PositiveIntegerField(blank=True, null=True)),
                ('height', models.PositiveIntegerField(blank=True, null=True)),
                ('thumbnail_key', models.CharField(
                    blank=True,
                    default='',
                    max_length=1024,
                )),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('folder', models.ForeignKey(
                    blank=True,
                    db_constraint=False,
                    help_text='Null for files at the root',
                    null=True,
                    on_delete=django.db.models.deletion.DO_NOTHING,
                    related_name='files',
                    to='files.folder',
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='files',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(
                        fields=['user', 'folder', '-created_at'],
                        name='files_user_folder_idx',
                    ),
                ],
            },
        ),
    ]
