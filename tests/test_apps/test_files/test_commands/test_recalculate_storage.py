"""Tests for recalculate_storage management command."""

from io import StringIO

import pytest
from django.core.management import call_command

from cloudvault.apps.files.models import File, StorageAccount


@pytest.mark.django_db
class TestRecalculateStorageCommand:
    """Tests for recalculate_storage management command."""

    def _add_file(self, user, size):
        File.objects.create(
            user=user,
            name='f.txt',
            storage_key=f'user-files/{user.id}/f.txt_{size}',
            size_bytes=size,
            mime_type='text/plain',
            checksum_sha256='a' * 64,
        )

    def test_fixes_drifted_accounts(self, user, other_user):
        """Test drifted usage is rebuilt from file sizes."""
        self._add_file(user, 300)
        StorageAccount.objects.filter(user=user).update(storage_used=999)
        self._add_file(other_user, 50)
        StorageAccount.objects.filter(user=other_user).update(storage_used=50)

        out = StringIO()
        call_command('recalculate_storage', stdout=out)

        assert StorageAccount.objects.get(user=user).storage_used == 300
        assert StorageAccount.objects.get(user=other_user).storage_used == 50
        assert 'Fixed 1 accounts, 0 failed' in out.getvalue()

    def test_dry_run(self, user):
        """Test dry run reports without changing anything."""
        self._add_file(user, 300)

        out = StringIO()
        call_command('recalculate_storage', '--dry-run', stdout=out)

        assert StorageAccount.objects.get(user=user).storage_used == 0
        assert 'Would fix testuser: 0 -> 300 bytes' in out.getvalue()
        assert 'Would fix 1 accounts' in out.getvalue()
