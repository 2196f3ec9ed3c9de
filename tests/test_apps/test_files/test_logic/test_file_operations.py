"""Tests for file operations business logic."""

from io import BytesIO

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from cloudvault.apps.analytics.models import AnalyticsEvent
from cloudvault.apps.files.exceptions import (
    DependencyUnavailableError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    QuotaExceededError,
)
from cloudvault.apps.files.infrastructure.storage import BlobStorage
from cloudvault.apps.files.logic import quota_operations
from cloudvault.apps.files.logic.file_operations import (
    delete_file,
    download_file,
    get_file,
    list_files,
    upload_file,
)
from cloudvault.apps.files.models import File, Folder, StorageAccount


def _usage(user):
    return StorageAccount.objects.get(user=user).storage_used


@pytest.mark.django_db
class TestUploadFile:
    """Tests for upload_file."""

    def test_upload_success(self, user, mock_s3, bucket_keys):
        """Test successful file upload (S3 + DB)."""
        result = upload_file(user, b'test file content', 'test.txt')
        file_instance = result.file

        assert result.quota_note is None
        assert file_instance.user == user
        assert file_instance.name == 'test.txt'
        assert file_instance.size_bytes == 17
        assert file_instance.mime_type == 'text/plain'
        assert len(file_instance.checksum_sha256) == 64
        assert file_instance.download_count == 0
        assert file_instance.storage_key == (
            f'user-files/{user.id}/test.txt_{file_instance.id}'
        )
        assert bucket_keys() == {file_instance.storage_key}
        assert _usage(user) == 17

    def test_upload_accepts_file_objects(self, user, mock_s3):
        """Test uploads from Django uploaded files and plain streams."""
        uploaded = SimpleUploadedFile('a.txt', b'abc', content_type='text/plain')

        first = upload_file(user, uploaded, 'a.txt').file
        second = upload_file(user, BytesIO(b'defg'), 'b.txt').file

        assert (first.size_bytes, second.size_bytes) == (3, 4)
        assert _usage(user) == 7

    def test_upload_records_event(self, user, mock_s3):
        """Test a file_upload event carries size and storage figures."""
        upload_file(user, b'12345', 'five.txt')

        event = AnalyticsEvent.objects.get(user=user, event_type='file_upload')
        assert event.event_data['fileName'] == 'five.txt'
        assert event.event_data['fileSize'] == 5
        assert event.event_data['fileType'] == 'text/plain'
        assert event.event_data['storageUsed'] == 5
        assert event.event_data['storageLimit'] == 15728640

    def test_upload_without_tracking(self, user, mock_s3, settings):
        """Test event tracking can be switched off."""
        settings.CLOUDVAULT_TRACK_EVENTS = False

        upload_file(user, b'12345', 'five.txt')

        assert not AnalyticsEvent.objects.exists()

    def test_upload_image_gets_thumbnail(self, user, mock_s3, bucket_keys, png_bytes):
        """Test images get dimensions and a stored thumbnail."""
        file_instance = upload_file(user, png_bytes, 'photo.png').file

        assert file_instance.mime_type == 'image/png'
        assert (file_instance.width, file_instance.height) == (640, 480)
        assert file_instance.thumbnail_key == f'thumbnails/{file_instance.id}.jpg'
        assert file_instance.thumbnail_key in bucket_keys()

    def test_broken_image_still_uploads(self, user, mock_s3, bucket_keys):
        """Test failed enrichment only omits the image fields."""
        file_instance = upload_file(user, b'\x89PNG-not-really', 'x.png').file

        assert file_instance.mime_type == 'image/png'
        assert file_instance.width is None
        assert file_instance.thumbnail_key == ''
        assert bucket_keys() == {file_instance.storage_key}

    def test_declared_type_used_as_last_resort(self, user, mock_s3):
        """Test the client's type applies only when sniffing fails."""
        unknown = upload_file(
            user,
            b'\x00\x01',
            'blob.unknownext',
            declared_mime_type='application/x-custom',
        ).file
        known = upload_file(
            user,
            b'%PDF',
            'doc.pdf',
            declared_mime_type='text/plain',
        ).file

        assert unknown.mime_type == 'application/x-custom'
        assert known.mime_type == 'application/pdf'

    def test_upload_into_folder(self, user, mock_s3):
        """Test uploads land in the requested folder."""
        folder = Folder.objects.create(user=user, name='Docs')

        file_instance = upload_file(user, b'x', 'a.txt', folder_id=folder.id).file

        assert file_instance.folder_id == folder.id

    def test_folder_type_restriction(self, user, mock_s3, bucket_keys):
        """Test folders reject file classes they do not allow."""
        folder = Folder.objects.create(
            user=user,
            name='Pics',
            allowed_file_types=['images'],
        )

        with pytest.raises(InvalidArgumentError, match='documents'):
            upload_file(user, b'%PDF', 'doc.pdf', folder_id=folder.id)

        assert File.objects.count() == 0
        assert bucket_keys() == set()

    def test_foreign_folder(self, user, other_user, mock_s3):
        """Test uploading into another user's folder fails NotFound."""
        folder = Folder.objects.create(user=other_user, name='Theirs')

        with pytest.raises(NotFoundError):
            upload_file(user, b'x', 'a.txt', folder_id=folder.id)

    def test_tags_and_classification(self, user, mock_s3):
        """Test tags are cleaned and classification stored."""
        file_instance = upload_file(
            user,
            b'x',
            'a.txt',
            tags=[' work ', 'work', '', 'q3'],
            confidentiality='restricted',
            importance='critical',
            allow_sharing=False,
        ).file

        assert file_instance.tags == ['work', 'q3']
        assert file_instance.confidentiality == 'restricted'
        assert file_instance.importance == 'critical'
        assert not file_instance.allow_sharing

    @pytest.mark.parametrize(('kwargs', 'match'), [
        ({'file_name': '  '}, 'name cannot be empty'),
        ({'file_name': 'a\r\nX-Injected: 1.txt'}, 'control characters'),
        ({'file_name': 'tab\there.txt'}, 'control characters'),
        ({'confidentiality': 'secret'}, 'confidentiality'),
        ({'importance': 'urgent'}, 'importance'),
    ])
    def test_invalid_arguments(self, user, mock_s3, kwargs, match):
        """Test invalid input is rejected before anything is stored."""
        arguments = {'file_name': 'a.txt', **kwargs}

        with pytest.raises(InvalidArgumentError, match=match):
            upload_file(user, b'x', **arguments)

        assert File.objects.count() == 0

    def test_advisory_quota_note(self, user, mock_s3):
        """Test an upload past the limit succeeds with a note."""
        StorageAccount.objects.filter(user=user).update(storage_limit=10)

        result = upload_file(user, b'x' * 25, 'big.txt')

        assert result.quota_note == 'Storage limit exceeded: 25 of 10 bytes used'
        assert _usage(user) == 25

    def test_enforced_quota(self, user, mock_s3, bucket_keys, settings):
        """Test an enforced quota stops the upload before any write."""
        settings.CLOUDVAULT_ENFORCE_QUOTA = True
        StorageAccount.objects.filter(user=user).update(storage_limit=10)

        with pytest.raises(QuotaExceededError):
            upload_file(user, b'x' * 25, 'big.txt')

        assert bucket_keys() == set()
        assert File.objects.count() == 0

    def test_progress_callback(self, user, mock_s3):
        """Test progress is reported against the payload size."""
        events = []

        upload_file(
            user,
            b'p' * 1000,
            'p.txt',
            progress_callback=lambda done, total: events.append((done, total)),
        )

        assert events
        assert {total for _, total in events} == {1000}
        assert max(done for done, _ in events) == 1000

    def test_failing_progress_callback_is_ignored(self, user, mock_s3):
        """Test a broken observer does not abort the upload."""
        def _broken(done, total):
            raise RuntimeError('render failed')

        result = upload_file(user, b'abc', 'a.txt', progress_callback=_broken)

        assert File.objects.filter(pk=result.file.pk).exists()

    def test_blob_failure_leaves_no_record(self, user, mock_s3, monkeypatch):
        """Test an interrupted transfer aborts cleanly."""
        def _fail(self, name, content, max_length=None):
            raise ConnectionError('connection reset')

        monkeypatch.setattr(BlobStorage, 'save', _fail)

        with pytest.raises(DependencyUnavailableError, match='connection reset'):
            upload_file(user, b'abc', 'a.txt')

        assert File.objects.count() == 0
        assert _usage(user) == 0

    def test_metadata_failure_rolls_back_blob(
        self,
        user,
        mock_s3,
        bucket_keys,
        monkeypatch,
    ):
        """Test the blob is deleted when the record cannot be written."""
        def _fail(user, size_bytes):
            raise RuntimeError('database unavailable')

        monkeypatch.setattr(quota_operations, 'increment_usage', _fail)

        with pytest.raises(RuntimeError):
            upload_file(user, b'abc', 'a.txt')

        assert File.objects.count() == 0
        assert bucket_keys() == set()


@pytest.mark.django_db
class TestDownloadFile:
    """Tests for download_file."""

    def test_download(self, user, mock_s3):
        """Test bytes are returned and the counter moves."""
        stored = upload_file(user, b'payload', 'a.txt').file

        result = download_file(user, stored.id)

        assert result.content == b'payload'
        assert result.file.download_count == 1
        assert result.file.last_accessed is not None
        assert AnalyticsEvent.objects.filter(
            user=user,
            event_type='file_download',
            event_data__fileName='a.txt',
        ).exists()

    def test_counter_accumulates(self, user, mock_s3):
        """Test repeated downloads are all counted."""
        stored = upload_file(user, b'payload', 'a.txt').file

        download_file(user, stored.id)
        download_file(user, stored.id)

        stored.refresh_from_db()
        assert stored.download_count == 2

    def test_foreign_file(self, user, other_user, mock_s3):
        """Test another user's file is invisible."""
        stored = upload_file(other_user, b'secret', 'a.txt').file

        with pytest.raises(NotFoundError):
            download_file(user, stored.id)

    def test_missing_blob(self, user, mock_s3):
        """Test a record whose blob vanished reports the dependency."""
        stored = upload_file(user, b'payload', 'a.txt').file
        mock_s3.Object('cloudvault', stored.storage_key).delete()

        with pytest.raises(DependencyUnavailableError):
            download_file(user, stored.id)

        stored.refresh_from_db()
        assert stored.download_count == 0


@pytest.mark.django_db
class TestDeleteFile:
    """Tests for delete_file."""

    def test_delete(self, user, mock_s3, bucket_keys, png_bytes):
        """Test blob, thumbnail and record go and usage is released."""
        stored = upload_file(user, png_bytes, 'photo.png').file

        delete_file(user, stored.id)

        assert not File.objects.filter(pk=stored.pk).exists()
        assert bucket_keys() == set()
        assert _usage(user) == 0

    def test_delete_missing(self, user):
        """Test deleting a non-existent file."""
        with pytest.raises(NotFoundError):
            delete_file(user, '00000000-0000-0000-0000-000000000000')

    def test_delete_malformed_id(self, user):
        """Test malformed identifiers are reported as not found."""
        with pytest.raises(NotFoundError):
            delete_file(user, 'not-a-uuid')

    def test_delete_foreign_file(self, user, other_user, mock_s3):
        """Test another user's file cannot be deleted."""
        stored = upload_file(other_user, b'secret', 'a.txt').file

        with pytest.raises(ForbiddenError):
            delete_file(user, stored.id)

        assert File.objects.filter(pk=stored.pk).exists()

    def test_blob_failure_keeps_record(self, user, mock_s3, monkeypatch):
        """Test the record survives when its blob cannot be deleted."""
        stored = upload_file(user, b'abc', 'a.txt').file

        def _fail(self, name):
            raise ConnectionError('storage down')

        monkeypatch.setattr(BlobStorage, 'delete', _fail)

        with pytest.raises(DependencyUnavailableError):
            delete_file(user, stored.id)

        assert File.objects.filter(pk=stored.pk).exists()
        assert _usage(user) == 3


@pytest.mark.django_db
class TestListAndGet:
    """Tests for list_files and get_file."""

    def test_list_most_recent_first(self, user, other_user, mock_s3):
        """Test ordering and user isolation."""
        first = upload_file(user, b'1', 'first.txt').file
        second = upload_file(user, b'2', 'second.txt').file
        upload_file(other_user, b'3', 'theirs.txt')

        assert [item.pk for item in list_files(user)] == [second.pk, first.pk]

    def test_list_by_folder(self, user, mock_s3):
        """Test the folder filter."""
        folder = Folder.objects.create(user=user, name='Docs')
        inside = upload_file(user, b'1', 'in.txt', folder_id=folder.id).file
        upload_file(user, b'2', 'out.txt')

        assert [item.pk for item in list_files(user, folder.id)] == [inside.pk]

    def test_list_empty(self, user):
        """Test an empty listing is not an error."""
        assert list_files(user) == []

    def test_get_file(self, user, other_user, mock_s3):
        """Test get_file returns own files only."""
        stored = upload_file(user, b'1', 'a.txt').file

        assert get_file(user, stored.id) == stored
        with pytest.raises(NotFoundError):
            get_file(other_user, stored.id)
