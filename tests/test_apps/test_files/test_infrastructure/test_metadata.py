"""Tests for metadata utilities."""

import hashlib

import pytest

from cloudvault.apps.files.exceptions import InvalidArgumentError
from cloudvault.apps.files.infrastructure.metadata import (
    build_placeholder_key,
    build_storage_key,
    build_thumbnail_key,
    calculate_checksum,
    classify_mime_type,
    extract_image_details,
    get_file_extension,
    normalize_file_types,
    sanitize_file_name,
    sniff_mime_type,
    validate_storage_key,
)


class TestSniffMimeType:
    """Tests for content and extension based MIME detection."""

    @pytest.mark.parametrize(('payload', 'expected'), [
        (b'\xff\xd8\xff\xe0rest', 'image/jpeg'),
        (b'\x89PNG\r\n\x1a\n', 'image/png'),
        (b'GIF89a', 'image/gif'),
        (b'RIFF\x00\x00\x00\x00WEBP', 'image/webp'),
    ])
    def test_magic_numbers(self, payload, expected):
        """Test signatures are recognized regardless of filename."""
        assert sniff_mime_type(payload, 'unnamed') == expected

    def test_magic_number_wins_over_extension(self):
        """Test a JPEG named .txt is still a JPEG."""
        assert sniff_mime_type(b'\xff\xd8data', 'notes.txt') == 'image/jpeg'

    def test_extension_table(self):
        """Test extension fallback for content without a signature."""
        assert sniff_mime_type(b'%PDF-1.7', 'report.PDF') == 'application/pdf'
        assert sniff_mime_type(b'', 'archive.rar') == (
            'application/x-rar-compressed'
        )
        assert sniff_mime_type(b'abc', 'song.mp3') == 'audio/mpeg'

    def test_mimetypes_registry_fallback(self):
        """Test extensions outside the table use the mimetypes registry."""
        assert sniff_mime_type(b'a,b', 'data.csv') == 'text/csv'

    def test_unknown(self):
        """Test unknown content and extension."""
        assert sniff_mime_type(b'\x00\x01', 'blob.unknownext') == (
            'application/octet-stream'
        )


def test_classify_mime_type():
    """Test MIME types map onto folder file-type classes."""
    assert classify_mime_type('image/png') == 'images'
    assert classify_mime_type('video/mp4') == 'videos'
    assert classify_mime_type('audio/wav') == 'audio'
    assert classify_mime_type('application/zip') == 'archives'
    assert classify_mime_type('text/csv') == 'data'
    assert classify_mime_type('text/x-python') == 'code'
    assert classify_mime_type('application/pdf') == 'documents'


class TestNormalizeFileTypes:
    """Tests for folder file-type validation."""

    def test_empty_means_all(self):
        """Test empty and missing lists become the wildcard."""
        assert normalize_file_types([]) == ['all']
        assert normalize_file_types(None) == ['all']

    def test_wildcard_absorbs_others(self):
        """Test 'all' alongside other classes collapses to 'all'."""
        assert normalize_file_types(['images', 'all']) == ['all']

    def test_deduplicates(self):
        """Test classes are de-duplicated and sorted."""
        assert normalize_file_types(['images', 'audio', 'images']) == [
            'audio',
            'images',
        ]

    def test_unknown_class(self):
        """Test unknown classes are rejected."""
        with pytest.raises(InvalidArgumentError, match='spreadsheets'):
            normalize_file_types(['images', 'spreadsheets'])


def test_calculate_checksum():
    """Test SHA256 checksum calculation."""
    checksum = calculate_checksum(b'test content')

    # Should be 64 character hex string
    assert len(checksum) == 64
    assert checksum == hashlib.sha256(b'test content').hexdigest()
    assert calculate_checksum(b'test content') == checksum


def test_calculate_checksum_spans_chunks():
    """Test payloads longer than one chunk hash like one update."""
    payload = b'x' * 20000
    assert calculate_checksum(payload) == hashlib.sha256(payload).hexdigest()
    assert calculate_checksum(payload) != calculate_checksum(payload[:-1])


def test_sanitize_file_name():
    """Test unsafe characters are replaced in storage keys."""
    assert sanitize_file_name('my report (v2).pdf') == 'my_report__v2_.pdf'
    assert sanitize_file_name('résumé.doc') == 'r_sum_.doc'


def test_build_keys():
    """Test derived blob keys."""
    assert build_storage_key(7, 'a b.txt', 'abc') == 'user-files/7/a_b.txt_abc'
    assert build_placeholder_key(7, 'My.Docs', 'f1') == (
        'user-files/7/folders/My_Docs_f1/.folder_placeholder'
    )
    assert build_thumbnail_key('f2') == 'thumbnails/f2.jpg'


class TestValidateStorageKey:
    """Tests for per-user key isolation."""

    def test_valid(self):
        """Test key under the user's prefix."""
        validate_storage_key(3, 'user-files/3/file.txt_x')

    def test_wrong_user(self):
        """Test key under another user's prefix."""
        with pytest.raises(InvalidArgumentError, match='does not match owner'):
            validate_storage_key(3, 'user-files/4/file.txt_x')

    def test_wrong_root(self):
        """Test key outside the storage root."""
        with pytest.raises(InvalidArgumentError, match='must start with'):
            validate_storage_key(3, 'thumbnails/3/file.jpg')

    def test_empty(self):
        """Test empty key."""
        with pytest.raises(InvalidArgumentError, match='cannot be empty'):
            validate_storage_key(3, '')


def test_get_file_extension():
    """Test file extension extraction."""
    assert get_file_extension('test.pdf') == 'pdf'
    assert get_file_extension('test.TXT') == 'txt'  # Lowercase
    assert get_file_extension('test') == ''  # No extension
    assert get_file_extension('test.tar.gz') == 'gz'  # Last extension


class TestExtractImageDetails:
    """Tests for dimensions and thumbnails."""

    def test_real_image(self, png_bytes):
        """Test dimensions are read and the thumbnail fits the box."""
        details = extract_image_details(png_bytes, (300, 300), 80)

        assert details is not None
        assert (details.width, details.height) == (640, 480)
        assert details.thumbnail.startswith(b'\xff\xd8')

    def test_garbage(self):
        """Test undecodable data yields None instead of raising."""
        assert extract_image_details(b'\x89PNG broken', (300, 300), 80) is None
