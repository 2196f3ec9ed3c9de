"""Metadata extraction utilities for files."""

import hashlib
import io
import logging
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from PIL import Image, UnidentifiedImageError

from cloudvault.apps.files.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

_FALLBACK_MIME_TYPE: Final = 'application/octet-stream'

# Magic-number prefixes, checked in order
_SIGNATURES: Final = (
    (b'\xff\xd8', 'image/jpeg'),
    (b'\x89PNG', 'image/png'),
    (b'GIF', 'image/gif'),
    (b'RIFF', 'image/webp'),
)

_EXTENSION_MIME_TYPES: Final = {
    'pdf': 'application/pdf',
    'doc': 'application/msword',
    'docx': (
        'application/vnd.openxmlformats-officedocument'
        '.wordprocessingml.document'
    ),
    'xls': 'application/vnd.ms-excel',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'ppt': 'application/vnd.ms-powerpoint',
    'pptx': (
        'application/vnd.openxmlformats-officedocument'
        '.presentationml.presentation'
    ),
    'txt': 'text/plain',
    'mp4': 'video/mp4',
    'avi': 'video/x-msvideo',
    'mov': 'video/quicktime',
    'mp3': 'audio/mpeg',
    'wav': 'audio/wav',
    'zip': 'application/zip',
    'rar': 'application/x-rar-compressed',
}

# File-type classes a folder can restrict uploads to
FILE_TYPE_CLASSES: Final = frozenset((
    'all',
    'documents',
    'images',
    'videos',
    'audio',
    'archives',
    'code',
    'data',
))

_ARCHIVE_MIME_TYPES: Final = frozenset((
    'application/zip',
    'application/x-rar-compressed',
    'application/x-tar',
    'application/gzip',
    'application/x-7z-compressed',
))
_DATA_MIME_TYPES: Final = frozenset((
    'application/json',
    'application/xml',
    'text/csv',
    'text/xml',
    'application/vnd.ms-excel',
    'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
))
_CODE_MIME_TYPES: Final = frozenset((
    'application/javascript',
    'text/javascript',
    'text/x-python',
    'text/html',
    'text/css',
    'application/x-sh',
))

_UNSAFE_FILE_NAME_CHARS: Final = re.compile(r'[^A-Za-z0-9.-]')
_UNSAFE_FOLDER_NAME_CHARS: Final = re.compile(r'[^A-Za-z0-9_-]')
_CHUNK_SIZE: Final = 8192  # 8KB chunks for checksum calculation

STORAGE_ROOT: Final = 'user-files'
PLACEHOLDER_NAME: Final = '.folder_placeholder'


@dataclass(frozen=True, slots=True)
class ImageDetails:
    """Dimensions and JPEG thumbnail of an uploaded image."""

    width: int
    height: int
    thumbnail: bytes


def sniff_mime_type(payload: bytes, filename: str) -> str:
    """Detect MIME type from file contents, then from the filename.

    Magic numbers win over the extension, so a JPEG named 'x.txt' is
    still 'image/jpeg'.

    Args:
        payload: File contents (only the first bytes are inspected).
        filename: Filename with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    for signature, mime_type in _SIGNATURES:
        if payload.startswith(signature):
            return mime_type

    extension = get_file_extension(filename)
    if extension in _EXTENSION_MIME_TYPES:
        return _EXTENSION_MIME_TYPES[extension]

    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return _FALLBACK_MIME_TYPE
    return mime_type


def classify_mime_type(mime_type: str) -> str:  # noqa: WPS212
    """Map a MIME type onto a folder file-type class.

    Args:
        mime_type: MIME type string.

    Returns:
        One of FILE_TYPE_CLASSES other than 'all'.
    """
    if mime_type.startswith('image/'):
        return 'images'
    if mime_type.startswith('video/'):
        return 'videos'
    if mime_type.startswith('audio/'):
        return 'audio'
    if mime_type in _ARCHIVE_MIME_TYPES:
        return 'archives'
    if mime_type in _DATA_MIME_TYPES:
        return 'data'
    if mime_type in _CODE_MIME_TYPES:
        return 'code'
    return 'documents'


def normalize_file_types(file_types: list[str] | None) -> list[str]:
    """Validate folder file-type classes.

    Args:
        file_types: Requested classes; empty or None means all types.

    Returns:
        Sorted, de-duplicated classes, or ['all'].

    Raises:
        InvalidArgumentError: If a class is unknown.
    """
    if not file_types:
        return ['all']

    unknown = set(file_types) - FILE_TYPE_CLASSES
    if unknown:
        raise InvalidArgumentError(
            'Unknown file types: {0}'.format(', '.join(sorted(unknown))),
        )
    if 'all' in file_types:
        return ['all']
    return sorted(set(file_types))


def calculate_checksum(payload: bytes) -> str:
    """Calculate SHA256 checksum of file contents.

    Hashes in chunks so memoryviews of large uploads are not copied.

    Args:
        payload: File contents.

    Returns:
        Hex-encoded SHA256 hash string.
    """
    sha256_hash = hashlib.sha256()
    view = memoryview(payload)
    for offset in range(0, len(view), _CHUNK_SIZE):
        sha256_hash.update(view[offset:offset + _CHUNK_SIZE])
    return sha256_hash.hexdigest()


def sanitize_file_name(filename: str) -> str:
    """Make a filename safe for use inside a storage key.

    Args:
        filename: Original filename.

    Returns:
        Name with every character outside [A-Za-z0-9.-] replaced by '_'.
    """
    return _UNSAFE_FILE_NAME_CHARS.sub('_', filename)


def build_storage_key(user_id: int, filename: str, file_id: str) -> str:
    """Derive the blob key of an uploaded file.

    Args:
        user_id: Owner's user ID.
        filename: Original filename.
        file_id: Generated file identifier.

    Returns:
        Key like 'user-files/42/report.pdf_<file_id>'.
    """
    return '{root}/{user_id}/{name}_{file_id}'.format(
        root=STORAGE_ROOT,
        user_id=user_id,
        name=sanitize_file_name(filename),
        file_id=file_id,
    )


def build_placeholder_key(user_id: int, folder_name: str, folder_id: str) -> str:
    """Derive the blob key of a folder placeholder.

    Args:
        user_id: Owner's user ID.
        folder_name: Folder display name.
        folder_id: Folder identifier.

    Returns:
        Key like 'user-files/42/folders/Docs_<id>/.folder_placeholder'.
    """
    safe_name = _UNSAFE_FOLDER_NAME_CHARS.sub('_', folder_name)
    return f'{STORAGE_ROOT}/{user_id}/folders/{safe_name}_{folder_id}/{PLACEHOLDER_NAME}'


def build_thumbnail_key(file_id: str) -> str:
    """Derive the blob key of an image thumbnail.

    Args:
        file_id: File identifier.

    Returns:
        Key like 'thumbnails/<file_id>.jpg'.
    """
    return f'thumbnails/{file_id}.jpg'


def validate_storage_key(user_id: int, storage_key: str) -> None:
    """Validate storage key follows user isolation rules.

    Ensures the key lives under the user's own prefix to maintain
    multi-user isolation. This is a critical security check.

    Args:
        user_id: Owner's user ID.
        storage_key: Proposed storage key.

    Raises:
        InvalidArgumentError: If key is outside the user's prefix.
    """
    if not storage_key:
        raise InvalidArgumentError('Storage key cannot be empty')

    path_parts = Path(storage_key).parts
    if len(path_parts) < 3 or path_parts[0] != STORAGE_ROOT:
        raise InvalidArgumentError(
            f'Storage key must start with {STORAGE_ROOT}/<user id>/',
        )

    if path_parts[1] != str(user_id):
        raise InvalidArgumentError(
            f'Storage key user ID ({path_parts[1]}) does not match '
            f'owner ({user_id})',
        )


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.pdf').

    Returns:
        Extension without dot, lowercase (e.g., 'pdf').
        Returns empty string if no extension.
    """
    extension = Path(filename).suffix
    return extension.lstrip('.').lower()


def extract_image_details(
    payload: bytes,
    thumbnail_size: tuple[int, int],
    quality: int,
) -> ImageDetails | None:
    """Read image dimensions and render a JPEG thumbnail.

    The thumbnail fits within thumbnail_size, keeps the aspect ratio and
    never upscales. Any decoding problem is logged and yields None.

    Args:
        payload: Image file contents.
        thumbnail_size: Bounding box (width, height).
        quality: JPEG quality for the thumbnail.

    Returns:
        ImageDetails, or None if the image could not be processed.
    """
    try:
        with Image.open(io.BytesIO(payload)) as image:
            width, height = image.size
            preview = image.convert('RGB')
            preview.thumbnail(thumbnail_size)
            buffer = io.BytesIO()
            preview.save(buffer, format='JPEG', quality=quality)
    except (UnidentifiedImageError, OSError, ValueError):
        logger.warning('Could not extract image details', exc_info=True)
        return None

    return ImageDetails(width=width, height=height, thumbnail=buffer.getvalue())
