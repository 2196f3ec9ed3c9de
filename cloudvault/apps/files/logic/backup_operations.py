"""Business logic for blob-level backups of user files.

A backup is a server-side copy of every object under ``user-files/``
(or one user's ``user-files/{userId}/``) to
``backups/{backupId}/{originalKey}`` in the same bucket. Backup ids
embed their creation time, which retention cleanup relies on.
Database records are not part of a backup.
"""

import logging
import re
import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Final

from django.conf import settings
from django.utils import timezone

from cloudvault.apps.files.exceptions import (
    DependencyUnavailableError,
    InvalidArgumentError,
    NotFoundError,
)
from cloudvault.apps.files.infrastructure.storage import (
    BlobEntry,
    get_blob_storage,
)
from cloudvault.apps.files.logic.results import BulkResult

# User type for Django's dynamic user model
_User = Any

_BACKUP_ROOT: Final = 'backups/'
_USER_FILES_ROOT: Final = 'user-files/'
_BACKUP_ID_PATTERN: Final = re.compile(r'^backup-(\d+)-([0-9a-f]+)$')

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BackupSummary:
    """Outcome of a backup or restore run."""

    backup_id: str
    copies: BulkResult = field(default_factory=BulkResult)


def _source_prefix(user: _User | None) -> str:
    if user is None:
        return _USER_FILES_ROOT
    return f'{_USER_FILES_ROOT}{user.pk}/'


def _backup_prefix(backup_id: str) -> str:
    return f'{_BACKUP_ROOT}{backup_id}/'


def _backup_created_at(backup_id: str) -> datetime:
    match = _BACKUP_ID_PATTERN.match(backup_id)
    if match is None:
        raise InvalidArgumentError(f'Malformed backup id: {backup_id}')
    return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=UTC)


def _list(prefix: str) -> list[BlobEntry]:
    try:
        return get_blob_storage().list_prefix(prefix)
    except Exception as error:
        raise DependencyUnavailableError(
            f'Failed to list {prefix}: {error}',
        ) from error


def _copy_all(pairs: list[tuple[str, str]]) -> BulkResult:
    storage = get_blob_storage()
    copies = BulkResult()
    for source_key, target_key in pairs:
        try:
            storage.copy(source_key, target_key)
        except Exception as error:
            logger.exception('Failed to copy %s -> %s', source_key, target_key)
            copies.add_failure(source_key, error)
        else:
            copies.add_success(source_key)
    return copies


def generate_backup_id(now: datetime | None = None) -> str:
    """Fresh backup id carrying its creation time in milliseconds."""
    if now is None:
        now = timezone.now()
    return f'backup-{int(now.timestamp() * 1000)}-{secrets.token_hex(4)}'


def create_backup(user: _User | None = None) -> BackupSummary:
    """Copy user files to a new backup.

    Args:
        user: Only back up this user's files; None backs up every user.

    Returns:
        BackupSummary with the new backup id and per-object outcome.

    Raises:
        DependencyUnavailableError: If the blob store cannot be listed.
    """
    backup_id = generate_backup_id()
    target = _backup_prefix(backup_id)
    entries = _list(_source_prefix(user))

    summary = BackupSummary(
        backup_id=backup_id,
        copies=_copy_all([
            (entry.key, f'{target}{entry.key}') for entry in entries
        ]),
    )
    logger.info(
        'Backup %s: %d objects copied, %d failed',
        backup_id,
        len(summary.copies.succeeded),
        len(summary.copies.failed),
    )
    return summary


def restore_backup(backup_id: str, user: _User | None = None) -> BackupSummary:
    """Copy backed-up objects back to their original keys.

    Existing objects with the same key are overwritten; objects created
    after the backup are left alone.

    Args:
        backup_id: Backup to restore.
        user: Only restore this user's files; None restores everything.

    Returns:
        BackupSummary with per-object outcome.

    Raises:
        InvalidArgumentError: If backup_id is malformed.
        NotFoundError: If the backup holds nothing to restore.
        DependencyUnavailableError: If the blob store cannot be listed.
    """
    _backup_created_at(backup_id)
    prefix = _backup_prefix(backup_id)
    entries = _list(f'{prefix}{_source_prefix(user)}')
    if not entries:
        raise NotFoundError(f'Backup not found: {backup_id}')

    summary = BackupSummary(
        backup_id=backup_id,
        copies=_copy_all([
            (entry.key, entry.key.removeprefix(prefix)) for entry in entries
        ]),
    )
    logger.info(
        'Restore %s: %d objects copied, %d failed',
        backup_id,
        len(summary.copies.succeeded),
        len(summary.copies.failed),
    )
    return summary


def verify_backup(backup_id: str, user: _User | None = None) -> list[str]:
    """Compare current user files with a backup.

    Every current object must be present in the backup with the same
    size. Objects only present in the backup are not an issue.

    Args:
        backup_id: Backup to check.
        user: Only check this user's files.

    Returns:
        Human-readable issues; empty when the backup is complete.

    Raises:
        InvalidArgumentError: If backup_id is malformed.
        DependencyUnavailableError: If the blob store cannot be listed.
    """
    _backup_created_at(backup_id)
    prefix = _backup_prefix(backup_id)
    source_prefix = _source_prefix(user)

    backed_up = {
        entry.key.removeprefix(prefix): entry.size
        for entry in _list(f'{prefix}{source_prefix}')
    }
    issues = []
    for entry in _list(source_prefix):
        if entry.key not in backed_up:
            issues.append(f'Missing file in backup: {entry.key}')
        elif backed_up[entry.key] != entry.size:
            issues.append(f'Size mismatch for file: {entry.key}')

    if issues:
        logger.warning(
            'Backup %s failed verification: %d issues',
            backup_id,
            len(issues),
        )
    return issues


def cleanup_backups(
    retention_days: int | None = None,
    now: datetime | None = None,
) -> BulkResult:
    """Delete every backup older than the retention period.

    Args:
        retention_days: Age limit (default CLOUDVAULT_BACKUP_RETENTION_DAYS).
        now: Reference moment, defaults to the current time.

    Returns:
        BulkResult keyed by backup id.

    Raises:
        InvalidArgumentError: If retention_days is negative.
        DependencyUnavailableError: If the blob store cannot be listed.
    """
    if retention_days is None:
        retention_days = settings.CLOUDVAULT_BACKUP_RETENTION_DAYS
    if retention_days < 0:
        raise InvalidArgumentError('retention_days cannot be negative')
    if now is None:
        now = timezone.now()
    cutoff = now - timedelta(days=retention_days)

    expired: dict[str, list[str]] = {}
    for entry in _list(_BACKUP_ROOT):
        backup_id = entry.key.removeprefix(_BACKUP_ROOT).split('/', 1)[0]
        try:
            created_at = _backup_created_at(backup_id)
        except InvalidArgumentError:
            logger.warning('Skipping unrecognized backup object: %s', entry.key)
            continue
        if created_at < cutoff:
            expired.setdefault(backup_id, []).append(entry.key)

    storage = get_blob_storage()
    removed = BulkResult()
    for backup_id, keys in expired.items():
        try:
            for key in keys:
                storage.delete(key)
        except Exception as error:
            removed.add_failure(backup_id, error)
        else:
            removed.add_success(backup_id)

    logger.info(
        'Backup cleanup: %d removed, %d failed',
        len(removed.succeeded),
        len(removed.failed),
    )
    return removed
