"""Management command to back up, restore, verify and prune user files."""

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from cloudvault.apps.files.exceptions import VaultError
from cloudvault.apps.files.logic import backup_operations
from cloudvault.apps.files.logic.results import BulkResult

logger = logging.getLogger(__name__)

_ACTIONS = ('backup', 'restore', 'verify', 'cleanup')


class Command(BaseCommand):
    """Blob-level backups of the user-files prefix in the same bucket."""

    help = 'Back up, restore, verify or clean up backups of user files'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument('action', choices=_ACTIONS)
        parser.add_argument(
            '--user',
            help='Username whose files to process (default: every user)',
        )
        parser.add_argument(
            '--backup-id',
            help='Backup to restore or verify',
        )
        parser.add_argument(
            '--retention-days',
            type=int,
            help='Age limit for cleanup (default: from settings)',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the requested action.

        Args:
            args: Positional arguments (unused).
            options: Command options.

        Raises:
            CommandError: If the action fails or finds problems.
        """
        action = options['action']
        user = self._resolve_user(options['user'])
        backup_id = options['backup_id']
        if action in {'restore', 'verify'} and not backup_id:
            raise CommandError(f'--backup-id is required for {action}')

        try:
            if action == 'backup':
                summary = backup_operations.create_backup(user)
                self._report(f'Backup {summary.backup_id}', summary.copies)
            elif action == 'restore':
                summary = backup_operations.restore_backup(backup_id, user)
                self._report(f'Restore {backup_id}', summary.copies)
            elif action == 'verify':
                self._verify(backup_id, user)
            else:
                removed = backup_operations.cleanup_backups(
                    options['retention_days'],
                )
                self._report('Cleanup', removed)
        except VaultError as exc:
            logger.exception('Backup action %s failed', action)
            raise CommandError(exc.message) from exc

    def _resolve_user(self, username: str | None) -> Any:
        if not username:
            return None
        user_model = get_user_model()
        try:
            return user_model.objects.get(username=username)
        except user_model.DoesNotExist as exc:
            raise CommandError(f'Unknown user: {username}') from exc

    def _verify(self, backup_id: str, user: Any) -> None:
        issues = backup_operations.verify_backup(backup_id, user)
        for issue in issues:
            self.stderr.write(issue)
        if issues:
            raise CommandError(
                f'Backup {backup_id} failed verification: {len(issues)} issues',
            )
        self.stdout.write(self.style.SUCCESS(f'Backup {backup_id} verified'))

    def _report(self, label: str, outcome: BulkResult) -> None:
        for failure in outcome.failed:
            self.stderr.write(f'Failed {failure.item_id}: {failure.error}')
        self.stdout.write(
            self.style.SUCCESS(
                f'{label}: {len(outcome.succeeded)} succeeded, '
                f'{len(outcome.failed)} failed',
            ),
        )
