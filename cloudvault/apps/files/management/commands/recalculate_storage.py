"""Management command to reconcile storage usage with stored files."""

import logging
from typing import Any

from django.core.management.base import BaseCommand
from django.db.models import Sum

from cloudvault.apps.files.logic.quota_operations import recalculate_usage
from cloudvault.apps.files.models import File, StorageAccount

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Recompute storage_used of every account from its file sizes."""

    help = 'Recalculate storage usage of every account from its files'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show drifted accounts without changing them',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the reconciliation.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']

        count = 0
        failed = 0

        accounts = StorageAccount.objects.select_related('user').order_by('pk')
        for account in accounts:
            actual = File.objects.filter(user=account.user).aggregate(
                total=Sum('size_bytes'),
            )['total'] or 0
            if actual == account.storage_used:
                continue

            if dry_run:
                self.stdout.write(
                    f'Would fix {account.user.username}: '
                    f'{account.storage_used} -> {actual} bytes',
                )
                count += 1
                continue

            try:
                recalculate_usage(account.user)
                count += 1
            except Exception as exc:
                self.stderr.write(
                    f'Failed to recalculate {account.user.username}: {exc}',
                )
                logger.exception(
                    'Failed to recalculate usage for user %s',
                    account.user.username,
                )
                failed += 1

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would fix {count} accounts'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f'Fixed {count} accounts, {failed} failed'),
            )
