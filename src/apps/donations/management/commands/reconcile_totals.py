"""Management command to compare project totals with the donation ledger."""

import json

from django.core.management.base import BaseCommand

from apps.donations.services.reconciliation import reconcile_project_totals
from apps.donations.store import EntityStore


class Command(BaseCommand):
    """Report (and optionally repair) drift between currentAmount and the ledger."""

    help = 'Compares each project total with min(goal, sum of donations)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--apply',
            action='store_true',
            help='Write the reconciled totals back'
        )
        parser.add_argument(
            '--format',
            type=str,
            default='text',
            choices=['text', 'json'],
            help='Output format'
        )
        parser.add_argument(
            '--database',
            default='default',
            help='Database alias to check (default: default)'
        )

    def handle(self, *args, **options):
        drifts = reconcile_project_totals(EntityStore(using=options['database']), apply=options['apply'])

        if options['format'] == 'json':
            rows = [
                {
                    'projectId': str(drift.project_id),
                    'title': drift.title,
                    'stored': f'{drift.stored:.2f}',
                    'expected': f'{drift.expected:.2f}',
                    'applied': drift.applied,
                }
                for drift in drifts
            ]
            self.stdout.write(json.dumps({'drift': rows, 'applied': options['apply']}, indent=2))
            return

        if not drifts:
            self.stdout.write(self.style.SUCCESS('All project totals match the ledger.'))
            return

        for drift in drifts:
            line = f'{drift.title} ({drift.project_id}): stored {drift.stored:.2f}, expected {drift.expected:.2f}'
            if drift.applied:
                self.stdout.write(self.style.SUCCESS(f'Fixed {line}'))
            else:
                self.stdout.write(self.style.WARNING(f'Drift {line}'))

        if not options['apply']:
            self.stdout.write('Run again with --apply to write the expected totals.')
