"""Management command to seed the tracker with sample projects and donations."""

from django.core.management.base import BaseCommand

from apps.core.contracts.errors import DonationTrackerError
from apps.donations.constants import SAMPLE_DONATIONS
from apps.donations.services.workflow import DonationWorkflow
from apps.donations.store import EntityStore
from apps.projects.constants import SAMPLE_PROJECTS
from apps.projects.models import Project
from apps.projects.services import ProjectCatalog


class Command(BaseCommand):
    """Seed sample projects, then donate to them through the workflow."""

    help = 'Creates the sample projects and applies the sample donations so totals match the ledger'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete all projects (and their donations) before seeding'
        )
        parser.add_argument(
            '--database',
            default='default',
            help='Database alias to seed (default: default)'
        )

    def handle(self, *args, **options):
        store = EntityStore(using=options['database'])
        catalog = ProjectCatalog(store)

        if options['clear']:
            self.stdout.write(self.style.WARNING('Clearing projects and donations...'))
            Project.objects.using(store.using).all().delete()
            self.stdout.write(self.style.SUCCESS('Data cleared!'))

        self.stdout.write(f'Creating {len(SAMPLE_PROJECTS)} sample projects...')
        created = {}
        for index, project_data in enumerate(SAMPLE_PROJECTS):
            existing = Project.objects.using(store.using).filter(title=project_data['title']).first()
            if existing is not None:
                self.stdout.write(self.style.WARNING(f'Project already exists: {existing.title}'))
                continue
            project = catalog.create({
                'title': project_data['title'],
                'description': project_data['description'],
                'goalAmount': project_data['goal_amount'],
            })
            created[index] = project
            self.stdout.write(self.style.SUCCESS(f'Created project: {project.title}'))

        workflow = DonationWorkflow(store)
        donation_count = 0
        for donation_data in SAMPLE_DONATIONS:
            # Only freshly created projects get sample donations.
            project = created.get(donation_data['project_index'])
            if project is None:
                continue
            try:
                receipt = workflow.submit({
                    'projectId': str(project.pk),
                    'amount': donation_data['amount'],
                    'paymentGateway': donation_data['payment_gateway'],
                })
            except DonationTrackerError as exc:
                self.stdout.write(self.style.ERROR(f'Error donating to {project.title}: {exc.message}'))
                continue
            donation_count += 1
            self.stdout.write(
                f'  {receipt.donation.formatted_amount} via {receipt.donation.payment_gateway} '
                f'-> {project.title} ({receipt.project.current_amount})'
            )

        self.stdout.write(
            self.style.SUCCESS(
                f'\nSeeding complete! Created {len(created)} projects and {donation_count} donations.'
            )
        )
