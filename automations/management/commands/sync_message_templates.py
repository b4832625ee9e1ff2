"""
Management command to copy the REST backend's email templates into the
local template catalog used by automation rules.

Usage:
    python manage.py sync_message_templates
    python manage.py sync_message_templates --backend-url=https://api.example.org/api
"""

from django.core.management.base import BaseCommand, CommandError

from automations.clients import RecruitmentBackendClient
from automations.exceptions import CollaboratorFailure
from automations.store import sync_templates


class Command(BaseCommand):
    help = 'Sync email templates from the recruitment backend into MessageTemplate'

    def add_arguments(self, parser):
        parser.add_argument(
            '--backend-url',
            type=str,
            default=None,
            help='Backend base URL (default: AUTOMATIONS_BACKEND_URL)'
        )

    def handle(self, *args, **options):
        client = RecruitmentBackendClient(base_url=options['backend_url'])
        self.stdout.write(f'Fetching templates from {client.base_url}')

        try:
            created, updated = sync_templates(client)
        except CollaboratorFailure as e:
            raise CommandError(f'Template sync failed: {e.message}')

        self.stdout.write(self.style.SUCCESS(
            f'Templates synced: {created} created, {updated} updated'
        ))
