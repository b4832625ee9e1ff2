"""
Tests for the automations management commands.
"""

from io import StringIO
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from automations.exceptions import CollaboratorFailure
from automations.models import MessageTemplate
from automations.rules import Template

COMMAND_CLIENT = 'automations.management.commands.sync_message_templates.RecruitmentBackendClient'


@pytest.mark.django_db
class TestSyncMessageTemplates:
    def test_syncs_backend_templates(self, message_template_factory):
        message_template_factory(name='Interview Invite', subject='Old subject')
        templates = [
            Template(id=1, name='Interview Invite', subject='Interview for {{job_title}}', body='Hi'),
            Template(id=2, name='Offer Letter', subject='Your offer', body='Congratulations', category='offer'),
        ]
        out = StringIO()

        with patch(COMMAND_CLIENT) as client_class:
            client_class.return_value.base_url = 'https://backend.test/api'
            client_class.return_value.fetch_templates.return_value = templates
            call_command('sync_message_templates', '--backend-url=https://backend.test/api', stdout=out)

        client_class.assert_called_once_with(base_url='https://backend.test/api')
        assert 'Templates synced: 1 created, 1 updated' in out.getvalue()
        assert MessageTemplate.objects.get(name='Interview Invite').subject == 'Interview for {{job_title}}'
        assert MessageTemplate.objects.filter(name='Offer Letter', category='offer').exists()

    def test_backend_failure(self):
        with patch(COMMAND_CLIENT) as client_class:
            client_class.return_value.fetch_templates.side_effect = CollaboratorFailure('backend down', source='templates')

            with pytest.raises(CommandError, match='Template sync failed: backend down'):
                call_command('sync_message_templates', stdout=StringIO())

        assert not MessageTemplate.objects.exists()
