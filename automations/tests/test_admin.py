"""
Tests for the automations admin.
"""

import pytest
from django.urls import reverse

from automations.models import AutomationRule, SentMessage


@pytest.mark.django_db
class TestAutomationRuleAdmin:
    def test_changelist(self, client, admin_user, automation_rule_factory):
        automation_rule_factory(name='Interview invite')
        client.force_login(admin_user)

        response = client.get(reverse('admin:automations_automationrule_changelist'))

        assert response.status_code == 200
        assert b'Interview Scheduled' in response.content

    def test_deactivate_action(self, client, admin_user, automation_rule_factory):
        rules = automation_rule_factory.create_batch(2)
        client.force_login(admin_user)

        client.post(reverse('admin:automations_automationrule_changelist'), {
            'action': 'deactivate_rules',
            '_selected_action': [rule.pk for rule in rules],
        })

        assert set(AutomationRule.objects.values_list('status', flat=True)) == {'inactive'}

    def test_template_changelist(self, client, admin_user, template_rule_factory):
        template_rule_factory()
        client.force_login(admin_user)

        response = client.get(reverse('admin:automations_messagetemplate_changelist'))

        assert response.status_code == 200

    def test_sent_message_changelist(self, client, admin_user, automation_rule_factory):
        rule = automation_rule_factory()
        SentMessage.objects.create(
            rule=rule, trigger=rule.trigger, channel='email',
            recipient='jane.doe@talentmail.io', subject='Interview', body='Hello Jane',
        )
        client.force_login(admin_user)

        response = client.get(reverse('admin:automations_sentmessage_changelist'))

        assert response.status_code == 200
        assert b'jane.doe@talentmail.io' in response.content
        assert client.get(reverse('admin:automations_sentmessage_add')).status_code == 403
