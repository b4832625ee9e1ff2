"""
Tests for the Dispatch Coordinator and channel services.
"""

from unittest.mock import patch

import pytest
from django.core import mail

from automations.dispatch import (
    DispatchCoordinator,
    EmailChannelService,
    InAppChannelService,
    SMSChannelService,
    in_app_group,
    recipient_for,
)
from automations.renderer import RenderedMessage
from automations.rules import Channel

MESSAGE = RenderedMessage(subject='Interview for Backend Engineer', body='Hello Jane, see you at 3pm')


class FakeChannelLayer:
    def __init__(self):
        self.sent = []

    async def group_send(self, group, message):
        self.sent.append((group, message))


class TestRecipientFor:
    def test_candidate_first(self):
        variables = {'candidate_email': 'jane@talentmail.io', 'sender_email': 'rita@globex.io'}
        assert recipient_for(Channel.EMAIL, variables) == 'jane@talentmail.io'
        assert recipient_for(Channel.IN_APP, variables) == 'jane@talentmail.io'

    def test_falls_back_to_sender(self):
        assert recipient_for(Channel.EMAIL, {'candidate_email': '', 'sender_email': 'rita@globex.io'}) == 'rita@globex.io'
        assert recipient_for(Channel.SMS, {'sender_phone': '+15550003333'}) == '+15550003333'

    def test_default_sender_details_are_not_recipients(self):
        assert recipient_for(Channel.EMAIL, {'sender_email': 'user@example.com'}) == ''
        assert recipient_for(Channel.SMS, {'sender_phone': 'N/A'}) == ''

    def test_in_app_group(self):
        group = in_app_group('Jane@TalentMail.io')

        assert group == in_app_group('jane@talentmail.io')
        assert group.startswith('automations_')
        assert len(group) < 100


class TestEmailChannelService:
    """Test sending automation emails."""

    def test_send(self):
        result = EmailChannelService().send('jane@talentmail.io', MESSAGE, {'rule_id': 4, 'trigger': 'interview_scheduled'})

        assert result.success
        assert result.rule_id == 4
        assert result.channel == 'email'
        assert len(mail.outbox) == 1
        email = mail.outbox[0]
        assert email.subject == 'Interview for Backend Engineer'
        assert email.body == 'Hello Jane, see you at 3pm'
        assert email.to == ['jane@talentmail.io']
        assert email.from_email == 'noreply@recruitops.test'
        assert email.extra_headers['X-Automation-Rule'] == '4'

    def test_missing_recipient(self):
        result = EmailChannelService().send('', MESSAGE)

        assert not result.success
        assert result.error_message == 'Recipient has no email address'
        assert mail.outbox == []


class TestSMSChannelService:
    """Test sending automation SMS via Twilio."""

    def test_send(self):
        with patch('automations.dispatch.Client') as client_class:
            client_class.return_value.messages.create.return_value.sid = 'SM123'
            result = SMSChannelService().send('+15550001111', MESSAGE, {'rule_id': 2})

        assert result.success
        assert result.external_id == 'SM123'
        client_class.assert_called_once_with('test_account_sid', 'test_auth_token')
        client_class.return_value.messages.create.assert_called_once_with(
            body='Hello Jane, see you at 3pm',
            from_='+15551234567',
            to='+15550001111',
        )

    def test_transport_error_is_reported(self):
        with patch('automations.dispatch.Client') as client_class:
            client_class.return_value.messages.create.side_effect = Exception('Invalid phone number')
            result = SMSChannelService().send('+1', MESSAGE)

        assert not result.success
        assert result.error_message == 'Invalid phone number'

    def test_not_configured(self, settings):
        settings.TWILIO_ACCOUNT_SID = None

        result = SMSChannelService().send('+15550001111', MESSAGE)

        assert not result.success
        assert result.error_message == 'Twilio is not configured'


class TestInAppChannelService:
    def test_send(self):
        layer = FakeChannelLayer()
        with patch('automations.dispatch.get_channel_layer', return_value=layer):
            result = InAppChannelService().send('jane@talentmail.io', MESSAGE, {'rule_id': 8})

        assert result.success
        group, message = layer.sent[0]
        assert group == in_app_group('jane@talentmail.io')
        assert result.external_id == group
        assert message['type'] == 'send_notification'
        assert message['notification']['data']['title'] == 'Interview for Backend Engineer'
        assert message['notification']['data']['rule_id'] == 8

    def test_no_channel_layer(self):
        with patch('automations.dispatch.get_channel_layer', return_value=None):
            result = InAppChannelService().send('jane@talentmail.io', MESSAGE)

        assert not result.success
        assert result.error_message == 'Channel layer is not configured'


class TestDispatchCoordinator:
    def test_routes_by_channel(self):
        coordinator = DispatchCoordinator()

        result = coordinator.dispatch(Channel.EMAIL, 'jane@talentmail.io', MESSAGE, {'rule_id': 1})

        assert result.success
        assert len(mail.outbox) == 1

    @pytest.mark.parametrize('channel, service_class', [
        ('email', EmailChannelService),
        (Channel.SMS, SMSChannelService),
        (Channel.IN_APP, InAppChannelService),
    ])
    def test_service_lookup(self, channel, service_class):
        coordinator = DispatchCoordinator()
        service = coordinator.get_service(channel)

        assert isinstance(service, service_class)
        assert coordinator.get_service(channel) is service
