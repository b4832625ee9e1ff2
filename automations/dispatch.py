"""
Dispatch Coordinator and channel services.

Performs the real send of a rendered automation message over email (Django
mail), SMS (Twilio) or an in-app notification (Channels group). Each channel
service reports the outcome as a ``DispatchResult``; failures carry the
transport's original error message and are never retried here.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Mapping, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.utils import timezone
from twilio.rest import Client

from .exceptions import DispatchResult
from .ports import Dispatcher
from .renderer import RenderedMessage
from .resolver import DEFAULT_SENDER_EMAIL, DEFAULT_SENDER_PHONE
from .rules import Channel

logger = logging.getLogger(__name__)

# Twilio accepts up to 1600 characters per message
SMS_MAX_LENGTH = 1600


def recipient_for(channel: Channel, variables: Mapping[str, str]) -> str:
    """
    Pick the address a rendered message goes to.

    The candidate is the primary recipient; the sender stands in when no
    candidate is part of the context. The resolver's default sender details
    are not addresses and are never returned. In-app notifications are
    addressed by email and mapped to a Channels group by the in-app service.
    """
    if channel is Channel.SMS:
        keys, placeholder = ('candidate_phone', 'sender_phone'), DEFAULT_SENDER_PHONE
    else:
        keys, placeholder = ('candidate_email', 'sender_email'), DEFAULT_SENDER_EMAIL
    for key in keys:
        value = (variables.get(key) or '').strip()
        if value and value != placeholder:
            return value
    return ''


def in_app_group(recipient: str) -> str:
    """Channels group name for a recipient address."""
    digest = hashlib.sha256(recipient.strip().lower().encode('utf-8')).hexdigest()[:32]
    return f"automations_{digest}"


class BaseChannelService(ABC):
    """Abstract base class for automation channel services."""

    channel: Channel = None

    @abstractmethod
    def send(
        self,
        recipient: str,
        message: RenderedMessage,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> DispatchResult:
        pass

    def _result(self, metadata, recipient, success=True, external_id=None, error_message=None):
        return DispatchResult(
            success=success,
            rule_id=(metadata or {}).get('rule_id'),
            channel=self.channel.value,
            recipient=recipient,
            external_id=external_id,
            error_message=error_message,
        )


class EmailChannelService(BaseChannelService):
    """Sends automation emails through the configured Django email backend."""

    channel = Channel.EMAIL

    def send(self, recipient, message, metadata=None) -> DispatchResult:
        metadata = metadata or {}
        try:
            if not recipient:
                raise ValueError("Recipient has no email address")

            headers = {}
            if metadata.get('rule_id') is not None:
                headers['X-Automation-Rule'] = str(metadata['rule_id'])
            if metadata.get('trigger'):
                headers['X-Automation-Trigger'] = str(metadata['trigger'])

            email = EmailMultiAlternatives(
                subject=message.subject,
                body=message.body,
                from_email=getattr(settings, 'DEFAULT_FROM_EMAIL', 'noreply@recruitops.local'),
                to=[recipient],
                headers=headers,
            )
            email.send(fail_silently=False)

            return self._result(metadata, recipient)

        except Exception as e:
            error_msg = str(e)
            logger.error(f"Automation email to {recipient!r} failed: {error_msg}")
            return self._result(metadata, recipient, success=False, error_message=error_msg)


class SMSChannelService(BaseChannelService):
    """Sends automation text messages via Twilio."""

    channel = Channel.SMS

    def __init__(self):
        self.account_sid = getattr(settings, 'TWILIO_ACCOUNT_SID', None)
        self.auth_token = getattr(settings, 'TWILIO_AUTH_TOKEN', None)
        self.from_number = getattr(settings, 'TWILIO_FROM_NUMBER', None)

    def send(self, recipient, message, metadata=None) -> DispatchResult:
        try:
            if not all([self.account_sid, self.auth_token, self.from_number]):
                raise ValueError("Twilio is not configured")
            if not recipient:
                raise ValueError("Recipient has no phone number")

            client = Client(self.account_sid, self.auth_token)
            sms = client.messages.create(
                body=message.body[:SMS_MAX_LENGTH],
                from_=self.from_number,
                to=recipient,
            )

            return self._result(metadata, recipient, external_id=sms.sid)

        except Exception as e:
            error_msg = str(e)
            logger.error(f"Automation SMS to {recipient!r} failed: {error_msg}")
            return self._result(metadata, recipient, success=False, error_message=error_msg)


class InAppChannelService(BaseChannelService):
    """Pushes automation notifications to the recipient's Channels group."""

    channel = Channel.IN_APP

    def send(self, recipient, message, metadata=None) -> DispatchResult:
        metadata = metadata or {}
        try:
            if not recipient:
                raise ValueError("Recipient has no address")

            channel_layer = get_channel_layer()
            if not channel_layer:
                raise ValueError("Channel layer is not configured")

            group = in_app_group(recipient)
            async_to_sync(channel_layer.group_send)(
                group,
                {
                    'type': 'send_notification',
                    'notification': {
                        'type': 'automation',
                        'data': {
                            'rule_id': metadata.get('rule_id'),
                            'trigger': metadata.get('trigger'),
                            'title': message.subject,
                            'message': message.body[:500],
                            'created_at': timezone.now().isoformat(),
                        },
                    },
                },
            )

            return self._result(metadata, recipient, external_id=group)

        except Exception as e:
            error_msg = str(e)
            logger.error(f"Automation in-app notification to {recipient!r} failed: {error_msg}")
            return self._result(metadata, recipient, success=False, error_message=error_msg)


class DispatchCoordinator(Dispatcher):
    """
    Routes rendered messages to the channel service for their channel.
    Services are created lazily and reused.
    """

    SERVICE_MAP = {
        Channel.EMAIL: EmailChannelService,
        Channel.SMS: SMSChannelService,
        Channel.IN_APP: InAppChannelService,
    }

    def __init__(self):
        self.channel_services: Dict[Channel, BaseChannelService] = {}

    def get_service(self, channel: Channel) -> BaseChannelService:
        channel = Channel(channel)
        if channel not in self.channel_services:
            self.channel_services[channel] = self.SERVICE_MAP[channel]()
        return self.channel_services[channel]

    def dispatch(self, channel, recipient, message, metadata=None) -> DispatchResult:
        result = self.get_service(channel).send(recipient, message, metadata)
        if result.success:
            logger.info(f"Dispatched automation over {result.channel} to {recipient!r}")
        return result
