"""
Messaging Automations API Serializers

Read serializers render model rows; write serializers only shape the request
payload. Rule validation itself happens in the engine so the API and the
Celery entry points share one rule set.
"""
from rest_framework import serializers

from ..models import AutomationRule, MessageTemplate, SentMessage
from ..triggers import display_name


# =============================================================================
# TEMPLATE SERIALIZERS
# =============================================================================

class MessageTemplateSerializer(serializers.ModelSerializer):
    class Meta:
        model = MessageTemplate
        fields = [
            'id', 'name', 'description', 'subject', 'content',
            'category', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


# =============================================================================
# RULE SERIALIZERS
# =============================================================================

class AutomationRuleSerializer(serializers.ModelSerializer):
    """Automation rule as listed in the dashboard."""

    trigger_display = serializers.SerializerMethodField()
    channel_display = serializers.CharField(source='get_channel_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    template_name = serializers.CharField(source='template.name', read_only=True, default=None)

    class Meta:
        model = AutomationRule
        fields = [
            'id', 'name', 'description', 'trigger', 'trigger_display',
            'channel', 'channel_display', 'content_mode', 'template',
            'template_name', 'subject', 'body', 'status', 'status_display',
            'last_run_at', 'sent_count', 'created_by', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_trigger_display(self, obj):
        return display_name(obj.trigger)


class AutomationRuleWriteSerializer(serializers.Serializer):
    """
    Rule editor payload. ``template`` and ``message`` are the legacy form's
    names for the template choice ("custom" or a template id) and the body.
    """

    name = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    trigger = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    channel = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    content_mode = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    template_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    template = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    subject = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    body = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    message = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False)
    status = serializers.CharField(required=False, allow_blank=True)


# =============================================================================
# DELIVERY HISTORY SERIALIZERS
# =============================================================================

class SentMessageSerializer(serializers.ModelSerializer):
    channel_display = serializers.CharField(source='get_channel_display', read_only=True)
    rule_name = serializers.CharField(source='rule.name', read_only=True, default=None)

    class Meta:
        model = SentMessage
        fields = [
            'id', 'rule', 'rule_name', 'template', 'trigger', 'channel',
            'channel_display', 'recipient', 'subject', 'body', 'external_id', 'sent_at',
        ]
        read_only_fields = fields


# =============================================================================
# ENGINE PAYLOAD SERIALIZERS
# =============================================================================

class FireSerializer(serializers.Serializer):
    """Trigger for a fired event; entity ids travel alongside it in the same payload."""

    trigger = serializers.CharField()
    run_async = serializers.BooleanField(required=False, default=False)


class TemplateTextSerializer(serializers.Serializer):
    subject = serializers.CharField(required=False, allow_blank=True, default='', trim_whitespace=False)
    body = serializers.CharField(required=False, allow_blank=True, default='', trim_whitespace=False)


class StatusChangeSerializer(serializers.Serializer):
    """A candidate status change; entity ids travel alongside it in the same payload."""

    new_status = serializers.CharField()
    previous_status = serializers.CharField(required=False, allow_blank=True, default='')
    run_async = serializers.BooleanField(required=False, default=False)
