"""
Persistence for automation rules and the message template catalog.

Rows are converted into the immutable domain values of ``rules`` before they
leave the store; the engine never works on model instances directly.
"""

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from .rules import (
    AutomationRule as RuleValue,
    Channel,
    ContentMode,
    InlineContent,
    RuleStatus,
    Template,
    TemplateRef,
)
from .triggers import canonicalize_trigger, trigger_choices


class MessageTemplate(models.Model):
    """
    Reusable email template referenced by automation rules in template mode.
    ``content`` may hold backslash-escaped newlines as stored by the editor.
    """

    name = models.CharField(max_length=200, unique=True)
    description = models.TextField(blank=True)
    subject = models.CharField(max_length=500, blank=True)
    content = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = _('Message Template')
        verbose_name_plural = _('Message Templates')

    def __str__(self):
        return self.name

    def to_template(self) -> Template:
        return Template(
            id=self.pk,
            name=self.name,
            subject=self.subject,
            body=self.content,
            description=self.description,
            category=self.category,
        )


class AutomationRule(models.Model):
    """
    A rule of the form "when trigger E happens, send content T over channel C".
    Exactly one of ``template`` or ``subject``/``body`` supplies the content,
    selected by ``content_mode``.
    """

    CHANNEL_CHOICES = [
        (Channel.EMAIL.value, _('Email')),
        (Channel.SMS.value, _('SMS')),
        (Channel.IN_APP.value, _('In-app notification')),
    ]

    CONTENT_MODE_CHOICES = [
        (ContentMode.TEMPLATE.value, _('Template')),
        (ContentMode.CUSTOM.value, _('Custom')),
    ]

    STATUS_CHOICES = [
        (RuleStatus.ACTIVE.value, _('Active')),
        (RuleStatus.INACTIVE.value, _('Inactive')),
    ]

    name = models.CharField(max_length=200)
    description = models.TextField()
    trigger = models.CharField(max_length=50, choices=trigger_choices(), db_index=True)
    channel = models.CharField(max_length=20, choices=CHANNEL_CHOICES)

    content_mode = models.CharField(max_length=20, choices=CONTENT_MODE_CHOICES)
    template = models.ForeignKey(
        MessageTemplate,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='automation_rules',
    )
    subject = models.CharField(max_length=500, blank=True)
    body = models.TextField(blank=True)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=RuleStatus.ACTIVE.value,
        db_index=True,
    )

    # Updated by real dispatch only, never by previews or test runs
    last_run_at = models.DateTimeField(null=True, blank=True)
    sent_count = models.PositiveIntegerField(default=0)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='automation_rules',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = _('Automation Rule')
        verbose_name_plural = _('Automation Rules')
        indexes = [
            models.Index(fields=['trigger', 'status'], name='automations_trigger_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(content_mode=ContentMode.TEMPLATE.value, template__isnull=False)
                    | Q(content_mode=ContentMode.CUSTOM.value, template__isnull=True)
                ),
                name='automations_rule_content_matches_mode',
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_trigger_display()})"

    def to_domain(self) -> RuleValue:
        if self.content_mode == ContentMode.TEMPLATE.value:
            content = TemplateRef(template_id=self.template_id)
        else:
            content = InlineContent(subject=self.subject, body=self.body)
        return RuleValue(
            id=self.pk,
            name=self.name,
            description=self.description,
            trigger=canonicalize_trigger(self.trigger),
            channel=Channel(self.channel),
            content=content,
            status=RuleStatus(self.status),
            last_run_at=self.last_run_at,
            sent_count=self.sent_count,
        )


class SentMessage(models.Model):
    """
    A message delivered by a real automation run. Previews and test runs
    never write one.
    """

    rule = models.ForeignKey(
        AutomationRule,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_messages',
    )
    template = models.ForeignKey(
        MessageTemplate,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_messages',
    )
    trigger = models.CharField(max_length=50, choices=trigger_choices())
    channel = models.CharField(max_length=20, choices=AutomationRule.CHANNEL_CHOICES)
    recipient = models.CharField(max_length=255)
    subject = models.CharField(max_length=500, blank=True)
    body = models.TextField(blank=True)
    external_id = models.CharField(max_length=255, blank=True)
    sent_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-sent_at']
        verbose_name = _('Sent Message')
        verbose_name_plural = _('Sent Messages')
        indexes = [
            models.Index(fields=['rule', '-sent_at'], name='automations_sent_rule_idx'),
        ]

    def __str__(self):
        return f"{self.get_channel_display()} to {self.recipient} at {self.sent_at:%Y-%m-%d %H:%M}"
