"""
ORM-backed Automation Rule Store and template catalog.

Validation runs before any write; database errors propagate to the caller
as raised by Django.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple

from django.db import transaction
from django.db.models import F

from .exceptions import DispatchResult, RuleNotFoundError, RuleValidationError, TemplateNotFoundError
from .models import AutomationRule as AutomationRuleModel, MessageTemplate, SentMessage
from .ports import RuleStore, TemplateProvider
from .renderer import RenderedMessage
from .rules import (
    AutomationRule,
    ContentMode,
    DraftRule,
    RuleStatus,
    Template,
    parse_channel,
    toggle_status,
    validate_rule,
)
from .triggers import as_canonical

logger = logging.getLogger(__name__)


class OrmRuleStore(RuleStore):
    """Stores automation rules in the ``automations_automationrule`` table."""

    def _get_row(self, rule_id: Any, for_update: bool = False) -> AutomationRuleModel:
        queryset = AutomationRuleModel.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=rule_id)
        except (AutomationRuleModel.DoesNotExist, ValueError, TypeError):
            raise RuleNotFoundError(rule_id)

    def _get_template(self, template_id: Any) -> MessageTemplate:
        try:
            return MessageTemplate.objects.get(pk=template_id)
        except (MessageTemplate.DoesNotExist, ValueError, TypeError):
            raise TemplateNotFoundError(template_id)

    def _apply(self, row: AutomationRuleModel, draft: DraftRule) -> AutomationRuleModel:
        errors = validate_rule(draft)
        if errors:
            raise RuleValidationError(errors)

        row.name = draft.name.strip()
        row.description = draft.description.strip()
        row.trigger = as_canonical(draft.trigger).value
        row.channel = parse_channel(draft.channel).value
        row.content_mode = draft.content_mode.value
        row.status = draft.status.value
        if draft.content_mode is ContentMode.TEMPLATE:
            row.template = self._get_template(draft.template_id)
            row.subject = ''
            row.body = ''
        else:
            row.template = None
            row.subject = draft.subject
            row.body = draft.body
        return row

    def load_rules(self) -> List[AutomationRule]:
        return [row.to_domain() for row in AutomationRuleModel.objects.all()]

    def get_rule(self, rule_id: Any) -> AutomationRule:
        return self._get_row(rule_id).to_domain()

    def create_rule(self, draft: DraftRule, created_by: Any = None) -> AutomationRule:
        row = self._apply(AutomationRuleModel(created_by=created_by), draft)
        row.save()
        logger.info(f"Created automation rule {row.pk} '{row.name}' on {row.trigger}")
        return row.to_domain()

    @transaction.atomic
    def update_rule(self, rule_id: Any, draft: DraftRule) -> AutomationRule:
        row = self._apply(self._get_row(rule_id, for_update=True), draft)
        row.save()
        logger.info(f"Updated automation rule {row.pk}")
        return row.to_domain()

    def delete_rule(self, rule_id: Any) -> None:
        row = self._get_row(rule_id)
        row.delete()
        logger.info(f"Deleted automation rule {rule_id}")

    @transaction.atomic
    def toggle_rule(self, rule_id: Any) -> AutomationRule:
        row = self._get_row(rule_id, for_update=True)
        rule = toggle_status(row.to_domain())
        row.status = rule.status.value
        row.save(update_fields=['status', 'updated_at'])
        logger.info(f"Automation rule {row.pk} is now {row.status}")
        return row.to_domain()

    @transaction.atomic
    def record_run(
        self,
        rule_id: Any,
        ran_at: datetime,
        message: Optional[RenderedMessage] = None,
        result: Optional[DispatchResult] = None,
    ) -> AutomationRule:
        updated = AutomationRuleModel.objects.filter(pk=rule_id).update(
            last_run_at=ran_at,
            sent_count=F('sent_count') + 1,
        )
        if not updated:
            raise RuleNotFoundError(rule_id)

        row = self._get_row(rule_id)
        if message is not None and result is not None:
            SentMessage.objects.create(
                rule=row,
                template_id=row.template_id,
                trigger=row.trigger,
                channel=result.channel or row.channel,
                recipient=result.recipient,
                subject=message.subject,
                body=message.body,
                external_id=result.external_id or '',
                sent_at=ran_at,
            )
        return row.to_domain()

    def active_rules_for(self, trigger) -> List[AutomationRule]:
        canonical = as_canonical(trigger)
        if canonical is None:
            return []
        rows = AutomationRuleModel.objects.filter(
            trigger=canonical.value,
            status=RuleStatus.ACTIVE.value,
        ).select_related('template')
        return [row.to_domain() for row in rows]


class OrmTemplateProvider(TemplateProvider):
    """Template catalog read from the local ``MessageTemplate`` table."""

    def fetch_templates(self) -> List[Template]:
        return [row.to_template() for row in MessageTemplate.objects.all()]

    def get_template(self, template_id: Any) -> Optional[Template]:
        try:
            return MessageTemplate.objects.get(pk=template_id).to_template()
        except (MessageTemplate.DoesNotExist, ValueError, TypeError):
            return None


def sync_templates(source: TemplateProvider) -> Tuple[int, int]:
    """
    Copy a template catalog (usually the REST backend's) into the local
    ``MessageTemplate`` table, matching templates by name.

    Returns (created, updated).
    """
    created = updated = 0
    for template in source.fetch_templates():
        if not template.name:
            logger.warning(f"Skipping template {template.id!r} without a name")
            continue
        _, was_created = MessageTemplate.objects.update_or_create(
            name=template.name,
            defaults={
                'subject': template.subject,
                'content': template.body,
                'description': template.description,
                'category': template.category,
            },
        )
        if was_created:
            created += 1
        else:
            updated += 1
    logger.info(f"Synced message templates: {created} created, {updated} updated")
    return created, updated
