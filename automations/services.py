"""
Automation engine services.

``AutomationEngine`` composes the pure pipeline (parse, resolve, render) with
the four external collaborators: entity provider, template catalog, rule
store and dispatcher. It exposes the operations used by the rule editor, the
test panel and the event sources:

- Editor: ``validate_rule``, ``group_variables``, ``list_triggers``,
  ``list_variables``, ``list_templates``
- Lifecycle: ``create_rule``, ``update_rule``, ``toggle_rule``, ``delete_rule``
- Test panel: ``load_entities``, ``preview``, ``run_test`` (never sends)
- Events: ``fire`` and ``fire_status_change`` (real dispatch, updates
  ``last_run_at``/``sent_count`` and records each delivered message)
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from django.conf import settings
from django.utils import timezone

from . import catalog
from .catalog import EntityKind
from .clients import RecruitmentBackendClient
from .dispatch import DispatchCoordinator, recipient_for
from .entities import OperatorProfile
from .exceptions import (
    DispatchResult,
    GuardRefusal,
    PreviewOutcome,
    ResolutionGap,
    TemplateNotFoundError,
)
from .fetching import EntityLists, load_entity_lists
from .ports import Dispatcher, EntityProvider, RuleStore, TemplateProvider
from .renderer import RenderedMessage, effective_content, missing_variables, render
from .resolver import TriggerContext, VariableMap, resolve
from .rules import AutomationRule, DraftRule, FieldError, InlineContent, Template, validate_rule
from .store import OrmRuleStore, OrmTemplateProvider
from .triggers import as_canonical, list_triggers, trigger_for_status

logger = logging.getLogger(__name__)

DraftLike = Union[DraftRule, Mapping[str, Any]]


def operator_for(user) -> OperatorProfile:
    """Operator profile for a Django user, with the organization as ``client_name``."""
    return OperatorProfile.from_user(user, client_name=getattr(settings, 'AUTOMATIONS_PLATFORM_NAME', ''))


def placeholder_domains() -> List[str]:
    domains = getattr(settings, 'AUTOMATIONS_PLACEHOLDER_EMAIL_DOMAINS', ['example.com'])
    return [domain.strip().lower().lstrip('@') for domain in domains if domain and domain.strip()]


def guard_recipient(variables: Mapping[str, str]) -> str:
    """The email address a test run would bind to: the candidate, else the sender."""
    return variables.get('candidate_email') or variables.get('sender_email') or ''


def check_recipient(recipient: Optional[str], domains: Optional[Sequence[str]] = None) -> Optional[GuardRefusal]:
    """
    Guard for test runs. Refuses an empty recipient and any address on a
    placeholder domain (``example.com`` by default).
    """
    recipient = (recipient or '').strip()
    if not recipient:
        return GuardRefusal(reason='No recipient email address is available for the selected test data')
    domains = placeholder_domains() if domains is None else domains
    lowered = recipient.lower()
    for domain in domains:
        if lowered.endswith(f'@{domain}'):
            return GuardRefusal(
                reason=f'{recipient} is a placeholder address; select a candidate or sender with a real email',
                recipient=recipient,
            )
    return None


# Entities whose contact details address a message, in order of preference.
RECIPIENT_KINDS = (EntityKind.CANDIDATE, EntityKind.SENDER)


def recipient_problem(context: TriggerContext, problems: Mapping[EntityKind, str]) -> Optional[str]:
    """
    Why the entity a message would be addressed to is unavailable, or None.

    Only the first recipient entity the context names matters: a missing
    candidate must not let the message fall through to the sender.
    """
    for kind in RECIPIENT_KINDS:
        if context.entity_id(kind) is not None:
            return problems.get(kind)
    return None


def _by_kind(problems: Mapping[EntityKind, str]) -> Dict[str, str]:
    return {kind.value: message for kind, message in problems.items()}


class AutomationEngine:
    """Event-triggered messaging automation engine."""

    def __init__(
        self,
        entity_provider: EntityProvider,
        template_provider: TemplateProvider,
        rule_store: RuleStore,
        dispatcher: Dispatcher,
        placeholder_domains: Optional[Sequence[str]] = None,
    ):
        self.entity_provider = entity_provider
        self.template_provider = template_provider
        self.rule_store = rule_store
        self.dispatcher = dispatcher
        self.placeholder_domains = placeholder_domains

    # =========================================================================
    # EDITOR
    # =========================================================================

    def validate_rule(self, draft: DraftLike) -> List[FieldError]:
        return validate_rule(self._as_draft(draft))

    def group_variables(self, subject: Optional[str], body: Optional[str]) -> Dict[EntityKind, List[Dict[str, str]]]:
        return catalog.group_variables(subject, body)

    def list_triggers(self) -> List[Dict[str, str]]:
        return list_triggers()

    def list_variables(self) -> Dict[str, Dict[str, str]]:
        return catalog.catalog_as_dict()

    def list_templates(self) -> List[Template]:
        return self.template_provider.fetch_templates()

    # =========================================================================
    # RULE LIFECYCLE
    # =========================================================================

    def list_rules(self) -> List[AutomationRule]:
        return self.rule_store.load_rules()

    def get_rule(self, rule_id: Any) -> AutomationRule:
        return self.rule_store.get_rule(rule_id)

    def create_rule(self, draft: DraftLike, created_by: Any = None) -> AutomationRule:
        return self.rule_store.create_rule(self._as_draft(draft), created_by=created_by)

    def update_rule(self, rule_id: Any, changes: Mapping[str, Any]) -> AutomationRule:
        """Apply a partial edit. The status only changes when ``changes`` names it."""
        current = self.rule_store.get_rule(rule_id)
        draft = DraftRule.from_rule(current).patched(changes)
        return self.rule_store.update_rule(rule_id, draft)

    def toggle_rule(self, rule_id: Any) -> AutomationRule:
        return self.rule_store.toggle_rule(rule_id)

    def delete_rule(self, rule_id: Any) -> None:
        self.rule_store.delete_rule(rule_id)

    # =========================================================================
    # RENDERING
    # =========================================================================

    def load_entities(self, kinds: Optional[Iterable[EntityKind]] = None) -> EntityLists:
        return load_entity_lists(self.entity_provider, kinds=kinds)

    def content_for(self, rule: AutomationRule) -> Tuple[str, str]:
        """Subject and body templates for a rule, looking up catalog content."""
        if isinstance(rule.content, InlineContent):
            return effective_content(rule.content)
        template = self.template_provider.get_template(rule.content.template_id)
        if template is None:
            raise TemplateNotFoundError(rule.content.template_id)
        return effective_content(rule.content, template)

    def resolve_context(
        self,
        context: TriggerContext,
        operator: Optional[OperatorProfile] = None,
        entities: Optional[EntityLists] = None,
    ) -> VariableMap:
        if entities is None:
            entities = self.load_entities(context.requested_kinds())
        return resolve(context, entities.select(context), operator)

    def render_rule(
        self,
        rule: AutomationRule,
        context: TriggerContext,
        operator: Optional[OperatorProfile] = None,
        entities: Optional[EntityLists] = None,
    ) -> Tuple[RenderedMessage, VariableMap, List[ResolutionGap]]:
        subject, body = self.content_for(rule)
        variables = self.resolve_context(context, operator, entities)
        gaps = [ResolutionGap(name) for name in missing_variables(subject, body, variables)]
        return render(subject, body, variables), variables, gaps

    def preview(
        self,
        rule: AutomationRule,
        context: TriggerContext,
        operator: Optional[OperatorProfile] = None,
        entities: Optional[EntityLists] = None,
    ) -> PreviewOutcome:
        """
        Render a rule against sample data. No guard, no send, no side effects.
        Entities that could not be loaded are reported in ``entity_errors``.
        """
        if entities is None:
            entities = self.load_entities(context.requested_kinds())
        message, variables, gaps = self.render_rule(rule, context, operator, entities)
        return PreviewOutcome(
            success=True,
            subject=message.subject,
            body=message.body,
            recipient=recipient_for(rule.channel, variables),
            variables=dict(variables),
            gaps=gaps,
            entity_errors=_by_kind(entities.unresolved(context)),
        )

    def run_test(
        self,
        rule: AutomationRule,
        context: TriggerContext,
        operator: Optional[OperatorProfile] = None,
        entities: Optional[EntityLists] = None,
    ) -> PreviewOutcome:
        """
        Guarded test run: resolve and render against operator-selected sample
        entities and return the preview instead of sending.

        Refused when the selected candidate (or sender) could not be loaded,
        and when the recipient email is empty or on a placeholder domain.
        Never calls the dispatcher and never touches ``last_run_at``.
        """
        if entities is None:
            entities = self.load_entities(context.requested_kinds())
        message, variables, gaps = self.render_rule(rule, context, operator, entities)
        problems = entities.unresolved(context)
        recipient = guard_recipient(variables)

        problem = recipient_problem(context, problems)
        if problem is not None:
            refusal = GuardRefusal(reason=f'Test data is incomplete: {problem}')
        else:
            refusal = check_recipient(recipient, self.placeholder_domains)
        if refusal is not None:
            logger.info(f"Test run of automation {rule.id} refused: {refusal.reason}")
            return PreviewOutcome(
                success=False,
                recipient=recipient,
                gaps=gaps,
                refusal=refusal,
                entity_errors=_by_kind(problems),
            )

        return PreviewOutcome(
            success=True,
            subject=message.subject,
            body=message.body,
            recipient=recipient,
            variables=dict(variables),
            gaps=gaps,
            entity_errors=_by_kind(problems),
        )

    # =========================================================================
    # REAL EXECUTION
    # =========================================================================

    def fire(
        self,
        trigger: Any,
        context: TriggerContext,
        operator: Optional[OperatorProfile] = None,
    ) -> List[DispatchResult]:
        """
        Run every active rule bound to ``trigger`` and dispatch its message.

        A successful send stamps ``last_run_at``, increments ``sent_count`` and
        records a ``SentMessage``; a failed one is reported in its
        ``DispatchResult`` and left as is. When any entity the context names
        cannot be loaded, nothing is sent and every rule reports the failure.
        """
        canonical = as_canonical(trigger)
        if canonical is None:
            logger.warning(f"Ignoring unknown automation trigger {trigger!r}")
            return []

        rules = self.rule_store.active_rules_for(canonical)
        if not rules:
            logger.debug(f"No active automations for {canonical.value}")
            return []

        entities = self.load_entities(context.requested_kinds())
        problems = entities.unresolved(context)
        if problems:
            error = 'Entity data unavailable: ' + '; '.join(problems.values())
            logger.error(f"Not sending {len(rules)} automation(s) for {canonical.value}: {error}")
            return [
                DispatchResult(success=False, rule_id=rule.id, channel=rule.channel.value, error_message=error)
                for rule in rules
            ]

        results = []
        for rule in rules:
            results.append(self._fire_rule(rule, canonical, context, operator, entities))
        return results

    def fire_status_change(
        self,
        context: TriggerContext,
        new_status: str,
        previous_status: Optional[str] = None,
        operator: Optional[OperatorProfile] = None,
    ) -> List[DispatchResult]:
        """
        Fire the automations for a candidate status change. The old and new
        status are available to templates as ``previous_status``,
        ``new_status`` and ``status_change``.
        """
        trigger = trigger_for_status(new_status)
        if trigger is None:
            logger.info(f"Status change to {new_status!r} fires no automation")
            return []

        custom = dict(context.custom_variables)
        custom.update({
            'status_change': new_status,
            'new_status': new_status,
            'previous_status': previous_status or '',
        })
        return self.fire(trigger, replace(context, custom_variables=custom), operator)

    def _fire_rule(self, rule, trigger, context, operator, entities) -> DispatchResult:
        try:
            message, variables, _ = self.render_rule(rule, context, operator, entities)
        except TemplateNotFoundError as e:
            logger.error(f"Automation {rule.id} cannot render: {e.message}")
            return DispatchResult(
                success=False,
                rule_id=rule.id,
                channel=rule.channel.value,
                error_message=e.message,
            )

        recipient = recipient_for(rule.channel, variables)
        if not recipient:
            logger.warning(f"Automation {rule.id} has no {rule.channel.value} recipient")
            return DispatchResult(
                success=False,
                rule_id=rule.id,
                channel=rule.channel.value,
                error_message=f'No {rule.channel.label} recipient for this event',
            )

        result = self.dispatcher.dispatch(
            rule.channel,
            recipient,
            message,
            metadata={'rule_id': rule.id, 'trigger': trigger.value},
        )
        if result.success:
            self.rule_store.record_run(rule.id, timezone.now(), message=message, result=result)
        else:
            logger.warning(f"Automation {rule.id} dispatch failed: {result.error_message}")
        return result

    @staticmethod
    def _as_draft(draft: DraftLike) -> DraftRule:
        return draft if isinstance(draft, DraftRule) else DraftRule.from_payload(draft)


def get_engine() -> AutomationEngine:
    """Engine wired to the REST backend, the local rule/template tables and the channel services."""
    return AutomationEngine(
        entity_provider=RecruitmentBackendClient(),
        template_provider=OrmTemplateProvider(),
        rule_store=OrmRuleStore(),
        dispatcher=DispatchCoordinator(),
    )
