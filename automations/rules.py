"""
Automation rule value types and the rule lifecycle.

An automation rule binds a canonical trigger to a channel and to content,
which is either a reference into the template catalog or inline
subject/body text. Rules are immutable values; every lifecycle transition
returns a new value.

Lifecycle:
    Create -> Active | Inactive
    Update  (content/trigger/channel edits, status untouched unless given)
    ToggleStatus  Active <-> Inactive
    Delete  (terminal)
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .triggers import CanonicalTrigger, as_canonical, canonicalize_trigger, is_known_trigger


class Channel(str, Enum):
    """Delivery medium for a rendered message."""

    EMAIL = 'email'
    SMS = 'sms'
    IN_APP = 'in_app'

    @property
    def label(self) -> str:
        return CHANNEL_LABELS[self]


CHANNEL_LABELS = {
    Channel.EMAIL: 'Email',
    Channel.SMS: 'SMS',
    Channel.IN_APP: 'In-app notification',
}


class RuleStatus(str, Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'

    @property
    def label(self) -> str:
        return self.value.title()

    def toggled(self) -> 'RuleStatus':
        return RuleStatus.INACTIVE if self is RuleStatus.ACTIVE else RuleStatus.ACTIVE


class ContentMode(str, Enum):
    TEMPLATE = 'template'
    CUSTOM = 'custom'


def parse_channel(raw: Any) -> Optional[Channel]:
    """
    Parse a channel value as stored by any version of the dashboard
    ("email", "Email", "SMS", "In-app notification", "in_app").
    Returns None when the value is empty or unrecognised.
    """
    if isinstance(raw, Channel):
        return raw
    if not raw or not isinstance(raw, str):
        return None
    lowered = raw.strip().lower()
    if 'email' in lowered:
        return Channel.EMAIL
    if 'sms' in lowered:
        return Channel.SMS
    if 'notification' in lowered or lowered in ('in_app', 'in-app', 'in app'):
        return Channel.IN_APP
    return None


def parse_status(raw: Any, default: RuleStatus = RuleStatus.ACTIVE) -> Optional[RuleStatus]:
    """
    Parse "active"/"inactive" in any case, or a boolean. Empty values give
    ``default``; anything else is unrecognised and gives None.
    """
    if isinstance(raw, RuleStatus):
        return raw
    if isinstance(raw, bool):
        return RuleStatus.ACTIVE if raw else RuleStatus.INACTIVE
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    try:
        return RuleStatus(str(raw).strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class TemplateRef:
    """Content taken from the template catalog at render time."""

    template_id: Any


@dataclass(frozen=True)
class InlineContent:
    """Operator-authored subject and body, used verbatim."""

    subject: str
    body: str


RuleContent = Union[TemplateRef, InlineContent]


@dataclass(frozen=True)
class Template:
    """A catalog template. ``body`` may contain backslash-escaped newlines."""

    id: Any
    name: str
    subject: str = ''
    body: str = ''
    description: str = ''
    category: str = ''

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'Template':
        return cls(
            id=payload.get('id'),
            name=payload.get('name') or '',
            subject=payload.get('subject') or '',
            body=payload.get('content') or payload.get('body') or '',
            description=payload.get('description') or '',
            category=payload.get('category') or '',
        )


@dataclass(frozen=True)
class AutomationRule:
    id: Any
    name: str
    description: str
    trigger: Union[CanonicalTrigger, str]
    channel: Channel
    content: RuleContent
    status: RuleStatus = RuleStatus.ACTIVE
    last_run_at: Optional[datetime] = None
    sent_count: int = 0

    @property
    def is_active(self) -> bool:
        return self.status is RuleStatus.ACTIVE

    @property
    def content_mode(self) -> ContentMode:
        return ContentMode.TEMPLATE if isinstance(self.content, TemplateRef) else ContentMode.CUSTOM


def toggle_status(rule: AutomationRule) -> AutomationRule:
    """Flip Active <-> Inactive. Applying it twice restores the original status."""
    return replace(rule, status=rule.status.toggled())


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {'field': self.field, 'message': self.message}


@dataclass(frozen=True)
class DraftRule:
    """
    An operator's edit of a rule before it is validated and persisted.

    ``content_mode`` picks between a template reference (``template_id``) and
    custom inline content (``subject``/``body``).
    """

    name: str = ''
    description: str = ''
    trigger: Any = None
    channel: Any = None
    content_mode: Optional[ContentMode] = None
    template_id: Any = None
    subject: str = ''
    body: str = ''
    # A RuleStatus, or the raw value when it is not recognised
    status: Any = RuleStatus.ACTIVE

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'DraftRule':
        """
        Build a draft from editor form data.

        The legacy form sends ``template`` as either ``"custom"`` or a template
        id, and ``message`` for the body; both spellings are accepted.
        """
        mode = payload.get('content_mode')
        template_id = payload.get('template_id')
        legacy_template = payload.get('template')
        if legacy_template not in (None, ''):
            if str(legacy_template).lower() == ContentMode.CUSTOM.value:
                mode = mode or ContentMode.CUSTOM
            else:
                mode = mode or ContentMode.TEMPLATE
                template_id = template_id if template_id not in (None, '') else legacy_template
        try:
            mode = ContentMode(mode) if mode else None
        except ValueError:
            mode = None
        body = payload.get('body')
        if body is None:
            body = payload.get('message')
        status = parse_status(payload.get('status'))
        return cls(
            name=payload.get('name') or '',
            description=payload.get('description') or '',
            trigger=payload.get('trigger'),
            channel=payload.get('channel'),
            content_mode=mode,
            template_id=template_id if template_id not in ('',) else None,
            subject=payload.get('subject') or '',
            body=body or '',
            status=status if status is not None else payload.get('status'),
        )

    @classmethod
    def from_rule(cls, rule: AutomationRule) -> 'DraftRule':
        if isinstance(rule.content, TemplateRef):
            mode, template_id, subject, body = ContentMode.TEMPLATE, rule.content.template_id, '', ''
        else:
            mode, template_id, subject, body = ContentMode.CUSTOM, None, rule.content.subject, rule.content.body
        return cls(
            name=rule.name,
            description=rule.description,
            trigger=rule.trigger,
            channel=rule.channel,
            content_mode=mode,
            template_id=template_id,
            subject=subject,
            body=body,
            status=rule.status,
        )

    def patched(self, changes: Mapping[str, Any]) -> 'DraftRule':
        """
        Apply a partial update. Only the keys present in ``changes`` move;
        in particular the status is kept unless ``status`` is given.
        """
        merged = self.to_payload()
        if 'template' in changes and 'content_mode' not in changes:
            merged.pop('content_mode')
            merged.pop('template_id')
        if 'message' in changes and 'body' not in changes:
            merged.pop('body')
        merged.update(changes)
        return DraftRule.from_payload(merged)

    def to_payload(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'description': self.description,
            'trigger': self.trigger.value if isinstance(self.trigger, CanonicalTrigger) else self.trigger,
            'channel': self.channel.value if isinstance(self.channel, Channel) else self.channel,
            'content_mode': self.content_mode.value if self.content_mode else None,
            'template_id': self.template_id,
            'subject': self.subject,
            'body': self.body,
            'status': self.status.value if isinstance(self.status, RuleStatus) else self.status,
        }

    def content(self) -> Optional[RuleContent]:
        if self.content_mode is ContentMode.TEMPLATE and self.template_id is not None:
            return TemplateRef(template_id=self.template_id)
        if self.content_mode is ContentMode.CUSTOM:
            return InlineContent(subject=self.subject, body=self.body)
        return None

    def to_rule(self, rule_id: Any = None, **extra) -> AutomationRule:
        """Build the rule value. Call only on a draft that validated cleanly."""
        return AutomationRule(
            id=rule_id,
            name=self.name.strip(),
            description=self.description.strip(),
            trigger=as_canonical(self.trigger),
            channel=parse_channel(self.channel),
            content=self.content(),
            status=self.status,
            **extra,
        )


def validate_rule(draft: DraftRule) -> List[FieldError]:
    """
    Check a draft before persistence. Returns one error per offending field,
    in form order; an empty list means the draft is valid.
    """
    errors: List[FieldError] = []

    if not (draft.name or '').strip():
        errors.append(FieldError('name', 'Automation name is required'))
    if not (draft.description or '').strip():
        errors.append(FieldError('description', 'Description is required'))

    if not draft.trigger:
        errors.append(FieldError('trigger', 'Trigger type is required'))
    elif not is_known_trigger(draft.trigger):
        errors.append(FieldError('trigger', f"Unknown trigger type '{canonicalize_trigger(draft.trigger)}'"))

    if not draft.channel:
        errors.append(FieldError('channel', 'Channel is required'))
    elif parse_channel(draft.channel) is None:
        errors.append(FieldError('channel', f"Unknown channel '{draft.channel}'"))

    if draft.content_mode is None:
        errors.append(FieldError('template', 'Template is required'))
    elif draft.content_mode is ContentMode.TEMPLATE:
        if draft.template_id in (None, ''):
            errors.append(FieldError('template', 'Template is required'))
    else:
        if not (draft.subject or '').strip():
            errors.append(FieldError('subject', 'Subject is required for custom template'))
        if not (draft.body or '').strip():
            errors.append(FieldError('body', 'Message is required for custom template'))

    if not isinstance(draft.status, RuleStatus):
        errors.append(FieldError('status', f"Unknown status '{draft.status}'"))

    return errors
