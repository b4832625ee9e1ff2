"""
Error taxonomy for the automation engine.

Parsing, taxonomy lookup, resolution and rendering never raise. Only rule
persistence, template lookup, entity fetches and dispatch can fail, and those
failures reach the caller with the collaborator's original message.

Guard refusals and resolution gaps are values, not exceptions: they are
returned inside ``PreviewOutcome`` for the presentation layer to surface.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .rules import FieldError


class AutomationError(Exception):
    """Base class for automation engine errors."""


class RuleValidationError(AutomationError):
    """A draft rule failed validation; nothing was persisted."""

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        fields = ', '.join(error.field for error in self.errors)
        super().__init__(f'Invalid automation rule: {fields}')

    def as_dict(self) -> Dict[str, str]:
        return {error.field: error.message for error in self.errors}


class CollaboratorFailure(AutomationError):
    """An external system (backend, database, transport) failed."""

    def __init__(self, message: str, source: str = ''):
        self.source = source
        self.message = message
        super().__init__(message)


class EntityFetchError(CollaboratorFailure):
    """Loading one entity list failed."""

    def __init__(self, message: str, kind: Any = None):
        self.kind = kind
        super().__init__(message, source=f'entities:{getattr(kind, "value", kind)}')


class RuleNotFoundError(CollaboratorFailure):
    def __init__(self, rule_id: Any):
        self.rule_id = rule_id
        super().__init__(f'Automation rule {rule_id} not found', source='rules')


class TemplateNotFoundError(CollaboratorFailure):
    def __init__(self, template_id: Any):
        self.template_id = template_id
        super().__init__(f'Template {template_id} not found', source='templates')


@dataclass(frozen=True)
class GuardRefusal:
    """A test run was refused because the sample data would not bind to a real recipient."""

    reason: str
    recipient: str = ''

    def as_dict(self) -> Dict[str, str]:
        return {'reason': self.reason, 'recipient': self.recipient}


@dataclass(frozen=True)
class ResolutionGap:
    """A placeholder with no matching variable; rendered as the empty string."""

    variable: str


@dataclass(frozen=True)
class PreviewOutcome:
    """Result of a preview or guarded test run. Never carries a send."""

    success: bool
    subject: str = ''
    body: str = ''
    recipient: str = ''
    variables: Dict[str, str] = field(default_factory=dict)
    gaps: List[ResolutionGap] = field(default_factory=list)
    refusal: Optional[GuardRefusal] = None
    entity_errors: Dict[str, str] = field(default_factory=dict)

    @property
    def missing_variables(self) -> List[str]:
        return [gap.variable for gap in self.gaps]

    def as_dict(self) -> Dict[str, Any]:
        data = {
            'success': self.success,
            'preview': {
                'subject': self.subject,
                'body': self.body,
                'recipient': self.recipient,
                'variables': dict(self.variables),
            } if self.success else None,
            'missing_variables': self.missing_variables,
            'entity_errors': dict(self.entity_errors),
        }
        if self.refusal is not None:
            data['refusal'] = self.refusal.as_dict()
        return data


@dataclass(frozen=True)
class DispatchResult:
    """Result of one real send, shaped after the notification service results."""

    success: bool
    rule_id: Any = None
    channel: Optional[str] = None
    recipient: str = ''
    external_id: Optional[str] = None
    error_message: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'rule_id': self.rule_id,
            'channel': self.channel,
            'recipient': self.recipient,
            'external_id': self.external_id,
            'error': self.error_message,
        }
