"""
Trigger taxonomy for messaging automations.

Every automation rule fires on one canonical trigger. Rules created before the
canonical set existed stored free-text descriptions ("On application
submission", "24 hours before interview", ...); those are mapped onto the
canonical ids through a fixed compatibility table.

All tables here are module-level constants built at import time and never
mutated afterwards.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Optional, Union


class CanonicalTrigger(str, Enum):
    """Enumeration of all events that can fire an automation."""

    # Applications
    APPLICATION_RECEIVED = 'application_received'

    # Interviews
    INTERVIEW_SCHEDULED = 'interview_scheduled'
    INTERVIEW_REMINDER = 'interview_reminder'
    INTERVIEW_COMPLETED = 'interview_completed'
    INTERVIEW_CANCELLED = 'interview_cancelled'
    INTERVIEW_RESCHEDULED = 'interview_rescheduled'
    INTERVIEW_UPDATED = 'interview_updated'

    # Decisions
    CANDIDATE_ACCEPTED = 'candidate_accepted'
    CANDIDATE_REJECTED = 'candidate_rejected'
    OFFER_SENT = 'offer_sent'

    # Onboarding
    WELCOME_NEW_HIRE = 'welcome_new_hire'


# Free-text triggers stored by older versions of the rule editor.
# "When candidate status changes" has no single canonical equivalent and
# resolves to candidate_rejected.
LEGACY_TRIGGERS: Dict[str, CanonicalTrigger] = MappingProxyType({
    'On application submission': CanonicalTrigger.APPLICATION_RECEIVED,
    '24 hours before interview': CanonicalTrigger.INTERVIEW_REMINDER,
    'Interview scheduled': CanonicalTrigger.INTERVIEW_SCHEDULED,
    'When candidate status changes': CanonicalTrigger.CANDIDATE_REJECTED,
})

DISPLAY_NAMES: Dict[CanonicalTrigger, str] = MappingProxyType({
    CanonicalTrigger.APPLICATION_RECEIVED: 'Application Received',
    CanonicalTrigger.INTERVIEW_SCHEDULED: 'Interview Scheduled',
    CanonicalTrigger.INTERVIEW_REMINDER: 'Interview Reminder',
    CanonicalTrigger.INTERVIEW_COMPLETED: 'Interview Completed',
    CanonicalTrigger.INTERVIEW_CANCELLED: 'Interview Cancelled',
    CanonicalTrigger.INTERVIEW_RESCHEDULED: 'Interview Rescheduled',
    CanonicalTrigger.INTERVIEW_UPDATED: 'Interview Updated',
    CanonicalTrigger.CANDIDATE_ACCEPTED: 'Candidate Accepted',
    CanonicalTrigger.CANDIDATE_REJECTED: 'Candidate Rejected',
    CanonicalTrigger.OFFER_SENT: 'Offer Sent',
    CanonicalTrigger.WELCOME_NEW_HIRE: 'Welcome New Hire',
})

_CANONICAL_BY_VALUE = MappingProxyType({trigger.value: trigger for trigger in CanonicalTrigger})

TriggerLike = Union[CanonicalTrigger, str, None]


def canonicalize_trigger(raw: TriggerLike) -> Union[CanonicalTrigger, str]:
    """
    Map a raw trigger value onto a canonical trigger.

    Canonical ids and legacy descriptions resolve to a ``CanonicalTrigger``.
    Anything else is returned unchanged so callers can show it as an unknown
    trigger. ``None`` becomes the empty string.
    """
    if raw is None:
        return ''
    if isinstance(raw, CanonicalTrigger):
        return raw
    if raw in _CANONICAL_BY_VALUE:
        return _CANONICAL_BY_VALUE[raw]
    return LEGACY_TRIGGERS.get(raw, raw)


def as_canonical(raw: TriggerLike) -> Optional[CanonicalTrigger]:
    """Return the canonical trigger for ``raw``, or None when it is unknown."""
    trigger = canonicalize_trigger(raw)
    return trigger if isinstance(trigger, CanonicalTrigger) else None


def is_known_trigger(raw: TriggerLike) -> bool:
    return as_canonical(raw) is not None


def display_name(trigger: TriggerLike) -> str:
    """Human display name for a trigger, falling back to the raw id."""
    canonical = as_canonical(trigger)
    if canonical is not None and canonical in DISPLAY_NAMES:
        return DISPLAY_NAMES[canonical]
    if isinstance(trigger, CanonicalTrigger):
        return trigger.value
    return trigger or ''


def trigger_choices() -> List[tuple]:
    """(value, label) pairs for model and serializer choices."""
    return [(trigger.value, DISPLAY_NAMES.get(trigger, trigger.value)) for trigger in CanonicalTrigger]


def list_triggers() -> List[Dict[str, str]]:
    """All canonical triggers with their display names, for the rule editor."""
    return [{'value': value, 'label': label} for value, label in trigger_choices()]


# Candidate status keywords and the trigger a status change to them fires,
# checked in order against the lowercased status.
STATUS_TRIGGERS = (
    (('rejected', 'declined'), CanonicalTrigger.CANDIDATE_REJECTED),
    (('accepted', 'hired'), CanonicalTrigger.CANDIDATE_ACCEPTED),
    (('offer',), CanonicalTrigger.OFFER_SENT),
)


def trigger_for_status(status: Optional[str]) -> Optional[CanonicalTrigger]:
    """
    Trigger fired when a candidate moves to ``status``, or None when the
    status change fires no automation ("Screening", "Interviewing", ...).
    """
    if not status:
        return None
    lowered = str(status).lower()
    for keywords, trigger in STATUS_TRIGGERS:
        if any(keyword in lowered for keyword in keywords):
            return trigger
    return None
