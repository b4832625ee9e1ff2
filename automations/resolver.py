"""
Variable resolution for automation templates.

Turns a trigger context (which entities an event concerns) plus the loaded
entity snapshots into a flat, string-valued variable map. Resolution is pure
and total: a missing entity contributes no keys and never raises.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from .catalog import EntityKind
from .entities import (
    ApplicationSnapshot,
    CandidateSnapshot,
    CompanySnapshot,
    EntitySnapshot,
    InterviewSnapshot,
    JobSnapshot,
    OperatorProfile,
    SenderSnapshot,
    same_id,
)
from .placeholders import is_identifier

logger = logging.getLogger(__name__)

VariableMap = Mapping[str, str]

# Sender defaults when neither a sender entity nor operator details are known.
DEFAULT_SENDER_NAME = 'Current User'
DEFAULT_SENDER_EMAIL = 'user@example.com'
DEFAULT_SENDER_PHONE = 'N/A'

_CONTEXT_KEYS = {
    EntityKind.CANDIDATE: ('candidate_id', 'candidateId'),
    EntityKind.JOB: ('job_id', 'jobId'),
    EntityKind.COMPANY: ('company_id', 'companyId'),
    EntityKind.SENDER: ('sender_id', 'senderId'),
    EntityKind.INTERVIEW: ('interview_id', 'interviewId'),
    EntityKind.APPLICATION: ('application_id', 'applicationId'),
}


@dataclass(frozen=True)
class TriggerContext:
    """Which entities an event (or a test run) is about. Any id may be absent."""

    candidate_id: Any = None
    job_id: Any = None
    company_id: Any = None
    sender_id: Any = None
    interview_id: Any = None
    application_id: Any = None
    custom_variables: Mapping[str, Any] = field(default_factory=dict)

    def entity_id(self, kind: EntityKind) -> Any:
        value = getattr(self, EntityKind(kind).id_field)
        return None if value in (None, '') else value

    def requested_kinds(self):
        return [kind for kind in EntityKind if self.entity_id(kind) is not None]

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> 'TriggerContext':
        """Accept both snake_case and the dashboard's camelCase keys."""
        payload = payload or {}
        ids = {}
        for kind, keys in _CONTEXT_KEYS.items():
            for key in keys:
                if payload.get(key) not in (None, ''):
                    ids[kind.id_field] = payload[key]
                    break
        custom = payload.get('custom_variables') or payload.get('customVariables') or {}
        if not isinstance(custom, Mapping):
            custom = {}
        return cls(custom_variables=dict(custom), **ids)

    def to_payload(self) -> Dict[str, Any]:
        data = {kind.id_field: self.entity_id(kind) for kind in EntityKind}
        data['custom_variables'] = dict(self.custom_variables)
        return data


def as_text(value: Any) -> str:
    """Coerce a snapshot field to the string stored in the variable map."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        return True
    if isinstance(value, str):
        try:
            float(value)
        except ValueError:
            return False
        return True
    return False


def _money(value: Any) -> str:
    if value in (None, '', 0):
        return ''
    return f'${as_text(value)}' if _is_number(value) else as_text(value)


def _years(value: Any) -> str:
    if value in (None, '', 0):
        return ''
    return f'{as_text(value)} years' if _is_number(value) else as_text(value)


def _candidate_variables(candidate: CandidateSnapshot) -> Dict[str, str]:
    return {
        'candidate_name': as_text(candidate.name),
        'candidate_email': as_text(candidate.email),
        'candidate_phone': as_text(candidate.phone),
        'candidate_location': as_text(candidate.location),
        'candidate_position': as_text(candidate.position),
        'candidate_company': as_text(candidate.company),
        'candidate_experience': _years(candidate.experience),
        'candidate_notice_period': as_text(candidate.notice_period),
        'candidate_expected_salary': _money(candidate.expected_salary),
        'candidate_linkedin': as_text(candidate.linkedin),
        'candidate_github': as_text(candidate.github),
        'candidate_portfolio': as_text(candidate.portfolio),
    }


def _job_variables(job: JobSnapshot) -> Dict[str, str]:
    return {
        'job_title': as_text(job.title),
        'job_type': as_text(job.type),
        'job_department': as_text(job.department),
        'job_location': as_text(job.location),
        'job_salary_min': _money(job.salary_min),
        'job_salary_max': _money(job.salary_max),
        'job_experience_level': as_text(job.experience_level),
        'job_work_type': as_text(job.work_type),
        'job_deadline': as_text(job.deadline),
        'job_description': as_text(job.description),
    }


def _company_variables(company: CompanySnapshot) -> Dict[str, str]:
    address = f'{as_text(company.address_line1)} {as_text(company.address_line2)}'.strip()
    return {
        'company_name': as_text(company.name),
        'company_industry': as_text(company.industry),
        'company_size': as_text(company.size),
        'company_location': as_text(company.location),
        'company_website': as_text(company.website),
        'company_phone': as_text(company.phone),
        'company_email': as_text(company.email),
        'company_address': address,
        'company_city': as_text(company.city),
        'company_state': as_text(company.state),
        'company_country': as_text(company.country),
    }


def _split_name(full_name: str):
    parts = full_name.split(' ')
    return parts[0], ' '.join(parts[1:])


def _sender_variables(sender: SenderSnapshot) -> Dict[str, str]:
    name = as_text(sender.name)
    first, last = _split_name(name)
    return {
        'sender_name': name,
        'sender_first_name': as_text(sender.first_name) or first,
        'sender_last_name': as_text(sender.last_name) or last,
        'sender_email': as_text(sender.email),
        'sender_phone': as_text(sender.phone),
    }


def _interview_variables(interview: InterviewSnapshot) -> Dict[str, str]:
    return {
        'interview_id': as_text(interview.id),
        'interview_type': as_text(interview.type),
        'interview_date': as_text(interview.date),
        'interview_time': as_text(interview.time),
        'interview_location': as_text(interview.location),
        'interview_notes': as_text(interview.notes),
    }


def _application_variables(application: ApplicationSnapshot) -> Dict[str, str]:
    return {
        'application_id': as_text(application.id),
        'application_date': as_text(application.date),
        'application_status': as_text(application.status),
    }


VARIABLE_BUILDERS: Mapping[EntityKind, Callable[[Any], Dict[str, str]]] = MappingProxyType({
    EntityKind.CANDIDATE: _candidate_variables,
    EntityKind.JOB: _job_variables,
    EntityKind.COMPANY: _company_variables,
    EntityKind.SENDER: _sender_variables,
    EntityKind.INTERVIEW: _interview_variables,
    EntityKind.APPLICATION: _application_variables,
})


def operator_sender_variables(operator: Optional[OperatorProfile]) -> Dict[str, str]:
    """Sender variables taken from the acting operator's own profile."""
    operator = operator or OperatorProfile()
    joined = f'{as_text(operator.first_name)} {as_text(operator.last_name)}'.strip()
    name = as_text(operator.name) or joined or DEFAULT_SENDER_NAME
    first, last = _split_name(name)
    return {
        'sender_name': name,
        'sender_first_name': as_text(operator.first_name) or first,
        'sender_last_name': as_text(operator.last_name) or last,
        'sender_email': as_text(operator.email) or DEFAULT_SENDER_EMAIL,
        'sender_phone': as_text(operator.phone) or DEFAULT_SENDER_PHONE,
    }


def variables_for(snapshot: EntitySnapshot) -> Dict[str, str]:
    """Variables contributed by one snapshot, prefixed by its entity kind."""
    return VARIABLE_BUILDERS[snapshot.kind](snapshot)


def resolve(
    context: TriggerContext,
    snapshots: Mapping[EntityKind, EntitySnapshot],
    operator: Optional[OperatorProfile] = None,
) -> VariableMap:
    """
    Build the variable map for one render pass.

    Only entities named in ``context`` contribute, and only when the loaded
    snapshot carries the same id. Sender variables fall back to the operator
    profile. Custom variables from the context are merged last, then
    ``client_name`` is set from the operator's organization.
    """
    variables: Dict[str, str] = {}

    for kind in EntityKind:
        wanted = context.entity_id(kind)
        snapshot = snapshots.get(kind)
        if wanted is None or snapshot is None:
            continue
        if not same_id(snapshot.id, wanted):
            logger.debug(
                f"Ignoring {kind.value} snapshot {snapshot.id!r}: context asked for {wanted!r}"
            )
            continue
        variables.update(variables_for(snapshot))

    if 'sender_name' not in variables:
        variables.update(operator_sender_variables(operator))

    for key, value in context.custom_variables.items():
        if is_identifier(key):
            variables[key] = as_text(value)

    variables['client_name'] = as_text(operator.client_name) if operator else ''

    return MappingProxyType(variables)
