"""
Entity variable catalog.

Declares, per entity kind, which template variables that entity supplies and
what each one means. The rule editor uses the catalog to show an operator
which live-data sources a template depends on.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from .placeholders import extract_from_pair


class EntityKind(str, Enum):
    """The closed set of entities that can feed template variables."""

    CANDIDATE = 'candidate'
    JOB = 'job'
    COMPANY = 'company'
    SENDER = 'sender'
    INTERVIEW = 'interview'
    APPLICATION = 'application'

    @property
    def id_field(self) -> str:
        """Name of the trigger-context field that carries this entity's id."""
        return f'{self.value}_id'


# Backend list resource for each entity kind. Senders are recruiters.
ENTITY_RESOURCES: Mapping[EntityKind, str] = MappingProxyType({
    EntityKind.CANDIDATE: 'candidates',
    EntityKind.JOB: 'jobs',
    EntityKind.COMPANY: 'companies',
    EntityKind.SENDER: 'recruiters',
    EntityKind.INTERVIEW: 'interviews',
    EntityKind.APPLICATION: 'applications',
})


ENTITY_VARIABLES: Mapping[EntityKind, Mapping[str, str]] = MappingProxyType({
    EntityKind.CANDIDATE: MappingProxyType({
        'candidate_name': 'Full name of the candidate',
        'candidate_email': 'Email address of the candidate',
        'candidate_phone': 'Phone number of the candidate',
        'candidate_location': 'Current location of the candidate',
        'candidate_position': 'Current or desired position',
        'candidate_company': 'Current employer',
        'candidate_experience': 'Total years of experience',
        'candidate_notice_period': 'Notice period at current employer',
        'candidate_expected_salary': 'Expected salary',
        'candidate_linkedin': 'LinkedIn profile URL',
        'candidate_github': 'GitHub profile URL',
        'candidate_portfolio': 'Portfolio URL',
    }),
    EntityKind.JOB: MappingProxyType({
        'job_title': 'Title of the job',
        'job_type': 'Employment type (full-time, contract, ...)',
        'job_department': 'Hiring department',
        'job_location': 'Job location',
        'job_salary_min': 'Minimum salary',
        'job_salary_max': 'Maximum salary',
        'job_experience_level': 'Required experience level',
        'job_work_type': 'Work arrangement (remote, hybrid, on-site)',
        'job_deadline': 'Application deadline',
        'job_description': 'Job description',
    }),
    EntityKind.COMPANY: MappingProxyType({
        'company_name': 'Name of the hiring company',
        'company_industry': 'Industry of the company',
        'company_size': 'Company size',
        'company_location': 'Company location',
        'company_website': 'Company website',
        'company_phone': 'Company phone number',
        'company_email': 'Company email address',
        'company_address': 'Street address',
        'company_city': 'City',
        'company_state': 'State or province',
        'company_country': 'Country',
    }),
    EntityKind.SENDER: MappingProxyType({
        'sender_name': 'Full name of the sending recruiter',
        'sender_first_name': 'First name of the sending recruiter',
        'sender_last_name': 'Last name of the sending recruiter',
        'sender_email': 'Email address of the sending recruiter',
        'sender_phone': 'Phone number of the sending recruiter',
    }),
    EntityKind.INTERVIEW: MappingProxyType({
        'interview_id': 'Interview reference',
        'interview_type': 'Interview type (phone, video, on-site)',
        'interview_date': 'Interview date',
        'interview_time': 'Interview time',
        'interview_location': 'Interview location or meeting link',
        'interview_notes': 'Notes for the candidate',
    }),
    EntityKind.APPLICATION: MappingProxyType({
        'application_id': 'Application reference',
        'application_date': 'Date the application was submitted',
        'application_status': 'Current application status',
    }),
})


def describe(variable_name: str) -> Optional[Dict[str, str]]:
    """Return ``{'entity', 'name', 'description'}`` for a catalog variable, or None."""
    for kind, variables in ENTITY_VARIABLES.items():
        if variable_name in variables:
            return {
                'entity': kind.value,
                'name': variable_name,
                'description': variables[variable_name],
            }
    return None


def group_by_entity(variable_names: Iterable[str]) -> Dict[EntityKind, List[Dict[str, str]]]:
    """
    Group variable names by the entity kind that supplies them.

    Each name goes to the first entity kind whose catalog contains it. Names
    that no entity supplies are left out. Group order follows the order in
    which entity kinds are first hit.
    """
    groups: Dict[EntityKind, List[Dict[str, str]]] = {}
    for name in variable_names:
        for kind, variables in ENTITY_VARIABLES.items():
            if name in variables:
                groups.setdefault(kind, []).append({
                    'name': name,
                    'description': variables[name],
                })
                break
    return groups


def group_variables(subject: Optional[str], body: Optional[str]) -> Dict[EntityKind, List[Dict[str, str]]]:
    """Group the placeholders used by a subject/body pair by entity kind."""
    return group_by_entity(extract_from_pair(subject, body))


def uncatalogued(variable_names: Iterable[str]) -> List[str]:
    """Names that no entity kind supplies (custom variables, typos, ``client_name``)."""
    return [name for name in variable_names if describe(name) is None]


def catalog_as_dict() -> Dict[str, Dict[str, str]]:
    """Plain-dict copy of the catalog, keyed by entity kind value."""
    return {kind.value: dict(variables) for kind, variables in ENTITY_VARIABLES.items()}
