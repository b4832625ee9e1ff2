"""
Entity snapshots consumed by the variable resolver.

Each entity kind has its own immutable snapshot type. Snapshots are built
from the REST backend's JSON payloads, which use camelCase names and a few
historical aliases, and are never persisted by the engine.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, Union

from .catalog import EntityKind


def _first(payload: Mapping[str, Any], *keys: str) -> Any:
    """Return the first non-empty value among ``keys``."""
    for key in keys:
        value = payload.get(key)
        if value not in (None, ''):
            return value
    return None


@dataclass(frozen=True)
class CandidateSnapshot:
    kind: ClassVar[EntityKind] = EntityKind.CANDIDATE

    id: Any
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    position: Optional[str] = None
    company: Optional[str] = None
    experience: Any = None
    notice_period: Optional[str] = None
    expected_salary: Any = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    portfolio: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'CandidateSnapshot':
        return cls(
            id=payload.get('id'),
            name=_first(payload, 'name', 'fullName'),
            email=payload.get('email'),
            phone=payload.get('phone'),
            location=payload.get('location'),
            position=payload.get('position'),
            company=_first(payload, 'company', 'currentCompany'),
            experience=_first(payload, 'experience', 'totalExperience'),
            notice_period=payload.get('noticePeriod'),
            expected_salary=payload.get('expectedSalary'),
            linkedin=payload.get('linkedInProfile'),
            github=payload.get('githubProfile'),
            portfolio=payload.get('portfolioUrl'),
        )


@dataclass(frozen=True)
class JobSnapshot:
    kind: ClassVar[EntityKind] = EntityKind.JOB

    id: Any
    title: Optional[str] = None
    type: Optional[str] = None
    department: Optional[str] = None
    location: Optional[str] = None
    salary_min: Any = None
    salary_max: Any = None
    experience_level: Optional[str] = None
    work_type: Optional[str] = None
    deadline: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'JobSnapshot':
        return cls(
            id=payload.get('id'),
            title=_first(payload, 'jobTitle', 'title'),
            type=_first(payload, 'jobType', 'type'),
            department=payload.get('department'),
            location=payload.get('location'),
            salary_min=_first(payload, 'salaryMin', 'salary_min'),
            salary_max=_first(payload, 'salaryMax', 'salary_max'),
            experience_level=_first(payload, 'experienceLevel', 'experience_level'),
            work_type=payload.get('workType'),
            deadline=payload.get('deadline'),
            description=payload.get('description'),
        )


@dataclass(frozen=True)
class CompanySnapshot:
    kind: ClassVar[EntityKind] = EntityKind.COMPANY

    id: Any
    name: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'CompanySnapshot':
        return cls(
            id=payload.get('id'),
            name=payload.get('name'),
            industry=payload.get('industry'),
            size=payload.get('size'),
            location=payload.get('location'),
            website=payload.get('website'),
            phone=payload.get('phone'),
            email=payload.get('email'),
            address_line1=payload.get('addressLine1'),
            address_line2=payload.get('addressLine2'),
            city=payload.get('city'),
            state=_first(payload, 'stateProvince', 'state'),
            country=payload.get('country'),
        )


@dataclass(frozen=True)
class SenderSnapshot:
    kind: ClassVar[EntityKind] = EntityKind.SENDER

    id: Any
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'SenderSnapshot':
        return cls(
            id=payload.get('id'),
            name=_first(payload, 'fullName', 'name'),
            first_name=payload.get('firstName'),
            last_name=payload.get('lastName'),
            email=payload.get('email'),
            phone=payload.get('phone'),
        )


@dataclass(frozen=True)
class InterviewSnapshot:
    kind: ClassVar[EntityKind] = EntityKind.INTERVIEW

    id: Any
    type: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'InterviewSnapshot':
        return cls(
            id=payload.get('id'),
            type=_first(payload, 'type', 'interviewType'),
            date=payload.get('date'),
            time=payload.get('time'),
            location=payload.get('location'),
            notes=payload.get('notes'),
        )


@dataclass(frozen=True)
class ApplicationSnapshot:
    kind: ClassVar[EntityKind] = EntityKind.APPLICATION

    id: Any
    date: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> 'ApplicationSnapshot':
        return cls(
            id=payload.get('id'),
            date=_first(payload, 'date', 'appliedDate', 'createdAt'),
            status=payload.get('status'),
        )


EntitySnapshot = Union[
    CandidateSnapshot,
    JobSnapshot,
    CompanySnapshot,
    SenderSnapshot,
    InterviewSnapshot,
    ApplicationSnapshot,
]

SNAPSHOT_TYPES: Dict[EntityKind, Type] = {
    EntityKind.CANDIDATE: CandidateSnapshot,
    EntityKind.JOB: JobSnapshot,
    EntityKind.COMPANY: CompanySnapshot,
    EntityKind.SENDER: SenderSnapshot,
    EntityKind.INTERVIEW: InterviewSnapshot,
    EntityKind.APPLICATION: ApplicationSnapshot,
}


def snapshot_from_payload(kind: EntityKind, payload: Mapping[str, Any]) -> EntitySnapshot:
    """Build the snapshot type for ``kind`` from a backend JSON object."""
    return SNAPSHOT_TYPES[EntityKind(kind)].from_payload(payload)


def same_id(left: Any, right: Any) -> bool:
    """Entity ids arrive as ints from the backend and as strings from forms."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


@dataclass(frozen=True)
class OperatorProfile:
    """
    The acting operator. Supplies the sender variables when no sender entity
    is selected, and the organization name used as ``client_name``.
    """

    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    client_name: str = ''
    user_id: Optional[int] = None

    @classmethod
    def from_user(cls, user, client_name: str = '') -> 'OperatorProfile':
        """Build a profile from a Django user (or anything shaped like one)."""
        if user is None or not getattr(user, 'is_authenticated', True):
            return cls(client_name=client_name)
        full_name = ''
        if hasattr(user, 'get_full_name'):
            full_name = user.get_full_name()
        return cls(
            name=full_name or None,
            first_name=getattr(user, 'first_name', None) or None,
            last_name=getattr(user, 'last_name', None) or None,
            email=getattr(user, 'email', None) or None,
            phone=getattr(user, 'phone', None) or None,
            client_name=client_name,
            user_id=getattr(user, 'pk', None),
        )
