"""
RecruitOps Test Configuration - pytest fixtures and factories

This module provides:
- pytest-django configuration (settings module set in pyproject.toml)
- factory_boy factories for users, message templates and automation rules
- In-memory collaborators (entity backend, template catalog, dispatcher)
  and sample entity data for engine tests

RUNNING TESTS:
# Run all tests
pytest -v

# Run one component
pytest automations/tests/test_services.py -v
"""

import uuid

import pytest
import factory
from factory.django import DjangoModelFactory

from automations.catalog import EntityKind
from automations.entities import (
    ApplicationSnapshot,
    CandidateSnapshot,
    CompanySnapshot,
    InterviewSnapshot,
    JobSnapshot,
    OperatorProfile,
    SenderSnapshot,
)
from automations.exceptions import DispatchResult, EntityFetchError
from automations.ports import Dispatcher, EntityProvider, TemplateProvider
from automations.rules import Template


# ============================================================================
# USER FACTORIES
# ============================================================================

class UserFactory(DjangoModelFactory):
    """Factory for the default Django user model."""

    class Meta:
        model = 'auth.User'
        django_get_or_create = ('username',)

    username = factory.LazyAttribute(lambda o: f"user_{uuid.uuid4().hex[:8]}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@recruitops.test")
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    password = factory.django.Password('testpass123')
    is_active = True


class SuperUserFactory(UserFactory):
    """Factory for superuser accounts."""

    is_staff = True
    is_superuser = True


# ============================================================================
# AUTOMATION FACTORIES
# ============================================================================

class MessageTemplateFactory(DjangoModelFactory):
    """Factory for catalog templates."""

    class Meta:
        model = 'automations.MessageTemplate'
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"Template {n}")
    description = factory.Faker('sentence')
    subject = 'Your interview for {{job_title}}'
    content = 'We look forward to meeting you on {{interview_date}}.\\nPlease arrive early.'
    category = 'interview'


class AutomationRuleFactory(DjangoModelFactory):
    """Factory for custom-content automation rules."""

    class Meta:
        model = 'automations.AutomationRule'

    name = factory.Sequence(lambda n: f"Automation {n}")
    description = factory.Faker('sentence')
    trigger = 'interview_scheduled'
    channel = 'email'
    content_mode = 'custom'
    template = None
    subject = 'Interview for {{job_title}}'
    body = 'Hello {{candidate_name}}, your interview is at {{interview_time}}'
    status = 'active'


class TemplateRuleFactory(AutomationRuleFactory):
    """Factory for rules that reference a catalog template."""

    content_mode = 'template'
    template = factory.SubFactory(MessageTemplateFactory)
    subject = ''
    body = ''


# ============================================================================
# IN-MEMORY COLLABORATORS
# ============================================================================

class InMemoryEntityProvider(EntityProvider):
    """Entity backend serving fixed snapshot lists; kinds in ``failures`` raise."""

    def __init__(self, lists=None, failures=None):
        self.lists = lists or {}
        self.failures = failures or {}
        self.calls = []

    def fetch_entity_list(self, kind):
        self.calls.append(kind)
        if kind in self.failures:
            raise EntityFetchError(self.failures[kind], kind=kind)
        return list(self.lists.get(kind, []))


class InMemoryTemplateProvider(TemplateProvider):
    def __init__(self, templates=None):
        self.templates = list(templates or [])

    def fetch_templates(self):
        return list(self.templates)


class RecordingDispatcher(Dispatcher):
    """Records every dispatch call; fails all sends when ``error`` is set."""

    def __init__(self, error=None):
        self.error = error
        self.sent = []

    def dispatch(self, channel, recipient, message, metadata=None):
        metadata = metadata or {}
        self.sent.append({
            'channel': channel,
            'recipient': recipient,
            'message': message,
            'metadata': metadata,
        })
        return DispatchResult(
            success=self.error is None,
            rule_id=metadata.get('rule_id'),
            channel=channel.value,
            recipient=recipient,
            error_message=self.error,
        )


# ============================================================================
# SAMPLE ENTITY DATA
# ============================================================================

@pytest.fixture
def candidate():
    return CandidateSnapshot(
        id=1,
        name='Jane Doe',
        email='jane.doe@talentmail.io',
        phone='+15550001111',
        location='Berlin',
        position='Backend Engineer',
        company='Acme GmbH',
        experience=5,
        notice_period='1 month',
        expected_salary=85000,
        linkedin='https://linkedin.com/in/janedoe',
    )


@pytest.fixture
def placeholder_candidate():
    return CandidateSnapshot(id=2, name='Jane Placeholder', email='jane@example.com', phone='+15550002222')


@pytest.fixture
def job():
    return JobSnapshot(
        id=10,
        title='Senior Backend Engineer',
        type='Full-time',
        department='Engineering',
        location='Remote',
        salary_min=80000,
        salary_max=110000.0,
        experience_level='Senior',
        work_type='Remote',
        deadline='2026-12-01',
    )


@pytest.fixture
def company():
    return CompanySnapshot(
        id=20,
        name='Globex',
        industry='Software',
        address_line1='1 Main St',
        address_line2='Suite 5',
        city='Springfield',
        state='IL',
        country='USA',
    )


@pytest.fixture
def sender():
    return SenderSnapshot(id=30, name='Rita Recruiter', email='rita@globex.io', phone='+15550003333')


@pytest.fixture
def interview():
    return InterviewSnapshot(id=40, type='Video', date='2026-11-02', time='3pm', location='Zoom')


@pytest.fixture
def application():
    return ApplicationSnapshot(id=50, date='2026-10-01', status='Screening')


@pytest.fixture
def entity_lists(candidate, placeholder_candidate, job, company, sender, interview, application):
    return {
        EntityKind.CANDIDATE: [candidate, placeholder_candidate],
        EntityKind.JOB: [job],
        EntityKind.COMPANY: [company],
        EntityKind.SENDER: [sender],
        EntityKind.INTERVIEW: [interview],
        EntityKind.APPLICATION: [application],
    }


@pytest.fixture
def catalog_template():
    return Template(
        id=7,
        name='Interview Invite',
        subject='Interview for {{job_title}}',
        body='We would like to meet you on {{interview_date}}.\\nSee you soon.',
    )


@pytest.fixture
def operator():
    return OperatorProfile(
        name='Olivia Operator',
        first_name='Olivia',
        last_name='Operator',
        email='olivia@globex.io',
        phone='+15550004444',
        client_name='Globex Talent',
    )


# ============================================================================
# COLLABORATOR FIXTURES
# ============================================================================

@pytest.fixture
def entity_provider_factory():
    return InMemoryEntityProvider


@pytest.fixture
def entity_provider(entity_lists):
    return InMemoryEntityProvider(entity_lists)


@pytest.fixture
def template_provider(catalog_template):
    return InMemoryTemplateProvider([catalog_template])


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def dispatcher_factory():
    return RecordingDispatcher


@pytest.fixture
def engine(entity_provider, template_provider, dispatcher):
    """Engine over in-memory collaborators and the ORM rule store."""
    from automations.services import AutomationEngine
    from automations.store import OrmRuleStore

    return AutomationEngine(
        entity_provider=entity_provider,
        template_provider=template_provider,
        rule_store=OrmRuleStore(),
        dispatcher=dispatcher,
    )


# ============================================================================
# FACTORY & CLIENT FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    """Provide UserFactory for tests."""
    return UserFactory


@pytest.fixture
def message_template_factory(db):
    return MessageTemplateFactory


@pytest.fixture
def automation_rule_factory(db):
    return AutomationRuleFactory


@pytest.fixture
def template_rule_factory(db):
    return TemplateRuleFactory


@pytest.fixture
def user(db):
    """Create a standard test user."""
    return UserFactory()


@pytest.fixture
def admin_user(db):
    """Create an admin user."""
    return SuperUserFactory()


@pytest.fixture
def api_client(db):
    """Provide a DRF API test client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def authenticated_api_client(db, api_client, user):
    """Provide an authenticated DRF API test client."""
    api_client.force_authenticate(user=user)
    return api_client
