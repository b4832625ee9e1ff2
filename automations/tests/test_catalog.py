"""
Tests for the entity variable catalog.
"""

import pytest

from automations.catalog import (
    ENTITY_RESOURCES,
    ENTITY_VARIABLES,
    EntityKind,
    catalog_as_dict,
    describe,
    group_by_entity,
    group_variables,
    uncatalogued,
)


class TestCatalogTables:
    def test_every_variable_carries_its_entity_prefix(self):
        for kind, variables in ENTITY_VARIABLES.items():
            for name in variables:
                assert name.startswith(f'{kind.value}_')

    def test_variable_counts(self):
        counts = {kind: len(variables) for kind, variables in ENTITY_VARIABLES.items()}
        assert counts == {
            EntityKind.CANDIDATE: 12,
            EntityKind.JOB: 10,
            EntityKind.COMPANY: 11,
            EntityKind.SENDER: 5,
            EntityKind.INTERVIEW: 6,
            EntityKind.APPLICATION: 3,
        }

    def test_catalog_is_read_only(self):
        with pytest.raises(TypeError):
            ENTITY_VARIABLES[EntityKind.JOB]['job_bonus'] = 'Signing bonus'

    def test_senders_are_recruiters(self):
        assert ENTITY_RESOURCES[EntityKind.SENDER] == 'recruiters'
        assert EntityKind.SENDER.id_field == 'sender_id'


class TestGroupByEntity:
    """Test classifying variable names by entity kind."""

    def test_groups_known_names_and_omits_unknown(self):
        groups = group_by_entity(['candidate_name', 'job_title', 'offer_details', 'interview_notes'])

        assert groups == {
            EntityKind.CANDIDATE: [{'name': 'candidate_name', 'description': 'Full name of the candidate'}],
            EntityKind.JOB: [{'name': 'job_title', 'description': 'Title of the job'}],
            EntityKind.INTERVIEW: [{'name': 'interview_notes', 'description': 'Notes for the candidate'}],
        }

    def test_empty_input(self):
        assert group_by_entity([]) == {}

    def test_group_variables_from_subject_and_body(self):
        groups = group_variables(
            'Interview for {{job_title}}',
            'Dear {{candidate_name}}, see you at {{interview_time}}. {{client_name}}',
        )
        assert list(groups) == [EntityKind.JOB, EntityKind.CANDIDATE, EntityKind.INTERVIEW]
        assert [entry['name'] for entry in groups[EntityKind.INTERVIEW]] == ['interview_time']


class TestDescribe:
    def test_known_and_unknown(self):
        assert describe('sender_email') == {
            'entity': 'sender',
            'name': 'sender_email',
            'description': 'Email address of the sending recruiter',
        }
        assert describe('client_name') is None

    def test_uncatalogued(self):
        assert uncatalogued(['candidate_name', 'client_name', 'offer_details']) == ['client_name', 'offer_details']

    def test_catalog_as_dict_is_a_copy(self):
        data = catalog_as_dict()
        data['candidate']['candidate_name'] = 'changed'
        assert ENTITY_VARIABLES[EntityKind.CANDIDATE]['candidate_name'] == 'Full name of the candidate'
        assert set(data) == {kind.value for kind in EntityKind}
