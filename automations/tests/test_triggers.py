"""
Tests for the trigger taxonomy.
"""

import pytest

from automations.triggers import (
    DISPLAY_NAMES,
    LEGACY_TRIGGERS,
    CanonicalTrigger,
    as_canonical,
    canonicalize_trigger,
    display_name,
    is_known_trigger,
    list_triggers,
    trigger_for_status,
)


class TestCanonicalizeTrigger:
    """Test mapping raw trigger values onto canonical ids."""

    def test_legacy_application_submission(self):
        assert canonicalize_trigger('On application submission') is CanonicalTrigger.APPLICATION_RECEIVED
        assert canonicalize_trigger('On application submission') == 'application_received'

    @pytest.mark.parametrize('raw, expected', [
        ('24 hours before interview', CanonicalTrigger.INTERVIEW_REMINDER),
        ('Interview scheduled', CanonicalTrigger.INTERVIEW_SCHEDULED),
        ('When candidate status changes', CanonicalTrigger.CANDIDATE_REJECTED),
    ])
    def test_legacy_table(self, raw, expected):
        assert canonicalize_trigger(raw) is expected

    def test_every_legacy_entry_is_canonical(self):
        for raw in LEGACY_TRIGGERS:
            assert isinstance(canonicalize_trigger(raw), CanonicalTrigger)

    def test_canonical_ids_map_to_themselves(self):
        for trigger in CanonicalTrigger:
            assert canonicalize_trigger(trigger.value) is trigger
            assert canonicalize_trigger(trigger) is trigger

    def test_unknown_value_passes_through(self):
        assert canonicalize_trigger('When the moon is full') == 'When the moon is full'
        assert as_canonical('When the moon is full') is None
        assert not is_known_trigger('When the moon is full')

    def test_none_becomes_empty_string(self):
        assert canonicalize_trigger(None) == ''

    def test_is_pure(self):
        assert canonicalize_trigger('Interview scheduled') is canonicalize_trigger('Interview scheduled')

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            LEGACY_TRIGGERS['New legacy'] = CanonicalTrigger.OFFER_SENT


class TestDisplayName:
    def test_canonical_trigger(self):
        assert display_name('interview_scheduled') == 'Interview Scheduled'
        assert display_name(CanonicalTrigger.WELCOME_NEW_HIRE) == 'Welcome New Hire'

    def test_legacy_trigger(self):
        assert display_name('24 hours before interview') == 'Interview Reminder'

    def test_unknown_trigger_falls_back_to_raw_id(self):
        assert display_name('custom_event') == 'custom_event'
        assert display_name(None) == ''

    def test_every_canonical_trigger_has_a_name(self):
        assert set(DISPLAY_NAMES) == set(CanonicalTrigger)


class TestListTriggers:
    def test_lists_all_canonical_triggers(self):
        triggers = list_triggers()
        assert len(triggers) == 11
        assert triggers[0] == {'value': 'application_received', 'label': 'Application Received'}
        assert {'value': 'interview_updated', 'label': 'Interview Updated'} in triggers


class TestTriggerForStatus:
    """Test mapping candidate status changes onto triggers."""

    @pytest.mark.parametrize('status, expected', [
        ('Rejected', CanonicalTrigger.CANDIDATE_REJECTED),
        ('Offer declined', CanonicalTrigger.CANDIDATE_REJECTED),
        ('Accepted', CanonicalTrigger.CANDIDATE_ACCEPTED),
        ('HIRED', CanonicalTrigger.CANDIDATE_ACCEPTED),
        ('Offer Extended', CanonicalTrigger.OFFER_SENT),
    ])
    def test_mapped_statuses(self, status, expected):
        assert trigger_for_status(status) is expected

    @pytest.mark.parametrize('status', ['Screening', 'Interviewing', '', None])
    def test_statuses_without_trigger(self, status):
        assert trigger_for_status(status) is None
