"""
Unit Tests for structured logging
"""
import json
import logging

from unirecords.core.logging_config import (
    ContextualFormatter,
    JSONFormatter,
    READABLE_FORMAT,
    set_request_id,
    set_user_id,
)


def make_record(message: str = 'Enrollment completed', **extra) -> logging.LogRecord:
    record = logging.LogRecord('unirecords', logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(make_record()))

        assert entry['level'] == 'INFO'
        assert entry['logger'] == 'unirecords'
        assert entry['message'] == 'Enrollment completed'

    def test_extra_fields_included(self):
        entry = json.loads(JSONFormatter().format(make_record(event_type='audit', audit_action='create')))

        assert entry['event_type'] == 'audit'
        assert entry['audit_action'] == 'create'

    def test_sensitive_fields_redacted(self):
        entry = json.loads(JSONFormatter().format(make_record(
            temporary_password='Xy7!secret',
            reset_token='abc123',
            registration_number='2025ELE1A2B',
        )))

        assert entry['temporary_password'] == '***'
        assert entry['reset_token'] == '***'
        assert entry['registration_number'] == '2025ELE1A2B'

    def test_context_ids(self):
        set_request_id('req-1')
        set_user_id('user-1')
        try:
            entry = json.loads(JSONFormatter().format(make_record()))
        finally:
            set_request_id('')
            set_user_id('')

        assert entry['request_id'] == 'req-1'
        assert entry['user_id'] == 'user-1'


class TestContextualFormatter:

    def test_placeholders_without_context(self):
        line = ContextualFormatter(READABLE_FORMAT).format(make_record())

        assert '[-] [-] Enrollment completed' in line
