"""Tests for the shared REST helpers."""

import pytest
from rest_framework.exceptions import ErrorDetail

from cloudvault.apps.files.exceptions import InvalidArgumentError
from cloudvault.apps.files.http import envelope, error_message, validated
from cloudvault.apps.files.logic.results import OperationResult
from cloudvault.apps.sharing.serializers import ShareLinkCreateSerializer


class TestErrorMessage:
    """Tests for error_message."""

    def test_field_error(self):
        """Test the first field error is prefixed with its field."""
        errors = {'downloadLimit': [ErrorDetail('A valid integer is required.')]}

        assert error_message(errors) == 'downloadLimit: A valid integer is required.'

    def test_non_field_error(self):
        """Test non-field errors carry no prefix."""
        errors = {'non_field_errors': [ErrorDetail('Invalid data.')]}

        assert error_message(errors) == 'Invalid data.'

    def test_nested_list_error(self):
        """Test child errors of list fields name the index."""
        errors = {'recipients': {1: [ErrorDetail('Not a valid string.')]}}

        assert error_message(errors) == 'recipients: 1: Not a valid string.'

    def test_empty(self):
        """Test empty details still produce a message."""
        assert error_message({}) == 'Invalid input'


class TestValidated:
    """Tests for validated."""

    def test_valid(self):
        """Test defaults are filled in."""
        data = validated(
            ShareLinkCreateSerializer,
            {'fileId': '6f1c2a9e-0f57-4d9c-9a43-3a8f2d6c1b7e'},
        )

        assert data['downloadLimit'] is None
        assert data['recipients'] == []

    def test_invalid(self):
        """Test a validation failure is an invalid argument."""
        with pytest.raises(InvalidArgumentError, match='fileId'):
            validated(ShareLinkCreateSerializer, {'fileId': 'nope'})


@pytest.mark.parametrize(('code', 'expected'), [
    ('not_found', 404),
    ('forbidden', 403),
    ('invalid_argument', 400),
    ('sharing_disabled', 403),
    ('link_invalid', 404),
    ('quota_exceeded', 413),
    ('dependency_unavailable', 503),
    ('corrupt_hierarchy', 500),
    ('something_new', 500),
])
def test_envelope_status(code, expected):
    """Test failure codes map onto HTTP statuses."""
    response = envelope(OperationResult(success=False, message='x', code=code))

    assert response.status_code == expected
    assert response.data == {'success': False, 'message': 'x', 'error': code}


def test_envelope_success_status():
    """Test successes use the requested status."""
    response = envelope(OperationResult(success=True, message='ok', data=1), 201)

    assert response.status_code == 201
    assert response.data['data'] == 1
