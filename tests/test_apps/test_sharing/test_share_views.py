"""Tests for share-link JSON views and anonymous downloads."""

from datetime import timedelta

import pytest
from django.test import Client
from django.utils import timezone

from cloudvault.apps.files.logic.file_operations import upload_file
from cloudvault.apps.sharing.models import ShareLink


@pytest.fixture
def client(user):
    """Client signed in as the test user."""
    signed_in = Client()
    signed_in.force_login(user)
    return signed_in


@pytest.fixture
def stored_file(user, mock_s3):
    """A file uploaded by the test user."""
    return upload_file(user, b'shared bytes', 'notes.txt').file


def _create(client, **body):
    return client.post('/api/share-links/', body, content_type='application/json')


@pytest.mark.django_db
class TestShareLinkViews:
    """Tests for issuing, listing and revoking links."""

    def test_create_and_list(self, client, stored_file):
        """Test a link is issued with its limits and listed."""
        expires_at = (timezone.now() + timedelta(days=1)).isoformat()

        response = _create(
            client,
            fileId=str(stored_file.id),
            expiresAt=expires_at,
            downloadLimit=2,
            recipients=['friend@example.com'],
        )

        assert response.status_code == 201
        created = response.json()['data']
        assert created['fileId'] == str(stored_file.id)
        assert created['downloadLimit'] == 2
        assert created['recipients'] == ['friend@example.com']
        assert created['isActive'] is True

        listing = client.get(
            '/api/share-links/',
            {'fileId': str(stored_file.id)},
        ).json()['data']
        assert [link['id'] for link in listing] == [created['id']]

    def test_sharing_disabled(self, client, user, mock_s3):
        """Test a private file answers 403 sharing_disabled."""
        private = upload_file(user, b'x', 'p.txt', allow_sharing=False).file

        response = _create(client, fileId=str(private.id))

        assert response.status_code == 403
        assert response.json()['error'] == 'sharing_disabled'

    def test_invalid_limit(self, client, stored_file):
        """Test a non-numeric limit answers 400."""
        response = _create(
            client,
            fileId=str(stored_file.id),
            downloadLimit='lots',
        )

        assert response.status_code == 400

    def test_numeric_expiry(self, client, stored_file):
        """Test a non-timestamp expiry answers 400, not 503."""
        response = _create(client, fileId=str(stored_file.id), expiresAt=5)

        assert response.status_code == 400
        assert response.json()['error'] == 'invalid_argument'

    def test_exhausted_flag(self, client, stored_file):
        """Test the issuer sees when a link has used up its downloads."""
        link = _create(
            client,
            fileId=str(stored_file.id),
            downloadLimit=1,
        ).json()['data']
        assert link['isExhausted'] is False

        Client().get(f'/api/shared/{link["token"]}/')

        listing = client.get('/api/share-links/').json()['data']
        assert listing[0]['isExhausted'] is True
        assert listing[0]['downloadCount'] == 1

    def test_revoke(self, client, user, stored_file):
        """Test revoking deactivates the link."""
        link = _create(client, fileId=str(stored_file.id)).json()['data']

        response = client.delete(f'/api/share-links/{link["id"]}/')

        assert response.status_code == 200
        assert response.json()['data']['isActive'] is False
        assert not ShareLink.objects.get(pk=link['id']).is_active


@pytest.mark.django_db
class TestSharedDownloadView:
    """Tests for the anonymous shared download endpoint."""

    def test_anonymous_download(self, client, stored_file):
        """Test a recipient without an account downloads the file."""
        link = _create(
            client,
            fileId=str(stored_file.id),
            downloadLimit=1,
        ).json()['data']
        anonymous = Client()

        first = anonymous.get(f'/api/shared/{link["token"]}/')
        second = anonymous.get(f'/api/shared/{link["token"]}/')

        assert first.status_code == 200
        assert first.content == b'shared bytes'
        assert 'notes.txt' in first['Content-Disposition']
        assert second.status_code == 404
        assert second.json()['error'] == 'link_invalid'

    def test_unknown_token(self, db):
        """Test an unknown token answers 404."""
        response = Client().get('/api/shared/nope/')

        assert response.status_code == 404
        assert response.json()['success'] is False
