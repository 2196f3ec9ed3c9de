"""Shared fixtures for cloudvault tests."""

import io

import boto3
import pytest
from django.contrib.auth import get_user_model
from moto import mock_aws
from PIL import Image

User = get_user_model()


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def mock_s3():
    """Mock S3 service with cloudvault bucket.

    Yields:
        boto3 S3 resource with cloudvault bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket='cloudvault')
        yield conn


@pytest.fixture
def bucket_keys(mock_s3):
    """Callable listing every key currently in the mocked bucket."""
    def _keys() -> set[str]:
        return {
            summary.key
            for summary in mock_s3.Bucket('cloudvault').objects.all()
        }
    return _keys


@pytest.fixture
def png_bytes():
    """A real 640x480 PNG image.

    Returns:
        PNG file contents.
    """
    buffer = io.BytesIO()
    Image.new('RGB', (640, 480), color=(200, 30, 30)).save(buffer, format='PNG')
    return buffer.getvalue()
