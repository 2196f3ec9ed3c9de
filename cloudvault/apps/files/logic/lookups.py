"""Ownership-checked lookups and input validation shared by operations.

Reads never reveal whether another user's record exists: they fail
with NotFoundError. Mutations of an existing record owned by someone
else fail with ForbiddenError.
"""

import re
from typing import Any, Final, TypeVar

from django.core.exceptions import ValidationError
from django.db import models

from cloudvault.apps.files.exceptions import (
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
)
from cloudvault.apps.files.models import Confidentiality, File, Folder, Importance

# User type for Django's dynamic user model
_User = Any

_ModelT = TypeVar('_ModelT', bound=models.Model)

_CONTROL_CHARACTERS: Final = re.compile(r'[\x00-\x1f\x7f]')


def _fetch(model: type[_ModelT], record_id: object, **filters: Any) -> _ModelT:
    label = model._meta.verbose_name
    try:
        return model.objects.get(pk=record_id, **filters)
    except (model.DoesNotExist, ValidationError, ValueError) as error:
        raise NotFoundError(f'{label} not found: {record_id}') from error


def get_owned_folder(user: _User, folder_id: object) -> Folder:
    """Fetch a folder owned by user.

    Args:
        user: Expected owner.
        folder_id: Folder identifier.

    Returns:
        Folder instance.

    Raises:
        NotFoundError: If absent or owned by another user.
    """
    return _fetch(Folder, folder_id, user=user)


def get_owned_file(user: _User, file_id: object) -> File:
    """Fetch a file owned by user.

    Args:
        user: Expected owner.
        file_id: File identifier.

    Returns:
        File instance.

    Raises:
        NotFoundError: If absent or owned by another user.
    """
    return _fetch(File, file_id, user=user)


def get_for_update(user: _User, model: type[_ModelT], record_id: object) -> _ModelT:
    """Fetch a record the user is about to change.

    Args:
        user: Acting user.
        model: Model class (Folder, File, ShareLink).
        record_id: Record identifier.

    Returns:
        Model instance.

    Raises:
        NotFoundError: If the record does not exist.
        ForbiddenError: If it belongs to another user.
    """
    instance = _fetch(model, record_id)
    if instance.user_id != user.pk:
        raise ForbiddenError(
            f'{model._meta.verbose_name} {record_id} belongs to another user',
        )
    return instance


def clean_name(name: str | None, label: str) -> str:
    """Trim a display name and make sure something is left.

    Args:
        name: Raw name.
        label: What is being named, for the error message.

    Returns:
        Trimmed name.

    Raises:
        InvalidArgumentError: If the name is missing, blank or contains
            control characters.
    """
    cleaned = (name or '').strip()
    if not cleaned:
        raise InvalidArgumentError(f'{label} name cannot be empty')
    if _CONTROL_CHARACTERS.search(cleaned):
        raise InvalidArgumentError(
            f'{label} name cannot contain control characters',
        )
    return cleaned


def validate_classification(confidentiality: str, importance: str) -> None:
    """Check confidentiality and importance values.

    Args:
        confidentiality: One of Confidentiality values.
        importance: One of Importance values.

    Raises:
        InvalidArgumentError: If either value is unknown.
    """
    if confidentiality not in Confidentiality.values:
        raise InvalidArgumentError(
            f'Unknown confidentiality level: {confidentiality}',
        )
    if importance not in Importance.values:
        raise InvalidArgumentError(f'Unknown importance level: {importance}')


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Trim tags and drop blanks and duplicates, keeping first order.

    Args:
        tags: Raw tags.

    Returns:
        Clean list of tags.
    """
    seen: dict[str, None] = {}
    for tag in tags or []:
        cleaned = str(tag).strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)
