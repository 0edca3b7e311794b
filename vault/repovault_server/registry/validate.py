"""
Field validation for repository records.

Checks run in field order (name, size, description, contributors) and the
first failing field decides the error raised. Validation is pure and runs
before any state is touched.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import (
    FieldValidationError,
    InvalidContributors,
    InvalidDescription,
    InvalidName,
    InvalidSize,
)

MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 128
MAX_SIZE = 1_000_000_000  # exclusive
MIN_CONTRIBUTORS = 1
MAX_CONTRIBUTORS = 10

Identity = Annotated[str, Field(min_length=1)]


class RepositoryFields(BaseModel):
    """The mutable metadata of a repository record."""

    model_config = ConfigDict(strict=True, frozen=True)

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    size: int = Field(..., gt=0, lt=MAX_SIZE)
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    contributors: List[Identity] = Field(
        ..., min_length=MIN_CONTRIBUTORS, max_length=MAX_CONTRIBUTORS
    )


FIELD_ERRORS: Dict[str, Type[FieldValidationError]] = {
    "name": InvalidName,
    "size": InvalidSize,
    "description": InvalidDescription,
    "contributors": InvalidContributors,
}


def validate_fields(
    name: Any,
    size: Any,
    description: Any,
    contributors: Any,
) -> RepositoryFields:
    """Validate record metadata.

    Args:
        name: Repository name
        size: Repository size
        description: Repository description
        contributors: List or tuple of contributor identities

    Returns:
        The validated fields

    Raises:
        InvalidName, InvalidSize, InvalidDescription, InvalidContributors:
            For the first field that fails
    """
    if isinstance(contributors, tuple):
        contributors = list(contributors)
    try:
        return RepositoryFields(
            name=name,
            size=size,
            description=description,
            contributors=contributors,
        )
    except ValidationError as e:
        first = e.errors()[0]
        field_name = str(first["loc"][0])
        error_cls = FIELD_ERRORS.get(field_name, FieldValidationError)
        raise error_cls(f"Invalid {field_name}: {first['msg']}", field_name) from e
