"""Base schema configuration."""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Read straight from domain dataclasses
        str_strip_whitespace=True,
        validate_assignment=True,
    )

