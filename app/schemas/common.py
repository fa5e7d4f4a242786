"""Shared schema base and small response bodies."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for wire models: snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(ApiModel):
    """Acknowledgement for operations without a resource body."""

    success: bool = Field(default=True)
    message: str = Field(..., description="Human readable outcome")


class ErrorResponse(ApiModel):
    """Shape of every non-validation error response."""

    error: str
    message: str | None = None
