"""Shared Pydantic v2 base classes and generic responses."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Model whose JSON keys are camelCase (``userType``, ``checkInDate``, ...).

    Python code uses the snake_case attribute names; both spellings are
    accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    message: str
    errors: dict[str, str] | None = None
