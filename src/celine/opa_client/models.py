"""Documents exchanged with the OPA data API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QueryEntity(BaseModel):
    """A subject or resource referenced by a query input."""

    model_config = ConfigDict(extra="allow")

    id: str | int = Field(..., description="Entity identifier")
    type: str | None = Field(default=None, description="Entity type")


class QueryInput(BaseModel):
    """Input document for a policy query.

    Only the common fields are declared; anything else is passed through.
    """

    model_config = ConfigDict(extra="allow")

    subject: QueryEntity | None = None
    resource: QueryEntity | None = None
    headers: dict[str, str] | None = Field(
        default=None, description="Request headers, e.g. authorization"
    )


class QueryResponse(BaseModel):
    """Default shape of a successful query response."""

    model_config = ConfigDict(extra="allow")

    result: Any = None


class OpaWarning(BaseModel):
    """Warning attached by OPA to a rejected query."""

    code: str
    message: str


class BadRequestBody(BaseModel):
    """Body returned by OPA with a 4xx status."""

    model_config = ConfigDict(extra="allow")

    warning: OpaWarning | None = None


def dump_input(input_data: Any) -> Any:
    """Convert a query input into plain JSON-compatible data."""
    if isinstance(input_data, BaseModel):
        return input_data.model_dump(mode="json", exclude_none=True)
    return input_data
