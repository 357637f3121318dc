"""Pydantic models for inbound request options and bodies."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pywwcp.exceptions import InvalidQueryOptions
from pywwcp.projection.history import check_history_size


def _split_tokens(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    tokens = []
    for item in value:
        tokens.extend(t.strip() for t in str(item).split(",") if t.strip())
    return tokens


class QueryOptions(BaseModel):
    """Query options of a projection request.

    Attributes:
        skip: Items to skip; negative values are clamped to 0
        take: Maximum items to return; None means unbounded
        expand: Relation tokens to embed, "-name" hides a relation
        include: Relation tokens to render as identifiers
        history_size: Status entries per entity (query key "historySize")
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    skip: int = 0
    take: Optional[int] = None
    expand: List[str] = Field(default_factory=list)
    include: List[str] = Field(default_factory=list)
    history_size: Optional[int] = Field(default=None, alias="historySize")

    @field_validator("skip", mode="before")
    @classmethod
    def _clamp_skip(cls, value):
        if value in (None, ""):
            return 0
        return max(0, int(value))

    @field_validator("take", mode="before")
    @classmethod
    def _check_take(cls, value):
        if value in (None, ""):
            return None
        value = int(value)
        if value < 0:
            raise ValueError("take must not be negative")
        return value

    @field_validator("history_size", mode="before")
    @classmethod
    def _check_history_size(cls, value):
        if value in (None, ""):
            return None
        return check_history_size(value)

    @field_validator("expand", "include", mode="before")
    @classmethod
    def _split(cls, value):
        return _split_tokens(value)

    @classmethod
    def parse(cls, params: Optional[dict] = None) -> "QueryOptions":
        """Build QueryOptions from a dict of raw query parameters."""
        params = dict(params or {})
        size = params.pop("history_size", None)
        size = params.pop("historySize", size)
        # Rejected as InvalidHistorySize, never clamped or rounded
        params["historySize"] = None if size in (None, "") else check_history_size(size)
        try:
            return cls.model_validate(params)
        except (ValidationError, ValueError) as e:
            raise InvalidQueryOptions(f"Invalid query options: {e}") from e


class StatusChangeRequest(BaseModel):
    """Body of a status mutation request: {"newstatus": "<token>"}"""
    model_config = ConfigDict(extra="ignore")

    newstatus: str
    timestamp: Optional[str] = None

    @field_validator("newstatus")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("newstatus must not be empty")
        return value.strip()
