from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List


class ErrorType(str, Enum):
    INVALID = "invalid"
    MISSING = "missing"
    NOT_SUPPORTED = "not_supported"


class Envelope(BaseModel):
    """Uniform result of every translator operation."""

    model_config = ConfigDict(frozen=True)

    status: int
    body: Any = Field(default_factory=dict)


class SearchPage(BaseModel):
    data: List[Dict[str, Any]]
    hasMore: bool
    totalCount: int
