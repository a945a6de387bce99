from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, Mapping, Optional


META_FIELDS = ("_index", "_id")


class Document(BaseModel):
    """
    A document to store: the `_index` / `_id` metadata split from the caller's
    fields. `fields` holds every other key exactly as supplied, whatever its name.
    """

    index: Optional[Any] = None
    id: Optional[Any] = None
    fields: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "Document":
        return cls(
            index=raw.get("_index"),
            id=raw.get("_id"),
            fields={k: v for k, v in raw.items() if k not in META_FIELDS},
        )

    def source(self, created_at: str) -> Dict[str, Any]:
        """Stored fields, stamped with `createdAtUtc`."""
        return {**self.fields, "createdAtUtc": created_at}


def flatten_hit(hit: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Flatten an engine hit (or get response) into a single mapping.

    Metadata goes in first and `_source` second, so a stored field named
    `_index` or `_id` wins over the engine's metadata.
    """
    source = hit.get("_source") or {}
    return {"_index": hit.get("_index"), "_id": hit.get("_id"), **source}


def _parse_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


class Pagination(BaseModel):
    """
    Validated paging parameters.

    `page` is zero-based. Anything that does not parse to a usable value
    (absent, non-numeric, negative page, non-positive per_page) becomes None,
    which means "not paginated".
    """

    model_config = ConfigDict(frozen=True)

    page: Optional[int] = None
    per_page: Optional[int] = None

    @field_validator("page", mode="before")
    @classmethod
    def _valid_page(cls, v: Any) -> Optional[int]:
        n = _parse_int(v)
        return n if n is not None and n >= 0 else None

    @field_validator("per_page", mode="before")
    @classmethod
    def _valid_per_page(cls, v: Any) -> Optional[int]:
        n = _parse_int(v)
        return n if n is not None and n > 0 else None

    @property
    def is_paged(self) -> bool:
        return self.page is not None and self.per_page is not None

    @property
    def offset(self) -> int:
        return self.page * self.per_page if self.is_paged else 0

    def size(self, max_results: int) -> int:
        return self.per_page if self.per_page is not None else max_results

    def has_more(self, total: int) -> bool:
        if not self.is_paged:
            return False
        return total > (self.page + 1) * self.per_page


class ItemRequest(BaseModel):
    """Headers and decoded JSON body of a write request."""

    headers: Dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @field_validator("headers", mode="before")
    @classmethod
    def _lower_keys(cls, v: Any) -> Dict[str, str]:
        if not v:
            return {}
        return {str(k).lower(): str(val) for k, val in dict(v).items()}

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")

    @property
    def is_json(self) -> bool:
        return "application/json" in self.content_type

    @property
    def has_body(self) -> bool:
        # Non-empty list or dict; a bare scalar is not a collection
        return isinstance(self.body, (list, dict)) and len(self.body) > 0
