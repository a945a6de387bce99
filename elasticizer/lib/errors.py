"""
Engine failures and their normalisation into response envelopes.

The engine fails in two shapes:

* a bulk (or multi-index) request where some items were rejected, which we
  model as `BulkFailure` holding one `ShardError` per rejected item;
* a whole-request failure (not found, cluster unavailable, connection
  refused), modelled as `TransportFailure`.

`normalise_error` turns either into an `Envelope`.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from elasticsearch import ApiError, TransportError
from fastapi import status

from elasticizer.models.common import Envelope

BULK_ACTIONS = ("index", "create", "update", "delete")


@dataclass(frozen=True)
class ShardError:
    type: Optional[str]
    reason: Optional[str]
    index: Optional[str]
    index_uuid: Optional[str] = None

    @classmethod
    def from_dict(cls, err: Mapping[str, Any]) -> "ShardError":
        return cls(
            type=err.get("type"),
            reason=err.get("reason"),
            index=err.get("index"),
            index_uuid=err.get("index_uuid"),
        )


@dataclass(frozen=True)
class BulkFailure:
    items: Tuple[ShardError, ...]


@dataclass(frozen=True)
class TransportFailure:
    status: int
    display_name: str
    message: str


EngineFailure = Union[BulkFailure, TransportFailure]


class EngineError(Exception):
    """Raised by engine clients; carries the failure to normalise."""

    def __init__(self, failure: EngineFailure):
        super().__init__(failure)
        self.failure = failure


# ---------------- Building failures -----------------------------


def transport_failure_from_exception(exc: Exception) -> TransportFailure:
    """
    Map an `elasticsearch` client exception onto a TransportFailure.

    ApiError keeps the engine's HTTP status; transport errors (connection
    refused, timeouts) never reached the engine and are reported as 503.
    """
    name = type(exc).__name__
    if isinstance(exc, ApiError):
        return TransportFailure(
            status=exc.meta.status,
            display_name=name,
            message=_api_error_message(exc),
        )
    if isinstance(exc, TransportError):
        return TransportFailure(
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
            display_name=name,
            message=str(exc.message),
        )
    return TransportFailure(
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        display_name=name,
        message=str(exc),
    )


def _api_error_message(exc: ApiError) -> str:
    body = exc.body
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("reason"):
            return str(error["reason"])
        # get/update/delete of a missing id answer 404 with a plain
        # {"_index", "_id", "found": false} or {"result": "not_found"} body
        if body.get("found") is False or body.get("result") == "not_found":
            return "Not Found"
    return str(exc.message)


def bulk_failure_from_response(resp: Mapping[str, Any]) -> BulkFailure:
    """Collect the error object of every rejected item in a bulk response."""
    errors = []
    for item in resp.get("items") or []:
        action = next((k for k in BULK_ACTIONS if k in item), None)
        if not action:
            continue
        err = (item[action] or {}).get("error")
        if err:
            errors.append(ShardError.from_dict(err))
    return BulkFailure(items=tuple(errors))


# ---------------- Normalising -----------------------------------


def normalise_error(failure: EngineFailure) -> Envelope:
    """
    Per-item failures are always the caller's fault (bad documents or
    mappings) and become 400 with one entry per item. Whole-request failures
    keep the engine's status.
    """
    match failure:
        case BulkFailure(items=items):
            return Envelope(
                status=status.HTTP_400_BAD_REQUEST,
                body=[_shard_error_body(e) for e in items],
            )
        case TransportFailure(status=code, display_name=name, message=message):
            return Envelope(status=code, body={"type": name, "message": message})
        case _:
            raise TypeError(f"Unknown engine failure: {failure!r}")


def _shard_error_body(err: ShardError) -> Dict[str, Any]:
    return {
        "type": err.type,
        "message": err.reason,
        "index": err.index,
        "uuid": err.index_uuid,
    }
