"""
Items router
============
Generic CRUD over any index: /items/{index}[/{id}]
"""

import json
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Path, Query, Request, status
from fastapi.responses import JSONResponse

from elasticizer.api.schemas import (
    DocumentResponse,
    EngineErrorBody,
    InvalidRequest,
    ShardErrorBody,
)
from elasticizer.core.config import settings
from elasticizer.lib.indices import split_indices
from elasticizer.models.common import Envelope, SearchPage
from elasticizer.models.items import ItemRequest
from elasticizer.services.es import engine
from elasticizer.services.translator import Elasticizer, invalid_request

router = APIRouter(prefix="/items", tags=["items"])
elasticizer = Elasticizer(
    engine, settings.elasticizer_config(), max_results=settings.ES_MAX_RESULTS
)

TRUTHY = {"1", "true", "yes", "on"}

ENGINE_ERROR = {"model": EngineErrorBody, "description": "Engine-reported failure"}
NOT_FOUND = {"model": EngineErrorBody, "description": "No such index or item"}
INVALID = {"model": InvalidRequest, "description": "Missing header, body or id"}
REJECTED = {
    "model": List[ShardErrorBody],
    "description": "Items rejected by the engine, or {\"type\": \"invalid\"}",
}

# -------------------------- Helpers ---------------------------------


def _respond(env: Envelope) -> JSONResponse:
    return JSONResponse(status_code=env.status, content=env.body)


def _truthy(value: Optional[str]) -> bool:
    return str(value or "").strip().lower() in TRUTHY


async def _item_request(request: Request) -> ItemRequest:
    # Bodies are decoded leniently; the translator decides what is acceptable.
    raw = await request.body()
    body: Any = None
    if raw:
        try:
            body = json.loads(raw)
        except ValueError:
            body = None
    return ItemRequest(headers=request.headers, body=body)


# ------------------------------ Endpoints ------------------------------------


# curl -s 'http://localhost:8000/api/items/logs?q=code:ANOTHER&page=0&per_page=10' | jq
@router.get(
    "/{index}",
    summary="Search items",
    response_model=SearchPage,
    responses={400: INVALID, 503: ENGINE_ERROR},
    response_description="One page of items, newest first unless sortAsc",
)
async def search_items(
    index: str = Path(
        ...,
        description="Logical index name, or several separated by commas",
        examples=["logs"],
    ),
    q: Optional[str] = Query(None, description="Free-text query (engine query string syntax)"),
    body: Optional[str] = Query(
        None,
        description="Structured search body as a JSON string",
        examples=['{"query": {"match": {"code": "ANOTHER"}}}'],
    ),
    page: Optional[str] = Query(None, description="Zero-based page; needs per_page"),
    per_page: Optional[str] = Query(None, description="Page size"),
    sortAsc: Optional[str] = Query(None, description="Oldest first when true"),
) -> JSONResponse:
    """
    GET /items/{index}
    """
    search_body: Optional[Dict[str, Any]] = None
    if body:
        try:
            search_body = json.loads(body)
        except ValueError:
            search_body = None
        if not isinstance(search_body, dict):
            return _respond(invalid_request())

    env = await elasticizer.search(
        split_indices(index), search_body, q, page, per_page, _truthy(sortAsc)
    )
    return _respond(env)


@router.get(
    "/{index}/{id}",
    summary="Get item by id",
    response_model=DocumentResponse,
    responses={404: NOT_FOUND, 503: ENGINE_ERROR},
    response_description="The item, with _index and _id",
)
async def get_item(
    index: str = Path(..., description="Logical index name", examples=["logs"]),
    id: str = Path(..., description="Item id"),
) -> JSONResponse:
    """
    GET /items/{index}/{id}
    """
    return _respond(await elasticizer.get_one(index, id))


@router.post(
    "",
    summary="Create items",
    status_code=status.HTTP_201_CREATED,
    responses={400: REJECTED, 503: ENGINE_ERROR},
    response_description="Empty object once every item is indexed",
)
async def create_items(request: Request) -> JSONResponse:
    """
    POST /items

    Body: a JSON array of objects, each naming its target in `_index`.
    """
    return _respond(await elasticizer.insert_many(await _item_request(request)))


@router.post(
    "/{index}",
    summary="Create items (default index)",
    status_code=status.HTTP_201_CREATED,
    responses={400: REJECTED, 503: ENGINE_ERROR},
    response_description="Empty object once every item is indexed",
)
async def create_items_in(
    request: Request,
    index: str = Path(..., description="Index for items without their own _index"),
) -> JSONResponse:
    """
    POST /items/{index}
    """
    return _respond(await elasticizer.insert_many(await _item_request(request), index))


@router.patch(
    "/{index}/{id}",
    summary="Patch item",
    responses={400: INVALID, 404: NOT_FOUND, 503: ENGINE_ERROR},
    response_description="Empty object once the item is updated",
)
async def patch_item(
    request: Request,
    index: str = Path(..., description="Logical index name"),
    id: str = Path(..., description="Item id"),
) -> JSONResponse:
    """
    PATCH /items/{index}/{id}

    Only the supplied fields change; `_index` in the body is ignored.
    """
    return _respond(await elasticizer.update_one(index, await _item_request(request), id))


@router.patch("/{index}", include_in_schema=False)
async def patch_without_id(request: Request, index: str) -> JSONResponse:
    return _respond(await elasticizer.update_one(index, await _item_request(request), None))


@router.delete(
    "/{index}/{id}",
    summary="Delete item",
    responses={400: INVALID, 404: NOT_FOUND, 503: ENGINE_ERROR},
    response_description="Empty object once the item is gone",
)
async def delete_item(
    index: str = Path(..., description="Logical index name"),
    id: str = Path(..., description="Item id"),
) -> JSONResponse:
    """
    DELETE /items/{index}/{id}
    """
    return _respond(await elasticizer.delete_one(index, id))


@router.delete("/{index}", include_in_schema=False)
async def delete_without_id(index: str) -> JSONResponse:
    return _respond(await elasticizer.delete_one(index, None))
