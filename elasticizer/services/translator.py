"""
Elasticizer
===========

Maps the generic CRUD verbs onto engine operations and maps the engine's
answers back onto `Envelope`s. Every public operation returns an envelope;
engine failures are normalised, never raised.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import status

from elasticizer.clients.engine import EngineClient
from elasticizer.core.config import ElasticizerConfig
from elasticizer.lib.dates import timestamp
from elasticizer.lib.errors import EngineError, bulk_failure_from_response, normalise_error
from elasticizer.lib.indices import IndexNameResolver, NameList
from elasticizer.models.common import Envelope, ErrorType, SearchPage
from elasticizer.models.items import Document, ItemRequest, Pagination, flatten_hit

log = logging.getLogger(__name__)

# Size sent when the caller does not paginate: "everything", up to what the
# engine accepts in a single window.
ELASTICSEARCH_MAX_RESULTS = 10_000

SORT_FIELD = "createdAtUtc"


def invalid_request(kind: ErrorType = ErrorType.INVALID) -> Envelope:
    return Envelope(status=status.HTTP_400_BAD_REQUEST, body={"type": kind.value})


def _total(hits: Dict[str, Any]) -> int:
    # 7.x+ reports {"value": n, "relation": "eq"}, older engines a bare int
    total = hits.get("total", 0)
    if isinstance(total, dict):
        total = total.get("value", 0)
    return int(total or 0)


def sort_clause(sort_asc: bool = False) -> List[Dict[str, Any]]:
    """Newest first unless `sort_asc`; unmapped_type keeps empty indices searchable."""
    order = "asc" if sort_asc else "desc"
    return [{SORT_FIELD: {"order": order, "unmapped_type": "date"}}]


class Elasticizer:
    """The elasticsearch-based RESTful API implementation."""

    def __init__(
        self,
        engine: EngineClient,
        config: ElasticizerConfig,
        *,
        max_results: int = ELASTICSEARCH_MAX_RESULTS,
    ) -> None:
        self.engine = engine
        self.config = config
        self.max_results = max_results
        self.indices = IndexNameResolver(config.prefix)

    def _failed(self, op: str, index: Any, err: EngineError) -> Envelope:
        env = normalise_error(err.failure)
        log.warning("%s on %s failed with %s: %s", op, index, env.status, env.body)
        return env

    # ------------------------------ Read ---------------------------------

    async def get_one(self, index: str, id: Any) -> Envelope:
        """Retrieves an existing item by id."""
        physical = self.indices.resolve(index)
        try:
            res = await self.engine.get_by_id(
                index=physical, id=id, doc_type=self.config.document_type
            )
        except EngineError as e:
            return self._failed("get", physical, e)

        return Envelope(status=status.HTTP_200_OK, body=flatten_hit(res))

    async def search(
        self,
        index: NameList,
        body: Optional[Dict[str, Any]] = None,
        query: Optional[str] = None,
        page: Any = None,
        per_page: Any = None,
        sort_asc: bool = False,
    ) -> Envelope:
        """
        Retrieves existing items.

        `body` (a structured query) and `query` (free text, the engine's `q`)
        are both passed through; the engine decides how they combine.
        `page` is zero-based and only applies together with a positive
        `per_page`; without one, up to `max_results` items are returned and
        `hasMore` is false.
        """
        if not index:
            # an empty name list would make the engine search every index
            log.debug("search rejected: no index named")
            return invalid_request()

        paging = Pagination(page=page, per_page=per_page)
        physical = self.indices.resolve(index)
        try:
            res = await self.engine.search(
                index=physical,
                body=body,
                q=query,
                from_=paging.offset,
                size=paging.size(self.max_results),
                sort=sort_clause(bool(sort_asc)),
            )
        except EngineError as e:
            return self._failed("search", physical, e)

        hits = res.get("hits") or {}
        total = _total(hits)
        page_body = SearchPage(
            data=[flatten_hit(h) for h in hits.get("hits") or []],
            hasMore=paging.has_more(total),
            totalCount=total,
        )
        return Envelope(status=status.HTTP_200_OK, body=page_body.model_dump())

    # ------------------------------ Write --------------------------------

    async def insert_many(self, req: ItemRequest, index: Optional[str] = None) -> Envelope:
        """
        Inserts new items.

        Each document names its own target in `_index`; `index` (the request
        path, when there is one) is used for documents that do not.
        """
        if not req.is_json or not req.has_body:
            log.debug("insert rejected: content-type=%r body=%r", req.content_type, req.body)
            return invalid_request()

        raw_docs = req.body if isinstance(req.body, list) else [req.body]
        if not all(isinstance(d, dict) for d in raw_docs):
            log.debug("insert rejected: non-object document in body")
            return invalid_request()

        created_at = timestamp()
        operations: List[Dict[str, Any]] = []
        for raw in raw_docs:
            doc = Document.from_mapping(raw)
            logical = doc.index if doc.index is not None else index
            action: Dict[str, Any] = {}
            # no target at all is left for the engine to reject
            if logical is not None:
                action["_index"] = self.indices.resolve(str(logical))
            if doc.id is not None:
                action["_id"] = doc.id
            operations.append({"index": action})
            operations.append(doc.source(created_at))

        try:
            res = await self.engine.bulk_index(
                operations=operations,
                doc_type=self.config.document_type,
                refresh=self.config.refresh,
            )
        except EngineError as e:
            return self._failed("bulk", None, e)

        if res.get("errors"):
            failure = bulk_failure_from_response(res)
            log.warning("bulk rejected %d of %d items", len(failure.items), len(raw_docs))
            return normalise_error(failure)

        return Envelope(status=status.HTTP_201_CREATED, body={})

    async def update_one(self, index: str, req: ItemRequest, id: Any) -> Envelope:
        """Updates (patches) an existing item; only the supplied fields change."""
        if not req.is_json or not req.has_body or not id:
            log.debug("update rejected: content-type=%r id=%r", req.content_type, id)
            return invalid_request()
        if not isinstance(req.body, dict):
            return invalid_request()

        # an update never moves a document to another index
        doc = {k: v for k, v in req.body.items() if k != "_index"}

        physical = self.indices.resolve(index)
        try:
            await self.engine.update_by_id(
                index=physical,
                id=id,
                doc=doc,
                doc_type=self.config.document_type,
                refresh=self.config.refresh,
            )
        except EngineError as e:
            return self._failed("update", physical, e)

        return Envelope(status=status.HTTP_200_OK, body={})

    async def delete_one(self, index: str, id: Any) -> Envelope:
        """Deletes an existing item."""
        if not id:
            return invalid_request(ErrorType.MISSING)

        physical = self.indices.resolve(index)
        try:
            await self.engine.delete_by_id(
                index=physical,
                id=id,
                doc_type=self.config.document_type,
                refresh=self.config.refresh,
            )
        except EngineError as e:
            return self._failed("delete", physical, e)

        return Envelope(status=status.HTTP_200_OK, body={})
