"""
Engine client: the five operations the translator needs from the search engine.

`EngineClient` is what the translator depends on. `ElasticsearchEngine` is the
production implementation over the official async client; tests supply their
own in-memory implementation.
"""

import logging
from typing import Any, Awaitable, Dict, List, Mapping, Optional, Protocol, Sequence, Union

from elastic_transport import ObjectApiResponse
from elasticsearch import ApiError, AsyncElasticsearch, TransportError

from elasticizer.lib.errors import EngineError, transport_failure_from_exception

log = logging.getLogger(__name__)

IndexArg = Union[str, List[str]]


class EngineClient(Protocol):
    async def get_by_id(self, *, index: str, id: Any, doc_type: str) -> Dict[str, Any]: ...

    async def search(
        self,
        *,
        index: IndexArg,
        body: Optional[Dict[str, Any]],
        q: Optional[str],
        from_: int,
        size: int,
        sort: List[Dict[str, Any]],
    ) -> Dict[str, Any]: ...

    async def bulk_index(
        self, *, operations: Sequence[Mapping[str, Any]], doc_type: str, refresh: str
    ) -> Dict[str, Any]: ...

    async def update_by_id(
        self, *, index: str, id: Any, doc: Dict[str, Any], doc_type: str, refresh: str
    ) -> Dict[str, Any]: ...

    async def delete_by_id(
        self, *, index: str, id: Any, doc_type: str, refresh: str
    ) -> Dict[str, Any]: ...

    async def ping(self) -> bool: ...


def unwrap_es_response(resp: Any) -> Dict[str, Any]:
    """Unwrap an Elasticsearch response, handling both ObjectApiResponse and dict."""
    if isinstance(resp, ObjectApiResponse):
        return resp.body
    if isinstance(resp, dict):
        return resp
    return dict(resp)


class ElasticsearchEngine:
    """
    EngineClient over `AsyncElasticsearch`.

    Client exceptions are converted to `EngineError` here, so nothing above
    this layer depends on the elasticsearch exception classes. The 8.x API is
    typeless; `doc_type` is accepted for interface parity and not sent.
    """

    def __init__(self, client: AsyncElasticsearch) -> None:
        self.client = client

    async def _call(self, op: str, request: Awaitable[Any]) -> Dict[str, Any]:
        try:
            return unwrap_es_response(await request)
        except (ApiError, TransportError) as e:
            failure = transport_failure_from_exception(e)
            log.debug("Elasticsearch %s failed: %s", op, failure)
            raise EngineError(failure) from e

    async def get_by_id(self, *, index: str, id: Any, doc_type: str) -> Dict[str, Any]:
        return await self._call("get", self.client.get(index=index, id=id))

    async def search(
        self,
        *,
        index: IndexArg,
        body: Optional[Dict[str, Any]],
        q: Optional[str],
        from_: int,
        size: int,
        sort: List[Dict[str, Any]],
    ) -> Dict[str, Any]:
        es_body: Dict[str, Any] = dict(body or {})
        es_body["from"] = from_
        es_body["size"] = size
        es_body["sort"] = sort
        # report the real total, not the 10k lower bound
        es_body.setdefault("track_total_hits", True)

        kwargs: Dict[str, Any] = {"index": index, "body": es_body}
        if q:
            kwargs["q"] = q
        return await self._call("search", self.client.search(**kwargs))

    async def bulk_index(
        self, *, operations: Sequence[Mapping[str, Any]], doc_type: str, refresh: str
    ) -> Dict[str, Any]:
        return await self._call(
            "bulk", self.client.bulk(operations=list(operations), refresh=refresh)
        )

    async def update_by_id(
        self, *, index: str, id: Any, doc: Dict[str, Any], doc_type: str, refresh: str
    ) -> Dict[str, Any]:
        return await self._call(
            "update", self.client.update(index=index, id=id, doc=doc, refresh=refresh)
        )

    async def delete_by_id(
        self, *, index: str, id: Any, doc_type: str, refresh: str
    ) -> Dict[str, Any]:
        return await self._call(
            "delete", self.client.delete(index=index, id=id, refresh=refresh)
        )

    async def ping(self) -> bool:
        try:
            return bool(await self.client.ping())
        except (ApiError, TransportError):
            return False
