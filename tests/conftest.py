import copy
import itertools
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from elasticizer.core.config import ElasticizerConfig
from elasticizer.lib.errors import EngineError, TransportFailure
from elasticizer.services.translator import Elasticizer

TEST_HOST = "http://localhost:9200"
TEST_TYPE = "testType"
TEST_PREFIX = "testing."


# ----------------------- helpers -----------------------


def not_found(message: str = "Not Found") -> EngineError:
    return EngineError(TransportFailure(status=404, display_name="NotFoundError", message=message))


class InMemoryEngine:
    """
    Minimal engine the translator expects, with enough Elasticsearch
    behaviour to run full CRUD cycles: lower-case index names only, 404 on
    missing indices/ids, partial-update merge, `q` as field:value or bare
    text, `match` / `match_all` bodies, createdAtUtc sort, from/size paging.
    """

    def __init__(self, docs: Optional[Dict[str, Dict[str, Dict[str, Any]]]] = None):
        self.indices: Dict[str, Dict[str, Dict[str, Any]]] = copy.deepcopy(docs or {})
        self.calls: List[tuple] = []
        self._ids = itertools.count(1)

    # engine operations

    async def get_by_id(self, *, index, id, doc_type):
        self.calls.append(("get", dict(index=index, id=id, doc_type=doc_type)))
        docs = self.indices.get(index)
        if docs is None:
            raise not_found(f"no such index [{index}]")
        if id not in docs:
            raise not_found()
        return {"_index": index, "_id": id, "found": True, "_source": copy.deepcopy(docs[id])}

    async def search(self, *, index, body, q, from_, size, sort):
        self.calls.append(
            ("search", dict(index=index, body=body, q=q, from_=from_, size=size, sort=sort))
        )
        names = [index] if isinstance(index, str) else list(index)
        hits = []
        for name in names:
            if name not in self.indices:
                raise not_found(f"no such index [{name}]")
            for _id, src in self.indices[name].items():
                if self._matches(src, body, q):
                    hits.append({"_index": name, "_id": _id, "_source": copy.deepcopy(src)})

        field, opts = next(iter(sort[0].items()))
        hits.sort(
            key=lambda h: h["_source"].get(field) or "",
            reverse=opts["order"] == "desc",
        )
        return {
            "took": 1,
            "timed_out": False,
            "hits": {
                "total": {"value": len(hits), "relation": "eq"},
                "hits": hits[from_ : from_ + size],
            },
        }

    async def bulk_index(self, *, operations, doc_type, refresh):
        self.calls.append(("bulk", dict(operations=operations, doc_type=doc_type, refresh=refresh)))
        items = []
        for action, source in zip(operations[::2], operations[1::2]):
            meta = action["index"]
            name = meta.get("_index")
            if name is None:
                raise EngineError(
                    TransportFailure(status=400, display_name="BadRequestError", message="index is missing")
                )
            if name != name.lower():
                items.append(
                    {
                        "index": {
                            "_index": name,
                            "status": 400,
                            "error": {
                                "type": "invalid_index_name_exception",
                                "reason": f"Invalid index name [{name}], must be lowercase",
                                "index": name,
                                "index_uuid": "_na_",
                            },
                        }
                    }
                )
                continue
            _id = meta.get("_id") or f"doc-{next(self._ids)}"
            self.indices.setdefault(name, {})[_id] = copy.deepcopy(source)
            items.append({"index": {"_index": name, "_id": _id, "status": 201, "result": "created"}})
        return {"took": 1, "errors": any("error" in i["index"] for i in items), "items": items}

    async def update_by_id(self, *, index, id, doc, doc_type, refresh):
        self.calls.append(("update", dict(index=index, id=id, doc=doc, doc_type=doc_type, refresh=refresh)))
        docs = self.indices.get(index) or {}
        if id not in docs:
            raise not_found(f"[{id}]: document missing")
        docs[id].update(copy.deepcopy(doc))
        return {"_index": index, "_id": id, "result": "updated"}

    async def delete_by_id(self, *, index, id, doc_type, refresh):
        self.calls.append(("delete", dict(index=index, id=id, doc_type=doc_type, refresh=refresh)))
        docs = self.indices.get(index) or {}
        if id not in docs:
            raise not_found()
        del docs[id]
        return {"_index": index, "_id": id, "result": "deleted"}

    async def ping(self):
        return True

    # matching

    @staticmethod
    def _matches(src: Dict[str, Any], body: Optional[Dict[str, Any]], q: Optional[str]) -> bool:
        if q:
            field, sep, text = q.partition(":")
            values = [src.get(field)] if sep else list(src.values())
            needle = (text if sep else q).lower()
            if not any(needle in str(v).lower().split() for v in values if v is not None):
                return False
        query = (body or {}).get("query") or {"match_all": {}}
        if "match" in query:
            for field, text in query["match"].items():
                if str(text).lower() not in str(src.get(field, "")).lower().split():
                    return False
        return True


class FailingEngine(InMemoryEngine):
    """Every operation fails as if the cluster were unreachable."""

    def __init__(self, failure: Optional[TransportFailure] = None):
        super().__init__()
        self.failure = failure or TransportFailure(
            status=503, display_name="ConnectionError", message="Connection refused"
        )

    async def get_by_id(self, **kwargs):
        raise EngineError(self.failure)

    async def search(self, **kwargs):
        raise EngineError(self.failure)

    async def bulk_index(self, **kwargs):
        raise EngineError(self.failure)

    async def update_by_id(self, **kwargs):
        raise EngineError(self.failure)

    async def delete_by_id(self, **kwargs):
        raise EngineError(self.failure)

    async def ping(self):
        return False


# ----------------------- fixtures -----------------------

INITIAL_ITEMS = {
    f"{TEST_PREFIX}testlogs": {
        "id-1": {"code": "CODE", "name": "name", "createdAtUtc": "2024-01-01T00:00:00.000Z"},
        "id-2": {
            "code": "ANOTHER CODE",
            "name": "another name",
            "createdAtUtc": "2024-01-02T00:00:00.000Z",
        },
    },
    f"{TEST_PREFIX}auditlogs": {
        "id-3": {"code": "AUDIT", "name": "audit", "createdAtUtc": "2024-01-03T00:00:00.000Z"},
    },
}


@pytest.fixture()
def config():
    return ElasticizerConfig(host=TEST_HOST, document_type=TEST_TYPE, prefix=TEST_PREFIX)


@pytest.fixture()
def engine():
    return InMemoryEngine(INITIAL_ITEMS)


@pytest.fixture()
def translator(engine, config):
    return Elasticizer(engine, config)


@pytest.fixture()
def client(translator, monkeypatch):
    import elasticizer.api.routers.items as r_items
    from elasticizer.main import app

    monkeypatch.setattr(r_items, "elasticizer", translator, raising=True)
    return TestClient(app)
