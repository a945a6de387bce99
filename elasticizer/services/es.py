from elasticsearch import AsyncElasticsearch

from elasticizer.clients.engine import ElasticsearchEngine
from elasticizer.core.config import settings


def build_es() -> AsyncElasticsearch:
    auth_kwargs = {}
    if settings.ES_API_KEY:
        auth_kwargs["api_key"] = settings.ES_API_KEY
    elif settings.ES_USERNAME and settings.ES_PASSWORD:
        auth_kwargs["basic_auth"] = (settings.ES_USERNAME, settings.ES_PASSWORD)

    common_kwargs = dict(
        retry_on_timeout=True,
        max_retries=settings.ES_MAX_RETRIES,
        http_compress=True,
        connections_per_node=10,
        request_timeout=settings.ES_REQUEST_TIMEOUT,
        **auth_kwargs,
    )

    # Prefer Cloud ID if supplied
    if settings.ES_CLOUD_ID:
        return AsyncElasticsearch(cloud_id=settings.ES_CLOUD_ID, **common_kwargs)

    # Otherwise fall back to a direct host/URL (for local dev)
    if settings.ES_HOST:
        return AsyncElasticsearch(settings.ES_HOST, **common_kwargs)

    # Nothing configured
    raise RuntimeError(
        "No Elasticsearch connection configured. Set ES_CLOUD_ID or ES_HOST (+ credentials)."
    )


# The client does not connect until the first request, so building it at
# import time is safe even when the cluster is down.
es = build_es()
engine = ElasticsearchEngine(es)
