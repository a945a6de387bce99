"""
Health router
=============
"""

from typing import Dict
from fastapi import APIRouter
from elasticizer.services.es import engine
from elasticizer.api.schemas import HealthResponse

router = APIRouter(tags=["health"])

# ------------------------------ Endpoints ------------------------------------


# curl -s -XGET http://localhost:8000/api/health | jq
@router.get(
    "/health",
    summary="Service health check",
    response_model=HealthResponse,
    response_description="Reachability status for backing Elasticsearch cluster",
)
async def health() -> Dict[str, str]:
    """
    GET /api/health
    """
    ok = await engine.ping()
    return {"status": "ok" if ok else "degraded"}
