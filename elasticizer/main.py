import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.requests import Request
from starlette.exceptions import HTTPException as StarletteHTTPException

from elasticizer.core.config import settings
from elasticizer.api.routers import health
from elasticizer.api.routers import items
from elasticizer.models.common import ErrorType
from elasticizer.services.es import es

API_VERSION = "1.0"

tags_metadata = [
    {"name": "health", "description": "Health check endpoint."},
    {
        "name": "items",
        "description": "Search, ID lookup, bulk create, patch and delete on any index.",
    },
]

# Public base path the API is exposed under (e.g. /api behind the load balancer).
# This keeps the OpenAPI "Try it out" requests pointed at the right prefix.
public_api_base = settings.API_BASE_PATH.rstrip("/") or "/"

log = logging.getLogger("uvicorn.error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await es.close()


app = FastAPI(
    title="Elasticizer API",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    openapi_tags=tags_metadata,
    swagger_ui_parameters={"defaultModelsExpandDepth": -1},
    servers=[{"url": public_api_base}],
    lifespan=lifespan,
)


@app.middleware("http")
async def add_api_marker(request: Request, call_next):
    resp = await call_next(request)
    resp.headers["x-elasticizer-api"] = "Python FastAPI"
    resp.headers["x-elasticizer-api-version"] = API_VERSION
    return resp


# CORS (Settings expects JSON array in .env)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(items.router)


@app.get("/")
def root():
    return {"ok": True}


# verbs the items routes do not serve answer 405 in the same error contract
@app.exception_handler(StarletteHTTPException)
async def method_not_supported(request: Request, exc: StarletteHTTPException):
    if exc.status_code != 405:
        return await http_exception_handler(request, exc)
    return JSONResponse(
        status_code=405,
        content={
            "error": {
                "type": ErrorType.NOT_SUPPORTED.value,
                "message": f"Method {request.method} not supported.",
            }
        },
        headers=exc.headers,
    )


# return a generic JSON error instead of internal messages/logs and capture the trace in the log
@app.exception_handler(Exception)
async def json_errors(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "internal_server_error"})
