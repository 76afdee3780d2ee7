from contextlib import asynccontextmanager
import logging
import time

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from launchcache.api.api import api_router
from launchcache.api.deps import get_cache_store
from launchcache.core.config import settings
from launchcache.core.logging_config import setup_logging
from launchcache.services.cache_store import CacheNamespace, CacheStore, RESPONSE_PREFIX, UPSTREAM_PREFIX
from launchcache.services.orchestrator import LaunchQueryService
from launchcache.services.spacex import SpaceXClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL, settings.LOG_FILE)

    # One store, two namespaces: raw upstream payloads and rendered responses
    store = CacheStore(settings.CACHE_TTL_SECONDS)
    client = SpaceXClient(
        settings.SPACEX_BASE_URL,
        CacheNamespace(store, UPSTREAM_PREFIX),
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
    )
    app.state.cache_store = store
    app.state.spacex_client = client
    app.state.launch_service = LaunchQueryService(client, CacheNamespace(store, RESPONSE_PREFIX))
    logger.info(f"Launch cache ready (ttl={settings.CACHE_TTL_SECONDS}s, upstream={settings.SPACEX_BASE_URL})")

    try:
        yield
    finally:
        await client.aclose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Cached query front-end for SpaceX launch records.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    target = request.url.path + (f"?{request.url.query}" if request.url.query else "")
    client_host = request.client.host if request.client else "-"
    logger.info(f"REQ {request.method} {target} from {client_host}")

    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.error(f"RES 500 {target} ({elapsed_ms} ms)")
        raise

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    level = logging.INFO
    if response.status_code >= 500:
        level = logging.ERROR
    elif response.status_code >= 400:
        level = logging.WARNING
    logger.log(level, f"RES {response.status_code} {target} ({elapsed_ms} ms)")
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/")
def read_root():
    return {"message": "Welcome to LaunchCache API", "status": "active", "version": "1.0.0"}

@app.get("/health")
def health_check(store: CacheStore = Depends(get_cache_store)):
    return {"status": "ok", "cache": store.stats()}

app.include_router(api_router, prefix=settings.API_V1_STR)


def run():
    import uvicorn

    uvicorn.run("launchcache.main:app", host=settings.SERVER_HOST, port=settings.SERVER_PORT)


if __name__ == "__main__":
    run()
