import logging
import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.middleware.cors import CORSMiddleware

from app.api.v1.api import router
from app.core.config import ModeEnum, settings
from app.core.exceptions import APIError
from app.core.pokeapi import PokeAPIClient
from app.core.token_service import TokenService
from app.core.tokens import AccessTokenCodec
from app.db.database import engine

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: warm up DB pool. Shutdown: close the PokéAPI client, dispose engine."""
    async with engine.begin() as conn:
        await conn.execute(text("SELECT 1"))
    yield
    await app.state.pokeapi_client.aclose()
    await engine.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

# ── Services (built once, injected via app.api.deps) ─────────

app.state.token_service = TokenService(
    codec=AccessTokenCodec(
        secret=settings.ACCESS_TOKEN_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        ttl=settings.ACCESS_TOKEN_TTL,
    ),
    refresh_ttl_days=settings.REFRESH_TOKEN_TTL_DAYS,
    lock_rows=settings.ROTATION_LOCK_ROWS,
)
app.state.pokeapi_client = PokeAPIClient(
    settings.POKEAPI_BASE_URL,
    timeout=settings.POKEAPI_TIMEOUT_SECONDS,
)


# ── Exception Handlers ───────────────────────────────────────

@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(status_code=exc.status_code, content=exc.body)


def jsonable_details(details: list[dict]) -> list[dict]:
    """repr() any validation input JSON can't carry (e.g. raw bytes bodies)."""
    for detail in details:
        if not isinstance(detail["value"], (str, int, float, bool, list, dict, type(None))):
            detail["value"] = repr(detail["value"])
    return details


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "unknown",
            "message": err.get("msg", "Validation failed"),
            "value": err.get("input"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Validation failed", "details": jsonable_details(details)},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    content = {"detail": "Internal server error"}
    if settings.MODE == ModeEnum.development:
        content["stack"] = "".join(traceback.format_exception(exc))
    return JSONResponse(status_code=500, content=content)


# ── Middleware ────────────────────────────────────────────────

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    # Unhandled exceptions surface as 500 from the global handler
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("%s %s %d %.1fms", request.method, request.url.path, status_code, elapsed_ms)


# CORS
ALLOWED_ORIGINS = [
    # Development
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────

app.include_router(router, prefix=settings.API_PREFIX)


# ── Root ──────────────────────────────────────────────────────

@app.get("/")
def read_root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME} API"}
