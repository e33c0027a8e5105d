"""
Deal Check API - FastAPI Main Entry

✅ LOCAL:
    cd backend
    export GROQ_API_KEY=...          # or put it in backend/.env
    python -m uvicorn dealcheck.main:app --reload --host 0.0.0.0 --port 8000

✅ TEST LOCALLY:
    curl -i http://127.0.0.1:8000/health
    curl -i http://127.0.0.1:8000/api/test
    curl -i -X POST http://127.0.0.1:8000/api/analyze \\
         -H 'Content-Type: application/json' \\
         -d '{"url": "https://www.vinted.fr/items/123-wool-coat"}'

✅ PRODUCTION (Render):
    Build Command:
        pip install .

    Start Command:
        python -m uvicorn dealcheck.main:app --app-dir backend --host 0.0.0.0 --port $PORT
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# ✅ Routers
from dealcheck.api.routes_analyze import router as analyze_router
from dealcheck.api.routes_meta import router as meta_router
from dealcheck.core.config import settings

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Wording for framework-raised errors
ERROR_MESSAGES = {405: "Method not allowed"}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # One pooled client for listing pages, photos and the model endpoint
    async with httpx.AsyncClient() as client:
        app.state.http_client = client
        logger.info("[STARTUP] Deal Check API %s (%s), provider=%s", settings.APP_VERSION, settings.BUILD_ID, settings.provider)
        if not settings.api_key:
            logger.warning("[STARTUP] %s is not set; /api/analyze will fail until it is", settings.api_key_name)
        yield
    logger.info("[SHUTDOWN] Deal Check API stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Deal Check API",
        version=settings.APP_VERSION,
        description="Rates secondhand marketplace listings (1-5) with a short written assessment",
        lifespan=lifespan,
    )

    # ✅ CORS
    # The static front end may be served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ✅ Every error body is {"error": "..."}
    # 405s for every route and method come through here (Allow header included)
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = ERROR_MESSAGES.get(exc.status_code, str(exc.detail))
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.info("[REQUEST] Invalid body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    # ✅ Root (GET /)
    @app.get("/")
    def root():
        return {
            "name": "Deal Check API",
            "status": "ok",
            "docs": "/docs",
            "health": "/health",
            "analyze": "/api/analyze",
        }

    # ✅ Health Check (GET /health)
    @app.get("/health")
    def health():
        return {"ok": True}

    # ✅ Mount routers
    app.include_router(analyze_router)
    app.include_router(meta_router)

    return app


app = create_app()
