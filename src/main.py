"""
Oncology Trial Finder API

Patient-facing backend over the ClinicalTrials.gov registry: trial
search, eligibility assessment and simple analytics, all under /api.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.analytics.analytics_routes import router as analytics_router
from src.config import settings
from src.eligibility.assessment_store import get_assessment_store
from src.eligibility.eligibility_routes import router as eligibility_router
from src.registry.registry_routes import router as registry_router
from src.search.search_routes import router as search_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("=" * 70)
    logger.info(f"[STARTUP] {settings.SERVICE_NAME} v{settings.VERSION}")
    logger.info(f"[STARTUP] Registry: {settings.REGISTRY_BASE_URL}")
    logger.info(
        f"[STARTUP] Assessments kept {settings.ASSESSMENT_TTL_SECONDS}s, "
        f"at most {settings.ASSESSMENT_MAX_ENTRIES}"
    )
    logger.info("=" * 70)

    yield

    stats = get_assessment_store().get_store_stats()
    logger.info(f"[SHUTDOWN] {settings.SERVICE_NAME} shutting down, {stats['stored']} assessments dropped")


api_router = APIRouter()


@api_router.get("/health", tags=["Health"])
async def health_check() -> Dict[str, str]:
    return {"status": "OK", "message": "Backend is running"}


# /trials/search must be registered ahead of /trials/{trial_id}
api_router.include_router(search_router)
api_router.include_router(registry_router)
api_router.include_router(eligibility_router)
api_router.include_router(analytics_router)


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.VERSION,
        description="Oncology clinical trial search and eligibility assessment",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in settings.CORS_ALLOW_ORIGINS.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.main:app", host=settings.HOST, port=settings.PORT, reload=settings.DEBUG)
