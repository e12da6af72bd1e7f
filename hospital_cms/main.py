"""
FastAPI application factory. No business logic; only wiring and middleware.

Run with:
  uvicorn hospital_cms.main:create_app --factory
or the `hospital-cms` console script.
"""

import logging

from dotenv import load_dotenv

load_dotenv()

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hospital_cms import __version__
from hospital_cms.api.error_handling import register_exception_handlers
from hospital_cms.api.v1 import router as api_router
from hospital_cms.core.config import Settings, get_settings
from hospital_cms.core.database import build_engine, build_session_factory
from hospital_cms.core.rate_limit import SlidingWindowRateLimiter
from hospital_cms.core.security import TokenService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%SZ")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application with its process-wide state on app.state.

    Raises pydantic.ValidationError when JWT_SECRET or DATABASE_URL is missing,
    so a misconfigured process never starts serving.
    """
    settings = settings or get_settings()
    engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

    app = FastAPI(
        title="Hospital CMS API",
        version=__version__,
        docs_url="/docs" if settings.APP_ENV != "prod" else None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.token_service = TokenService(
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_EXPIRE_MINUTES,
    )
    app.state.auth_rate_limiter = SlidingWindowRateLimiter(
        settings.AUTH_RATE_LIMIT_MAX_ATTEMPTS,
        settings.AUTH_RATE_LIMIT_WINDOW_SECONDS,
    )
    app.state.api_rate_limiter = SlidingWindowRateLimiter(
        settings.API_RATE_LIMIT_MAX_REQUESTS,
        settings.API_RATE_LIMIT_WINDOW_SECONDS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Hospital CMS API"}

    logger.info("Application created: env=%s api_prefix=%s", settings.APP_ENV, settings.API_PREFIX)
    return app


def main() -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=3000)


if __name__ == "__main__":
    main()
