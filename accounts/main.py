from fastapi import FastAPI
from fastapi.concurrency import asynccontextmanager
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from accounts.api.routes import api_router
from accounts.core.auth import CredentialVerifier
from accounts.core.config import Environment, settings
from accounts.core.keys import KeyMaterialManager
from accounts.core.logger import configure_uvicorn_logging, setup_logger, shutdown_logger
from accounts.core.tokens import TokenService
from accounts.middleware.logging import LoggingMiddleware
from accounts.middleware.rate_limit import RateLimitHeaderMiddleware
from accounts.services.cache import RateLimiter, close_redis_pool, create_redis_client


def _load_key_manager() -> KeyMaterialManager:
    if settings.jwt_private_key_path is None:
        logger.warning("No JWT key path configured, tokens will not survive a restart")
        return KeyMaterialManager.generate()

    return KeyMaterialManager.load_or_generate(settings.jwt_private_key_path)


async def _check_dependencies(app: FastAPI):
    """Check essential dependencies before starting the app"""

    is_healthy = await app.state.rate_limiter.health_check()

    if not is_healthy:
        logger.error("Redis health check failed. Exiting application.")
        raise RuntimeError("Redis is not healthy.")

    logger.success("Redis is healthy.")


async def _shutdown_dependencies(app: FastAPI):
    """Shutdown essential dependencies gracefully"""

    await app.state.rate_limiter.close()
    await close_redis_pool()
    logger.success("Redis connection closed.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""

    setup_logger()
    configure_uvicorn_logging()

    logger.info("Initializing resources...")

    key_manager = _load_key_manager()
    app.state.key_manager = key_manager
    app.state.token_service = TokenService(key_manager)
    app.state.rate_limiter = RateLimiter(create_redis_client())
    app.state.credential_verifier = CredentialVerifier()

    await _check_dependencies(app)
    logger.success("Resources initialized.")

    yield

    logger.info("Cleaning up resources...")
    await _shutdown_dependencies(app)
    await shutdown_logger()


ALLOWED_ENVIRONMENTS = {Environment.LOCAL, Environment.DEV, Environment.STG}

app = FastAPI(
    title=settings.app_title,
    version=settings.app_version,
    description=settings.app_description,
    openapi_url=("/openapi.json" if settings.current_environment in ALLOWED_ENVIRONMENTS else None),
    docs_url="/docs" if settings.current_environment in ALLOWED_ENVIRONMENTS else None,
    redoc_url="/redoc" if settings.current_environment in ALLOWED_ENVIRONMENTS else None,
    lifespan=lifespan,
    generate_unique_id_function=lambda route: f"{route.tags[0]}-{route.name}",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(RateLimitHeaderMiddleware)

# Added last so it wraps everything else and sees every request
app.add_middleware(LoggingMiddleware)

app.include_router(api_router)
