# Standard library imports
from pathlib import Path
from contextlib import asynccontextmanager
import logging

# External package imports
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Local application imports
from .api.v1 import referral_router
from .core.config import get_settings
from .application.use_cases.referral.create_user import wait_for_enrollment_notifications
from .di.container import get_container
from .domain.repositories.user_repository import UserRepository
from .infrastructure.db.mongo_connection import close_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.

    Ensures the user collection indexes exist (unique email and referral
    code). On shutdown, waits for enrollment emails still being sent
    and closes the MongoDB client.
    """
    try:
        user_repository = get_container().get(UserRepository)
        ensure_indexes = getattr(user_repository, "ensure_indexes", None)
        if ensure_indexes is not None:
            await ensure_indexes()
    except Exception as e:
        # Don't fail app startup if MongoDB is briefly unavailable
        logger.error(f"Failed to ensure user indexes: {e}", exc_info=True)

    yield

    await wait_for_enrollment_notifications()
    close_database()
    logger.info("Application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    This function sets up the FastAPI application with:
    - Environment variable loading
    - CORS middleware configuration
    - API route registration

    Returns:
        Configured FastAPI application instance
    """
    # Load environment variables from .env file
    env_path = Path(__file__).resolve().parent.parent / ".env"
    load_dotenv(env_path)

    # Create FastAPI app
    application = FastAPI(
        title="Referral Service API",
        version="0.1.0",
        description="Referral codes with points ranking",
        lifespan=lifespan
    )

    # Add CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routers
    application.include_router(referral_router, prefix="/api/v1/referrals")

    return application


# Create application instance
app = create_application()
