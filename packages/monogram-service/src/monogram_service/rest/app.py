"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from monogram import __version__
from monogram.spotify import SpotifyError
from monogram_service.db.engine import close_db, init_db
from monogram_service.rest.routes.auth import router as auth_router
from monogram_service.rest.routes.exports import router as exports_router
from monogram_service.rest.routes.health import router as health_router
from monogram_service.rest.routes.newsletters import router as newsletters_router
from monogram_service.rest.routes.preferences import router as preferences_router
from monogram_service.rest.routes.prompts import router as prompts_router
from monogram_service.rest.routes.responses import router as responses_router
from monogram_service.rest.routes.spaces import router as spaces_router
from monogram_service.rest.routes.spotify import router as spotify_router
from monogram_service.settings import settings
from monogram_service.spotify.errors import spotify_error_handler


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await init_db()
    yield
    await close_db()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Monogram API",
        description="Rotating-curator journaling circles",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SpotifyError, spotify_error_handler)

    # Public routes
    app.include_router(health_router, tags=["health"])

    # Auth routes (register/login/refresh are public; /me is protected inside the router)
    app.include_router(auth_router, prefix="/api/v1", tags=["auth"])

    # Protected API routes
    app.include_router(preferences_router, prefix="/api/v1", tags=["settings"])
    app.include_router(spaces_router, prefix="/api/v1", tags=["spaces"])
    app.include_router(prompts_router, prefix="/api/v1", tags=["prompts"])
    app.include_router(responses_router, prefix="/api/v1", tags=["responses"])
    app.include_router(newsletters_router, prefix="/api/v1", tags=["newsletters"])
    app.include_router(exports_router, prefix="/api/v1", tags=["export"])
    app.include_router(spotify_router, prefix="/api/v1", tags=["spotify"])

    return app
