"""FastAPI app, CORS, error mapping and route registration."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import get_settings
from ..errors import BAD_CREDENTIAL, BAD_REQUEST, NOT_FOUND, UNAVAILABLE, Setlist2PlaylistError
from ..logging import configure_logging, get_logger
from .routes import health, setlist, spotify

logger = get_logger(__name__)

STATUS_BY_CATEGORY = {
    NOT_FOUND: 404,
    BAD_CREDENTIAL: 401,
    BAD_REQUEST: 400,
    UNAVAILABLE: 502,
}


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(level=settings.log_level, format=settings.log_format)

    app = FastAPI(
        title="setlist2playlist API",
        description="Turn setlist.fm setlists into Spotify playlists",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Setlist2PlaylistError)
    async def handle_error(request: Request, exc: Setlist2PlaylistError) -> JSONResponse:
        status_code = STATUS_BY_CATEGORY.get(exc.category, 500)
        logger.warning(
            "request_failed",
            path=request.url.path,
            status=status_code,
            category=exc.category,
            stage=exc.stage,
            error=exc.message,
        )
        return JSONResponse(status_code=status_code, content=exc.to_dict())

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(spotify.router, prefix="/api/spotify", tags=["spotify"])
    app.include_router(setlist.router, prefix="/api/setlist", tags=["setlist"])
    return app


app = create_app()
