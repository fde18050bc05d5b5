"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request

from delveforge import __version__
from delveforge.config import get_settings
from delveforge.middleware.error_handler import setup_error_handlers

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Delveforge",
    description="Encounter, encounter deck and tile map generation for tabletop dungeon crawls",
    version=__version__,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    logger.debug(f"{request.method} {request.url.path} -> {response.status_code}")
    return response


# Setup structured error handlers
setup_error_handlers(app, debug=settings.DEBUG)


@app.get("/")
async def root():
    """Service banner."""
    return {"status": "online", "service": "Delveforge", "version": __version__}


@app.get("/health")
async def health_check():
    """Detailed health check."""
    from delveforge.services import get_library

    library = get_library()
    return {
        "status": "healthy",
        "debug_mode": settings.DEBUG,
        "creatures": len(library.creatures),
        "traps": len(library.traps),
        "skill_challenges": len(library.challenges),
        "tile_libraries": len(library.tile_libraries),
    }


# Routes
from delveforge.api.routes import encounters, maps, scaling
app.include_router(encounters.router, prefix="/api/encounters", tags=["encounters"])
app.include_router(maps.router, prefix="/api/maps", tags=["maps"])
app.include_router(scaling.router, prefix="/api/scaling", tags=["scaling"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "delveforge.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
