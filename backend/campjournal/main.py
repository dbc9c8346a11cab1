"""
Main FastAPI application entry point.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager

from campjournal.core.config import settings
from campjournal.core.database import Database
from campjournal.core.exceptions import CampJournalError
from campjournal.services.places_service import PlacesClient
from campjournal.api import auth, campgrounds, journal, photos, places, users

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    app.state.db = Database()
    app.state.places = PlacesClient()
    if settings.APP_ENV == "development":
        await app.state.db.create_all()
    logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")
    yield
    await app.state.places.aclose()
    await app.state.db.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="Campground search, travel journal and sharing",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
    return response


@app.exception_handler(CampJournalError)
async def campjournal_error_handler(request: Request, exc: CampJournalError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Include routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(journal.router, prefix="/api/v1/journal", tags=["journal"])
app.include_router(campgrounds.router, prefix="/api/v1/campgrounds", tags=["campgrounds"])
app.include_router(places.router, prefix="/api/v1/places", tags=["places"])
app.include_router(users.router, prefix="/api/v1/users", tags=["users"])
app.include_router(photos.router, prefix="/api/v1/photos", tags=["photos"])

# Serve uploaded files in development
if settings.STORAGE_PROVIDER.lower() == "local":
    app.mount("/storage", StaticFiles(directory=settings.LOCAL_STORAGE_PATH, check_dir=False), name="storage")


@app.get("/")
async def root():
    """API root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": "1.0.0",
        "status": "running"
    }


@app.get("/healthz")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
