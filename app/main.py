from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from app.core.config import settings
from app.core.firebase_init import initialize_firebase, get_firebase_status
from app.routers import reports, water_sources, websocket
from app.services.firebase_repository import FirebaseRepository
from app.services.water_source_state import WaterSourceStateHolder

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(repository: Optional[FirebaseRepository] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Starting Kitui Water Finder API")
        repo = repository
        if repo is None:
            if not initialize_firebase():
                logger.warning("⚠️ Firebase initialization failed - loads will fail until it is configured")
            repo = FirebaseRepository()

        # Triggers the first load
        app.state.water_sources = WaterSourceStateHolder(repo)
        yield
        logger.info("⛔ Waiting for in-flight Firestore calls")
        await app.state.water_sources.drain()

    app = FastAPI(
        title="Kitui Water Finder API",
        description="Community water sources, their availability and issue reports",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Adjust as needed for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(water_sources.router)
    app.include_router(reports.router)
    app.include_router(websocket.router)

    @app.get("/")
    async def root():
        return {
            "message": "Welcome to the Kitui Water Finder API",
            "firebase_status": get_firebase_status(),
        }

    @app.get("/health")
    async def health_check():
        holder = getattr(app.state, "water_sources", None)
        return {
            "status": "healthy",
            "firebase_available": get_firebase_status()['available'],
            "sources_loaded": len(holder.sources) if holder else 0,
            "is_loading": holder.is_loading if holder else False,
        }

    return app


app = create_app()
