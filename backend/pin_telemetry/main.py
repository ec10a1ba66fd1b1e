"""
Pin Telemetry - Backend API
===========================
FastAPI application that lets IoT devices register and upload pin readings.

ARCHITECTURE:

    [ESP32 / device] --POST /auth--> [This Backend] --> [MongoDB: users]
           |                               |
           +-------POST /data------------->+-------> [MongoDB: signaldatas]

    1. The device sends its unique_id to POST /auth and gets an api_key.
    2. The device sends readings to POST /data with header `api-key`.

HOW TO RUN:
    # Install
    pip install -e .

    # Copy environment config (optional, defaults work with a local MongoDB)
    cp env.example.txt .env

    # Run the server
    python -m pin_telemetry
    # or
    uvicorn pin_telemetry.main:app --reload --port 5000

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:5000/docs
    - ReDoc: http://localhost:5000/redoc
"""

import os
import sys
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from pin_telemetry import __version__
from pin_telemetry.errors import register_exception_handlers
from pin_telemetry.routers import auth_router, data_router
from pin_telemetry.storage import Storage, StorageUnavailableError


# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

# Aliases that logging accepts but uvicorn does not
LOG_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


def normalize_log_level(value: str) -> str:
    """Upper-case a level name and map WARN/FATAL to their canonical names."""
    level = value.strip().upper()
    return LOG_LEVEL_ALIASES.get(level, level)


class Config:
    """
    Application configuration loaded from environment variables.

    Environment Variables:
        MONGO_URI: MongoDB connection string
        MONGO_DB_NAME: Database name (default: esp32DB)
        MONGO_TIMEOUT_MS: How long to wait for MongoDB at startup
        USERS_COLLECTION / SIGNALS_COLLECTION: Collection names
        HOST / PORT: Where `python -m pin_telemetry` listens
        LOG_LEVEL: DEBUG, INFO, WARNING...
        CORS_ORIGINS: Comma-separated origins (empty = no CORS)

    Defaults are set for a MongoDB running on this machine.
    """

    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
    MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "esp32DB")
    MONGO_TIMEOUT_MS = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

    # Same names the original Node version used, so old data still works
    USERS_COLLECTION = os.getenv("USERS_COLLECTION", "users")
    SIGNALS_COLLECTION = os.getenv("SIGNALS_COLLECTION", "signaldatas")

    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "5000"))

    LOG_LEVEL = normalize_log_level(os.getenv("LOG_LEVEL", "INFO"))

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "").split(",")
        if origin.strip()
    ]


def configure_logging(level: str = Config.LOG_LEVEL):
    """Send log lines to stderr as [HH:MM:SS] message."""
    logging.basicConfig(
        level=level,
        format='[%(asctime)s] %(message)s',
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    STARTUP:
        1. Connect to MongoDB (unless a storage handle was passed to create_app)
        2. Create indexes
        3. Put the handle on app.state for the endpoints

    SHUTDOWN:
        1. Close the MongoDB client we opened

    If MongoDB can't be reached, StorageUnavailableError is raised here
    and the server exits instead of serving requests it can't handle.
    """
    # ========== STARTUP ==========
    owns_storage = app.state.storage is None
    if owns_storage:
        try:
            app.state.storage = Storage.connect(
                Config.MONGO_URI,
                Config.MONGO_DB_NAME,
                timeout_ms=Config.MONGO_TIMEOUT_MS,
                users_collection=Config.USERS_COLLECTION,
                signals_collection=Config.SIGNALS_COLLECTION,
            )
        except StorageUnavailableError as e:
            logger.critical(f"Error connecting to MongoDB: {e}")
            raise

    logger.info("=" * 60)
    logger.info(f"PIN TELEMETRY API v{__version__} - ready")
    logger.info(f"   Database: {Config.MONGO_DB_NAME}")
    logger.info(f"   Collections: {Config.USERS_COLLECTION}, {Config.SIGNALS_COLLECTION}")
    logger.info("=" * 60)

    yield  # Application runs here

    # ========== SHUTDOWN ==========
    if owns_storage:
        app.state.storage.close()
        app.state.storage = None
    logger.info("Shutdown complete")


# =============================================================================
# CREATE FASTAPI APPLICATION
# =============================================================================

def create_app(storage: Optional[Storage] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Args:
        storage: Use this storage handle instead of connecting to MongoDB
                 at startup (tests pass a mongomock-backed one). The caller
                 keeps ownership and closes it.
    """
    app = FastAPI(
        title="Pin Telemetry API",
        description="""
## Overview

Devices register once to get an API key, then upload timestamped pin readings.

## Endpoints

| Method | Path | What it does |
|--------|------|--------------|
| POST | `/auth` | `{"unique_id": ...}` -> `{"api_key": ...}` |
| POST | `/data` | `{"timestamp": ..., "pin_state": "HIGH" or "LOW"}` with header `api-key` |

Errors always come back as `{"error": "..."}`.
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.storage = storage

    if Config.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=Config.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(data_router)

    @app.get(
        "/",
        summary="API Information",
        description="Get basic API information and available endpoints."
    )
    async def root():
        return {
            "name": "Pin Telemetry API",
            "version": __version__,
            "documentation": {
                "swagger": "/docs",
                "redoc": "/redoc",
                "openapi": "/openapi.json"
            },
            "endpoints": {
                "register": "POST /auth",
                "ingest": "POST /data",
                "health": "GET /health"
            }
        }

    @app.get(
        "/health",
        summary="Health Check",
        description="Check if the backend is running and MongoDB answers."
    )
    def health():
        """Health check endpoint."""
        current = app.state.storage
        if current is not None and current.ping():
            return {"status": "healthy", "database": "connected"}
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "database": "unreachable"}
        )

    return app


configure_logging()

app = create_app()
