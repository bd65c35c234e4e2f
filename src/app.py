"""
Message Board Backend API Server
Users post, read, update and delete short messages linked to an author.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import ALLOWED_ORIGINS
from database.connection import Database
from api.routes import health, messages, users
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the FastAPI application around a database handle

    The handle is stored on app.state and opened/closed by the lifespan,
    so tests can pass their own.
    """
    database = database or Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        await database.connect()
        yield
        await database.close()

    app = FastAPI(
        title="Message Board Backend",
        description="Backend API for users and their messages",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.database = database

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Setup centralized error handling
    setup_error_handling(app)

    # Include API routes
    app.include_router(health.router, tags=["Health"])
    app.include_router(messages.router, prefix="/messages", tags=["Messages"])
    app.include_router(users.router, prefix="/users", tags=["Users"])

    return app

# FastAPI app instance is exported for use by uvicorn
# Server startup is handled by main.py at the project root
app = create_app()
