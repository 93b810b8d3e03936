"""
OrgAdmin Server - Main FastAPI Application

This module contains the main FastAPI application for the OrgAdmin server.
It manages REST API endpoints for user account administration.
"""

import logging
from logging.handlers import RotatingFileHandler
from datetime import datetime
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from managers.config_manager import ConfigManager
from managers.database_manager import DatabaseManager
from managers.cache_manager import UserCacheManager
from exceptions import OrgAdminServiceError
from responses import BuildError

logger = logging.getLogger(__name__)

# Import database module for shared manager instances
import database


# ==================== Logging ====================

def ConfigureLogging(config_manager: ConfigManager):
    """
    Configure logging to write to both console and a rotating daily file

    Args:
        config_manager: Loaded ConfigManager
    """
    logs_dir = Path(config_manager.get("log_dir"))
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_filename = logs_dir / f"orgadmin-server-{datetime.now().strftime('%Y-%m-%d')}.log"

    logging.basicConfig(
        level=getattr(logging, str(config_manager.get("log_level")).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            # Console handler
            logging.StreamHandler(),
            # File handler with rotation (max 10MB per file, keep 10 backup files)
            RotatingFileHandler(
                log_filename,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=10,
                encoding='utf-8'
            )
        ]
    )


def InitializeManagers(config_manager: ConfigManager):
    """
    Create the shared managers in the database module

    Args:
        config_manager: Loaded ConfigManager

    Returns:
        str: Generated admin password if the admin user was created, None otherwise
    """
    database.config_manager = config_manager
    database.db_manager = DatabaseManager(config_manager.get("database_url"))
    database.cache_manager = UserCacheManager.FromConfig(config_manager)
    return database.db_manager.InitializeDatabase()


# ==================== Lifespan Events ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan event handler for startup and shutdown
    Manages configuration, logging and database initialization
    """
    config_manager = ConfigManager()
    config_manager.load_config()
    ConfigureLogging(config_manager)

    logger.info("OrgAdmin Server starting up...")

    admin_password = InitializeManagers(config_manager)
    if admin_password:
        logger.warning("=" * 60)
        logger.warning("NEW ADMIN USER CREATED")
        logger.warning("Login ID: admin")
        logger.warning(f"Password: {admin_password}")
        logger.warning("SAVE THIS PASSWORD - IT WILL NOT BE SHOWN AGAIN!")
        logger.warning("=" * 60)

    logger.info("Database initialized successfully")
    logger.info("Server startup complete")

    yield

    logger.info("OrgAdmin Server shutting down...")
    if database.cache_manager and database.cache_manager.redis_client is not None:
        database.cache_manager.redis_client.close()
    if database.db_manager:
        database.db_manager.engine.dispose()
    logger.info("Shutdown complete")


# ==================== FastAPI Application ====================

app = FastAPI(
    title="OrgAdmin Server",
    description="User account administration API",
    version="1.0.0",
    lifespan=lifespan
)

# ==================== CORS Middleware ====================

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Exception Handlers ====================

@app.exception_handler(OrgAdminServiceError)
async def service_error_handler(request: Request, exc: OrgAdminServiceError):
    """
    Convert service errors into the uniform failure envelope
    """
    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=BuildError(exc.message))


# ==================== Import Routers ====================

from routes import status, auth
from routes.admin import users as admin_users


# ==================== Include Routers ====================

app.include_router(status.router)
app.include_router(auth.router)
app.include_router(admin_users.router)


# ==================== Main Entry Point ====================

if __name__ == "__main__":
    """
    Run the server using uvicorn
    """
    config_manager = ConfigManager()
    config_manager.load_config()

    logger.info("Starting OrgAdmin Server...")

    uvicorn.run(
        "server:app",
        host=config_manager.get("host"),
        port=int(config_manager.get("port")),
        reload=False,
        log_level="info"
    )
