"""FastAPI backend for National Economy sessions."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from econ_engine.config import EngineConfig
from web.api.routes import games

logger = logging.getLogger(__name__)

config = EngineConfig.from_env()

app = FastAPI(
    title="National Economy API",
    description="API for playing National Economy against bots",
    version="0.1.0",
)

# Configure CORS for frontend
logger.info("CORS origins configured: %s", config.cors_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(games.router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
