"""homemesh export FastAPI application"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from dotenv import load_dotenv
load_dotenv()  # Load .env file

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from homemesh.config import ExportConfig
from homemesh.materials import DefaultMaterialLibrary

from .routes import export, health

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Application lifespan handler."""
    logger.info("Starting homemesh export API...")
    config = ExportConfig.from_env()
    app.state.export_config = config
    app.state.default_library = DefaultMaterialLibrary.from_file(config.default_material_library)
    logger.info(f"Resources served from {config.resource_root}")
    yield
    logger.info("Shutting down homemesh export API...")


app = FastAPI(
    title="homemesh",
    description="Home scene to OBJ/MTL export API",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for the floor-plan editor
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(export.router, prefix="/api/export", tags=["Export"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "homemesh",
        "version": "0.1.0",
        "status": "running",
        "docs": "/docs",
    }
