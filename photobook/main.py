from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uvicorn
import logging

from photobook.storage.dynamodb import DynamoDBService
from photobook.storage.s3 import S3Service
from photobook.analysis.vision import VisionService
from photobook.monitoring.instrumented import InstrumentedVisionService
from photobook.monitoring.metrics import router as metrics_router
from photobook.settings import settings
from photobook.routers.photos import router as photos_router
from photobook.exceptions import add_exception_handlers

logging.basicConfig(level=settings.log_level.upper())
log = logging.getLogger("photobook")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
        Async context manager for FastAPI application lifecycle events.
        Creates the shared S3, DynamoDB and Computer Vision clients once and
        closes them on shutdown.
    """
    # Initialize resources
    app.state.s3 = S3Service()
    app.state.db = DynamoDBService()
    app.state.vision = InstrumentedVisionService(VisionService())
    log.info("Photobook started")
    yield
    # Cleanup resources
    app.state.vision.close()
    app.state.s3.close()
    app.state.db.close()

# Initialize App
app = FastAPI(
    title=settings.app_title,
    lifespan=lifespan,
    description="Photo upload service with automatic captions",
    root_path = "/api/v1"
)

# Add exception handlers
add_exception_handlers(app)

# CORS - Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Location"],
)

# Add the routers
app.include_router(photos_router)
app.include_router(metrics_router)

# Check Health
@app.get("/")
def read_root():
    """
        Default end point
    """
    return "Photobook is running."

if __name__ == "__main__":
    uvicorn.run("photobook.main:app", host="0.0.0.0", port=8000, reload=True)
