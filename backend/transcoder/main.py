"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from transcoder.api.routes import router
from transcoder.config import logger as config_logger
from transcoder.conversion.service import get_conversion_service, reset_conversion_service

logging.getLogger("uvicorn").setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_conversion_service()
    config_logger.info("Transcoder API started")
    yield
    config_logger.info("Transcoder API shutting down")
    reset_conversion_service()


app = FastAPI(
    title="Image Transcoder API",
    description="Convert images to JPEG, AVIF, PNG or WebP with quality and speed controls.",
    version="1.0.0",
    lifespan=lifespan,
)
app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    from transcoder.config import HOST, PORT
    uvicorn.run("transcoder.main:app", host=HOST, port=PORT)
