import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from .api import listing, transfer
from .dependencies import (
    get_cursor_store,
    get_listing_service,
    get_record_sink,
    get_remote_client,
    get_settings,
    register_all_handlers,
)
from .logging_config import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    settings = get_settings()
    setup_logging(settings)

    config_info = settings.config_file_info
    logging.info(f"Configuration loaded from: {config_info['active_config_file']}")
    logging.info(f"Running on hostname: {config_info['hostname']}")
    if len(config_info["all_available_configs"]) > 1:
        logging.info(
            f"Available config files: {', '.join(config_info['all_available_configs'])}"
        )

    logging.info("Listing Agent starting up...")
    logging.info(f"Filesystem backend: {settings.filesystem_backend}")
    logging.info(f"Cursor backend: {settings.cursor_backend}")
    logging.info(f"Sink backend: {settings.sink_backend}")

    register_all_handlers()
    listing_service = get_listing_service()
    await listing_service.start_listing()

    yield

    logging.info("Listing Agent shutting down...")
    if listing_service.is_running():
        await listing_service.stop_listing()

    await get_record_sink().close()
    await get_cursor_store().close()
    await get_remote_client().close()
    logging.info("All background tasks stopped")


app = FastAPI(
    title="Listing Agent",
    description="Incremental recursive listing of a data lake store",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logging.debug(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "operation": "http_request",
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        },
    )
    response = await call_next(request)
    logging.debug(
        f"Response: {response.status_code}",
        extra={"operation": "http_response", "status_code": response.status_code},
    )
    return response


app.include_router(listing.router)
app.include_router(transfer.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "message": "Listing Agent is running"}


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "listing-agent"}


if __name__ == "__main__":
    uvicorn.run(
        "listing_agent.main:app", host="0.0.0.0", port=8000, reload=False, log_level="info"
    )
