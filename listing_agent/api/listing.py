import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from listing_agent.config import Settings
from listing_agent.core.cqrs.command_bus import CommandBus
from listing_agent.core.cqrs.query_bus import QueryBus
from listing_agent.core.exceptions import ConfigurationError, CursorPersistenceError
from listing_agent.dependencies import get_command_bus, get_query_bus, get_settings
from listing_agent.domains.listing.commands import (
    PauseListingCommand,
    ResetListingCommand,
    ResumeListingCommand,
    RunListingCycleCommand,
)
from listing_agent.domains.listing.queries import GetListingCursorQuery, GetListingStatusQuery

router = APIRouter(prefix="/api", tags=["listing"])


class RunCycleRequest(BaseModel):
    variables: Dict[str, str] = {}


class ResetRequest(BaseModel):
    reason: str = "requested via api"


@router.get("/listing/status")
async def get_listing_status(query_bus: QueryBus = Depends(get_query_bus)):
    return await query_bus.execute(GetListingStatusQuery())


@router.get("/listing/cursor")
async def get_listing_cursor(query_bus: QueryBus = Depends(get_query_bus)):
    try:
        return await query_bus.execute(GetListingCursorQuery())
    except CursorPersistenceError as e:
        logging.error(f"API: Failed to load listing cursor: {e}")
        raise HTTPException(status_code=503, detail=str(e))


@router.post("/listing/run")
async def run_listing_cycle(
    request: Optional[RunCycleRequest] = None,
    command_bus: CommandBus = Depends(get_command_bus),
):
    """Run one cycle now and return its outcome. A failed cycle is reported, not raised."""
    variables = request.variables if request else {}
    try:
        result = await command_bus.execute(RunListingCycleCommand(variables=variables))
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logging.info(
        f"API: Listing cycle {result.cycle_id[:8]} finished, "
        f"{result.emitted_count} record(s) emitted",
        extra={"operation": "api_listing_run"},
    )
    return result.summary()


@router.post("/listing/reset")
async def reset_listing(
    request: Optional[ResetRequest] = None,
    command_bus: CommandBus = Depends(get_command_bus),
):
    reason = request.reason if request else "requested via api"
    try:
        await command_bus.execute(ResetListingCommand(reason=reason))
    except CursorPersistenceError as e:
        logging.error(f"API: Failed to reset listing cursor: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    return {"success": True, "message": "Listing cursor reset"}


@router.post("/listing/pause")
async def pause_listing(command_bus: CommandBus = Depends(get_command_bus)):
    changed = await command_bus.execute(PauseListingCommand())
    message = "Listing paused" if changed else "Listing was not running"
    logging.info(f"API: {message}", extra={"operation": "api_listing_pause"})
    return {"success": changed, "message": message}


@router.post("/listing/resume")
async def resume_listing(command_bus: CommandBus = Depends(get_command_bus)):
    changed = await command_bus.execute(ResumeListingCommand())
    message = "Listing resumed" if changed else "Listing was already running"
    logging.info(f"API: {message}", extra={"operation": "api_listing_resume"})
    return {"success": changed, "message": message}


@router.get("/settings", response_model=Settings)
async def read_settings(settings: Settings = Depends(get_settings)):
    """Get current application settings"""
    logging.info("Settings endpoint called", extra={"operation": "api_settings"})
    return settings


@router.get("/config-info")
async def get_config_info(settings: Settings = Depends(get_settings)):
    return settings.config_file_info
