import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel

from listing_agent.core.cqrs.command_bus import CommandBus
from listing_agent.core.cqrs.query_bus import QueryBus
from listing_agent.core.exceptions import ConfigurationError, RemoteAccessError
from listing_agent.dependencies import get_command_bus, get_query_bus
from listing_agent.domains.transfer.commands import PutFileCommand
from listing_agent.domains.transfer.queries import FetchFileQuery
from listing_agent.models import ListingRecord

router = APIRouter(prefix="/api/transfer", tags=["transfer"])


class FetchRequest(BaseModel):
    path: Optional[str] = None
    record: Optional[ListingRecord] = None


@router.post("/fetch")
async def fetch_file(request: FetchRequest, query_bus: QueryBus = Depends(get_query_bus)):
    """
    Return the content of one remote file.

    Either path or a listing record (camelCase, as emitted) must be given;
    with both, path is read.
    """
    try:
        content, result = await query_bus.execute(
            FetchFileQuery(remote_path=request.path, record=request.record)
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RemoteAccessError as e:
        logging.error(f"API: Fetch failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return Response(
        content=content,
        media_type="application/octet-stream",
        headers={
            "X-Remote-Path": result.remote_path,
            "X-Transfer-Summary": result.get_summary(),
        },
    )


@router.put("/files/{filename}")
async def put_file(
    filename: str,
    request: Request,
    command_bus: CommandBus = Depends(get_command_bus),
):
    """
    Write the request body as filename.

    Query parameters are the attributes the put directory template is
    rendered with, e.g. PUT /api/transfer/files/a.csv?region=eu
    """
    content = await request.body()
    attributes = dict(request.query_params)
    try:
        result = await command_bus.execute(
            PutFileCommand(filename=filename, content=content, attributes=attributes)
        )
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RemoteAccessError as e:
        logging.error(f"API: Put of {filename} failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    logging.info(f"API: Stored {result.get_summary()}", extra={"operation": "api_transfer_put"})
    return {
        "success": True,
        "remote_path": result.remote_path,
        "bytes_transferred": result.bytes_transferred,
        "elapsed_seconds": result.elapsed_seconds,
    }
