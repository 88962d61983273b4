"""
Bulk endpoint.

POST /_bulk - Newline-delimited action/document pairs, optionally gzipped.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from mockes.handler import MockHandler
from mockes.server.deps import get_handler
from mockes.server.middleware import request_uri
from mockes.server.schemas import BulkResponse


router = APIRouter(tags=["bulk"])


@router.post("/_bulk", response_model=BulkResponse)
async def bulk(request: Request, handler: MockHandler = Depends(get_handler)) -> Response:
    """
    Process a bulk request.

    Returns 413 with an empty body when the request-level draw rejects the
    whole request. Otherwise returns 200; per-document failures are reported
    in ``items`` and flagged by ``errors``.

    Parsing runs on the thread pool so concurrent bulk requests are processed
    in parallel.
    """
    body = await request.body()
    result = await run_in_threadpool(
        handler.bulk,
        body,
        request.headers.get("content-encoding"),
        request.headers.get("user-agent"),
        request_uri(request),
    )
    if result.rejected:
        return Response(status_code=result.status_code)
    payload = BulkResponse(**result.body())
    return JSONResponse(
        status_code=result.status_code,
        content=payload.model_dump(exclude_none=True),
    )
