"""
Cluster identity endpoints.

GET /         - Cluster info, version echoed from the client's User-Agent.
GET /_license - A trial license that is always active.
*   anything  - Tagline, used by clients probing product identity.
"""
from fastapi import APIRouter, Depends, Request

from mockes.handler import MockHandler
from mockes.server.deps import get_handler
from mockes.server.middleware import request_uri
from mockes.server.schemas import LicenseResponse, RootResponse, TaglineResponse


router = APIRouter(tags=["cluster"])

# Registered last by the app factory so it only catches unrouted requests.
fallback_router = APIRouter(tags=["cluster"])

ANY_METHOD = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


@router.get("/", response_model=RootResponse)
async def root(request: Request, handler: MockHandler = Depends(get_handler)) -> RootResponse:
    """
    Cluster info.

    Beats and Elastic Agent refuse to ship to a cluster older than
    themselves, so the version reported is the one in the User-Agent.
    """
    body = handler.root(
        user_agent=request.headers.get("user-agent"),
        uri=request_uri(request),
    )
    return RootResponse(**body)


@router.get("/_license", response_model=LicenseResponse)
async def license(request: Request, handler: MockHandler = Depends(get_handler)) -> LicenseResponse:
    """Trial license, expiring 24h after startup unless configured."""
    body = handler.license(
        user_agent=request.headers.get("user-agent"),
        uri=request_uri(request),
    )
    return LicenseResponse(**body)


@fallback_router.api_route("/{path:path}", methods=ANY_METHOD, response_model=TaglineResponse)
async def tagline(path: str) -> TaglineResponse:
    """Catch-all for every other method and path."""
    return TaglineResponse()
