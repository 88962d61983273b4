"""
Pydantic models for API response schemas.

Field names follow the Elasticsearch wire format, so they are serialized
as-is (``model_dump(exclude_none=True)``).
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


# =============================================================================
# Cluster Info Schemas
# =============================================================================


class VersionInfo(BaseModel):
    """Version block of GET /."""

    number: str = Field(..., description="Version reported back to the client")
    build_flavor: str = Field("default", description="Build flavor")


class RootResponse(BaseModel):
    """Response body for GET /."""

    name: str = Field("mock", description="Node name")
    cluster_uuid: str = Field(..., description="Cluster UUID being mocked")
    version: VersionInfo


class LicenseInfo(BaseModel):
    """License block of GET /_license."""

    status: str = Field("active", description="License status")
    uid: str = Field(..., description="License UID")
    type: str = Field("trial", description="License type")
    expiry_date_in_millis: int = Field(..., description="Expiry as epoch milliseconds")


class LicenseResponse(BaseModel):
    """Response body for GET /_license."""

    license: LicenseInfo


class TaglineResponse(BaseModel):
    """Response body for every unrouted path."""

    tagline: str = "You Know, for Testing"


# =============================================================================
# Bulk Schemas
# =============================================================================


class BulkResponse(BaseModel):
    """
    Response body for POST /_bulk.

    Matches a bulk response filtered with
    ``filter_path=errors,items.*.error,items.*.status``; each item is
    ``{verb: {"_index", "_id", "status", "error"}}``.
    """

    errors: bool = Field(..., description="True if any item failed")
    items: Optional[List[Dict[str, Dict[str, Any]]]] = Field(
        None, description="Per-action results in request order"
    )


# =============================================================================
# History Schemas
# =============================================================================


class HistoryRecordModel(BaseModel):
    """One entry of GET /_history."""

    method: str
    uri: str
    body: str = ""


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorDetail(BaseModel):
    """Error detail."""

    type: str = Field(..., description="Error type")
    reason: str = Field(..., description="Error message")
    request_id: Optional[str] = Field(None, description="Request ID for tracing")


class ErrorResponse(BaseModel):
    """Elasticsearch-shaped error response."""

    error: ErrorDetail
    status: int
