"""Employee Onboarding - Pydantic models for API responses.

Pydantic models corresponding to JSON schemas in /specs. Used by FastAPI
for response validation and OpenAPI docs. Field aliases carry the camelCase
names of the public HTTP contract.
"""

from pydantic import BaseModel, ConfigDict, Field

# --- Response Models ---


class UploadSuccessResponse(BaseModel):
    """Response for an accepted and committed upload (200)."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    status: str = Field(default="success", description="Operation status")
    message: str = Field(..., description="Human-readable summary")
    onboarded_users: list[dict[str, str | None]] = Field(
        ...,
        alias="onboardedUsers",
        description="Rows committed by this upload, as uploaded",
    )
    log_file: str = Field(
        ...,
        alias="logFile",
        description="Identifier of the audit artifact for this batch",
    )


class UploadConflictResponse(BaseModel):
    """Response for a rejected upload (409)."""

    model_config = ConfigDict(extra="forbid")

    status: str = Field(default="error", description="Operation status")
    message: str = Field(..., description="Human-readable summary")
    duplicates: list[str] = Field(
        ...,
        description="Every distinct normalized email that already exists",
    )


class ErrorResponse(BaseModel):
    """Response for failed requests (400/500)."""

    model_config = ConfigDict(extra="forbid")

    status: str = Field(default="error", description="Operation status")
    error_code: str = Field(..., description="Error taxonomy code")
    error_message: str = Field(..., description="Human-readable error description")


class UsersResponse(BaseModel):
    """Response for GET /users."""

    model_config = ConfigDict(extra="forbid")

    users: list[dict[str, str | None]] = Field(
        ..., description="Persisted user records in insertion order"
    )


class ResetResponse(BaseModel):
    """Response for DELETE /reset."""

    model_config = ConfigDict(extra="forbid")

    status: str = Field(default="success", description="Operation status")
    message: str = Field(..., description="Human-readable summary")


__all__ = [
    "UploadSuccessResponse",
    "UploadConflictResponse",
    "ErrorResponse",
    "UsersResponse",
    "ResetResponse",
]
