"""Pydantic schemas for Unlock API."""

from pydantic import BaseModel, Field


class UnlockRequest(BaseModel):
    """Schema for unlocking a host profile.

    ``viewer_id`` defaults to the caller; acting for another viewer needs admin.
    """

    target_id: str = Field(..., min_length=1, max_length=128)
    viewer_id: str | None = Field(None, min_length=1, max_length=128)


class UnlockResponse(BaseModel):
    """Schema for unlock outcome."""

    viewer_id: str
    target_id: str
    status: str


class UnlockStateResponse(BaseModel):
    """Schema for the caller's unlock state of one host."""

    target_id: str
    is_unlocked: bool
