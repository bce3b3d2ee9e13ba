"""Pydantic schemas for Maintenance API."""

from dataclasses import asdict

from pydantic import BaseModel, Field

from domain.entities.maintenance import (
    DeletionReport,
    MaintenanceStats,
    SweepMode,
    SweepResult,
)


class SweepRequest(BaseModel):
    """Schema for running a maintenance sweep."""

    mode: SweepMode
    preserve_emails: list[str] = Field(default_factory=list, max_length=500)
    preserve_account_ids: list[str] = Field(default_factory=list, max_length=500)


class SweepFailureResponse(BaseModel):
    """One account the sweep could not fully remove."""

    account_id: str
    stage: str
    error: str


class SweepResponse(BaseModel):
    """Schema for sweep outcome."""

    mode: str
    scanned: int
    matched: int
    deleted: int
    errors: int
    identity_errors: int
    failures: list[SweepFailureResponse]

    @classmethod
    def from_entity(cls, result: SweepResult) -> "SweepResponse":
        return cls(
            mode=result.mode.value,
            scanned=result.scanned,
            matched=result.matched,
            deleted=result.deleted,
            errors=result.errors,
            identity_errors=result.identity_errors,
            failures=[
                SweepFailureResponse(
                    account_id=f.account_id,
                    stage=f.stage.value,
                    error=f.error,
                )
                for f in result.failures
            ],
        )


class StatsResponse(BaseModel):
    """Schema for maintenance statistics."""

    total_accounts: int
    participants: int
    hosts: int
    admins: int
    inactive_participants: int
    empty_hosts: int
    visible_hosts: int
    substantial_hosts: int
    with_name: int
    with_bio: int
    with_photo: int
    with_socials: int

    @classmethod
    def from_entity(cls, stats: MaintenanceStats) -> "StatsResponse":
        return cls(**asdict(stats))


class DeletionResponse(BaseModel):
    """Schema for single account deletion."""

    account_id: str
    record_deleted: bool
    identity_deleted: bool
    identity_error: str | None = None

    @classmethod
    def from_entity(cls, report: DeletionReport) -> "DeletionResponse":
        return cls(**asdict(report))
