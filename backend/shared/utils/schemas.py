"""
Shared Pydantic schemas for request bodies.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CamelModel(BaseModel):
    """Accepts camelCase keys from the web client."""

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Backup Schemas
# =============================================================================


class BackupCreateRequest(CamelModel):
    """Create backup body. The whole body is optional."""

    note: str | None = Field(default=None, max_length=500)


class BackupImportRequest(CamelModel):
    """Import body: snapshot is validated by the snapshot parser, not here."""

    snapshot: Any = None
    note: str | None = Field(default=None, max_length=500)


# =============================================================================
# System Reset Schemas
# =============================================================================


class SystemResetRequest(CamelModel):
    scope: Literal["transactions", "operational"]


class FactoryResetRequest(CamelModel):
    confirm_text: str = Field(alias="confirmText", min_length=2, max_length=200)
    confirm_ack: bool = Field(alias="confirmAck")

    @field_validator("confirm_ack")
    @classmethod
    def must_acknowledge(cls, value: bool) -> bool:
        if not value:
            raise ValueError("Confirmation is required")
        return value
