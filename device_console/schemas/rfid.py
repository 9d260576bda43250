"""
Pydantic schemas for fake RFID card devices.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

RFID_FLAGS = ("clip_card", "empty_card_bin", "error_card_bin_full", "pre_empty_card_bin")

_TRUTHY = {"1", "true", "yes", "on"}


def parse_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


class RfidRecord(BaseModel):
    """RFID device as returned by the backend."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str = ""
    rfid: str = ""
    clip_card: bool = False
    empty_card_bin: bool = False
    error_card_bin_full: bool = False
    pre_empty_card_bin: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RfidDraft(BaseModel):
    """Create/update body for an RFID device."""
    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    name: str = ""
    rfid: str = ""
    clip_card: bool = False
    empty_card_bin: bool = False
    error_card_bin_full: bool = False
    pre_empty_card_bin: bool = False

    @field_validator(*RFID_FLAGS, mode="before")
    @classmethod
    def _flags(cls, value: Any) -> bool:
        return parse_flag(value)

    @field_validator("name", "rfid", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @classmethod
    def from_record(cls, record: RfidRecord) -> "RfidDraft":
        return cls(**record.model_dump(include=set(cls.model_fields)))

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
