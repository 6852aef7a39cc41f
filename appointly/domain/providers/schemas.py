"""Provider domain schemas - Pydantic models for availability updates"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...utils.formatting import parse_instant


class BlockedSlotUpdate(BaseModel):
    """Block or unblock one slot, identified by its ISO start time"""

    slot: str
    block: bool = True

    @field_validator("slot")
    @classmethod
    def validate_slot(cls, v: str) -> str:
        try:
            parse_instant(v)
        except ValueError:
            raise ValueError("slot must be an ISO-8601 timestamp")
        return v


class BlockedDatesUpdate(BaseModel):
    """Block or unblock calendar dates (yyyy-MM-dd)"""

    dates: list[str] = Field(min_length=1)
    block: bool = True

    @field_validator("dates")
    @classmethod
    def validate_dates(cls, v: list[str]) -> list[str]:
        for value in v:
            parts = value.split("-")
            if len(parts) != 3 or not all(part.isdigit() for part in parts) or len(parts[0]) != 4:
                raise ValueError(f"Invalid date: {value}")
        return v


class BlockedSlotsResult(BaseModel):
    success: bool
    error: Optional[str] = None
    blockedSlots: Optional[list[str]] = None


class BlockedDatesResult(BaseModel):
    success: bool
    error: Optional[str] = None
    blockedDates: Optional[list[str]] = None
