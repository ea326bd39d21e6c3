"""Pydantic v2 schemas for the availability calendar and host blackouts."""

import datetime as dt
import uuid

from pydantic import BaseModel, ConfigDict, Field, model_validator

from staybook.models.enums import AvailabilitySource


class BlackoutRequest(BaseModel):
    """Host blackout over ``[start, end)``."""

    start: dt.date
    end: dt.date
    note: str | None = Field(None, max_length=255)

    @model_validator(mode="after")
    def check_range(self) -> "BlackoutRequest":
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class CalendarDayResponse(BaseModel):
    date: dt.date
    available: bool
    source: AvailabilitySource | None = None
    note: str | None = None

    model_config = ConfigDict(from_attributes=True)


class CalendarResponse(BaseModel):
    property_id: uuid.UUID
    start: dt.date
    end: dt.date
    days: list[CalendarDayResponse]
