from pydantic import BaseModel, AliasChoices, Field, field_validator
from datetime import datetime
from typing import Optional


class OccupancyReading(BaseModel):
    """One occupancy snapshot. Decodes the upstream PascalCase keys."""

    last_updated: datetime = Field(validation_alias=AliasChoices("LastUpdated", "last_updated"))
    name: str = Field(validation_alias=AliasChoices("Name", "name"))
    status: str = Field(default="", validation_alias=AliasChoices("Status", "status"))
    current_percentage: float = Field(
        ge=0, le=100, validation_alias=AliasChoices("CurrentPercentage", "current_percentage")
    )

    @field_validator("status", mode="before")
    @classmethod
    def _null_status_is_empty(cls, value):
        # upstream may send "Status": null
        return "" if value is None else value

    class Config:
        from_attributes = True
        frozen = True


class ExpectedAttendanceSlot(BaseModel):
    """One hour-of-day forecast. Upstream spells the percentage key 'percantage'."""

    hour: int = Field(ge=0, le=23)
    percentage: float = Field(validation_alias=AliasChoices("percantage", "percentage"))
    remaining: Optional[float] = None

    class Config:
        from_attributes = True
        frozen = True
