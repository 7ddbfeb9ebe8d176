from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ReadingCreate(BaseModel):
    glucose_value: int = Field(..., gt=0)
    # Guayaquil ``YYYY-MM-DDTHH:mm`` or any ISO-8601 instant; omitted means now.
    measured_at: Optional[Union[datetime, str]] = None
    notes: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "example": {"glucose_value": 112, "measured_at": "2024-03-04T08:30", "notes": "Ayunas"}
        }
    }


class ReadingOut(BaseModel):
    id: str
    glucose_value: int
    unit: str
    measured_at: str
    photo_url: Optional[str] = None
    notes: Optional[str] = None
    created_at: str

    model_config = ConfigDict(from_attributes=True)


class ReadingSuggestion(BaseModel):
    """What the capture form can pre-fill from a photo; every field may be missing."""

    value: Optional[int] = None
    unit: str = "mg/dL"
    # Guayaquil ``YYYY-MM-DDTHH:mm`` read from the photo EXIF.
    measured_at: Optional[str] = None
