"""Pydantic models for campaign record validation."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class CampaignRecord(BaseModel):
    """Single campaign row after cleaning.

    Currency values are plain floats. A null amount_earned means no revenue
    has been reported yet; a null end_date means the campaign is still running.
    """

    model_config = ConfigDict(strict=True, frozen=True)

    # Ownership
    business_id: int
    ad_method_id: int

    # Money
    amount_spent: float = Field(ge=0)
    amount_earned: Optional[float] = None

    # Flight
    start_date: date
    end_date: Optional[date] = None

    # Optional display / filter fields
    campaign_id: Optional[int] = None
    name: Optional[str] = None
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @model_validator(mode="after")
    def check_flight_dates(self) -> "CampaignRecord":
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError(
                f"end_date {self.end_date} is before start_date {self.start_date}"
            )
        return self
