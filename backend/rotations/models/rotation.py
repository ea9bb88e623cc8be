"""
Rotation Pydantic models.

Read-side snapshots of rotations and their legs, detached from the
session so they can be handed to the classifier and kept in a clipboard.
"""

from datetime import date, time
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .enums import FlightStatus


class RotationLegModel(BaseModel):
    """One leg of a rotation."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    leg_sequence: int = Field(..., ge=1)
    flight_id: Optional[str] = None
    airline_code: Optional[str] = None
    flight_number: Optional[str] = None
    dep_station: str
    arr_station: str
    std_local: time
    sta_local: time
    block_minutes: Optional[int] = None
    day_offset: int = 0
    arrives_next_day: bool = False
    service_type: str = "J"


class RotationModel(BaseModel):
    """A rotation with its legs ordered by sequence."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    route_name: Optional[str] = None
    season_id: Optional[str] = None
    scenario_id: Optional[str] = None
    aircraft_type_icao: Optional[str] = None
    days_of_operation: str = "1234567"
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    duration_days: int = 1
    status: FlightStatus = FlightStatus.DRAFT
    notes: Optional[str] = None
    version: int = 1
    legs: List[RotationLegModel] = Field(default_factory=list)

    @property
    def leg_sequences(self) -> List[int]:
        return [leg.leg_sequence for leg in self.legs]
