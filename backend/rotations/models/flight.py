"""
Flight-related Pydantic models for the reassignment engine.

This module contains the flight template schema, the timeline entry shape
the clipboard works with, the dated flight shape the swap validator walks,
and the per-date tail assignment records.
"""

from datetime import date, datetime, time
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict

from .enums import FlightSource, FlightStatus


class ScheduledFlightModel(BaseModel):
    """
    Recurring flight template as stored.

    Mirrors the ``scheduled_flights`` table for read access.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    season_id: Optional[str] = None
    airline_code: Optional[str] = Field(None, max_length=3)
    flight_number: str = Field(..., max_length=8, description="Flight number")
    dep_station: str = Field(..., description="Departure station code")
    arr_station: str = Field(..., description="Arrival station code")
    std_local: time = Field(..., description="Scheduled departure (local)")
    sta_local: time = Field(..., description="Scheduled arrival (local)")
    block_minutes: int = Field(default=0, ge=0)
    arrival_day_offset: int = Field(default=0, ge=0)
    days_of_operation: str = Field(default="1234567", max_length=7)
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    aircraft_type_icao: Optional[str] = None
    service_type: str = "J"
    aircraft_reg: Optional[str] = Field(None, description="Assigned registration")
    source: FlightSource = FlightSource.MANUAL
    status: FlightStatus = FlightStatus.DRAFT
    created_at: Optional[datetime] = None


class ClipboardFlightModel(BaseModel):
    """
    One flight entry on the schedule timeline.

    ``id`` identifies the entry (a template can appear on many dates);
    ``flight_id`` is the underlying scheduled flight.
    """
    id: str = Field(..., description="Timeline entry identifier")
    flight_id: str = Field(..., description="Underlying scheduled flight id")
    flight_number: str
    dep_station: str
    arr_station: str
    std_local: str = Field(..., description="Departure time as HH:MM")
    sta_local: str = Field(..., description="Arrival time as HH:MM")
    block_minutes: int = Field(default=0, ge=0)
    status: FlightStatus = FlightStatus.DRAFT
    aircraft_type_icao: Optional[str] = None
    route_id: Optional[str] = Field(None, description="Rotation the flight belongs to")
    aircraft_reg: Optional[str] = None
    flight_date: Optional[date] = None


class SwapFlightModel(BaseModel):
    """Dated flight occurrence as seen on an aircraft row."""
    id: str = Field(..., description="Timeline entry identifier")
    flight_id: str
    dep_station: str
    arr_station: str
    std_minutes: int = Field(..., ge=0, description="Departure, minutes after local midnight")
    sta_minutes: int = Field(..., ge=0, description="Arrival, minutes after local midnight")
    block_minutes: int = Field(default=0, ge=0)
    flight_date: date
    aircraft_type_icao: Optional[str] = None
    route_type: Optional[str] = None


class FlightDateItemModel(BaseModel):
    """A (flight, date) pair addressed by a tail assignment."""
    flight_id: str
    flight_date: date


class TailAssignmentModel(BaseModel):
    """Per-date registration override."""
    model_config = ConfigDict(from_attributes=True)

    scheduled_flight_id: str
    flight_date: date
    aircraft_reg: str
