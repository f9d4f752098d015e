"""Pydantic models for LTA DataMall bus arrival data.

Field names follow Python conventions; aliases carry the PascalCase names
LTA uses on the wire, and responses are serialized back with those aliases.
"""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# stop codes are unsigned 32-bit integers
MAX_STOP_CODE = 2**32 - 1


class BusLoad(str, Enum):
    """Passenger load of an arriving bus."""

    SEATS_AVAILABLE = "SEA"
    STANDING_AVAILABLE = "SDA"
    LIMITED_STANDING = "LSD"


class BusFeature(str, Enum):
    """Accessibility feature of an arriving bus."""

    WHEELCHAIR_ACCESSIBLE = "WAB"


class BusType(str, Enum):
    """Vehicle type of an arriving bus."""

    SINGLE_DECK = "SD"
    DOUBLE_DECK = "DD"
    BENDY = "BD"


class NextBus(BaseModel):
    """Arrival prediction for one upcoming bus of a service."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, serialize_by_alias=True)

    origin_code: str | None = Field(default=None, alias="OriginCode")
    destination_code: str | None = Field(default=None, alias="DestinationCode")
    estimated_arrival: datetime | None = Field(default=None, alias="EstimatedArrival")
    monitored: int | None = Field(default=None, alias="Monitored")  # 1 = live GPS estimate
    latitude: float | None = Field(default=None, alias="Latitude")
    longitude: float | None = Field(default=None, alias="Longitude")
    visit_number: int | None = Field(default=None, alias="VisitNumber")
    load: BusLoad | None = Field(default=None, alias="Load")
    feature: BusFeature | None = Field(default=None, alias="Feature")
    type: BusType | None = Field(default=None, alias="Type")

    @field_validator("*", mode="before")
    @classmethod
    def _empty_string_is_none(cls, value: Any) -> Any:
        # LTA sends "" for every field it has no data for
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ArrivalBusService(BaseModel):
    """Arrival predictions for one bus service at a stop."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, serialize_by_alias=True)

    service_no: str = Field(alias="ServiceNo")
    operator: str | None = Field(default=None, alias="Operator")
    next_bus: NextBus | None = Field(default=None, alias="NextBus")
    next_bus_2: NextBus | None = Field(default=None, alias="NextBus2")
    next_bus_3: NextBus | None = Field(default=None, alias="NextBus3")

    @field_validator("next_bus", "next_bus_2", "next_bus_3", mode="before")
    @classmethod
    def _blank_bus_is_none(cls, value: Any) -> Any:
        """A next-bus object whose fields are all empty means no bus is coming."""
        if isinstance(value, dict) and all(
            v is None or (isinstance(v, str) and not v.strip()) for v in value.values()
        ):
            return None
        return value


class BusArrivalResponse(BaseModel):
    """Top-level BusArrival payload returned by LTA DataMall."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, serialize_by_alias=True)

    bus_stop_code: str = Field(alias="BusStopCode")
    services: list[ArrivalBusService] = Field(default_factory=list, alias="Services")


class TimingResult(BaseModel):
    """Arrival services for a single bus stop."""

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    bus_stop_code: int = Field(alias="BusStopCode")
    data: list[ArrivalBusService] = Field(default_factory=list, alias="Data")
