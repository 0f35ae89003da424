"""Pydantic models for the booking and account API payloads.

The backend speaks camelCase JSON; every model also accepts snake_case field
names. Time and date fields stay raw strings so one malformed value never
fails a whole response - the rules engine parses them lazily and skips what
it cannot read.
"""
from datetime import date
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from booking_rules.timeutils import parse_calendar_day, parse_time_to_minutes


class BookingStatus(str, Enum):
    """Booking lifecycle states as reported by the booking service."""
    PENDING = "Pending"
    PAID = "Paid"
    CHECKED_IN = "CheckedIn"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class ShiftStatus(str, Enum):
    """Decision state of one shift inside a day-off request."""
    WAITING = "WAITING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


def _loose_str(value: Any) -> Optional[str]:
    """Keep strings, stringify numbers, drop anything else."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


class ApiModel(BaseModel):
    """Base for wire models: camelCase aliases, extra keys ignored."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Slot(ApiModel):
    """A bookable interval for one lawyer on one (externally chosen) date."""
    slot_id: str = Field(..., alias="slotId", description="Unique slot identifier")
    start_time: Optional[str] = Field(None, alias="slotStartTime", examples=["08:00:00"])
    end_time: Optional[str] = Field(None, alias="slotEndTime", examples=["09:00:00"])
    booking_slots: List[Any] = Field(default_factory=list, alias="bookingSlots")

    @field_validator("slot_id", mode="before")
    @classmethod
    def coerce_slot_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def coerce_time(cls, v):
        return _loose_str(v)

    @property
    def start_minutes(self) -> Optional[int]:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> Optional[int]:
        return parse_time_to_minutes(self.end_time)

    @property
    def is_well_formed(self) -> bool:
        """True when both times parse and the slot ends after it starts."""
        start, end = self.start_minutes, self.end_minutes
        return start is not None and end is not None and end > start


class Booking(ApiModel):
    """An existing reservation; for the rules engine only an interval on a day."""
    booking_id: Optional[str] = Field(None, alias="bookingId")
    booking_date: Optional[str] = Field(None, alias="bookingDate", examples=["2025-01-10"])
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")
    status: Optional[str] = Field(None, description="Pending, Paid, CheckedIn, Completed or Cancelled")
    price: Optional[float] = None
    description: Optional[str] = None
    lawyer_id: Optional[str] = Field(None, alias="lawyerId")
    lawyer_name: Optional[str] = Field(None, alias="lawyerName")
    customer_id: Optional[str] = Field(None, alias="customerId")
    customer_name: Optional[str] = Field(None, alias="customerName")
    service_id: Optional[str] = Field(None, alias="serviceId")
    service_name: Optional[str] = Field(None, alias="serviceName")

    @field_validator(
        "booking_id", "booking_date", "start_time", "end_time", "status",
        "lawyer_id", "customer_id", "service_id",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        return _loose_str(v)

    @property
    def day(self) -> Optional[date]:
        return parse_calendar_day(self.booking_date)

    @property
    def start_minutes(self) -> Optional[int]:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> Optional[int]:
        return parse_time_to_minutes(self.end_time)


class Shift(ApiModel):
    """A working shift from the account service's shift catalog."""
    shift_id: str = Field(..., alias="shiftId")
    start_time: Optional[str] = Field(None, alias="startTime")
    end_time: Optional[str] = Field(None, alias="endTime")

    @field_validator("shift_id", mode="before")
    @classmethod
    def coerce_shift_id(cls, v):
        return str(v) if v is not None else v

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def coerce_time(cls, v):
        return _loose_str(v)


class ShiftRequest(ApiModel):
    """One shift a lawyer asked to take off, with its decision state."""
    shift_id: str = Field(..., alias="shiftId")
    from_time: Optional[str] = Field(None, alias="fromTime")
    to_time: Optional[str] = Field(None, alias="toTime")
    status: ShiftStatus = ShiftStatus.WAITING


class DayOff(ApiModel):
    """A lawyer's day-off request covering one or more shifts."""
    day_off_id: str = Field(..., alias="dayOffId")
    lawyer_id: Optional[str] = Field(None, alias="lawyerId")
    lawyer_name: Optional[str] = Field(None, alias="lawyerName")
    day_off: Optional[str] = Field(None, alias="dayOff", examples=["2025-03-14"])
    specific_day_offs: List[ShiftRequest] = Field(default_factory=list, alias="specificDayOffs")

    @property
    def day(self) -> Optional[date]:
        return parse_calendar_day(self.day_off)


class ShiftJustification(ApiModel):
    """Payload item of the day-off justify call."""
    shift_id: str = Field(..., alias="shiftId")
    status: ShiftStatus


class BookingCreate(ApiModel):
    """Body of POST /api/Booking; the slots must be consecutive."""
    booking_date: str = Field(..., alias="bookingDate")
    price: float = Field(..., ge=0)
    description: str = Field("", max_length=1000)
    customer_id: str = Field(..., alias="customerId")
    lawyer_id: str = Field(..., alias="lawyerId")
    service_id: str = Field(..., alias="serviceId")
    slot_ids: List[str] = Field(..., min_length=1, alias="slotId")


class BookingUpdate(ApiModel):
    """Body of PUT /api/Booking/{id}."""
    booking_date: str = Field(..., alias="bookingDate")
    description: str = Field(..., min_length=1, max_length=1000)
    price: float = Field(..., ge=0)
    customer_id: str = Field(..., alias="customerId")
    lawyer_id: str = Field(..., alias="lawyerId")
    service_id: str = Field(..., alias="serviceId")
    slot_ids: List[str] = Field(..., min_length=1, alias="slotId")
