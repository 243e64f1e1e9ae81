"""Domain enumerations and state-transition rules."""

import enum


class TripStatus(str, enum.Enum):
    PROPOSED = "proposed"
    CONFIRMED = "confirmed"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses.
# Self-loops (update_proposal, add_toll_entry, add_advance_payment) are not
# status changes and are guarded separately by the lifecycle service.
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.PROPOSED: {TripStatus.CONFIRMED, TripStatus.CANCELLED},
    TripStatus.CONFIRMED: {TripStatus.ACTIVE, TripStatus.CANCELLED},
    TripStatus.ACTIVE: {TripStatus.COMPLETED, TripStatus.CANCELLED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
}


class CarSize(str, enum.Enum):
    HATCHBACK = "Hatchback"
    SEDAN = "Sedan"
    SUV = "SUV"
    MUV = "MUV"
    LUXURY = "Luxury"


class FuelType(str, enum.Enum):
    PETROL = "Petrol"
    DIESEL = "Diesel"
    CNG = "CNG"
    ELECTRIC = "Electric"
    HYBRID = "Hybrid"


class ACOption(str, enum.Enum):
    AC = "AC"
    NON_AC = "Non-AC"


class OdometerType(str, enum.Enum):
    START = "start"
    END = "end"
