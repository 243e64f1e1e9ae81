"""
SQLAlchemy ORM models.

Tables
------
* ``vehicles``         -- the driver's vehicle registry
* ``trips``            -- one row per trip; the full trip document lives in
  the JSON ``payload`` column, scalar columns are copies used for filtering
* ``recent_places``    -- recently searched places (capped list)
* ``driver_settings``  -- single-row driver profile and defaults

Indexes
-------
* **B-Tree** on ``trips.status``, ``trips.vehicle_id`` and
  ``trips.actual_end_time`` for status lists and earnings windows.

Timestamps are ISO-8601 strings, matching the domain model.
"""

from sqlalchemy import JSON, Column, Float, Index, Integer, String

from .database import Base


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True)
    name = Column(String(120), nullable=False)
    car_size = Column(String(20), nullable=False)
    fuel_type = Column(String(20), nullable=False)
    ac_option = Column(String(10), nullable=False)
    min_km_per_day = Column(Float, nullable=False)
    rate_per_km = Column(Float, nullable=False)
    created_at = Column(String(40), nullable=False)
    updated_at = Column(String(40), nullable=False)


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(String(36), primary_key=True)
    status = Column(String(20), nullable=False)
    vehicle_id = Column(String(36), nullable=False)
    customer_name = Column(String(120), nullable=False)
    proposed_start_date = Column(String(40), nullable=False)
    actual_end_time = Column(String(40), nullable=True)
    payload = Column(JSON, nullable=False)

    created_at = Column(String(40), nullable=False)
    updated_at = Column(String(40), nullable=False)

    __table_args__ = (
        Index("idx_trips_status", "status"),
        Index("idx_trips_vehicle", "vehicle_id"),
        Index("idx_trips_actual_end", "actual_end_time"),
    )


class RecentPlaceModel(Base):
    __tablename__ = "recent_places"

    id = Column(String(64), primary_key=True)
    display_name = Column(String(255), nullable=False)
    short_name = Column(String(120), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    type = Column(String(40), nullable=False)
    # Monotonic position; highest = most recent
    position = Column(Integer, nullable=False, default=0)


class DriverSettingsModel(Base):
    __tablename__ = "driver_settings"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False, default="")
    phone = Column(String(40), nullable=False, default="")
    default_bata_per_day = Column(Float, nullable=False, default=500.0)
