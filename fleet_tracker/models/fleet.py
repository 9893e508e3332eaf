from sqlalchemy import Column, String, Float, DateTime, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB

from fleet_tracker.db.session import Base
from fleet_tracker.db.base_model import TimestampMixin

class Vehicle(Base, TimestampMixin):
    """
    Latest known state of one vehicle.
    Rows are created implicitly by the first ingestion for an unseen id.
    """
    __tablename__ = "vehicle"

    # Opaque key; normally a UUID but any string is accepted
    id = Column(String, primary_key=True)
    plate_number = Column(String, nullable=False, default="")
    last_status = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)

    def __repr__(self):
        return f"<Vehicle {self.id} ({self.plate_number})>"


class Trip(Base, TimestampMixin):
    """
    Append-only trip log derived from status updates.
    Rows are never updated after insertion.
    """
    __tablename__ = "trips"

    id = Column(Uuid, primary_key=True)
    vehicle_id = Column(Uuid, nullable=False, index=True)  # Reference without constraint
    start_time = Column(DateTime(timezone=True), nullable=False, index=True)
    end_time = Column(DateTime(timezone=True), nullable=False)
    mileage = Column(Float, nullable=False)
    avg_speed = Column(Float, nullable=False)

    def __repr__(self):
        return f"<Trip {self.id} for vehicle {self.vehicle_id}>"
