from datetime import datetime
from uuid import UUID
from pydantic import BaseModel, Field, model_validator

class TripRecord(BaseModel):
    """Schema for a trip derived from a status update."""
    id: UUID = Field(..., description="Trip ID")
    vehicle_id: UUID = Field(..., description="ID of the vehicle")
    start_time: datetime = Field(..., description="Trip start")
    end_time: datetime = Field(..., description="Trip end")
    mileage: float = Field(..., description="Distance covered in kilometers")
    avg_speed: float = Field(..., description="Average speed in km/h")

    model_config = {
        "from_attributes": True,
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "id": "8a0e5d44-91c3-4f1e-b6d2-0c9f7e3a2b11",
                "vehicle_id": "3f1c2a9e-8d4b-4a71-9d0e-2b6f5c7a1e90",
                "start_time": "2024-05-15T14:29:00Z",
                "end_time": "2024-05-15T14:30:00Z",
                "mileage": 0.5,
                "avg_speed": 30.0
            }
        }
    }

    @model_validator(mode="after")
    def check_time_order(self) -> "TripRecord":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self
