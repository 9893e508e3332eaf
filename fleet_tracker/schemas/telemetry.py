import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, Field

_RFC3339_PATTERN = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def parse_rfc3339(value: Any) -> Optional[datetime]:
    """Parse an RFC3339 date-time string, returning None when it is not one.

    Fractional seconds of any length are accepted and truncated to
    microseconds. Instants that fall outside the datetime range once
    converted to UTC are rejected too.
    """
    if not isinstance(value, str):
        return None
    match = _RFC3339_PATTERN.fullmatch(value)
    if match is None:
        return None
    date, time, fraction, offset = match.groups()
    if offset in ("Z", "z"):
        offset = "+00:00"
    fraction = f".{(fraction + '000000')[:6]}" if fraction else ""
    try:
        parsed = datetime.fromisoformat(f"{date}T{time}{fraction}{offset}")
        parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None
    return parsed


class VehicleStatus(BaseModel):
    """Latest telemetry reported by one vehicle.

    ``location`` and ``speed`` are type checked, ``timestamp`` is kept exactly as
    received and parsed on demand. Any other telemetry key is carried along
    untouched.
    """
    location: Optional[Tuple[float, float]] = Field(None, description="(lat, lon) pair")
    speed: Optional[float] = Field(None, description="Speed in km/h")
    timestamp: Optional[Any] = Field(None, description="RFC3339 instant of the reading")

    model_config = {
        "extra": "allow",
        "json_schema_extra": {
            "example": {
                "location": [55.296249, 25.276987],
                "speed": 52.4,
                "timestamp": "2024-05-15T14:30:00Z",
                "fuel_level": 0.63
            }
        }
    }

    def parsed_timestamp(self) -> Optional[datetime]:
        return parse_rfc3339(self.timestamp)

    def to_document(self) -> Dict[str, Any]:
        """JSON-compatible mapping of the fields that were actually supplied."""
        supplied = set(self.model_fields_set) | set(self.model_extra or {})
        dumped = self.model_dump(mode="json")
        return {key: value for key, value in dumped.items() if key in supplied}

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_document()).encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes) -> "VehicleStatus":
        # Raises pydantic.ValidationError on malformed content
        return cls.model_validate_json(raw)


class IngestPayload(BaseModel):
    """Telemetry update submitted by a client or by the simulator."""
    vehicle_id: str = Field("", description="Vehicle UUID")
    plate_number: str = Field("", description="License plate, stored on first ingestion")
    status: Optional[Dict[str, Any]] = Field(None, description="Telemetry mapping (location, speed, timestamp, ...)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "vehicle_id": "3f1c2a9e-8d4b-4a71-9d0e-2b6f5c7a1e90",
                "plate_number": "DXB-12345",
                "status": {
                    "location": [55.296249, 25.276987],
                    "speed": 52.4,
                    "timestamp": "2024-05-15T14:30:00Z"
                }
            }
        }
    }


class IngestResponse(BaseModel):
    """Schema for the ingestion endpoint response."""
    ok: bool = Field(True, description="Whether the status was stored")
    trip_recorded: bool = Field(False, description="Whether a trip record was derived")
    degraded: List[str] = Field(default_factory=list, description="Best-effort steps that failed")
