from typing import Optional

from pydantic import BaseModel

from followme.enums.flight_mode import FlightMode
from followme.models.target_location import TargetLocation


class FlightModeRecord(BaseModel):
    timestamp: float
    flight_mode: FlightMode
    last_target_location: Optional[TargetLocation] = None
