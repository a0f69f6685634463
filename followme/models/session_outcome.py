from typing import List, Optional

from pydantic import BaseModel, Field

from followme.enums.session_state import SessionState
from followme.models.target_location import TargetLocation


class PipelineStats(BaseModel):
    accepted: int = 0
    dropped: int = 0
    forwarded: int = 0
    forwarding_failures: int = 0
    last_forwarding_failure: Optional[str] = None


class SessionOutcome(BaseModel):
    final_state: SessionState
    success: bool
    cancelled: bool = False
    failure_reason: Optional[str] = None
    failure_result: Optional[str] = None
    stopping_failures: List[str] = Field(default_factory=list)
    pipeline: PipelineStats = Field(default_factory=PipelineStats)
    flight_mode_records: int = 0
    last_target_location: Optional[TargetLocation] = None
    vehicle_target_location: Optional[TargetLocation] = None
