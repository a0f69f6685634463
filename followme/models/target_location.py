from pydantic import BaseModel, ConfigDict, Field


class TargetLocation(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    latitude_deg: float = Field(ge=-90.0, le=90.0)
    longitude_deg: float = Field(ge=-180.0, le=180.0)
    absolute_altitude_m: float = 0.0
    velocity_x_m_s: float = 0.0
    velocity_y_m_s: float = 0.0
    velocity_z_m_s: float = 0.0
