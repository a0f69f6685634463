import os
from os import _Environ
from typing import Optional

from dotenv import dotenv_values

from followme.enums.connection_types import ConnectionTypes
from followme.exceptions.config_exceptions import ConfigTypeException, ConfigValueException

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


class Config:
    def __init__(self, config_file: Optional[str] = None):
        if config_file:
            raw: dict[str, str | None] = dotenv_values(config_file)
        else:
            raw: _Environ[str] = os.environ

        self.verbose: bool = self._optional_bool(raw, "VERBOSE", False)
        self.drone_address: str = self._require(raw, "DRONE_ADDRESS")
        self.drone_port: int = self._require_int(raw, "DRONE_PORT")
        self.drone_connection_type: ConnectionTypes = self._require_enum(
            raw, "DRONE_CONNECTION_TYPE", ConnectionTypes
        )
        self.readiness_poll_interval: float = self._optional_float(
            raw, "READINESS_POLL_INTERVAL", 1.0
        )
        self.readiness_timeout: Optional[float] = self._optional_float(
            raw, "READINESS_TIMEOUT", None
        )
        self.takeoff_settle_time: float = self._optional_float(
            raw, "TAKEOFF_SETTLE_TIME", 5.0
        )
        self.land_grace_period: float = self._optional_float(
            raw, "LAND_GRACE_PERIOD", 5.0
        )
        self.fake_location_start_lat: float = self._optional_float(
            raw, "FAKE_LOCATION_START_LAT", 47.3977419
        )
        self.fake_location_start_lon: float = self._optional_float(
            raw, "FAKE_LOCATION_START_LON", 8.5455938
        )
        self.fake_location_step_deg: float = self._optional_float(
            raw, "FAKE_LOCATION_STEP_DEG", 0.00001
        )
        self.fake_location_interval: float = self._optional_float(
            raw, "FAKE_LOCATION_INTERVAL", 1.0
        )
        self.fake_location_count: int = self._optional_int(
            raw, "FAKE_LOCATION_COUNT", 75
        )

        if self.readiness_poll_interval <= 0:
            raise ConfigValueException("READINESS_POLL_INTERVAL must be positive")

    @property
    def endpoint(self) -> str:
        if self.drone_connection_type == ConnectionTypes.SERIAL:
            return f"serial:///{self.drone_address.lstrip('/')}:{self.drone_port}"
        return f"{self.drone_connection_type.value}://{self.drone_address}:{self.drone_port}"

    def _require(self, config: dict | _Environ[str], key: str) -> str:
        value = config.get(key)
        if value is None:
            raise ConfigValueException(f"{key} not set")
        return value

    def _require_int(self, config: dict | _Environ[str], key: str) -> int:
        value = self._require(config, key)
        try:
            return int(value)
        except ValueError:
            raise ConfigTypeException(f"{key} must be integer")

    def _require_enum(self, config: dict | _Environ[str], key: str, enum_type):
        value = self._require(config, key)
        try:
            return enum_type(value)
        except ValueError:
            raise ConfigTypeException(f"{key} must be valid {enum_type.__name__}")

    def _optional_int(self, config: dict | _Environ[str], key: str, default):
        if config.get(key) is None:
            return default
        return self._require_int(config, key)

    def _optional_float(self, config: dict | _Environ[str], key: str, default):
        value = config.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except ValueError:
            raise ConfigTypeException(f"{key} must be a number")

    def _optional_bool(self, config: dict | _Environ[str], key: str, default: bool):
        value = config.get(key)
        if value is None:
            return default
        if value.lower() in _TRUE_VALUES:
            return True
        if value.lower() in _FALSE_VALUES:
            return False
        raise ConfigTypeException(f"{key} must be a boolean")
