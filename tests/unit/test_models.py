import math

import pytest
from pydantic import ValidationError

from followme.core.target_location_cache import TargetLocationCache
from followme.enums.results import ActionResult, ConnectionResult, FollowMeResult
from followme.models.target_location import TargetLocation


def test_target_location_defaults():
    location = TargetLocation(latitude_deg=47.397, longitude_deg=8.545)

    assert location.absolute_altitude_m == 0.0
    assert location.velocity_x_m_s == 0.0
    assert location.velocity_y_m_s == 0.0
    assert location.velocity_z_m_s == 0.0


@pytest.mark.parametrize(
    "latitude, longitude",
    [
        (90.0, 180.0),
        (-90.0, -180.0),
        (0.0, 0.0),
    ],
)
def test_target_location_accepts_bounds(latitude, longitude):
    location = TargetLocation(latitude_deg=latitude, longitude_deg=longitude)

    assert location.latitude_deg == latitude
    assert location.longitude_deg == longitude


@pytest.mark.parametrize(
    "latitude, longitude",
    [
        (90.0001, 8.5),
        (-91.0, 8.5),
        (47.0, 180.5),
        (47.0, -181.0),
        (math.nan, 8.5),
        (47.0, math.inf),
        (-math.inf, 8.5),
    ],
)
def test_target_location_rejects_invalid(latitude, longitude):
    with pytest.raises(ValidationError):
        TargetLocation(latitude_deg=latitude, longitude_deg=longitude)


def test_target_location_is_immutable():
    location = TargetLocation(latitude_deg=47.397, longitude_deg=8.545)

    with pytest.raises(ValidationError):
        location.latitude_deg = 10.0


def test_cache_latest_value_wins():
    cache = TargetLocationCache()
    assert cache.get() is None

    first = TargetLocation(latitude_deg=47.397, longitude_deg=8.545)
    second = TargetLocation(latitude_deg=47.398, longitude_deg=8.546)
    cache.update(first)
    cache.update(second)

    assert cache.get() == second


def test_result_classification():
    assert ActionResult.SUCCESS.is_success
    assert not ActionResult.SUCCESS.is_terminal

    assert ActionResult.BUSY.is_retryable
    assert ConnectionResult.TIMEOUT.is_retryable
    assert FollowMeResult.CONNECTION_ERROR.is_retryable

    assert ActionResult.COMMAND_DENIED.is_terminal
    assert FollowMeResult.INVALID_TARGET_LOCATION.is_terminal
    assert not ActionResult.COMMAND_DENIED.is_retryable


def test_result_from_name():
    assert ActionResult.from_name("COMMAND_DENIED") == ActionResult.COMMAND_DENIED
    assert FollowMeResult.from_name("NOT_ACTIVE") == FollowMeResult.NOT_ACTIVE
    assert ActionResult.from_name("SOMETHING_NEW") == ActionResult.UNKNOWN
    assert ConnectionResult.from_name("SOMETHING_NEW") == ConnectionResult.UNKNOWN
    assert ActionResult.COMMAND_DENIED.description == "Command denied"
