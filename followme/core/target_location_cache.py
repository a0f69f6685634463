from typing import Optional

from followme.models.target_location import TargetLocation


class TargetLocationCache:
    """Holds the most recent target location; the latest write wins."""

    def __init__(self) -> None:
        self.__location: Optional[TargetLocation] = None

    def get(self) -> Optional[TargetLocation]:
        return self.__location

    def update(self, location: TargetLocation) -> None:
        self.__location = location
