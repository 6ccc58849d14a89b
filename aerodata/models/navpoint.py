#!/usr/bin/env python3

import math
from typing import Optional
from dataclasses import dataclass

EARTH_RADIUS_KM = 6371.0


@dataclass
class NavPoint:
    """
    A point on the earth with an optional name.

    All coordinates are stored in decimal degrees:
    - Latitude: -90 to +90 degrees (negative for South, positive for North)
    - Longitude: -180 to +180 degrees (negative for West, positive for East)
    """

    latitude: float
    longitude: float
    name: Optional[str] = None

    def __post_init__(self):
        """Validate coordinates after initialization."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Latitude must be between -90 and 90 degrees, got {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Longitude must be between -180 and 180 degrees, got {self.longitude}")

    def _central_angle(self, other: 'NavPoint') -> float:
        lat1 = math.radians(self.latitude)
        lat2 = math.radians(other.latitude)
        dlat = lat2 - lat1
        dlon = math.radians(other.longitude - self.longitude)

        a = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
        return 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    def distance_km(self, other: 'NavPoint') -> float:
        """Great circle distance to another point in kilometers."""
        return EARTH_RADIUS_KM * self._central_angle(other)

    def __str__(self) -> str:
        label = f"{self.name}: " if self.name else ""
        return f"{label}{self.latitude:.4f}, {self.longitude:.4f}"
