"""Travel mode, search radius and travel-time helpers."""
from __future__ import annotations

import math
from typing import Optional

from excursion_engine.schemas import Coordinates, EnergyLevel, MobilityLevel, TravelMode

EARTH_RADIUS_KM = 6371.0

# Conservative door-to-door speeds.
KM_PER_MIN = {
    "walking": 0.075,  # ~4.5 km/h
    "driving": 0.6,  # ~36 km/h on surface roads
}

TRAVEL_RATIO = 0.4
MIN_SEARCH_RADIUS_METERS = 500.0


def select_travel_mode(
    time_available_minutes: float,
    energy_level: EnergyLevel,
    mobility_level: Optional[MobilityLevel] = None,
) -> TravelMode:
    """Pick walking or driving for the whole request; first matching rule wins."""
    if time_available_minutes <= 20:
        return "walking"
    # Keep reduced-mobility users on foot-reachable spots.
    if mobility_level in ("limited", "assisted"):
        return "walking"
    if time_available_minutes >= 45 and energy_level != "low":
        return "driving"
    return "walking"


def one_way_budget_minutes(time_available_minutes: float, travel_ratio: float = TRAVEL_RATIO) -> float:
    return time_available_minutes * travel_ratio / 2


def compute_search_radius_meters(mode: TravelMode, one_way_budget: float) -> float:
    radius_km = KM_PER_MIN[mode] * one_way_budget
    return max(radius_km * 1000, MIN_SEARCH_RADIUS_METERS)


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points using the haversine formula."""
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def estimate_travel_minutes(origin: Coordinates, destination: Coordinates, mode: TravelMode) -> float:
    return distance_km(origin, destination) / KM_PER_MIN[mode]


def offset_coordinates(origin: Coordinates, distance_m: float, bearing_deg: float) -> Coordinates:
    """Point ``distance_m`` away from ``origin`` along ``bearing_deg`` (clockwise from north)."""
    delta = distance_m / 1000 / EARTH_RADIUS_KM
    theta = math.radians(bearing_deg)
    phi1 = math.radians(origin.latitude)
    lambda1 = math.radians(origin.longitude)

    phi2 = math.asin(math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta))
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    longitude = (math.degrees(lambda2) + 540) % 360 - 180
    return Coordinates(latitude=math.degrees(phi2), longitude=longitude)
