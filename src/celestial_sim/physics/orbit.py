# src/celestial_sim/physics/orbit.py

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Union

from celestial_sim.core.constants import KEPLER_ITERATIONS, MEAN_MOTION_CONSTANT_DEG
from celestial_sim.core.frames import ORIGIN, Vector3, rot3
from celestial_sim.physics.gravity import (
    check_elliptic,
    eccentric_to_true_anomaly,
    solve_keplers_equation,
    wrap_to_full_turn,
)

Duration = Union[float, timedelta]


def duration_s(dt: Duration) -> float:
    if isinstance(dt, timedelta):
        return dt.total_seconds()
    return float(dt)


@dataclass
class OrbitalState:
    """
    Two-body orbital elements of one body relative to its parent.

    Units:
        semi_major_axis_km: km, 0 means the body does not orbit anything
        eccentricity: dimensionless (only 0<=e<1 can be positioned)
        longitude_of_periapsis_deg: whole degrees (stored, not applied by default)
        mean_anomaly_deg: degrees, kept in [0, 360) by step_forward
    """
    semi_major_axis_km: float = 0.0
    eccentricity: float = 0.0
    longitude_of_periapsis_deg: int = 0
    mean_anomaly_deg: float = 0.0

    def __post_init__(self):
        if not math.isfinite(self.semi_major_axis_km) or self.semi_major_axis_km < 0:
            raise ValueError(f"Semi-major axis must be finite and non-negative. Got: {self.semi_major_axis_km}")
        if not math.isfinite(self.eccentricity) or self.eccentricity < 0:
            raise ValueError(f"Eccentricity must be finite and non-negative. Got: {self.eccentricity}")
        if not math.isfinite(self.mean_anomaly_deg):
            raise ValueError(f"Mean anomaly must be finite. Got: {self.mean_anomaly_deg}")

    @classmethod
    def stationary(cls) -> "OrbitalState":
        return cls()

    @property
    def is_stationary(self) -> bool:
        return self.semi_major_axis_km == 0.0

    def mean_motion_deg_s(self) -> float:
        """n = K / a^1.5 (deg/s)."""
        if self.is_stationary:
            return 0.0
        return MEAN_MOTION_CONSTANT_DEG / (self.semi_major_axis_km ** 1.5)

    def step_forward(self, dt: Duration) -> None:
        """Advance the mean anomaly by ``dt`` (seconds or timedelta)."""
        if self.is_stationary:
            return
        self.mean_anomaly_deg = wrap_to_full_turn(
            self.mean_anomaly_deg + self.mean_motion_deg_s() * duration_s(dt)
        )


def compute_position(
    state: OrbitalState,
    iterations: int = KEPLER_ITERATIONS,
    apply_periapsis: bool = False,
) -> Vector3:
    """
    Planar offset of a body from its orbital focus (km).

    The focus is the parent's position; callers add ancestor offsets
    themselves (see resolve_positions). The z component is always 0.

    With apply_periapsis=False the major axis lies along +x regardless of
    longitude_of_periapsis_deg.

    Returns:
        (x, y, 0.0)
    """
    e = state.eccentricity
    check_elliptic(e)
    a = state.semi_major_axis_km
    if a == 0.0:
        return ORIGIN

    M = math.radians(state.mean_anomaly_deg)
    E = solve_keplers_equation(M, e, iterations)
    nu = eccentric_to_true_anomaly(E, e)

    r_km = a * (1.0 - e * e) / (1.0 + e * math.cos(nu))
    r: Vector3 = (r_km * math.cos(nu), r_km * math.sin(nu), 0.0)

    if apply_periapsis:
        r = rot3(math.radians(state.longitude_of_periapsis_deg), r)
    return r
