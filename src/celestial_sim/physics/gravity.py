# Two-body Kepler model

from __future__ import annotations

import math

from celestial_sim.core.constants import FULL_TURN_DEG, KEPLER_ITERATIONS


def wrap_to_full_turn(angle_deg: float) -> float:
    """Wrap angle to [0, 360)."""
    wrapped = angle_deg % FULL_TURN_DEG
    # -1e-20 % 360.0 rounds up to 360.0
    return 0.0 if wrapped >= FULL_TURN_DEG else wrapped


def check_elliptic(e: float) -> None:
    if not (0.0 <= e < 1.0):
        raise ValueError(f"Elliptic Kepler solver requires 0 <= e < 1. Got: {e}")


def solve_keplers_equation(M_rad: float, e: float, iterations: int = KEPLER_ITERATIONS) -> float:
    """
    Solve Kepler's equation for elliptic orbits:
        M = E - e sin(E)
    using a fixed number of Newton-Raphson steps seeded with E0 = M.

    There is no convergence test: the iteration budget bounds the cost per
    call. Five steps are plenty for planetary eccentricities; raise
    ``iterations`` for e close to 1.

    Args:
        M_rad: Mean anomaly (rad)
        e: eccentricity (0 <= e < 1)
        iterations: number of Newton-Raphson steps

    Returns:
        E_rad: Eccentric anomaly (rad)
    """
    check_elliptic(e)
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative. Got: {iterations}")

    E = M_rad
    for _ in range(iterations):
        # 1 - e cos(E) >= 1 - e > 0 for elliptic orbits
        E -= (E - e * math.sin(E) - M_rad) / (1.0 - e * math.cos(E))
    return E


def eccentric_to_true_anomaly(E_rad: float, e: float) -> float:
    """tan(ν/2) = sqrt((1+e)/(1-e)) tan(E/2), in atan2 form."""
    check_elliptic(e)
    half = 0.5 * E_rad
    return 2.0 * math.atan2(math.sqrt(1.0 + e) * math.sin(half), math.sqrt(1.0 - e) * math.cos(half))
