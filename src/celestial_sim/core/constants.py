from __future__ import annotations

# Mean anomaly is stored in degrees everywhere outside the Kepler solver
FULL_TURN_DEG: float = 360.0

# Mean motion n = K / a^1.5 (deg/s, a in km): one full turn per a^1.5 seconds
MEAN_MOTION_CONSTANT_DEG: float = FULL_TURN_DEG

# Fixed Newton-Raphson budget for Kepler's equation (no convergence test)
KEPLER_ITERATIONS: int = 5

# Default engine tick in seconds
DEFAULT_DT_S: float = 3600.0
