from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Tuple

from celestial_sim.core.frames import Vector3
from celestial_sim.objects.celestial import CelestialNode

logger = logging.getLogger(__name__)


class System(Protocol):
    """
    Plugin interface for simulation systems.
    Each system runs per tick, before the tree is stepped, and can write to the log.
    """
    name: str

    def on_step(self, t_s: float, root: CelestialNode, log: "SimulationLog") -> None:
        ...


@dataclass
class SimulationLog:
    """
    Stores outputs from a simulation run.
    Keep it simple and serializable.
    """
    # Positions: body path -> list of (t, r)
    positions_km: Dict[str, List[Tuple[float, Vector3]]] = field(default_factory=dict)

    # Free-form events
    events: List[Dict[str, Any]] = field(default_factory=list)

    def record_position(self, path: str, t_s: float, r: Vector3) -> None:
        self.positions_km.setdefault(path, []).append((t_s, r))

    def record_event(self, t_s: float, kind: str, **details: Any) -> None:
        self.events.append({"t": t_s, "kind": kind, **details})


@dataclass
class Engine:
    """
    Fixed-step simulation engine.

    The tree passed to run() is stepped in place by dt_s between ticks, so a
    second run continues from where the first one stopped.
    Deterministic replay: given same tree state + dt + start/end => same output.
    """
    dt_s: float
    systems: List[System] = field(default_factory=list)

    def run(self, root: CelestialNode, t_start_s: float, t_end_s: float) -> SimulationLog:
        if self.dt_s <= 0:
            raise ValueError("dt_s must be positive.")
        if t_end_s < t_start_s:
            raise ValueError("t_end_s must be >= t_start_s.")

        log = SimulationLog()
        t = t_start_s
        ticks = 0
        logger.debug("Running %s from t=%.1fs to t=%.1fs with dt=%.1fs", root.name, t_start_s, t_end_s, self.dt_s)

        # Note: inclusive end if it lands exactly; otherwise last tick < end
        while True:
            for sys in self.systems:
                sys.on_step(t, root, log)
            ticks += 1

            if t + self.dt_s > t_end_s + 1e-9:
                break
            root.step_forward(self.dt_s)
            t += self.dt_s

        logger.info("Simulated %d ticks of %s", ticks, root.name)
        return log
