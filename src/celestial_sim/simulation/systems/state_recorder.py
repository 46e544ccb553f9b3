from __future__ import annotations

from dataclasses import dataclass

from celestial_sim.objects.celestial import CelestialNode, resolve_positions
from celestial_sim.simulation.engine import SimulationLog


@dataclass
class StateRecorderSystem:
    name: str = "state_recorder"

    def on_step(self, t_s: float, root: CelestialNode, log: SimulationLog) -> None:
        for path, r in resolve_positions(root).items():
            log.record_position(path, t_s, r)
