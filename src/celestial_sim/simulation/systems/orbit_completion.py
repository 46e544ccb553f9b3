from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from celestial_sim.objects.celestial import PATH_SEP, CelestialNode
from celestial_sim.simulation.engine import SimulationLog


@dataclass
class OrbitCompletionSystem:
    """
    Logs an "orbit_completed" event each time a body's mean anomaly wraps
    past 0 degrees between two ticks. Assumes forward steps shorter than
    one orbital period.
    """
    name: str = "orbit_completion"
    _last_anomaly_deg: Dict[str, float] = field(default_factory=dict)

    def on_step(self, t_s: float, root: CelestialNode, log: SimulationLog) -> None:
        self._visit(t_s, root, "", log)

    def _visit(self, t_s: float, node: CelestialNode, prefix: str, log: SimulationLog) -> None:
        path = f"{prefix}{PATH_SEP}{node.name}" if prefix else node.name
        if not node.orbit.is_stationary:
            current = node.orbit.mean_anomaly_deg
            previous = self._last_anomaly_deg.get(path)
            if previous is not None and current < previous:
                log.record_event(t_s, "orbit_completed", body=path)
            self._last_anomaly_deg[path] = current
        for child in node.children:
            self._visit(t_s, child, path, log)
