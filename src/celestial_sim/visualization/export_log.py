from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict

from celestial_sim.simulation.engine import SimulationLog

logger = logging.getLogger(__name__)


def log_to_dict(log: SimulationLog) -> Dict[str, Any]:
    """
    Minimal playback data:
      {
        "positions_km": {
          "Sol/Earth": [{"t":0.0,"r":[x,y,z]}, ...],
          ...
        },
        "events": [{"t": ..., "kind": ..., ...}, ...]
      }
    """
    data: Dict[str, Any] = {"positions_km": {}, "events": list(log.events)}

    for path, samples in log.positions_km.items():
        data["positions_km"][path] = [{"t": t, "r": [r[0], r[1], r[2]]} for (t, r) in samples]

    return data


def export_log_to_json(log: SimulationLog, out_path: str = "out/simlog.json") -> str:
    data = log_to_dict(log)

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(data, f)

    logger.info("Wrote %d body tracks to %s", len(data["positions_km"]), out_path)
    return out_path
