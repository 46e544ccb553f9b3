from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from celestial_sim.core.frames import ORIGIN, Vector3, add
from celestial_sim.physics.orbit import Duration, OrbitalState, compute_position

PATH_SEP = "/"


class ObjectKind(Enum):
    STAR = "STAR"
    ROCKY = "ROCKY"      # rocky planets, moons and asteroids
    JOVIAN = "JOVIAN"    # gas giants like Jupiter or Saturn
    ICE_GIANT = "ICE_GIANT"


@dataclass
class CelestialNode:
    """
    A star, planet, moon or asteroid and the bodies orbiting it.

    Each child orbits this node's position; the tree is owned top-down and
    nothing points back up.
    """
    name: str
    kind: ObjectKind
    mass_kg: float
    radius_km: float
    orbit: OrbitalState = field(default_factory=OrbitalState.stationary)
    atmosphere: Dict[str, float] = field(default_factory=dict)
    children: List["CelestialNode"] = field(default_factory=list)

    def __post_init__(self):
        if not self.name.strip():
            raise ValueError("Object name cannot be empty or whitespace.")
        if not (math.isfinite(self.mass_kg) and self.mass_kg > 0):
            raise ValueError(f"Mass must be positive. Got: {self.mass_kg}")
        if not (math.isfinite(self.radius_km) and self.radius_km > 0):
            raise ValueError(f"Radius must be positive. Got: {self.radius_km}")
        names = [child.name for child in self.children]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Child names must be unique. Duplicates: {duplicates}")

    def step_forward(self, dt: Duration) -> None:
        """Advance this body, then every child, by the same ``dt``."""
        self.orbit.step_forward(dt)
        for child in self.children:
            child.step_forward(dt)

    def walk(self, depth: int = 0) -> Iterator[Tuple[int, "CelestialNode"]]:
        """Pre-order (depth, node) pairs, root at ``depth``."""
        yield depth, self
        for child in self.children:
            yield from child.walk(depth + 1)

    def find(self, path: str) -> Optional["CelestialNode"]:
        """Look up a descendant by slash-joined names, e.g. ``Sol/Earth/Moon``."""
        head, _, rest = path.partition(PATH_SEP)
        if head != self.name:
            return None
        if not rest:
            return self
        for child in self.children:
            found = child.find(rest)
            if found is not None:
                return found
        return None


def resolve_positions(root: CelestialNode, origin: Vector3 = ORIGIN) -> Dict[str, Vector3]:
    """
    Absolute position of every body, keyed by its path from the root.

    Each body's local offset is added to its parent's resolved position.
    """
    out: Dict[str, Vector3] = {}

    def visit(node: CelestialNode, prefix: str, focus: Vector3) -> None:
        path = f"{prefix}{PATH_SEP}{node.name}" if prefix else node.name
        position = add(focus, compute_position(node.orbit))
        out[path] = position
        for child in node.children:
            visit(child, path, position)

    visit(root, "", origin)
    return out


def format_tree(root: CelestialNode, indent: str = "  ") -> str:
    lines = [f"{indent * depth}- {node.name}" for depth, node in root.walk()]
    return "\n".join(lines)
