"""
YAML star-system description parsing.

Builds a CelestialNode tree from a document like:

StarSystem:
  Sol:
    type: STAR
    mass: 1.989e30
    radius: 696340
    parentTo:
      - Earth:
          type: ROCKY
          mass: 5.972e24
          radius: 6371
          semi-major-axis: 149600000
          eccentricity: 0.0167
          longitude-of-periapsis: 102
          mean-anomaly: 0
          atmosphere:
            N2: 0.78
            O2: 0.21

Required fields (type, mass, radius) abort the whole load when missing.
The orbital fields are all-or-nothing: a node that lacks any of them is
treated as stationary. Bad atmosphere entries and children that fail to
parse are dropped without affecting their siblings.
"""

from __future__ import annotations

import math
import re
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple, Union

import yaml

from celestial_sim.objects.celestial import CelestialNode, ObjectKind
from celestial_sim.physics.orbit import OrbitalState

STAR_SYSTEM_KEY = "StarSystem"
CHILDREN_KEY = "parentTo"
ATMOSPHERE_KEY = "atmosphere"
ORBIT_KEYS = ("semi-major-axis", "eccentricity", "longitude-of-periapsis", "mean-anomaly")
UNNAMED = "Unnamed"


class _SystemYamlLoader(yaml.SafeLoader):
    """SafeLoader that also reads exponent floats without a dot or exponent sign (5e24, 1.989e30)."""


_SystemYamlLoader.add_implicit_resolver(
    "tag:yaml.org,2002:float",
    re.compile(r"^[-+]?[0-9][0-9_]*(?:\.[0-9_]*)?[eE][-+]?[0-9]+$"),
    list("-+0123456789"),
)


class SystemLoadError(ValueError):
    """Base class for failures that abort a whole load."""


class UnreadableSource(SystemLoadError):
    pass


class MalformedInput(SystemLoadError):
    pass


class CyclicDefinition(MalformedInput):
    """An object definition that, through YAML aliases, is its own descendant."""


class MissingField(SystemLoadError):
    def __init__(self, node_name: str, field_name: str):
        super().__init__(f"{node_name}: missing {field_name}")
        self.node_name = node_name
        self.field_name = field_name


class InvalidObjectType(SystemLoadError):
    def __init__(self, node_name: str, token: Any):
        super().__init__(f"{node_name}: invalid object type {token!r}")
        self.node_name = node_name
        self.token = token


def _as_number(value: Any) -> Optional[float]:
    # bool is an int subclass but YAML true/false is not a number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    # .inf and .nan are not usable numbers either
    return number if math.isfinite(number) else None


def _required_number(name: str, definition: Mapping[str, Any], key: str) -> float:
    value = _as_number(definition.get(key))
    if value is None:
        raise MissingField(name, key)
    return value


def _parse_kind(name: str, definition: Mapping[str, Any]) -> ObjectKind:
    token = definition.get("type")
    if token is None:
        raise MissingField(name, "type")
    if not isinstance(token, str):
        raise InvalidObjectType(name, token)
    try:
        return ObjectKind(token)
    except ValueError:
        raise InvalidObjectType(name, token)


def _parse_orbit(definition: Mapping[str, Any]) -> OrbitalState:
    values = [_as_number(definition.get(key)) for key in ORBIT_KEYS]
    if any(v is None for v in values):
        return OrbitalState.stationary()
    sma, ecc, lop, ma = values
    return OrbitalState(
        semi_major_axis_km=sma,
        eccentricity=ecc,
        longitude_of_periapsis_deg=int(lop),
        mean_anomaly_deg=ma,
    )


def _parse_atmosphere_entry(key: Any, value: Any) -> Optional[Tuple[str, float]]:
    fraction = _as_number(value)
    if not isinstance(key, str) or fraction is None:
        return None
    return key, fraction


def _parse_atmosphere(definition: Mapping[str, Any]) -> Dict[str, float]:
    raw = definition.get(ATMOSPHERE_KEY)
    if not isinstance(raw, dict):
        return {}
    atmosphere: Dict[str, float] = {}
    for key, value in raw.items():
        entry = _parse_atmosphere_entry(key, value)
        if entry is not None:
            atmosphere[entry[0]] = entry[1]
    return atmosphere


def _parse_child(entry: Any, ancestors: FrozenSet[int]) -> Optional[CelestialNode]:
    """A single ``name: definition`` child entry, or None if it is unusable."""
    if not isinstance(entry, dict) or not entry:
        return None
    name, definition = next(iter(entry.items()))
    if not isinstance(name, str):
        return None
    try:
        return _parse_object(name, definition, ancestors)
    except CyclicDefinition:
        raise
    except SystemLoadError:
        return None


def _parse_children(definition: Mapping[str, Any], ancestors: FrozenSet[int]) -> List[CelestialNode]:
    raw = definition.get(CHILDREN_KEY)
    if not isinstance(raw, list):
        return []
    children: List[CelestialNode] = []
    seen = set()
    for entry in raw:
        child = _parse_child(entry, ancestors)
        # Sibling names must be unique; the first one wins
        if child is None or child.name in seen:
            continue
        seen.add(child.name)
        children.append(child)
    return children


def _parse_object(name: str, definition: Any, ancestors: FrozenSet[int]) -> CelestialNode:
    if not isinstance(definition, dict):
        raise MalformedInput(f"{name}: object definition must be a mapping")
    # YAML anchors can make a definition contain itself
    if id(definition) in ancestors:
        raise CyclicDefinition(f"{name}: object definition contains itself")

    kind = _parse_kind(name, definition)
    mass = _required_number(name, definition, "mass")
    radius = _required_number(name, definition, "radius")

    try:
        return CelestialNode(
            name=name,
            kind=kind,
            mass_kg=mass,
            radius_km=radius,
            orbit=_parse_orbit(definition),
            atmosphere=_parse_atmosphere(definition),
            children=_parse_children(definition, ancestors | {id(definition)}),
        )
    except SystemLoadError:
        raise
    except ValueError as e:
        raise MalformedInput(f"{name}: {e}")


def parse_object(name: str, definition: Any) -> CelestialNode:
    """
    Parse one object definition and, recursively, its ``parentTo`` children.

    Raises:
        MissingField: type, mass or radius is absent or not a number
        InvalidObjectType: type is not STAR, ROCKY, JOVIAN or ICE_GIANT
        MalformedInput: the definition is not a mapping, holds invalid values
            or (through a YAML alias) contains itself
    """
    return _parse_object(name, definition, frozenset())


def load_system(source_text: str) -> CelestialNode:
    """
    Parse a YAML description into the root CelestialNode.

    A top-level ``StarSystem`` mapping is unwrapped and its first entry used
    as the root; otherwise the first top-level entry is the root.
    """
    try:
        document = yaml.load(source_text, Loader=_SystemYamlLoader)
    except yaml.YAMLError as e:
        raise MalformedInput(f"Failed to parse YAML: {e}")

    if not isinstance(document, dict) or not document:
        raise MalformedInput("No valid object found in YAML")

    if STAR_SYSTEM_KEY in document:
        system = document[STAR_SYSTEM_KEY]
        if not isinstance(system, dict) or not system:
            raise MalformedInput("Malformed StarSystem definition")
        name, definition = next(iter(system.items()))
        return parse_object(name if isinstance(name, str) else UNNAMED, definition)

    name, definition = next(iter(document.items()))
    if not isinstance(name, str):
        raise MalformedInput(f"Object name must be a string. Got: {name!r}")
    return parse_object(name, definition)


def load_system_file(filepath: Union[str, Path]) -> CelestialNode:
    """Read and parse a YAML description file."""
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            source_text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise UnreadableSource(f"Failed to read file: {e}")
    return load_system(source_text)
