"""
Tests for the celestial object tree.
"""
import math
import pytest

from celestial_sim.core.frames import add
from celestial_sim.objects.celestial import (
    CelestialNode,
    ObjectKind,
    format_tree,
    resolve_positions,
)
from celestial_sim.physics.orbit import OrbitalState, compute_position


@pytest.fixture
def system():
    moon = CelestialNode(
        name="Moon",
        kind=ObjectKind.ROCKY,
        mass_kg=7.342e22,
        radius_km=1737.0,
        orbit=OrbitalState(semi_major_axis_km=384399.0, eccentricity=0.0549, mean_anomaly_deg=135.0),
    )
    earth = CelestialNode(
        name="Earth",
        kind=ObjectKind.ROCKY,
        mass_kg=5.972e24,
        radius_km=6371.0,
        orbit=OrbitalState(semi_major_axis_km=149600000.0, eccentricity=0.0167, mean_anomaly_deg=10.0),
        atmosphere={"N2": 0.78, "O2": 0.21},
        children=[moon],
    )
    mars = CelestialNode(
        name="Mars",
        kind=ObjectKind.ROCKY,
        mass_kg=6.39e23,
        radius_km=3389.5,
        orbit=OrbitalState(semi_major_axis_km=227900000.0, eccentricity=0.0934, mean_anomaly_deg=300.0),
    )
    return CelestialNode(
        name="Sol",
        kind=ObjectKind.STAR,
        mass_kg=1.989e30,
        radius_km=696340.0,
        children=[earth, mars],
    )


class TestStepForward:
    def test_broadcasts_same_step_to_every_level(self, system):
        dt = 5.0e9
        expected = {}
        for _depth, node in system.walk():
            twin = OrbitalState(
                semi_major_axis_km=node.orbit.semi_major_axis_km,
                eccentricity=node.orbit.eccentricity,
                mean_anomaly_deg=node.orbit.mean_anomaly_deg,
            )
            twin.step_forward(dt)
            expected[node.name] = twin.mean_anomaly_deg

        system.step_forward(dt)

        for _depth, node in system.walk():
            assert node.orbit.mean_anomaly_deg == expected[node.name]

    def test_stationary_root_does_not_move(self, system):
        system.step_forward(1e12)
        assert system.orbit.mean_anomaly_deg == 0.0

    def test_children_keep_order(self, system):
        system.step_forward(1.0)
        assert [c.name for c in system.children] == ["Earth", "Mars"]


class TestTraversal:
    def test_walk_is_pre_order_with_depth(self, system):
        assert [(d, n.name) for d, n in system.walk()] == [
            (0, "Sol"), (1, "Earth"), (2, "Moon"), (1, "Mars"),
        ]

    def test_find_by_path(self, system):
        assert system.find("Sol").name == "Sol"
        assert system.find("Sol/Earth/Moon").name == "Moon"
        assert system.find("Sol/Venus") is None
        assert system.find("Earth") is None

    def test_format_tree(self, system):
        assert format_tree(system) == "- Sol\n  - Earth\n    - Moon\n  - Mars"


class TestResolvePositions:
    def test_root_at_origin(self, system):
        positions = resolve_positions(system)
        assert positions["Sol"] == (0.0, 0.0, 0.0)

    def test_child_offsets_add_to_parent(self, system):
        positions = resolve_positions(system)
        earth = system.find("Sol/Earth")
        moon = system.find("Sol/Earth/Moon")

        assert positions["Sol/Earth"] == compute_position(earth.orbit)
        assert positions["Sol/Earth/Moon"] == add(positions["Sol/Earth"], compute_position(moon.orbit))

    def test_custom_origin(self, system):
        positions = resolve_positions(system, origin=(1.0, 2.0, 3.0))
        assert positions["Sol"] == (1.0, 2.0, 3.0)

    def test_every_body_resolved(self, system):
        assert set(resolve_positions(system)) == {"Sol", "Sol/Earth", "Sol/Earth/Moon", "Sol/Mars"}


class TestValidation:
    def test_empty_name(self):
        with pytest.raises(ValueError, match="Object name cannot be empty"):
            CelestialNode(name="  ", kind=ObjectKind.ROCKY, mass_kg=1.0, radius_km=1.0)

    def test_non_positive_mass(self):
        with pytest.raises(ValueError, match="Mass must be positive"):
            CelestialNode(name="Rock", kind=ObjectKind.ROCKY, mass_kg=0.0, radius_km=1.0)

    def test_non_positive_radius(self):
        with pytest.raises(ValueError, match="Radius must be positive"):
            CelestialNode(name="Rock", kind=ObjectKind.ROCKY, mass_kg=1.0, radius_km=-2.0)

    def test_infinite_mass(self):
        with pytest.raises(ValueError, match="Mass must be positive"):
            CelestialNode(name="Rock", kind=ObjectKind.ROCKY, mass_kg=math.inf, radius_km=1.0)

    def test_defaults(self):
        node = CelestialNode(name="Ceres", kind=ObjectKind.ROCKY, mass_kg=9.38e20, radius_km=469.7)
        assert node.orbit.is_stationary
        assert node.atmosphere == {}
        assert node.children == []

    def test_duplicate_child_names(self):
        twin = dict(kind=ObjectKind.ROCKY, mass_kg=1.0, radius_km=1.0)
        with pytest.raises(ValueError, match="Child names must be unique"):
            CelestialNode(
                name="Sol",
                kind=ObjectKind.STAR,
                mass_kg=1.0,
                radius_km=1.0,
                children=[CelestialNode(name="Earth", **twin), CelestialNode(name="Earth", **twin)],
            )
