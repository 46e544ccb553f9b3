from datetime import timedelta

from celestial_sim.core.system_loader import load_system_file
from celestial_sim.objects.celestial import format_tree, resolve_positions

system = load_system_file("data/celestial/sol.yaml")
print(format_tree(system))

# One simulated day per tick
for day in range(0, 4):
    if day:
        system.step_forward(timedelta(days=1))
    earth = system.find("Sol/Earth")
    print(day, round(earth.orbit.mean_anomaly_deg, 6), resolve_positions(system)["Sol/Earth/Moon"])
