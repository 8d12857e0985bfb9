import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest

from fleetsim.health import build_node
from fleetsim.random_utils import RandomUtils
from fleetsim.state import Telemetry


def make_node(
    node_id: str = "node-00-00-100",
    rack: str = "R01",
    zone: str = "iad1-a",
    last_seen: int = 0,
    **metrics,
):
    """Build an evaluated node; unspecified metrics default to a quiet, healthy unit."""
    values = dict(cpu_temp_c=50.0, power_w=200.0, fan_rpm=4000.0)
    values.update(metrics)
    return build_node(node_id, rack, zone, Telemetry(**values), last_seen)


@pytest.fixture
def rng():
    return RandomUtils(seed=1234)
