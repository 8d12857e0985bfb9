"""Baseline telemetry for freshly created nodes."""

from __future__ import annotations

from typing import Optional, Sequence

from fleetsim.health import build_node
from fleetsim.random_utils import RandomUtils, clamp, ensure_rng
from fleetsim.state import (
	FAN_RANGE_RPM,
	POWER_RANGE_W,
	TEMP_RANGE_C,
	Node,
	Telemetry,
	utc_ms,
)


ZONES = ("iad1-a", "iad1-b", "iad1-c", "pdx1-a", "pdx1-b", "sin1-a")
RACK_COUNT = 40


class NodeFactory:
	"""
	Builds a single node's baseline telemetry from scratch.

	Most nodes come out healthy; a few carry pre-existing counters
	(throttling, ECC, NIC, reboots) or a power excursion so a fresh fleet
	already shows some spread.
	"""

	def __init__(
		self,
		rng: Optional[RandomUtils] = None,
		zones: Sequence[str] = ZONES,
		throttle_probability: float = 0.06,
		ecc_probability: float = 0.03,
		nic_probability: float = 0.05,
		reboot_probability: float = 0.02,
		power_excursion_probability: float = 0.08,
	) -> None:
		self.rng = ensure_rng(rng)
		self.zones = tuple(zones)
		self.throttle_probability = throttle_probability
		self.ecc_probability = ecc_probability
		self.nic_probability = nic_probability
		self.reboot_probability = reboot_probability
		self.power_excursion_probability = power_excursion_probability

	def create(self, index: int, now: Optional[int] = None) -> Node:
		rng = self.rng
		now = utc_ms() if now is None else now

		zone = rng.pick(self.zones)
		rack = f"R{rng.randint(1, RACK_COUNT):02d}"
		node_id = f"node-{index // 100:02d}-{index % 100:02d}-{rng.randint(100, 999)}"

		base_temp = rng.uniform(45, 72)
		base_power = rng.uniform(180, 320)
		base_fan = rng.uniform(2400, 5200)

		throttle = rng.randint(1, 6) if rng.chance(self.throttle_probability) else 0
		ecc = rng.randint(1, 9) if rng.chance(self.ecc_probability) else 0
		nic = rng.randint(1, 10) if rng.chance(self.nic_probability) else 0
		reboot = rng.randint(1, 4) if rng.chance(self.reboot_probability) else 0

		# Throttling runs hot and starves the fans.
		cpu_temp_c = clamp(base_temp + throttle * rng.uniform(2, 4), *TEMP_RANGE_C)
		excursion = rng.uniform(80, 220) if rng.chance(self.power_excursion_probability) else 0.0
		power_w = clamp(base_power + excursion, *POWER_RANGE_W)
		fan_rpm = clamp(base_fan - throttle * rng.uniform(100, 250), *FAN_RANGE_RPM)

		tel = Telemetry(
			cpu_temp_c=cpu_temp_c,
			power_w=power_w,
			fan_rpm=fan_rpm,
			throttle_events=throttle,
			ecc_errors=ecc,
			nic_errors=nic,
			reboot_count=reboot,
		)
		last_seen = now - rng.randint(0, 15) * 60_000
		return build_node(node_id, rack, zone, tel, last_seen)
