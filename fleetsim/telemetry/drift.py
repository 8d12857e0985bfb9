"""One simulated telemetry interval applied to an existing node."""

from __future__ import annotations

import logging
from typing import Optional

from fleetsim.health import build_node
from fleetsim.random_utils import RandomUtils, clamp, ensure_rng
from fleetsim.state import (
	ECC_CAP,
	FAN_RANGE_RPM,
	NIC_CAP,
	POWER_RANGE_W,
	REBOOT_CAP,
	TEMP_RANGE_C,
	THROTTLE_CAP,
	Node,
	Telemetry,
	utc_ms,
)

logger = logging.getLogger(__name__)


class DriftModel:
	"""
	Small uniform noise on every step, plus rare spikes/bursts added on top.

	Counters only grow and saturate at their caps. The previous node is never
	touched; ``step`` returns a new, re-evaluated node.
	"""

	def __init__(
		self,
		rng: Optional[RandomUtils] = None,
		thermal_spike_probability: float = 0.03,
		power_spike_probability: float = 0.03,
		nic_burst_probability: float = 0.02,
		ecc_burst_probability: float = 0.01,
		reboot_probability: float = 0.01,
	) -> None:
		self.rng = ensure_rng(rng)
		self.thermal_spike_probability = thermal_spike_probability
		self.power_spike_probability = power_spike_probability
		self.nic_burst_probability = nic_burst_probability
		self.ecc_burst_probability = ecc_burst_probability
		self.reboot_probability = reboot_probability

	def step(self, prev: Node, now: Optional[int] = None) -> Node:
		rng = self.rng
		now = utc_ms() if now is None else now

		spike_thermal = rng.chance(self.thermal_spike_probability)
		spike_power = rng.chance(self.power_spike_probability)
		nic_burst = rng.chance(self.nic_burst_probability)
		ecc_burst = rng.chance(self.ecc_burst_probability)
		rebooted = rng.chance(self.reboot_probability)

		cpu_temp_c = clamp(
			prev.cpu_temp_c + rng.uniform(-2.0, 2.5) + (rng.uniform(10, 22) if spike_thermal else 0.0),
			*TEMP_RANGE_C,
		)
		power_w = clamp(
			prev.power_w + rng.uniform(-15, 18) + (rng.uniform(90, 220) if spike_power else 0.0),
			*POWER_RANGE_W,
		)
		fan_rpm = clamp(prev.fan_rpm + rng.uniform(-250, 250), *FAN_RANGE_RPM)

		throttle_delta = rng.randint(0, 2) if cpu_temp_c >= 88 else rng.randint(0, 1)
		if spike_thermal:
			throttle_delta += rng.randint(1, 3)
		nic_delta = rng.randint(3, 10) if nic_burst else rng.randint(0, 1)
		ecc_delta = rng.randint(4, 10) if ecc_burst else rng.randint(0, 1)

		tel = Telemetry(
			cpu_temp_c=cpu_temp_c,
			power_w=power_w,
			fan_rpm=fan_rpm,
			throttle_events=_grow(prev.throttle_events, throttle_delta, THROTTLE_CAP),
			ecc_errors=_grow(prev.ecc_errors, ecc_delta, ECC_CAP),
			nic_errors=_grow(prev.nic_errors, nic_delta, NIC_CAP),
			reboot_count=_grow(prev.reboot_count, 1 if rebooted else 0, REBOOT_CAP),
		)
		if spike_thermal or spike_power or nic_burst or ecc_burst or rebooted:
			logger.debug(
				f"Drift spike on {prev.node_id}: thermal={spike_thermal} power={spike_power} "
				f"nic={nic_burst} ecc={ecc_burst} reboot={rebooted}"
			)

		last_seen = now - rng.randint(0, 8) * 60_000
		return build_node(prev.node_id, prev.rack, prev.zone, tel, last_seen)


def _grow(current: int, delta: int, cap: int) -> int:
	# Never below the previous value, even if it was already above the cap.
	return max(current, min(cap, current + delta))
