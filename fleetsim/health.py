"""Health scoring and failure classification for a single node."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from fleetsim.random_utils import clamp
from fleetsim.state import FailureClass, HealthStatus, Node, Telemetry


@dataclass(frozen=True)
class HealthAssessment:
	failure_class: FailureClass
	status: HealthStatus
	score: int


def classify(tel: Telemetry) -> FailureClass:
	"""First matching rule wins."""
	if tel.reboot_count >= 3:
		return FailureClass.BOOT_LOOP
	if tel.ecc_errors >= 6:
		return FailureClass.ECC_BURST
	if tel.nic_errors >= 6:
		return FailureClass.NIC_FLAP
	if tel.cpu_temp_c >= 88 or tel.throttle_events >= 4:
		return FailureClass.THERMAL_THROTTLE
	if tel.power_w >= 420:
		return FailureClass.POWER_SPIKE
	return FailureClass.NONE


def penalty(tel: Telemetry) -> float:
	return (
		max(0.0, tel.cpu_temp_c - 65) * 1.2  # >65C starts penalty
		+ max(0.0, tel.power_w - 260) * 0.08  # >260W starts penalty
		+ max(0.0, 2600 - tel.fan_rpm) * 0.01  # low fan rpm is bad
		+ tel.ecc_errors * 6
		+ tel.nic_errors * 3
		+ tel.reboot_count * 8
		+ tel.throttle_events * 5
	)


def score(tel: Telemetry) -> Tuple[HealthStatus, int]:
	"""
	Continuous 0..100 score plus hard escalation gates.

	A single dangerous signal (one ECC burst, a reboot loop) forces CRITICAL
	even when the aggregate score still looks moderate. Gates only ever raise
	the score-derived status.
	"""
	value = int(math.floor(clamp(100.0 - penalty(tel), 0.0, 100.0) + 0.5))

	status = HealthStatus.HEALTHY
	if value < 45:
		status = HealthStatus.CRITICAL
	elif value < 70:
		status = HealthStatus.DEGRADED

	if tel.cpu_temp_c >= 92 or tel.power_w >= 520 or tel.reboot_count >= 3 or tel.ecc_errors >= 6:
		status = HealthStatus.CRITICAL
	elif tel.cpu_temp_c >= 85 or tel.power_w >= 420 or tel.nic_errors >= 6 or tel.throttle_events >= 4:
		if status.rank < HealthStatus.DEGRADED.rank:
			status = HealthStatus.DEGRADED

	return status, value


def evaluate(tel: Telemetry) -> HealthAssessment:
	status, value = score(tel)
	return HealthAssessment(failure_class=classify(tel), status=status, score=value)


def build_node(node_id: str, rack: str, zone: str, tel: Telemetry, last_seen: int) -> Node:
	"""Assemble a fully evaluated node from identity and telemetry."""
	assessment = evaluate(tel)
	return Node(
		node_id=node_id,
		rack=rack,
		zone=zone,
		cpu_temp_c=tel.cpu_temp_c,
		power_w=tel.power_w,
		fan_rpm=tel.fan_rpm,
		throttle_events=tel.throttle_events,
		ecc_errors=tel.ecc_errors,
		nic_errors=tel.nic_errors,
		reboot_count=tel.reboot_count,
		last_seen=last_seen,
		status=assessment.status,
		failure_class=assessment.failure_class,
		health_score=assessment.score,
	)
