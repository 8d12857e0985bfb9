"""Fleet data model: telemetry, nodes, events, snapshots and validation runs."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Tuple


def utc_ms() -> int:
	return int(time.time() * 1000)


class FailureClass(Enum):
	"""Dominant failure mode inferred from a node's telemetry."""
	NONE = "NONE"
	THERMAL_THROTTLE = "THERMAL_THROTTLE"
	POWER_SPIKE = "POWER_SPIKE"
	ECC_BURST = "ECC_BURST"
	NIC_FLAP = "NIC_FLAP"
	BOOT_LOOP = "BOOT_LOOP"


class HealthStatus(Enum):
	HEALTHY = "HEALTHY"
	DEGRADED = "DEGRADED"
	CRITICAL = "CRITICAL"

	@property
	def rank(self) -> int:
		return _STATUS_RANK[self]


_STATUS_RANK = {
	HealthStatus.HEALTHY: 0,
	HealthStatus.DEGRADED: 1,
	HealthStatus.CRITICAL: 2,
}


class EventSeverity(Enum):
	INFO = "INFO"
	WARN = "WARN"
	CRIT = "CRIT"


# Physical ranges every continuous metric is clamped to.
TEMP_RANGE_C = (30.0, 105.0)
POWER_RANGE_W = (120.0, 650.0)
FAN_RANGE_RPM = (1200.0, 9000.0)

# Counter caps; counters never decay.
THROTTLE_CAP = 12
ECC_CAP = 50
NIC_CAP = 50
REBOOT_CAP = 10


@dataclass(frozen=True)
class Telemetry:
	"""Raw per-node measurements; everything health-related is derived from these."""
	cpu_temp_c: float
	power_w: float
	fan_rpm: float
	throttle_events: int = 0
	ecc_errors: int = 0
	nic_errors: int = 0
	reboot_count: int = 0


@dataclass(frozen=True)
class Node:
	"""
	One simulated hardware unit.

	Field order is the export column order. Build instances through
	``fleetsim.health.build_node`` so that ``status``, ``failure_class`` and
	``health_score`` always match the telemetry.
	"""
	node_id: str
	rack: str
	zone: str

	cpu_temp_c: float
	power_w: float
	fan_rpm: float

	throttle_events: int
	ecc_errors: int
	nic_errors: int
	reboot_count: int

	last_seen: int
	status: HealthStatus
	failure_class: FailureClass
	health_score: int

	@property
	def telemetry(self) -> Telemetry:
		return Telemetry(
			cpu_temp_c=self.cpu_temp_c,
			power_w=self.power_w,
			fan_rpm=self.fan_rpm,
			throttle_events=self.throttle_events,
			ecc_errors=self.ecc_errors,
			nic_errors=self.nic_errors,
			reboot_count=self.reboot_count,
		)

	def to_dict(self) -> Dict[str, Any]:
		return {f.name: _plain(getattr(self, f.name)) for f in fields(self)}


@dataclass(frozen=True)
class Event:
	ts: int
	severity: EventSeverity
	title: str
	detail: str

	def to_dict(self) -> Dict[str, Any]:
		return {
			"ts": self.ts,
			"severity": self.severity.value,
			"title": self.title,
			"detail": self.detail,
		}


@dataclass(frozen=True)
class Snapshot:
	"""Point-in-time fleet state. Nodes keep creation order; events are newest first."""
	generated_at: int
	nodes: Tuple[Node, ...] = ()
	events: Tuple[Event, ...] = ()

	def to_dict(self) -> Dict[str, Any]:
		return {
			"generated_at": self.generated_at,
			"nodes": [n.to_dict() for n in self.nodes],
			"events": [e.to_dict() for e in self.events],
		}


@dataclass(frozen=True)
class ValidationCheck:
	name: str
	passed: bool
	detail: str

	def to_dict(self) -> Dict[str, Any]:
		return {"name": self.name, "pass": self.passed, "detail": self.detail}


@dataclass(frozen=True)
class ValidationSummary:
	overall_pass: bool
	pass_count: int
	fail_count: int


@dataclass(frozen=True)
class ValidationRun:
	run_id: str
	started_at: int
	finished_at: int
	checks: Tuple[ValidationCheck, ...] = field(default_factory=tuple)
	summary: ValidationSummary = field(default_factory=lambda: ValidationSummary(True, 0, 0))

	def to_dict(self) -> Dict[str, Any]:
		return {
			"run_id": self.run_id,
			"started_at": self.started_at,
			"finished_at": self.finished_at,
			"checks": [c.to_dict() for c in self.checks],
			"summary": {
				"overall_pass": self.summary.overall_pass,
				"pass_count": self.summary.pass_count,
				"fail_count": self.summary.fail_count,
			},
		}


def _plain(value: Any) -> Any:
	return value.value if isinstance(value, Enum) else value
