"""Sorting, filtering and search over snapshot nodes."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from fleetsim.state import FailureClass, HealthStatus, Node

_FAILURE_ORDER = {fc: i for i, fc in enumerate(FailureClass)}


class SortDir(Enum):
	ASC = "asc"
	DESC = "desc"

	@classmethod
	def parse(cls, raw: Optional[str]) -> "SortDir":
		if not raw:
			return cls.ASC
		try:
			return cls(raw.lower())
		except ValueError:
			raise ValueError(f"unknown sort direction: {raw}") from None


class SortKey(Enum):
	"""Every sortable column, each bound to an explicit accessor below."""
	NODE_ID = "node_id"
	ZONE = "zone"
	RACK = "rack"
	CPU_TEMP_C = "cpu_temp_c"
	POWER_W = "power_w"
	FAN_RPM = "fan_rpm"
	THROTTLE_EVENTS = "throttle_events"
	ECC_ERRORS = "ecc_errors"
	NIC_ERRORS = "nic_errors"
	REBOOT_COUNT = "reboot_count"
	STATUS = "status"
	FAILURE_CLASS = "failure_class"
	HEALTH_SCORE = "health_score"

	@classmethod
	def parse(cls, raw: Optional[str]) -> "SortKey":
		if not raw:
			return cls.NODE_ID
		try:
			return cls(raw)
		except ValueError:
			raise ValueError(f"unknown sort key: {raw}") from None

	@property
	def label(self) -> str:
		return _LABELS[self]

	def accessor(self) -> Callable[[Node], Any]:
		return _ACCESSORS[self]


_ACCESSORS: Dict[SortKey, Callable[[Node], Any]] = {
	SortKey.NODE_ID: lambda n: n.node_id,
	SortKey.ZONE: lambda n: n.zone,
	SortKey.RACK: lambda n: n.rack,
	SortKey.CPU_TEMP_C: lambda n: n.cpu_temp_c,
	SortKey.POWER_W: lambda n: n.power_w,
	SortKey.FAN_RPM: lambda n: n.fan_rpm,
	SortKey.THROTTLE_EVENTS: lambda n: n.throttle_events,
	SortKey.ECC_ERRORS: lambda n: n.ecc_errors,
	SortKey.NIC_ERRORS: lambda n: n.nic_errors,
	SortKey.REBOOT_COUNT: lambda n: n.reboot_count,
	SortKey.STATUS: lambda n: n.status.rank,
	SortKey.FAILURE_CLASS: lambda n: _FAILURE_ORDER[n.failure_class],
	SortKey.HEALTH_SCORE: lambda n: n.health_score,
}

_LABELS: Dict[SortKey, str] = {
	SortKey.NODE_ID: "Node",
	SortKey.ZONE: "Zone",
	SortKey.RACK: "Rack",
	SortKey.CPU_TEMP_C: "CPU °C",
	SortKey.POWER_W: "Power W",
	SortKey.FAN_RPM: "Fan RPM",
	SortKey.THROTTLE_EVENTS: "Throttle",
	SortKey.ECC_ERRORS: "ECC",
	SortKey.NIC_ERRORS: "NIC",
	SortKey.REBOOT_COUNT: "Reboots",
	SortKey.STATUS: "Status",
	SortKey.FAILURE_CLASS: "Failure",
	SortKey.HEALTH_SCORE: "Score",
}


def sort_nodes(nodes: Iterable[Node], key: SortKey, direction: SortDir = SortDir.ASC) -> List[Node]:
	# sorted() is stable in both directions, so ties keep insertion order.
	return sorted(nodes, key=key.accessor(), reverse=direction is SortDir.DESC)


def parse_status(raw: Optional[str]) -> Optional[HealthStatus]:
	if not raw or raw.upper() == "ALL":
		return None
	try:
		return HealthStatus(raw.upper())
	except ValueError:
		raise ValueError(f"unknown status filter: {raw}") from None


def parse_failure_class(raw: Optional[str]) -> Optional[FailureClass]:
	if not raw or raw.upper() == "ALL":
		return None
	try:
		return FailureClass(raw.upper())
	except ValueError:
		raise ValueError(f"unknown failure class filter: {raw}") from None


def matches_query(node: Node, query: str) -> bool:
	q = query.strip().lower()
	if not q:
		return True
	haystack = (node.node_id, node.rack, node.zone, node.status.value, node.failure_class.value)
	return any(q in field.lower() for field in haystack)


def filter_nodes(
	nodes: Iterable[Node],
	status: Optional[HealthStatus] = None,
	failure_class: Optional[FailureClass] = None,
	query: str = "",
) -> List[Node]:
	"""``None`` filters mean ALL."""
	return [
		n for n in nodes
		if (status is None or n.status is status)
		and (failure_class is None or n.failure_class is failure_class)
		and matches_query(n, query)
	]
