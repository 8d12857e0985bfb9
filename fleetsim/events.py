"""State-transition events derived from consecutive snapshots."""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from fleetsim.state import (
	Event,
	EventSeverity,
	FailureClass,
	HealthStatus,
	Node,
	Snapshot,
)

logger = logging.getLogger(__name__)

MAX_DIFF_EVENTS = 40
EVENT_DISPLAY_CAP = 20

_STATUS_SEVERITY = {
	HealthStatus.CRITICAL: EventSeverity.CRIT,
	HealthStatus.DEGRADED: EventSeverity.WARN,
	HealthStatus.HEALTHY: EventSeverity.INFO,
}


def diff_snapshots(prev: Snapshot, next: Snapshot, limit: int = MAX_DIFF_EVENTS) -> List[Event]:
	"""
	Compare two snapshots node by node.

	Events follow ``next.nodes`` order. A status change wins over a failure
	class change on the same node. Nodes missing from ``prev`` are skipped.
	Collection stops once ``limit`` events exist. The result is never empty:
	with no transitions a single "Telemetry refreshed" event is returned.
	"""
	by_id: Dict[str, Node] = {n.node_id: n for n in prev.nodes}
	events: List[Event] = []

	for node in next.nodes:
		before = by_id.get(node.node_id)
		if before is None:
			continue

		if before.status != node.status:
			events.append(Event(
				ts=next.generated_at,
				severity=_STATUS_SEVERITY[node.status],
				title="Health state changed",
				detail=(
					f"{node.node_id} {before.status.value} → {node.status.value} • "
					f"{node.failure_class.value} • temp={node.cpu_temp_c:.1f}°C power={node.power_w:.0f}W"
				),
			))
		elif before.failure_class != node.failure_class:
			severity = EventSeverity.INFO if node.failure_class is FailureClass.NONE else EventSeverity.WARN
			events.append(Event(
				ts=next.generated_at,
				severity=severity,
				title="Failure class updated",
				detail=(
					f"{node.node_id} {before.failure_class.value} → {node.failure_class.value} • "
					f"score={node.health_score}"
				),
			))

		if len(events) >= limit:
			break

	if not events:
		events.append(Event(
			ts=next.generated_at,
			severity=EventSeverity.INFO,
			title="Telemetry refreshed",
			detail="No significant state transitions detected in this interval.",
		))

	logger.debug(f"Diff produced {len(events)} events")
	return events


def merge_events(fresh: Sequence[Event], existing: Sequence[Event], cap: int = EVENT_DISPLAY_CAP) -> Tuple[Event, ...]:
	"""Newest first, truncated to the display cap."""
	return tuple(list(fresh) + list(existing))[:max(0, cap)]
