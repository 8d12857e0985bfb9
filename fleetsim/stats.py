from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Sequence

import numpy as np

from fleetsim.state import HealthStatus, Snapshot


@dataclass(frozen=True)
class FleetKpis:
	total: int = 0
	healthy: int = 0
	degraded: int = 0
	critical: int = 0
	avg_temp_c: float = 0.0
	p95_temp_c: float = 0.0
	p95_power_w: float = 0.0
	avg_health_score: float = 0.0

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


def p95(values: Sequence[float]) -> float:
	"""Nearest-rank 95th percentile; 0 for no samples."""
	if len(values) == 0:
		return 0.0
	arr = np.sort(np.asarray(values, dtype=float))
	idx = int(np.ceil(0.95 * arr.size)) - 1
	return float(arr[max(0, min(arr.size - 1, idx))])


def fleet_kpis(snapshot: Snapshot) -> FleetKpis:
	nodes = snapshot.nodes
	if not nodes:
		return FleetKpis()

	temps = np.array([n.cpu_temp_c for n in nodes], dtype=float)
	power = np.array([n.power_w for n in nodes], dtype=float)
	scores = np.array([n.health_score for n in nodes], dtype=float)
	statuses = [n.status for n in nodes]

	return FleetKpis(
		total=len(nodes),
		healthy=statuses.count(HealthStatus.HEALTHY),
		degraded=statuses.count(HealthStatus.DEGRADED),
		critical=statuses.count(HealthStatus.CRITICAL),
		avg_temp_c=float(temps.mean()),
		p95_temp_c=p95(temps),
		p95_power_w=p95(power),
		avg_health_score=float(scores.mean()),
	)
