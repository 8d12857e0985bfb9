"""Threshold-based fleet validation suite."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from fleetsim.random_utils import RandomUtils, ensure_rng
from fleetsim.state import (
	HealthStatus,
	Node,
	Snapshot,
	ValidationCheck,
	ValidationRun,
	ValidationSummary,
	utc_ms,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationRule:
	"""
	One fleet-wide check.

	A node "trips" the rule when ``trips(node)`` is true. The check passes
	while the number of tripped nodes stays within
	``max(floor, floor_div(fleet_size * ratio))``.
	"""
	name: str
	trips: Callable[[Node], bool]
	floor: int
	ratio: float
	counter: str
	condition: str
	context: Optional[Callable[[Sequence[Node]], str]] = None

	def tolerance(self, fleet_size: int) -> int:
		return max(self.floor, int(math.floor(fleet_size * self.ratio)))


DEFAULT_RULES: Sequence[ValidationRule] = (
	ValidationRule(
		name="Thermal headroom",
		trips=lambda n: n.cpu_temp_c >= 90 or n.throttle_events >= 5,
		floor=5,
		ratio=0.01,
		counter="nodes_over_limit",
		condition="temp>=90C OR throttle>=5",
	),
	ValidationRule(
		name="Power delivery stability",
		trips=lambda n: n.power_w >= 450,
		floor=6,
		ratio=0.012,
		counter="nodes_with_power_spike",
		condition="power>=450W",
	),
	ValidationRule(
		name="ECC stability (DIMM health)",
		trips=lambda n: n.ecc_errors >= 6,
		floor=3,
		ratio=0.006,
		counter="nodes_with_ecc_burst",
		condition="ecc>=6",
	),
	ValidationRule(
		name="NIC error burst / link flaps",
		trips=lambda n: n.nic_errors >= 8,
		floor=6,
		ratio=0.012,
		counter="nodes_with_nic_flap",
		condition="nic>=8",
	),
	ValidationRule(
		name="Reboot loop detection",
		trips=lambda n: n.reboot_count >= 3,
		floor=2,
		ratio=0.004,
		counter="nodes_in_boot_loop",
		condition="reboots>=3",
	),
	ValidationRule(
		name="Fleet health gate",
		trips=lambda n: n.status is HealthStatus.CRITICAL,
		floor=8,
		ratio=0.015,
		counter="critical",
		condition="status==CRITICAL",
		context=lambda nodes: f"degraded={sum(1 for n in nodes if n.status is HealthStatus.DEGRADED)}",
	),
)


class ValidationSuite:
	"""
	Evaluates every rule against the full node set.

	All rules always run; there is no short-circuit on the first failure.
	An empty fleet passes every check.
	"""

	def __init__(
		self,
		rng: Optional[RandomUtils] = None,
		rules: Sequence[ValidationRule] = DEFAULT_RULES,
	) -> None:
		self.rng = ensure_rng(rng)
		self.rules = tuple(rules)

	def run(self, snapshot: Snapshot, clock: Optional[Callable[[], int]] = None) -> ValidationRun:
		clock = clock or utc_ms
		started_at = clock()
		run_id = f"run-{started_at:x}-{uuid.UUID(int=self.rng.bits(128), version=4).hex[:8]}"
		nodes = snapshot.nodes
		fleet_size = len(nodes)

		checks: List[ValidationCheck] = []
		for rule in self.rules:
			count = sum(1 for n in nodes if rule.trips(n))
			limit = rule.tolerance(fleet_size)
			detail = f"{rule.counter}={count} ({rule.condition}) limit<={limit}"
			if rule.context is not None:
				detail = f"{detail} {rule.context(nodes)}"
			checks.append(ValidationCheck(name=rule.name, passed=count <= limit, detail=detail))

		pass_count = sum(1 for c in checks if c.passed)
		fail_count = len(checks) - pass_count
		finished_at = clock()

		result = ValidationRun(
			run_id=run_id,
			started_at=started_at,
			finished_at=finished_at,
			checks=tuple(checks),
			summary=ValidationSummary(
				overall_pass=fail_count == 0,
				pass_count=pass_count,
				fail_count=fail_count,
			),
		)

		status = "PASS" if result.summary.overall_pass else "FAIL"
		logger.info(
			f"Validation {run_id}: {status} "
			f"({pass_count} passed, {fail_count} failed over {fleet_size} nodes)"
		)
		for check in checks:
			if not check.passed:
				logger.debug(f"  {check.name} failed: {check.detail}")
		return result


def run_validation(snapshot: Snapshot, rng: Optional[RandomUtils] = None) -> ValidationRun:
	return ValidationSuite(rng).run(snapshot)


def compute_aggregate_stats(runs: Sequence[ValidationRun]) -> Dict[str, float]:
	"""
	Pass rates across several runs (e.g. one per tick of a soak run).

	Returns:
		Dictionary with overall and per-check pass rates in percent
	"""
	if not runs:
		return {}

	stats: Dict[str, float] = {
		'total_runs': len(runs),
		'passing_runs': sum(1 for r in runs if r.summary.overall_pass),
	}
	stats['pass_rate_pct'] = stats['passing_runs'] / len(runs) * 100.0

	per_check: Dict[str, List[bool]] = {}
	for run in runs:
		for check in run.checks:
			per_check.setdefault(check.name, []).append(check.passed)
	for name, outcomes in per_check.items():
		stats[f"{name} pass_rate_pct"] = sum(outcomes) / len(outcomes) * 100.0
	return stats
