"""Fleet snapshot generation: genesis and drift ticks."""

from __future__ import annotations

import logging
from typing import Optional

from fleetsim.random_utils import RandomUtils, ensure_rng
from fleetsim.state import Event, EventSeverity, Snapshot, utc_ms
from fleetsim.telemetry import DriftModel, NodeFactory

logger = logging.getLogger(__name__)

DEFAULT_DRIFT_PROBABILITY = 0.35


class SnapshotGenerator:
	"""
	Produces whole-fleet snapshots.

	Genesis builds ``size`` new nodes. A tick walks the previous snapshot's
	nodes and replaces roughly ``drift_probability`` of them with a drifted
	copy; the rest are carried over as-is. The node count always comes from
	the previous snapshot on a tick.
	"""

	def __init__(
		self,
		rng: Optional[RandomUtils] = None,
		drift_probability: float = DEFAULT_DRIFT_PROBABILITY,
		factory: Optional[NodeFactory] = None,
		drift: Optional[DriftModel] = None,
	) -> None:
		self.rng = ensure_rng(rng)
		self.drift_probability = drift_probability
		self.factory = factory or NodeFactory(self.rng)
		self.drift = drift or DriftModel(self.rng)

	def genesis(self, size: int, now: Optional[int] = None) -> Snapshot:
		if size < 0:
			raise ValueError(f"fleet size must be non-negative, got {size}")
		generated_at = utc_ms() if now is None else now
		nodes = tuple(self.factory.create(i, now=generated_at) for i in range(size))
		event = Event(
			ts=generated_at,
			severity=EventSeverity.INFO,
			title="Snapshot generated",
			detail=f"Initialized fleet telemetry for {size} nodes.",
		)
		logger.info(f"Generated genesis snapshot with {size} nodes")
		return Snapshot(generated_at=generated_at, nodes=nodes, events=(event,))

	def tick(self, prev: Snapshot, now: Optional[int] = None) -> Snapshot:
		generated_at = utc_ms() if now is None else now
		drifted = 0
		nodes = []
		for node in prev.nodes:
			if self.rng.chance(self.drift_probability):
				nodes.append(self.drift.step(node, now=generated_at))
				drifted += 1
			else:
				nodes.append(node)
		logger.debug(f"Tick drifted {drifted}/{len(nodes)} nodes")
		# Events carry over untouched; callers swap in diff-derived events.
		return Snapshot(generated_at=generated_at, nodes=tuple(nodes), events=prev.events)

	def generate(self, size: int, prev: Optional[Snapshot] = None, now: Optional[int] = None) -> Snapshot:
		if prev is None:
			return self.genesis(size, now=now)
		return self.tick(prev, now=now)


def generate_snapshot(
	size: int,
	previous: Optional[Snapshot] = None,
	rng: Optional[RandomUtils] = None,
	now: Optional[int] = None,
	drift_probability: float = DEFAULT_DRIFT_PROBABILITY,
) -> Snapshot:
	"""Genesis when ``previous`` is None, otherwise one drift tick (``size`` is ignored)."""
	return SnapshotGenerator(rng, drift_probability=drift_probability).generate(size, previous, now=now)
