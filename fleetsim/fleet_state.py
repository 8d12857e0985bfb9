"""Thread-safe holder for the live snapshot, event log and last validation run."""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple

from fleetsim.config import FleetConfig
from fleetsim.events import diff_snapshots, merge_events
from fleetsim.random_utils import RandomUtils
from fleetsim.snapshot import SnapshotGenerator
from fleetsim.state import Event, EventSeverity, Snapshot, ValidationRun, utc_ms
from fleetsim.verification import ValidationSuite

logger = logging.getLogger(__name__)


class FleetState:
	"""
	Threads the previous snapshot through generate/tick/diff/validate.

	Snapshots are immutable, so readers get a consistent view without
	copying; the lock only serializes replacements.
	"""

	def __init__(self, config: Optional[FleetConfig] = None) -> None:
		self.config = config or FleetConfig()
		self._rng = RandomUtils(self.config.seed)
		self._generator = SnapshotGenerator(
			self._rng.spawn(),
			drift_probability=self.config.drift_probability,
		)
		self._suite = ValidationSuite(self._rng.spawn())
		self._lock = threading.RLock()
		self._snapshot: Optional[Snapshot] = None
		self._last_run: Optional[ValidationRun] = None

	@property
	def snapshot(self) -> Optional[Snapshot]:
		with self._lock:
			return self._snapshot

	@property
	def last_run(self) -> Optional[ValidationRun]:
		with self._lock:
			return self._last_run

	def ensure_snapshot(self) -> Snapshot:
		with self._lock:
			if self._snapshot is None:
				return self.regenerate()
			return self._snapshot

	def regenerate(self, size: Optional[int] = None) -> Snapshot:
		size = self.config.fleet_size if size is None else size
		if size > self.config.max_fleet_size:
			raise ValueError(f"size {size} exceeds max_fleet_size {self.config.max_fleet_size}")
		with self._lock:
			self._snapshot = self._generator.genesis(size)
			self._last_run = None
			return self._snapshot

	def tick(self) -> Tuple[Snapshot, List[Event]]:
		"""Drift one interval and prepend the resulting transition events."""
		with self._lock:
			prev = self.ensure_snapshot()
			nxt = self._generator.tick(prev)
			fresh = diff_snapshots(prev, nxt)
			self._snapshot = Snapshot(
				generated_at=nxt.generated_at,
				nodes=nxt.nodes,
				events=merge_events(fresh, prev.events, self.config.event_display_cap),
			)
			logger.debug(f"Tick at {nxt.generated_at}: {len(fresh)} events")
			return self._snapshot, fresh

	def validate(self) -> ValidationRun:
		with self._lock:
			snapshot = self.ensure_snapshot()
			run = self._suite.run(snapshot)
			summary = run.summary
			event = Event(
				ts=run.finished_at,
				severity=EventSeverity.INFO if summary.overall_pass else EventSeverity.WARN,
				title="Validation suite passed" if summary.overall_pass else "Validation suite failed",
				detail=f"{run.run_id}: {summary.pass_count} passed, {summary.fail_count} failed",
			)
			self._snapshot = Snapshot(
				generated_at=snapshot.generated_at,
				nodes=snapshot.nodes,
				events=merge_events([event], snapshot.events, self.config.event_display_cap),
			)
			self._last_run = run
			return run

	def age_ms(self) -> Optional[int]:
		snapshot = self.snapshot
		return None if snapshot is None else utc_ms() - snapshot.generated_at
