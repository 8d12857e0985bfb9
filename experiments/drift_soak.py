"""Drift soak run

Generates a fleet, applies N drift ticks in-process and prints one JSON line
per tick: transition counts, fleet KPIs and the validation verdict. Ends with
aggregate pass rates across all ticks.
"""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
from collections import Counter
from typing import Optional

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

from fleetsim.events import diff_snapshots
from fleetsim.random_utils import RandomUtils
from fleetsim.snapshot import SnapshotGenerator
from fleetsim.stats import fleet_kpis
from fleetsim.verification import ValidationSuite, compute_aggregate_stats


def run(size: int = 1000, ticks: int = 20, seed: Optional[int] = None) -> None:
	print(f"=== Drift soak: {size} nodes, {ticks} ticks, seed={seed} ===")
	rng = RandomUtils(seed)
	generator = SnapshotGenerator(rng.spawn())
	suite = ValidationSuite(rng.spawn())

	snapshot = generator.genesis(size)
	runs = []
	for t in range(ticks):
		nxt = generator.tick(snapshot)
		events = diff_snapshots(snapshot, nxt)
		result = suite.run(nxt)
		runs.append(result)
		print(json.dumps({
			"tick": t,
			"events": dict(Counter(e.severity.value for e in events)),
			"kpis": fleet_kpis(nxt).to_dict(),
			"overall_pass": result.summary.overall_pass,
			"failed_checks": [c.name for c in result.checks if not c.passed],
		}))
		snapshot = nxt

	print(json.dumps(compute_aggregate_stats(runs)))


def main() -> None:
	parser = argparse.ArgumentParser(description="Run a synthetic fleet drift soak")
	parser.add_argument("--size", type=int, default=1000)
	parser.add_argument("--ticks", type=int, default=20)
	parser.add_argument("--seed", type=int, default=None)
	parser.add_argument("--log-level", default="WARNING")
	args = parser.parse_args()

	logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))
	run(args.size, args.ticks, args.seed)


if __name__ == "__main__":
	main()
