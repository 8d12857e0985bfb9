"""
Synthetic hardware fleet simulator.

Modules:
- state: nodes, telemetry, events, snapshots and validation runs
- health: failure classification and health scoring
- telemetry: node factory and drift model
- snapshot: genesis / tick snapshot generation
- events: snapshot diffing into state-transition events
- verification: threshold-based validation suite
- query, stats, exporters: consumers of snapshots (sort/filter, KPIs, CSV/Markdown)
- fleet_state, api: live state holder and REST API
"""

from fleetsim.events import diff_snapshots
from fleetsim.snapshot import generate_snapshot
from fleetsim.verification import run_validation

__all__ = ['generate_snapshot', 'diff_snapshots', 'run_validation']
