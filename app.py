from __future__ import annotations

import logging
from typing import Optional

from fleetsim.api import create_app
from fleetsim.config import FleetConfig
from fleetsim.fleet_state import FleetState

logger = logging.getLogger(__name__)


def seed_state(state: FleetState) -> None:
    """Make sure the state holds a snapshot. Safe to call multiple times."""
    if state.snapshot is None:
        snap = state.regenerate()
        logger.info(f"Seeded fleet state with {len(snap.nodes)} nodes")


def build_app(config: Optional[FleetConfig] = None):
	"""Build the Flask app with a seeded fleet state."""
	config = config or FleetConfig.load()
	logging.basicConfig(
		level=getattr(logging, config.log_level, logging.INFO),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	state = FleetState(config)
	seed_state(state)
	return create_app(state)


# Build app at module level (for gunicorn)
app = build_app()


if __name__ == "__main__":
	cfg = app.config['fleet_state'].config
	app.run(host=cfg.host, port=cfg.port)
