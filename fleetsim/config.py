"""Runtime configuration: code defaults, optional YAML file, environment overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

_ENV_VARS = {
	"fleet_size": "FLEET_SIZE",
	"seed": "FLEET_SEED",
	"drift_probability": "FLEET_DRIFT_PROBABILITY",
	"event_display_cap": "FLEET_EVENT_CAP",
	"host": "FLEET_HOST",
	"port": "FLEET_PORT",
	"log_level": "FLEET_LOG_LEVEL",
	"max_fleet_size": "FLEET_MAX_SIZE",
}


@dataclass(frozen=True)
class FleetConfig:
	fleet_size: int = 1000
	seed: Optional[int] = None
	drift_probability: float = 0.35
	event_display_cap: int = 20
	host: str = "0.0.0.0"
	port: int = 8080
	log_level: str = "INFO"
	max_fleet_size: int = 100_000

	@classmethod
	def load(
		cls,
		path: Optional[str] = None,
		env: Optional[Mapping[str, str]] = None,
	) -> "FleetConfig":
		"""
		Build a config from defaults, then YAML, then environment.

		Args:
			path: YAML file; falls back to $FLEET_CONFIG_PATH
			env: Environment mapping (default: os.environ)
		"""
		env = os.environ if env is None else env
		config = cls()

		path = path or env.get("FLEET_CONFIG_PATH")
		if path:
			config = config.merged(_load_yaml(path))

		overrides = {name: env[var] for name, var in _ENV_VARS.items() if env.get(var) not in (None, "")}
		return config.merged(overrides)

	def merged(self, values: Mapping[str, Any]) -> "FleetConfig":
		known = {f.name: f for f in fields(self)}
		changes: Dict[str, Any] = {}
		for name, raw in values.items():
			if name not in known:
				logger.warning(f"Ignoring unknown config key: {name}")
				continue
			changes[name] = _coerce(name, raw)
		config = replace(self, **changes)
		if config.fleet_size > config.max_fleet_size:
			raise ValueError(f"fleet_size {config.fleet_size} exceeds max_fleet_size {config.max_fleet_size}")
		return config


def _load_yaml(path: str) -> Dict[str, Any]:
	try:
		with open(path, 'r') as f:
			data = yaml.safe_load(f) or {}
	except (OSError, yaml.YAMLError) as e:
		logger.warning(f"Failed to load fleet config from {path}: {e}")
		return {}
	if not isinstance(data, dict):
		logger.warning(f"Fleet config {path} is not a mapping, ignoring")
		return {}
	logger.info(f"Loaded fleet config from {path}")
	return data


def _as_int(raw: Any) -> int:
	if isinstance(raw, float) and not raw.is_integer():
		raise ValueError("must be a whole number")
	return int(raw)


def _coerce(name: str, raw: Any) -> Any:
	try:
		if name in ("fleet_size", "event_display_cap", "port", "max_fleet_size"):
			value = _as_int(raw)
			if value < 0:
				raise ValueError("must be non-negative")
			return value
		if name == "seed":
			return None if raw is None or raw == "" else _as_int(raw)
		if name == "drift_probability":
			value = float(raw)
			if not 0.0 <= value <= 1.0:
				raise ValueError("must be within [0, 1]")
			return value
		if name == "log_level":
			return str(raw).upper()
		return str(raw)
	except (TypeError, ValueError) as e:
		raise ValueError(f"invalid value for {name}: {raw!r} ({e})") from e
