"""Synthetic telemetry: baseline node creation and per-interval drift."""

from fleetsim.telemetry.factory import NodeFactory
from fleetsim.telemetry.drift import DriftModel

__all__ = ['NodeFactory', 'DriftModel']
