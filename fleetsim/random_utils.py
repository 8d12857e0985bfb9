"""Bounded random helpers shared by the node factory, drift model and validator."""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def clamp(x: float, lo: float, hi: float) -> float:
	return max(lo, min(hi, x))


class RandomUtils:
	"""
	Thin wrapper around an explicit ``random.Random`` stream.

	Every component takes one of these instead of reaching for the module-level
	``random`` functions, so a seed pins the whole simulation.
	"""

	def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None) -> None:
		self._rng = rng if rng is not None else random.Random(seed)

	def uniform(self, lo: float, hi: float) -> float:
		"""Float in [lo, hi)."""
		return lo + self._rng.random() * (hi - lo)

	def randint(self, lo: int, hi: int) -> int:
		"""Integer in [lo, hi], both ends inclusive."""
		return self._rng.randint(lo, hi)

	def pick(self, items: Sequence[T]) -> T:
		return items[self._rng.randint(0, len(items) - 1)]

	def chance(self, probability: float) -> bool:
		return self._rng.random() < probability

	def bits(self, k: int) -> int:
		return self._rng.getrandbits(k)

	def spawn(self) -> "RandomUtils":
		"""Independent child stream, seeded from this one."""
		return RandomUtils(seed=self._rng.getrandbits(64))


def ensure_rng(rng: Optional[RandomUtils]) -> RandomUtils:
	return rng if rng is not None else RandomUtils()
