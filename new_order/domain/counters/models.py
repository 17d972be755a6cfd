"""Domain models for Redis-backed counters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

DAY_TTL_SECONDS = 24 * 60 * 60
WEEK_TTL_SECONDS = 7 * DAY_TTL_SECONDS

DEFAULT_GET_ALL_LIMIT = 100

EntityId = Union[int, str]
Score = Union[int, float]
FetchCount = Callable[[EntityId], Awaitable[Score]]


def member(entity_id: EntityId) -> str:
	"""Serialise an entity id to the string stored in redis."""
	return str(entity_id)


def as_text(raw: Any) -> str:
	"""Decode a member read from redis; clients without decode_responses return bytes."""
	if isinstance(raw, bytes):
		return raw.decode("utf-8")
	return str(raw)


def to_number(raw: Any) -> Score:
	"""Coerce a stored score to int when integral, float otherwise."""
	value = float(as_text(raw))
	if value.is_integer():
		return int(value)
	return value


@dataclass(frozen=True, slots=True)
class ScoreEntry:
	"""One stored entity and its score."""

	value: str
	score: Score


@dataclass(frozen=True, slots=True)
class CounterOptions:
	"""Construction options for a counter; fixed for the counter's lifetime.

	ttl is in seconds; 0 disables expiry. In hash mode the ttl applies to each
	field, in sorted-set mode to the whole key.
	"""

	key: str
	fetch_count: FetchCount
	ttl: int = DAY_TTL_SECONDS
	ordered: bool = False
	name: Optional[str] = None

	def __post_init__(self) -> None:
		if not self.key:
			raise ValueError("counter key is required")
		if self.ttl < 0:
			raise ValueError("counter ttl must be >= 0")

	@property
	def label(self) -> str:
		return self.name or self.key


async def zero_count(_: EntityId) -> Score:
	"""Population function for counters whose truth lives only in redis."""
	return 0
