"""Redis-backed per-entity counters with lazy population."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence, Union, overload

from new_order.domain.counters.backends import CounterBackend, backend_for
from new_order.domain.counters.models import (
	DEFAULT_GET_ALL_LIMIT,
	CounterOptions,
	EntityId,
	FetchCount,
	Score,
	ScoreEntry,
	member,
)
from new_order.infra.redis import RedisProxy, redis_client
from new_order.obs import metrics
from new_order.settings import settings

logger = logging.getLogger(__name__)


class Counter:
	"""Numeric score per entity, kept in one redis hash or sorted set.

	Reads of a cold entity call the population function, persist its result
	with the counter's ttl and return it, so callers never see a silent zero
	for an entity that was simply never cached.
	"""

	def __init__(self, options: CounterOptions, *, redis: Any = None) -> None:
		client = redis if redis is not None else redis_client
		if not isinstance(client, RedisProxy):
			client = RedisProxy(client)
		self.options = options
		self._backend: CounterBackend = backend_for(
			client, options.key, options.ttl, ordered=options.ordered
		)

	@property
	def key(self) -> str:
		return self.options.key

	@property
	def ordered(self) -> bool:
		return self.options.ordered

	@property
	def ttl(self) -> int:
		return self.options.ttl

	def __repr__(self) -> str:
		mode = "ordered" if self.ordered else "unordered"
		return f"Counter(key={self.key!r}, {mode}, ttl={self.ttl})"

	async def _populate(self, entity_id: EntityId) -> Score:
		fetched = await self.options.fetch_count(entity_id)
		stored, created = await self._backend.populate(member(entity_id), fetched)
		metrics.inc_counter_population(self.options.label, "stored" if created else "raced")
		logger.debug(
			"counter populated",
			extra={"counter": self.key, "entity": member(entity_id), "count": stored, "won": created},
		)
		return stored

	async def get_count(self, entity_id: EntityId) -> Score:
		stored = await self._backend.read(member(entity_id))
		if stored is None:
			return await self._populate(entity_id)
		return stored

	async def get_count_batch(self, entity_ids: Iterable[EntityId]) -> Dict[EntityId, Score]:
		"""Read many entities in one round trip; cold ones are populated."""
		ids = list(dict.fromkeys(entity_ids))
		stored = await self._backend.read_many([member(entity_id) for entity_id in ids])
		result: Dict[EntityId, Score] = {}
		for entity_id, value in zip(ids, stored):
			result[entity_id] = await self._populate(entity_id) if value is None else value
		return result

	async def increment(self, entity_id: EntityId, value: Score = 1) -> Score:
		"""Add abs(value); returns the count read beforehand plus abs(value)."""
		count = await self.get_count(entity_id)
		magnitude = abs(value)
		await self._backend.add(member(entity_id), magnitude)
		return count + magnitude

	async def decrement(self, entity_id: EntityId, value: Score = 1) -> Score:
		"""Subtract abs(value). Not clamped: counts can go negative."""
		count = await self.get_count(entity_id)
		magnitude = abs(value)
		await self._backend.add(member(entity_id), -magnitude)
		return count - magnitude

	@overload
	async def get_all(
		self, limit: int = ..., offset: int = ..., *, with_count: Literal[False] = ...
	) -> List[str]: ...

	@overload
	async def get_all(
		self, limit: int = ..., offset: int = ..., *, with_count: Literal[True]
	) -> List[ScoreEntry]: ...

	async def get_all(
		self,
		limit: int = DEFAULT_GET_ALL_LIMIT,
		offset: int = 0,
		*,
		with_count: bool = False,
	) -> Union[List[str], List[ScoreEntry]]:
		"""List stored entity ids.

		Ordered counters return ids by descending score. Unordered counters
		return hash fields in whatever order redis yields them.
		"""
		entries = await self._backend.entries(offset=offset, limit=limit)
		if with_count:
			return entries
		return [entry.value for entry in entries]

	async def exists(self, entity_id: EntityId) -> bool:
		return await self._backend.read(member(entity_id)) is not None

	async def reset(
		self,
		*,
		id: Optional[Union[EntityId, Sequence[EntityId]]] = None,  # noqa: A002 (mirrors call sites)
		all: bool = False,  # noqa: A002
	) -> int:
		"""Remove one entity, several entities, or (all=True) the whole key.

		Exactly one of `id` or `all=True` must be given. Returns the number of
		removed entries (or keys, for all=True).
		"""
		if all and id is not None:
			raise ValueError("reset takes either id or all=True, not both")
		if all:
			metrics.inc_counter_reset(self.options.label, "all")
			return await self._backend.drop()
		if id is None:
			raise ValueError("reset requires id or all=True")
		ids = list(id) if isinstance(id, (list, tuple, set)) else [id]
		metrics.inc_counter_reset(self.options.label, "id")
		return await self._backend.remove([member(entity_id) for entity_id in ids])


def create_counter(
	key: str,
	fetch_count: FetchCount,
	*,
	ttl: Optional[int] = None,
	ordered: bool = False,
	name: Optional[str] = None,
	redis: Any = None,
) -> Counter:
	"""Build a counter bound to one key. Performs no I/O.

	ttl defaults to settings.counter_default_ttl_seconds (one day); 0 disables expiry.
	"""
	if ttl is None:
		ttl = settings.counter_default_ttl_seconds
	options = CounterOptions(key=key, fetch_count=fetch_count, ttl=ttl, ordered=ordered, name=name)
	return Counter(options, redis=redis)
