"""Redis storage strategies behind a counter.

A counter picks one backend at construction:
- HashBackend: one hash field per entity, per-field TTL (HEXPIRE)
- SortedSetBackend: one sorted-set member per entity, whole-key TTL

Population writes are set-if-absent so two cold readers racing on the same
entity store a single baseline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from new_order.domain.counters.models import Score, ScoreEntry, as_text, to_number


class CounterBackend(ABC):
	"""Storage primitives a counter needs from redis for one key."""

	def __init__(self, redis: Any, key: str, ttl: int) -> None:
		self._redis = redis
		self.key = key
		self.ttl = ttl

	@abstractmethod
	async def read(self, field: str) -> Optional[Score]:
		"""Return the stored score or None when absent."""

	@abstractmethod
	async def read_many(self, fields: Sequence[str]) -> List[Optional[Score]]:
		"""Pipelined read; one entry per field, None when absent."""

	@abstractmethod
	async def populate(self, field: str, value: Score) -> Tuple[Score, bool]:
		"""Store value if the field is absent.

		Returns (stored score, True if this call wrote it).
		"""

	@abstractmethod
	async def add(self, field: str, amount: Score) -> None:
		"""Atomically add amount (may be negative) to the stored score."""

	@abstractmethod
	async def entries(self, *, offset: int, limit: int) -> List[ScoreEntry]:
		"""Return up to limit entries starting at offset."""

	@abstractmethod
	async def remove(self, fields: Sequence[str]) -> int:
		"""Remove the given fields; return how many existed."""

	async def drop(self) -> int:
		return int(await self._redis.delete(self.key))


class HashBackend(CounterBackend):
	"""Unordered counter stored in a redis hash."""

	async def read(self, field: str) -> Optional[Score]:
		raw = await self._redis.hget(self.key, field)
		return None if raw is None else to_number(raw)

	async def read_many(self, fields: Sequence[str]) -> List[Optional[Score]]:
		if not fields:
			return []
		raw = await self._redis.hmget(self.key, list(fields))
		return [None if item is None else to_number(item) for item in raw]

	async def populate(self, field: str, value: Score) -> Tuple[Score, bool]:
		async with self._redis.pipeline(transaction=True) as pipe:
			pipe.hsetnx(self.key, field, value)
			if self.ttl:
				# NX: only the writer that created the field sets its ttl
				pipe.hexpire(self.key, self.ttl, field, nx=True)
			pipe.hget(self.key, field)
			results = await pipe.execute()
		created, stored = results[0], results[-1]
		return to_number(stored), bool(created)

	async def add(self, field: str, amount: Score) -> None:
		# float arithmetic so integral and fractional writes can mix on one field
		await self._redis.hincrbyfloat(self.key, field, amount)

	async def entries(self, *, offset: int, limit: int) -> List[ScoreEntry]:
		data: Dict[str, Any] = await self._redis.hgetall(self.key)
		items = list(data.items())[offset : offset + limit]
		return [ScoreEntry(value=as_text(field), score=to_number(score)) for field, score in items]

	async def remove(self, fields: Sequence[str]) -> int:
		if not fields:
			return 0
		return int(await self._redis.hdel(self.key, *fields))


class SortedSetBackend(CounterBackend):
	"""Ordered counter stored in a redis sorted set."""

	async def read(self, field: str) -> Optional[Score]:
		raw = await self._redis.zscore(self.key, field)
		return None if raw is None else to_number(raw)

	async def read_many(self, fields: Sequence[str]) -> List[Optional[Score]]:
		if not fields:
			return []
		raw = await self._redis.zmscore(self.key, list(fields))
		return [None if item is None else to_number(item) for item in raw]

	async def populate(self, field: str, value: Score) -> Tuple[Score, bool]:
		async with self._redis.pipeline(transaction=True) as pipe:
			pipe.zadd(self.key, {field: value}, nx=True)
			if self.ttl:
				pipe.expire(self.key, self.ttl)
			pipe.zscore(self.key, field)
			results = await pipe.execute()
		added, stored = results[0], results[-1]
		return to_number(stored), bool(added)

	async def add(self, field: str, amount: Score) -> None:
		await self._redis.zincrby(self.key, amount, field)

	async def entries(self, *, offset: int, limit: int) -> List[ScoreEntry]:
		rows = await self._redis.zrange_with_scores(
			self.key, "+inf", "-inf", rev=True, offset=offset, count=limit
		)
		return [ScoreEntry(value=value, score=to_number(score)) for value, score in rows]

	async def remove(self, fields: Sequence[str]) -> int:
		if not fields:
			return 0
		return int(await self._redis.zrem(self.key, *fields))


def backend_for(redis: Any, key: str, ttl: int, *, ordered: bool) -> CounterBackend:
	cls = SortedSetBackend if ordered else HashBackend
	return cls(redis, key, ttl)
