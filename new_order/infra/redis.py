"""Redis connection management.

Counters import `redis_client`, a stable proxy whose underlying client can be
swapped at runtime (e.g. for fakeredis in tests) without breaking references
captured at import time.

The proxy also adds one read helper:
- zrange_with_scores: score-ranged read (max -> min) returning (member, score) pairs
"""

from __future__ import annotations

from typing import List, Optional, Tuple, Union

import redis.asyncio as redis

from new_order.settings import settings

ScoreBound = Union[float, str]


class RedisProxy:
	"""Forward attribute access to an underlying asyncio Redis client."""

	def __init__(self, client: redis.Redis):
		self._client: redis.Redis = client

	def set_client(self, client: redis.Redis) -> None:
		self._client = client

	@property
	def client(self) -> redis.Redis:
		return self._client

	async def zrange_with_scores(
		self,
		name: str,
		max_score: ScoreBound = "+inf",
		min_score: ScoreBound = "-inf",
		*,
		rev: bool = True,
		offset: int = 0,
		count: Optional[int] = None,
	) -> List[Tuple[str, float]]:
		"""Return members scored within [min_score, max_score] as (member, score).

		Members are decoded to str. With rev=True members come highest score first. `offset`/`count` map to
		the LIMIT clause; count=None returns everything past the offset.
		"""
		num = -1 if count is None else count
		if rev:
			rows = await self._client.zrevrangebyscore(
				name, max_score, min_score, start=offset, num=num, withscores=True
			)
		else:
			rows = await self._client.zrangebyscore(
				name, min_score, max_score, start=offset, num=num, withscores=True
			)
		return [(member.decode("utf-8") if isinstance(member, bytes) else str(member), float(score)) for member, score in rows]

	# Fallback: delegate everything else to the underlying client
	def __getattr__(self, item):
		return getattr(self._client, item)


_real_client = redis.from_url(settings.redis_url, decode_responses=True)
redis_client: RedisProxy = RedisProxy(_real_client)


def set_redis_client(client: redis.Redis) -> None:
	redis_client.set_client(client)
