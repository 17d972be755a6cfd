"""Sliding-window rate limiting for New Order votes."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Optional

from redis.exceptions import RedisError

from new_order.domain.knights import keys
from new_order.domain.knights.models import VotingRateLimit
from new_order.infra.redis import redis_client
from new_order.obs import metrics
from new_order.settings import settings

logger = logging.getLogger(__name__)

MINUTE_WINDOW_MS = 60 * 1000
HOUR_WINDOW_MS = 60 * 60 * 1000


def _now_ms() -> int:
	return int(time.time() * 1000)


def _open(now_ms: int) -> VotingRateLimit:
	return VotingRateLimit(
		allowed=True,
		remaining=settings.voting_limit_per_minute,
		reset_time=now_ms + MINUTE_WINDOW_MS,
		is_abuse=False,
	)


async def check_voting_rate_limit(user_id: int | str, *, now_ms: Optional[int] = None) -> VotingRateLimit:
	"""Check and record one vote for a player.

	Keeps per-minute and per-hour sorted sets scored by request time. Redis
	failures fail open so voting is never blocked by the limiter itself.
	"""
	now_ms = now_ms if now_ms is not None else _now_ms()
	minute_key, hour_key = keys.rate_limit_keys(user_id)
	try:
		async with redis_client.pipeline(transaction=True) as pipe:
			pipe.zremrangebyscore(minute_key, "-inf", now_ms - MINUTE_WINDOW_MS)
			pipe.zremrangebyscore(hour_key, "-inf", now_ms - HOUR_WINDOW_MS)
			pipe.zcard(minute_key)
			pipe.zcard(hour_key)
			_, _, minute_count, hour_count = await pipe.execute()

		minute_allowed = minute_count < settings.voting_limit_per_minute
		hour_allowed = hour_count < settings.voting_limit_per_hour
		is_abuse = hour_count >= settings.voting_abuse_threshold
		allowed = minute_allowed and hour_allowed and not is_abuse

		if allowed:
			request_id = f"{now_ms}-{uuid.uuid4().hex}"
			async with redis_client.pipeline(transaction=True) as pipe:
				pipe.zadd(minute_key, {request_id: now_ms})
				pipe.zadd(hour_key, {request_id: now_ms})
				pipe.expire(minute_key, MINUTE_WINDOW_MS // 1000)
				pipe.expire(hour_key, HOUR_WINDOW_MS // 1000)
				await pipe.execute()
	except RedisError:
		logger.warning("voting rate limit check failed", extra={"user_id": str(user_id)}, exc_info=True)
		metrics.inc_voting_rate_limit("error")
		return _open(now_ms)

	if is_abuse:
		metrics.inc_voting_rate_limit("abuse")
	else:
		metrics.inc_voting_rate_limit("allowed" if allowed else "limited")
	return VotingRateLimit(
		allowed=allowed,
		remaining=max(0, settings.voting_limit_per_minute - minute_count - (1 if allowed else 0)),
		reset_time=now_ms + MINUTE_WINDOW_MS,
		is_abuse=is_abuse,
	)
