from unittest.mock import MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from new_order.domain.knights import rate_limit
from new_order.settings import settings

NOW = 1_760_000_000_000


@pytest.mark.asyncio
async def test_rate_limit_allows_within_budget():
	first = await rate_limit.check_voting_rate_limit(5, now_ms=NOW)
	second = await rate_limit.check_voting_rate_limit(5, now_ms=NOW + 10)

	assert first.allowed and second.allowed
	assert first.remaining == settings.voting_limit_per_minute - 1
	assert second.remaining == settings.voting_limit_per_minute - 2
	assert second.reset_time == NOW + 10 + rate_limit.MINUTE_WINDOW_MS
	assert second.is_abuse is False


@pytest.mark.asyncio
async def test_rate_limit_blocks_when_minute_budget_exhausted():
	settings.voting_limit_per_minute = 2
	await rate_limit.check_voting_rate_limit(6, now_ms=NOW)
	await rate_limit.check_voting_rate_limit(6, now_ms=NOW + 1)

	blocked = await rate_limit.check_voting_rate_limit(6, now_ms=NOW + 2)

	assert blocked.allowed is False
	assert blocked.remaining == 0
	assert blocked.is_abuse is False


@pytest.mark.asyncio
async def test_rate_limit_window_slides(fake_redis):
	settings.voting_limit_per_minute = 1
	assert (await rate_limit.check_voting_rate_limit(7, now_ms=NOW)).allowed
	assert not (await rate_limit.check_voting_rate_limit(7, now_ms=NOW + 1_000)).allowed

	later = await rate_limit.check_voting_rate_limit(7, now_ms=NOW + rate_limit.MINUTE_WINDOW_MS + 1)

	assert later.allowed
	assert await fake_redis.zcard("new-order:rate-limit:hour:7") == 2


@pytest.mark.asyncio
async def test_rate_limit_flags_abuse():
	settings.voting_limit_per_minute = 100
	settings.voting_limit_per_hour = 10
	settings.voting_abuse_threshold = 3
	for offset in range(3):
		await rate_limit.check_voting_rate_limit(8, now_ms=NOW + offset)

	result = await rate_limit.check_voting_rate_limit(8, now_ms=NOW + 5)

	assert result.is_abuse is True
	assert result.allowed is False


@pytest.mark.asyncio
async def test_rate_limit_sets_window_ttls(fake_redis):
	await rate_limit.check_voting_rate_limit(9, now_ms=NOW)

	assert 0 < await fake_redis.ttl("new-order:rate-limit:minute:9") <= 60
	assert 0 < await fake_redis.ttl("new-order:rate-limit:hour:9") <= 3600


@pytest.mark.asyncio
async def test_rate_limit_fails_open_on_redis_error(monkeypatch):
	broken = MagicMock()
	broken.pipeline.side_effect = RedisConnectionError("redis down")
	monkeypatch.setattr(rate_limit, "redis_client", broken)

	result = await rate_limit.check_voting_rate_limit(10, now_ms=NOW)

	assert result.allowed is True
	assert result.remaining == settings.voting_limit_per_minute
	assert result.is_abuse is False
