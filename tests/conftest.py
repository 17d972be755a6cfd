import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis

from new_order.infra import postgres
from new_order.settings import settings


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from new_order.infra.redis import redis_client, set_redis_client

	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		await client.flushall()
		set_redis_client(original)


@pytest.fixture(autouse=True)
def patch_postgres(monkeypatch):
	async def _noop():
		return None

	monkeypatch.setattr(postgres, "init_pool", _noop)
	monkeypatch.setattr(postgres, "close_pool", _noop)


@pytest.fixture(autouse=True)
def force_test_settings():
	"""Keep limits and toggles stable regardless of the local .env."""
	original = (
		settings.analytics_enabled,
		settings.voting_limit_per_minute,
		settings.voting_limit_per_hour,
		settings.voting_abuse_threshold,
	)
	settings.analytics_enabled = True
	settings.voting_limit_per_minute = 75
	settings.voting_limit_per_hour = 4500
	settings.voting_abuse_threshold = 4510
	try:
		yield
	finally:
		(
			settings.analytics_enabled,
			settings.voting_limit_per_minute,
			settings.voting_limit_per_hour,
			settings.voting_abuse_threshold,
		) = original
