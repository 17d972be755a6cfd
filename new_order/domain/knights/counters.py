"""Named New Order counters, matching-pool queues and per-image rating tallies."""

from __future__ import annotations

import logging
from typing import Dict, List, Union

from new_order.domain.counters import DAY_TTL_SECONDS, WEEK_TTL_SECONDS, Counter, create_counter, zero_count
from new_order.domain.counters.models import EntityId
from new_order.domain.knights import keys
from new_order.domain.knights.models import INQUISITOR, RankType, RatingBucket
from new_order.infra.postgres import get_pool
from new_order.settings import settings

logger = logging.getLogger(__name__)

POOL_SHARDS = 3

correct_judgments_counter = create_counter(keys.JUDGMENTS_CORRECT, zero_count, name="judgments_correct")
all_judgments_counter = create_counter(keys.JUDGMENTS_ALL, zero_count, name="judgments_all")
acolyte_failed_judgments = create_counter(
	keys.JUDGMENTS_ACOLYTE_FAILED, zero_count, ttl=WEEK_TTL_SECONDS, name="judgments_acolyte_failed"
)
sanity_check_failures_counter = create_counter(keys.SANITY_CHECK_FAILURES, zero_count, name="sanity_failures")

fervor_counter = create_counter(keys.FERVOR, zero_count, ttl=WEEK_TTL_SECONDS, ordered=True, name="fervor")
smites_counter = create_counter(keys.SMITE, zero_count, name="smites")
blessed_buzz_counter = create_counter(keys.BLESSED_BUZZ, zero_count, name="blessed_buzz")
exp_counter = create_counter(keys.EXP, zero_count, name="exp")

PoolTier = Union[RankType, str]

pool_keys: Dict[PoolTier, List[str]] = {
	**{rank: [keys.queue_key(rank.value, shard) for shard in range(1, POOL_SHARDS + 1)] for rank in RankType},
	INQUISITOR: [keys.queue_key(INQUISITOR)],
}

pool_counters: Dict[PoolTier, List[Counter]] = {
	tier: [
		create_counter(key, zero_count, ttl=WEEK_TTL_SECONDS, ordered=True, name=key.replace(f"{keys.QUEUES}:", "queue:"))
		for key in tier_keys
	]
	for tier, tier_keys in pool_keys.items()
}

_RATINGS_QUERY = """
	SELECT COUNT(*) AS count
	FROM knights_new_order_image_rating
	WHERE "imageId" = $1 AND rank = $2 AND rating = $3
"""


async def count_image_ratings(image_id: int, bucket: RatingBucket) -> int:
	"""Count stored ratings for one image at one rank and nsfw level."""
	pool = await get_pool()
	async with pool.acquire() as conn:
		row = await conn.fetchrow(_RATINGS_QUERY, image_id, bucket.rank.value, bucket.nsfw_level)
	if not row:
		return 0
	return int(row["count"] or 0)


def get_image_ratings_counter(image_id: int) -> Counter:
	"""Ordered counter of ratings for one image, keyed by "<rank>-<nsfwLevel>"."""

	async def fetch_count(entity_id: EntityId) -> int:
		bucket = RatingBucket.parse(entity_id)
		if bucket is None:
			logger.debug("ignoring malformed rating bucket", extra={"image_id": image_id, "entity": str(entity_id)})
			return 0
		if not settings.analytics_enabled:
			return 0
		return await count_image_ratings(image_id, bucket)

	return create_counter(
		keys.ratings_key(image_id),
		fetch_count,
		ttl=DAY_TTL_SECONDS,
		ordered=True,
		name="image_ratings",
	)
