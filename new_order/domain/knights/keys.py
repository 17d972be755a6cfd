"""Redis key namespace for New Order."""

from __future__ import annotations

NEW_ORDER_PREFIX = "new-order"

EXP = f"{NEW_ORDER_PREFIX}:exp"
FERVOR = f"{NEW_ORDER_PREFIX}:fervor"
BLESSED_BUZZ = f"{NEW_ORDER_PREFIX}:blessed-buzz"
SMITE = f"{NEW_ORDER_PREFIX}:smite-progress"
QUEUES = f"{NEW_ORDER_PREFIX}:queues"
RATINGS = f"{NEW_ORDER_PREFIX}:ratings"

JUDGMENTS_ALL = f"{NEW_ORDER_PREFIX}:judgments:all"
JUDGMENTS_CORRECT = f"{NEW_ORDER_PREFIX}:judgments:correct"
JUDGMENTS_ACOLYTE_FAILED = f"{NEW_ORDER_PREFIX}:judgments:acolyte-failed"

SANITY_CHECK_FAILURES = f"{NEW_ORDER_PREFIX}:sanity-failures"

RATE_LIMIT_MINUTE = f"{NEW_ORDER_PREFIX}:rate-limit:minute"
RATE_LIMIT_HOUR = f"{NEW_ORDER_PREFIX}:rate-limit:hour"


def queue_key(tier: str, shard: int | None = None) -> str:
	"""Queue key for a tier; shards are 1-based and appended to the tier name."""
	suffix = tier if shard is None else f"{tier}{shard}"
	return f"{QUEUES}:{suffix}"


def ratings_key(image_id: int) -> str:
	return f"{RATINGS}:{image_id}"


def rate_limit_keys(user_id: int | str) -> tuple[str, str]:
	return f"{RATE_LIMIT_MINUTE}:{user_id}", f"{RATE_LIMIT_HOUR}:{user_id}"
