"""Redis-backed counters with lazy population."""

from new_order.domain.counters.models import (
	DAY_TTL_SECONDS,
	WEEK_TTL_SECONDS,
	CounterOptions,
	ScoreEntry,
	zero_count,
)
from new_order.domain.counters.service import Counter, create_counter

__all__ = [
	"DAY_TTL_SECONDS",
	"WEEK_TTL_SECONDS",
	"Counter",
	"CounterOptions",
	"ScoreEntry",
	"create_counter",
	"zero_count",
]
