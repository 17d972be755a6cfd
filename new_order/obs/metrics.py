"""Prometheus metrics for New Order counters."""

from __future__ import annotations

from prometheus_client import Counter

COUNTER_POPULATIONS = Counter(
	"new_order_counter_populations_total",
	"Cold counter entries populated from their source of truth",
	["counter", "result"],
)

COUNTER_RESETS = Counter(
	"new_order_counter_resets_total",
	"Counter resets by scope",
	["counter", "scope"],
)

VOTING_RATE_LIMIT_DECISIONS = Counter(
	"new_order_voting_rate_limit_total",
	"Voting rate limit decisions",
	["outcome"],
)


def inc_counter_population(counter: str, result: str) -> None:
	"""result is "stored" when this call wrote the value, "raced" when another writer won."""
	COUNTER_POPULATIONS.labels(counter=counter, result=result).inc()


def inc_counter_reset(counter: str, scope: str) -> None:
	COUNTER_RESETS.labels(counter=counter, scope=scope).inc()


def inc_voting_rate_limit(outcome: str) -> None:
	VOTING_RATE_LIMIT_DECISIONS.labels(outcome=outcome).inc()
