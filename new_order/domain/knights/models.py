"""Domain models for Knights of New Order."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class RankType(str, Enum):
	"""Player ranks that rate images."""

	ACOLYTE = "Acolyte"
	KNIGHT = "Knight"
	TEMPLAR = "Templar"


# Top tier queue; not a player rank, so it lives outside RankType
INQUISITOR = "Inquisitor"


@dataclass(frozen=True, slots=True)
class RatingBucket:
	"""Composite entity id of the per-image ratings counter: "<rank>-<nsfwLevel>"."""

	rank: RankType
	nsfw_level: int

	def __str__(self) -> str:
		return f"{self.rank.value}-{self.nsfw_level}"

	@classmethod
	def parse(cls, raw: object) -> Optional["RatingBucket"]:
		"""Return the bucket for a well-formed id, None otherwise."""
		if not isinstance(raw, str):
			return None
		parts: Tuple[str, ...] = tuple(raw.split("-"))
		if len(parts) != 2:
			return None
		rank_raw, level_raw = parts
		try:
			rank = RankType(rank_raw)
			level = int(level_raw)
		except ValueError:
			return None
		return cls(rank=rank, nsfw_level=level)


@dataclass(frozen=True, slots=True)
class VotingRateLimit:
	"""Outcome of a voting rate-limit check."""

	allowed: bool
	remaining: int
	reset_time: int  # epoch milliseconds
	is_abuse: bool
