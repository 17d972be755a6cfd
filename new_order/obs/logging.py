"""JSON logging for counter jobs."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from new_order.settings import settings

_LOGGER_NAME = "new_order"

# Extras whose names contain these are never written out
_SENSITIVE_KEYWORDS = ("password", "secret", "token", "dsn", "url")

_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message"}


class JSONLogFormatter(logging.Formatter):
	"""One JSON object per record; `extra=` fields become top-level keys."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"msg": record.getMessage(),
			"logger": record.name,
			"service": settings.service_name,
			"env": settings.environment,
		}
		for key, value in record.__dict__.items():
			if key in _RECORD_ATTRS or key in payload:
				continue
			lowered = key.lower()
			payload[key] = "[redacted]" if any(word in lowered for word in _SENSITIVE_KEYWORDS) else value
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		return json.dumps(payload, separators=(",", ":"), default=str)


def configure_logging(level: Optional[str] = None) -> logging.Logger:
	"""Send root logging to stderr as JSON at settings.obs_log_level."""
	root = logging.getLogger()
	root.handlers.clear()
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	root.addHandler(handler)
	root.setLevel(level or settings.obs_log_level)
	return logging.getLogger(_LOGGER_NAME)
