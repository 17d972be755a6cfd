import json
import logging

from new_order.obs import logging as obs_logging
from new_order.settings import Settings


def _record(msg="counter populated", level=logging.INFO, **extra):
	record = logging.LogRecord("new_order.test", level, __file__, 1, msg, (), None)
	for key, value in extra.items():
		setattr(record, key, value)
	return record


def test_json_formatter_emits_extras():
	payload = json.loads(obs_logging.JSONLogFormatter().format(_record(counter="new-order:exp", count=3)))

	assert payload["msg"] == "counter populated"
	assert payload["level"] == "info"
	assert payload["logger"] == "new_order.test"
	assert payload["counter"] == "new-order:exp"
	assert payload["count"] == 3
	assert "lineno" not in payload


def test_json_formatter_redacts_sensitive_fields():
	payload = json.loads(obs_logging.JSONLogFormatter().format(_record(redis_url="redis://:hunter2@cache:6379/0")))

	assert payload["redis_url"] == "[redacted]"


def test_json_formatter_includes_exception():
	try:
		raise RuntimeError("aggregate failed")
	except RuntimeError:
		import sys

		record = logging.LogRecord("new_order.test", logging.ERROR, __file__, 1, "boom", (), sys.exc_info())
	payload = json.loads(obs_logging.JSONLogFormatter().format(record))

	assert "RuntimeError: aggregate failed" in payload["exc_info"]


def test_settings_read_environment(monkeypatch):
	monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")
	monkeypatch.setenv("COUNTER_DEFAULT_TTL_SECONDS", "3600")
	monkeypatch.setenv("LOG_LEVEL", "debug")

	configured = Settings()

	assert configured.redis_url == "redis://cache:6379/2"
	assert configured.counter_default_ttl_seconds == 3600
	assert configured.obs_log_level == "DEBUG"


def test_obs_init_installs_json_handler(monkeypatch):
	from new_order import obs

	root = logging.getLogger()
	saved_handlers, saved_level = list(root.handlers), root.level
	monkeypatch.setattr(obs, "_initialised", False)
	try:
		obs.init()
		assert len(root.handlers) == 1
		assert isinstance(root.handlers[0].formatter, obs_logging.JSONLogFormatter)
		# second call is a no-op
		obs.init()
		assert len(root.handlers) == 1
	finally:
		root.handlers[:] = saved_handlers
		root.setLevel(saved_level)
