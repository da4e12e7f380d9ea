import os
import logging
from pathlib import Path
from typing import Optional

try:
	from dotenv import load_dotenv
except ImportError:
	logging.warning("python-dotenv not available; using environment variables only")
else:
	loaded = load_dotenv()
	if not loaded and Path(".env").exists():
		raise RuntimeError(".env file present but failed to load")


def get_str_env(name: str, default: str) -> str:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	return raw


def get_optional_str_env(name: str) -> Optional[str]:
	raw = os.getenv(name)
	if raw is None or raw.strip() == "":
		return None
	return raw.strip()


def get_int_env(name: str, default: int) -> int:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	try:
		return int(raw)
	except Exception:
		logging.exception("Invalid %s: %r", name, raw)
		return default


def get_float_env(name: str, default: float) -> float:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	try:
		return float(raw)
	except Exception:
		logging.exception("Invalid %s: %r", name, raw)
		return default


USER_AGENT = get_str_env("USER_AGENT", "SiteCrawl/0.1")
HTTP_TIMEOUT = get_int_env("HTTP_TIMEOUT", 10)
DEFAULT_MAX_DEPTH = get_int_env("SITECRAWL_MAX_DEPTH", 10)
DEFAULT_DUMP_PERIOD = get_int_env("SITECRAWL_DUMP_PERIOD", 200)
DEFAULT_WORKER_COUNT = get_int_env("SITECRAWL_WORKER_COUNT", 10)
POLITENESS_DELAY = get_float_env("SITECRAWL_POLITENESS_DELAY", 0.01)
WORKER_BACKOFF = get_float_env("SITECRAWL_WORKER_BACKOFF", 0.01)


def root_url() -> Optional[str]:
	return get_optional_str_env("SITECRAWL_ROOT_URL")


def output_dir() -> str:
	return get_str_env("SITECRAWL_OUTPUT_DIR", ".")


def log_level() -> str:
	return (get_str_env("LOG_LEVEL", "INFO") or "INFO").strip().upper()
