import os
from typing import Any, Dict, Optional

from sitecrawl.domain.config import CrawlerConfig
from sitecrawl.exceptions import ConfigError

# YAML key -> CrawlerConfig field
_FIELDS = {
    "root_url": "root_url",
    "max_depth": "max_depth",
    "dump_period": "dump_period",
    "workers": "worker_count",
    "politeness_delay": "politeness_delay",
    "worker_backoff": "worker_backoff",
    "output_dir": "output_dir",
}

_CASTS = {
    "max_depth": int,
    "dump_period": int,
    "worker_count": int,
    "politeness_delay": float,
    "worker_backoff": float,
    "root_url": str,
    "output_dir": str,
}


class CrawlerConfigParser:
    """Build a CrawlerConfig from a YAML dict layered over defaults.

    Responsibility: schema/validation for crawl settings.
    It does NOT perform filesystem IO.
    """

    def parse(
        self,
        *,
        data: Optional[Dict[str, Any]],
        defaults: Optional[Dict[str, Any]] = None,
        config_path: Optional[str] = None,
    ) -> CrawlerConfig:
        values: Dict[str, Any] = dict(defaults or {})
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(config_path or "<config>", "top level must be a mapping")

        unknown = set(data) - set(_FIELDS)
        if unknown:
            raise ConfigError(", ".join(sorted(unknown)), "unknown setting")

        for key, field in _FIELDS.items():
            if key in data and data[key] is not None:
                values[field] = data[key]

        for field, cast in _CASTS.items():
            if values.get(field) is None:
                continue
            try:
                values[field] = cast(values[field])
            except (TypeError, ValueError):
                raise ConfigError(field, f"expected {cast.__name__}, got {values[field]!r}")

        if not values.get("root_url"):
            raise ConfigError("root_url", "is required")
        if values.get("max_depth") is None:
            raise ConfigError("max_depth", "is required")
        if values.get("dump_period") is None:
            raise ConfigError("dump_period", "is required")

        if config_path:
            values["config_path"] = os.path.basename(config_path)
        return CrawlerConfig(**values)
