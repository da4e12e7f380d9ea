import os

import yaml

from sitecrawl.exceptions import ConfigError


def load_crawl_file(path: str) -> dict:
    """Load a YAML crawl file and return its top-level mapping.

    Recognized keys:
      - root_url: string
      - max_depth: integer >= 0
      - dump_period: integer > 0
      - workers: integer (one site processor per worker)
      - politeness_delay / worker_backoff: seconds
      - output_dir: directory for snapshot files
    """
    if not os.path.isfile(path):
        raise ConfigError(path, "file not found")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(path, f"invalid YAML: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(path, "top level must be a mapping")
    return data
