"""
Common utility functions for zapscan
"""

import re
import yaml
import os
from pathlib import Path
from typing import Any, Dict, Optional
from datetime import datetime
from urllib.parse import urlparse
from dotenv import load_dotenv


DEFAULT_CONFIG_PATH = "config/zapscan.yaml"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """Load configuration from YAML file with environment variable expansion"""
    # Environment variables from the cwd `.env` and from a `.env` next to the
    # config file; already-set variables win.
    load_dotenv()

    def _resolve_config_path(path: str) -> str:
        p = Path(path).expanduser()
        if p.exists():
            return str(p)

        # Outside a project checkout the default path usually does not exist;
        # fall back to a repo-root `zapscan.yaml`.
        if path == DEFAULT_CONFIG_PATH and Path("zapscan.yaml").exists():
            return "zapscan.yaml"

        return str(p)

    resolved_config_path = _resolve_config_path(config_path)

    env_candidate = Path(resolved_config_path).expanduser().parent / ".env"
    if env_candidate.exists():
        load_dotenv(env_candidate)

    def _load(path: str) -> Dict[str, Any]:
        with open(path, "r", encoding="utf-8") as f:
            return expand_env_vars(yaml.safe_load(f) or {})

    try:
        cfg = _load(resolved_config_path)
    except FileNotFoundError:
        return {}
    except (OSError, yaml.YAMLError) as e:
        print(f"Warning: Could not load config from {config_path}: {e}")
        return {}

    if not isinstance(cfg, dict):
        print(f"Warning: Ignoring config {config_path}: top level is not a mapping")
        return {}

    # Repo-root `zapscan.yaml` acts as an override layer on the default config.
    if resolved_config_path == DEFAULT_CONFIG_PATH and Path("zapscan.yaml").exists():
        try:
            cfg = deep_merge(cfg, _load("zapscan.yaml"))
        except (OSError, yaml.YAMLError) as e:
            print(f"Warning: Could not load override zapscan.yaml: {e}")

    return cfg


def expand_env_vars(value: Any) -> Any:
    """Recursively expand ${VAR} and ${VAR:-default} in config values"""
    if isinstance(value, str):
        pattern = r'\$\{([^:}]+)(?::-(.*?))?\}'

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else ""
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, value)
    elif isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    else:
        return value


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def parse_bool(value: Any) -> bool:
    """Interpret YAML/env style booleans; raises ValueError for anything unrecognised"""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = str(value).strip().lower()
    if text in ("true", "1", "yes", "y", "on"):
        return True
    if text in ("false", "0", "no", "n", "off", ""):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def is_valid_url(url: str) -> bool:
    """http(s) URL with a host; localhost and bare IPs are fine"""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def session_timestamp(dt: Optional[datetime] = None) -> str:
    """Timestamp used in ZAP session names (yyyyMMddHHmmss)"""
    if dt is None:
        dt = datetime.now()
    return dt.strftime("%Y%m%d%H%M%S")


def format_duration(seconds: float) -> str:
    """Format duration in human-readable format."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        mins = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{mins}m {secs}s"
    else:
        hours = int(seconds // 3600)
        mins = int((seconds % 3600) // 60)
        return f"{hours}h {mins}m"


def ensure_dir(path: Path):
    """Ensure directory exists"""
    path.mkdir(parents=True, exist_ok=True)
