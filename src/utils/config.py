from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import os
import yaml
from dotenv import load_dotenv


@dataclass(frozen=True)
class APIConfig:
    base_url: str
    countries_endpoint: str
    timeout_seconds: float
    rates_endpoint: str | None = None
    countries_params: dict[str, Any] = field(default_factory=dict)


def _project_root() -> Path:
    # Resolve from this file: .../src/utils/config.py -> project root is 3 parents up.
    return Path(__file__).resolve().parents[2]


def load_api_config(path: str | Path | None = None) -> APIConfig:
    """
    Load API config from YAML.

    Precedence:
    - explicit `path`
    - env `COUNTRY_LOOKUP_API_CONFIG` (a `.env` file is honoured)
    - project default `config/api.yaml`
    """
    load_dotenv()
    cfg_path = Path(path or os.getenv("COUNTRY_LOOKUP_API_CONFIG") or (_project_root() / "config" / "api.yaml"))
    cfg = load_yaml(cfg_path)
    api = cfg.get("api") or {}

    base_url = api.get("base_url")
    countries_endpoint = api.get("countries_endpoint")
    timeout_seconds = api.get("timeout_seconds")

    missing: list[str] = []
    if not base_url:
        missing.append("api.base_url")
    if not countries_endpoint:
        missing.append("api.countries_endpoint")
    if timeout_seconds is None:
        missing.append("api.timeout_seconds")
    if missing:
        raise ValueError(f"Missing {', '.join(missing)} in {cfg_path}")

    rates_endpoint = api.get("rates_endpoint")
    return APIConfig(
        base_url=str(base_url),
        countries_endpoint=str(countries_endpoint),
        timeout_seconds=float(timeout_seconds),
        rates_endpoint=str(rates_endpoint) if rates_endpoint else None,
        countries_params=dict(api.get("countries_params") or {}),
    )


def load_yaml(path: str | Path) -> dict[str, Any]:
    p = Path(path)
    return yaml.safe_load(p.read_text(encoding="utf-8")) or {}
