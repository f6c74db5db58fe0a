"""TOML configuration loader for the menu dashboard."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

DEFAULT_BASE_URL = "https://clear-essence-backend.onrender.com/api/v1"


@dataclass
class BackendConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0


@dataclass
class AuthConfig:
    token: str = ""
    token_env: str = "MENUBOARD_TOKEN"
    token_path: str = "~/.config/menuboard/token"


@dataclass
class MenusConfig:
    page_size: int = 8
    max_file_size_mb: float = 10
    retries: int = 1


@dataclass
class LoggingConfig:
    level: str = "WARNING"


@dataclass
class DashboardConfig:
    backend: BackendConfig = field(default_factory=BackendConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    menus: MenusConfig = field(default_factory=MenusConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | Path | None = None) -> DashboardConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    The backend URL can be overridden via MENUBOARD_BASE_URL.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path).expanduser()
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    bkd = raw.get("backend", {})
    ath = raw.get("auth", {})
    mns = raw.get("menus", {})
    lgg = raw.get("logging", {})

    # Resolve base URL: config file → environment variable → default
    base_url = (
        bkd.get("base_url", "")
        or os.environ.get("MENUBOARD_BASE_URL", "")
        or DEFAULT_BASE_URL
    )

    return DashboardConfig(
        backend=BackendConfig(
            base_url=base_url,
            timeout=float(bkd.get("timeout", 30.0)),
        ),
        auth=AuthConfig(
            token=ath.get("token", ""),
            token_env=ath.get("token_env", "MENUBOARD_TOKEN"),
            token_path=ath.get("token_path", "~/.config/menuboard/token"),
        ),
        menus=MenusConfig(
            page_size=mns.get("page_size", 8),
            max_file_size_mb=mns.get("max_file_size_mb", 10),
            retries=mns.get("retries", 1),
        ),
        logging=LoggingConfig(
            level=str(lgg.get("level", "WARNING")).upper(),
        ),
    )
